#!/usr/bin/env python3
"""
Operator CLI over the ledger kernel.

Usage:
    python -m scripts.ledger_cli init-db
    python -m scripts.ledger_cli seed-currency EUR 2 "Euro"
    python -m scripts.ledger_cli seed-currency          # ledger.default_currency
    python -m scripts.ledger_cli create-user alice
    python -m scripts.ledger_cli balances --user USER_ID [--as-of 2026-02-28]
    python -m scripts.ledger_cli timeseries --user USER_ID --account ACCOUNT_ID \
        --from 2026-02-01 --to 2026-02-28
    python -m scripts.ledger_cli monthly --user USER_ID --period 2026-02 \
        [--household HOUSEHOLD_ID]

Settings come from ledger_config (defaults.yaml, --config / LEDGER_CONFIG,
LEDGER_* environment variables).  Output is JSON on stdout.  A kernel error
prints {"error": CODE, "message": ...} and exits with status 1.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, is_dataclass
from datetime import date
from enum import Enum
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select

from ledger_config import configure_kernel, load_settings
from ledger_kernel.db.engine import create_tables, read_only_scope, session_scope
from ledger_kernel.domain.clock import SystemClock
from ledger_kernel.exceptions import ConflictError, LedgerKernelError
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.user import User
from ledger_kernel.services.reporting_service import ReportingService


def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return _to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def _emit(payload: Any) -> None:
    print(json.dumps(_to_jsonable(payload), indent=2, sort_keys=True))


def _cmd_init_db(args: argparse.Namespace) -> Any:
    create_tables()
    return {"status": "ok"}


def _cmd_seed_currency(args: argparse.Namespace) -> Any:
    code = (args.code or args.settings.default_currency).strip().upper()
    name = args.name or code
    with session_scope() as session:
        existing = session.scalars(select(Currency).where(Currency.code == code)).first()
        if existing is not None:
            raise ConflictError(f"Currency {code} already exists")
        session.add(
            Currency(code=code, minor_unit_exponent=args.exponent, display_name=name)
        )
    return {"code": code, "minor_unit_exponent": args.exponent, "display_name": name}


def _cmd_create_user(args: argparse.Namespace) -> Any:
    with session_scope() as session:
        user = User(username=args.username, created_at=SystemClock().now())
        session.add(user)
        session.flush()
        return {"id": user.id, "username": user.username}


def _cmd_balances(args: argparse.Namespace) -> Any:
    as_of = args.as_of or SystemClock().today()
    with read_only_scope() as session:
        return ReportingService(session).all_account_balances(args.user, as_of)


def _cmd_timeseries(args: argparse.Namespace) -> Any:
    with read_only_scope() as session:
        return ReportingService(session).balance_timeseries(
            args.user, args.account, args.date_from, args.date_to
        )


def _cmd_monthly(args: argparse.Namespace) -> Any:
    mode = "HOUSEHOLD" if args.household else "INDIVIDUAL"
    with read_only_scope() as session:
        return ReportingService(session).monthly_expenses(
            args.user, args.period, mode, args.household
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Household ledger operator CLI")
    parser.add_argument("--config", help="YAML settings file (overrides LEDGER_CONFIG)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create all tables")
    p.set_defaults(func=_cmd_init_db)

    p = sub.add_parser("seed-currency", help="Add a currency to the reference data")
    p.add_argument("code", nargs="?", help="Defaults to ledger.default_currency")
    p.add_argument("exponent", nargs="?", type=int, default=2)
    p.add_argument("name", nargs="?", help="Defaults to the code")
    p.set_defaults(func=_cmd_seed_currency)

    p = sub.add_parser("create-user", help="Add a user")
    p.add_argument("username")
    p.set_defaults(func=_cmd_create_user)

    p = sub.add_parser("balances", help="Balances of every account a user owns")
    p.add_argument("--user", required=True, type=UUID)
    p.add_argument("--as-of", type=date.fromisoformat)
    p.set_defaults(func=_cmd_balances)

    p = sub.add_parser("timeseries", help="Daily balance series for one account")
    p.add_argument("--user", required=True, type=UUID)
    p.add_argument("--account", required=True, type=UUID)
    p.add_argument("--from", dest="date_from", required=True, type=date.fromisoformat)
    p.add_argument("--to", dest="date_to", required=True, type=date.fromisoformat)
    p.set_defaults(func=_cmd_timeseries)

    p = sub.add_parser("monthly", help="Monthly expenses by account and category")
    p.add_argument("--user", required=True, type=UUID)
    p.add_argument("--period", required=True, help="YYYY-MM")
    p.add_argument("--household", type=UUID)
    p.set_defaults(func=_cmd_monthly)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    args.settings = load_settings(args.config)
    configure_kernel(args.settings)

    try:
        result = args.func(args)
    except LedgerKernelError as exc:
        _emit({"error": exc.code, "message": str(exc)})
        return 1

    _emit(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
