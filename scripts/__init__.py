"""Operator scripts for the household ledger."""
