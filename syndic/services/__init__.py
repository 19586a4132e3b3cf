"""Ledger services: bills, remaining payments, balances and apartment records."""
