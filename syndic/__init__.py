"""Billing and remaining-payment ledger for syndic apartment administration."""

__version__ = "0.1.0"
