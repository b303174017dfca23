"""Heist and race mini-games with an in-memory document store and credit ledger."""

__version__ = "0.1.0"