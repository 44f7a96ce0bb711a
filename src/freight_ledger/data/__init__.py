"""Data layer for the freight ledger."""
