"""Shared helpers (logging setup, exception tree)."""
