from __future__ import annotations

"""Environment adapter.

Typed readers for ``NOVA_EXPORTER_*`` / ``OS_*`` variables. Blank or
malformed numeric values fall back to the default instead of failing
startup; settings validation catches values that parse but make no sense.
"""
import os

_TRUTHY = {"1", "true", "yes", "on", "y"}


def _raw(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def get_str(name: str, default: str = "") -> str:
    value = os.getenv(name)
    return default if value is None else value


def get_bool(name: str, default: bool = False) -> bool:
    value = _raw(name)
    if value is None:
        return default
    return value.lower() in _TRUTHY


def get_int(name: str, default: int) -> int:
    value = _raw(name)
    try:
        return default if value is None else int(value)
    except ValueError:
        return default


def get_float(name: str, default: float) -> float:
    value = _raw(name)
    try:
        return default if value is None else float(value)
    except ValueError:
        return default


def get_csv(name: str, default: list[str] | None = None) -> list[str]:
    """Comma separated list; empty items dropped."""
    value = os.getenv(name)
    if value is None:
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


__all__ = ["get_str", "get_bool", "get_int", "get_float", "get_csv"]
