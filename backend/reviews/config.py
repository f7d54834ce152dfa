"""
Centralized configuration for the reviews domain.

Intent:
    Single source of truth for data-access endpoints, credentials and limits.
    Clients are described by an explicit `DataAccessConfig` and constructed by
    the caller, instead of hidden module-level client handles.

Behavior:
    - `data_access_from_env(privilege)` reads SUPABASE_URL plus the anon or
      service-role key and returns None when not configured.
    - `get_database_dsn()` returns DATABASE_URL (direct PostgreSQL path) or None.
    - Numeric limits are parsed leniently; invalid values fall back to defaults.

Permissions:
    Pure configuration; no external calls or privileges required.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional


PRIVILEGE_ANON = "anon"
PRIVILEGE_SERVICE = "service"

REVIEW_TABLE = "review"
COURSES_TABLE = "courses"
INSERT_REVIEW_RPC = "insert_review"

REFRESH_SECONDS_DEFAULT = 30
PHOTO_MAX_CHARS_DEFAULT = 5_000_000
SUGGESTION_LIMIT = 5


@dataclass(frozen=True)
class DataAccessConfig:
    """Endpoint, credential and privilege level of one data-access client."""

    url: str
    key: str
    privilege: str = PRIVILEGE_ANON

    def __repr__(self) -> str:  # keep keys out of logs
        return f"DataAccessConfig(url={self.url!r}, privilege={self.privilege!r})"


def data_access_from_env(privilege: str = PRIVILEGE_SERVICE) -> Optional[DataAccessConfig]:
    """Return the client config for `privilege`, or None when env is incomplete.

    Env:
        SUPABASE_URL – project endpoint.
        SUPABASE_SERVICE_ROLE_KEY – used for privilege "service"; falls back to
        the anon key like the dashboard always did.
        SUPABASE_ANON_KEY – used for privilege "anon".
    """
    url = (os.getenv("SUPABASE_URL") or "").strip()
    anon = (os.getenv("SUPABASE_ANON_KEY") or "").strip()
    if privilege == PRIVILEGE_SERVICE:
        key = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip() or anon
    else:
        key = anon
    if not url or not key:
        return None
    return DataAccessConfig(url=url, key=key, privilege=privilege)


def get_database_dsn() -> Optional[str]:
    dsn = (os.getenv("DATABASE_URL") or "").strip()
    return dsn or None


def _parse_int_env(name: str, default: int, *, contract_max: int | None = None) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    if isinstance(contract_max, int) and contract_max > 0:
        value = min(value, contract_max)
    return value


def get_refresh_seconds() -> int:
    """Interval of the periodic full refresh of the live review list (default 30 s)."""
    return _parse_int_env("REVIEWS_REFRESH_SECONDS", REFRESH_SECONDS_DEFAULT)


def get_photo_max_chars() -> int:
    """Soft cap for the embedded photo data URI (default/clamped 5,000,000 chars)."""
    return _parse_int_env("REVIEW_PHOTO_MAX_CHARS", PHOTO_MAX_CHARS_DEFAULT, contract_max=PHOTO_MAX_CHARS_DEFAULT)


__all__ = [
    "PRIVILEGE_ANON",
    "PRIVILEGE_SERVICE",
    "REVIEW_TABLE",
    "COURSES_TABLE",
    "INSERT_REVIEW_RPC",
    "SUGGESTION_LIMIT",
    "DataAccessConfig",
    "data_access_from_env",
    "get_database_dsn",
    "get_refresh_seconds",
    "get_photo_max_chars",
]
