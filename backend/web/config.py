"""
Configuration and startup security checks for the dashboard.

Why: The dashboard writes to a hosted database with a privileged key. This
module provides a single guard that refuses obviously insecure production
deployments without burdening local development.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os
import sys


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def current_environment() -> str:
    return (os.getenv("DASHBOARD_ENV", "dev") or "dev").lower()


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks (prod/staging only):
    - Supabase Service Role key must be set and not a known dummy placeholder
      when SUPABASE_URL is configured.
    - At least one data path (SUPABASE_URL or DATABASE_URL) must be configured;
      the in-memory store is for development only.
    - DATABASE_URL must not explicitly disable TLS.
    - SUPABASE_URL must use https.
    """

    env = current_environment()
    if not _is_prod_like(env):
        return  # dev/test remain permissive

    url = (os.getenv("SUPABASE_URL") or "").strip()
    dsn = (os.getenv("DATABASE_URL") or "").strip()

    if not url and not dsn:
        raise SystemExit(
            "Refusing to start: neither SUPABASE_URL nor DATABASE_URL is configured in production."
        )

    # 1) Supabase Service Role key
    if url:
        srole = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip()
        if not srole or srole.upper() == "DUMMY_DO_NOT_USE":
            raise SystemExit(
                "Refusing to start: SUPABASE_SERVICE_ROLE_KEY is unset or a dummy placeholder in production."
            )
        if url.lower().startswith("http://"):
            raise SystemExit("Refusing to start: SUPABASE_URL must use https in production (got http).")

    # 2) Postgres TLS: basic guard to avoid explicit disable
    if "sslmode=disable" in dsn:
        raise SystemExit(
            "Refusing to start: DATABASE_URL contains sslmode=disable in production. Use sslmode=require or verify TLS."
        )


def should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via DASHBOARD_ENABLE_DOTENV (default true
      outside pytest).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("DASHBOARD_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


def _env_flag(name: str) -> bool:
    return (os.getenv(name, "false") or "").strip().lower() == "true"


def trust_proxy_enabled() -> bool:
    """Whether X-Forwarded-* headers describe the public origin (DASHBOARD_TRUST_PROXY)."""
    return _env_flag("DASHBOARD_TRUST_PROXY")


def strict_csrf_enabled() -> bool:
    """Origin/Referer is mandatory on writes in prod or with STRICT_CSRF_REVIEWS=true."""
    return current_environment() == "prod" or _env_flag("STRICT_CSRF_REVIEWS")
