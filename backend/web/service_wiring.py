"""
Wiring of review stores and services from environment configuration.

Why:
    Clients are constructed explicitly from a `DataAccessConfig` (endpoint,
    key, privilege) and injected into the service. Routes reach the service
    through `get_service()`, and tests swap it with `set_service()`.

Behavior:
    - SUPABASE_URL + key → Supabase store (insert and rpc write attempts).
    - DATABASE_URL (with psycopg installed) → direct PostgreSQL write attempt;
      also the primary store when Supabase is not configured.
    - Neither → in-memory store with a local change feed (development only).

Logging:
    Wiring failures are logged as warnings and degrade to the next option.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from backend.reviews.config import PRIVILEGE_SERVICE, data_access_from_env, get_database_dsn, get_photo_max_chars
from backend.reviews.feeds import LocalChangeFeed, SupabaseRealtimeFeed
from backend.reviews.repo_db import HAVE_PSYCOPG, DBReviewStore
from backend.reviews.repo_memory import InMemoryReviewStore
from backend.reviews.repo_supabase import (
    SupabaseReviewStore,
    create_async_supabase_client,
    create_supabase_client,
)
from backend.reviews.services.course_lookup import CourseLookupService
from backend.reviews.services.reviews import ReviewsService
from backend.reviews.services.write_path import build_write_path

logger = logging.getLogger("dashboard.web")


def build_reviews_service() -> ReviewsService:
    """Assemble the reviews service from whichever backends are configured."""
    supabase_store: Optional[SupabaseReviewStore] = None
    db_store: Optional[DBReviewStore] = None

    cfg = data_access_from_env(PRIVILEGE_SERVICE)
    if cfg is not None:
        try:
            supabase_store = SupabaseReviewStore(create_supabase_client(cfg))
            logger.info("Review store wired: Supabase (%s)", cfg.privilege)
        except Exception as exc:
            logger.warning("Supabase client unavailable: %s: %s", exc.__class__.__name__, str(exc))

    dsn = get_database_dsn()
    if dsn and HAVE_PSYCOPG:
        try:
            db_store = DBReviewStore(dsn)
            logger.info("Review store wired: direct PostgreSQL")
        except RuntimeError as exc:
            logger.warning("Direct PostgreSQL store unavailable: %s", exc)

    primary: Any = supabase_store or db_store
    fallback = None
    if primary is None:
        logger.warning("No review backend configured; using in-memory store")
        primary = fallback = InMemoryReviewStore(feed=LocalChangeFeed())

    write_path = build_write_path(supabase_store=supabase_store, db_store=db_store, fallback_store=fallback)
    return ReviewsService(
        primary,
        write_path,
        CourseLookupService(primary),
        max_picture_chars=get_photo_max_chars(),
    )


async def build_change_feed(store: Any) -> Optional[Any]:
    """Return a change feed matching `store`, or None when push is unavailable."""
    if isinstance(store, InMemoryReviewStore):
        return store.feed
    if isinstance(store, SupabaseReviewStore):
        cfg = data_access_from_env(PRIVILEGE_SERVICE)
        if cfg is None:
            return None
        try:
            client = await create_async_supabase_client(cfg)
        except Exception as exc:
            logger.warning("Realtime client unavailable: %s: %s", exc.__class__.__name__, str(exc))
            return None
        return SupabaseRealtimeFeed(client)
    return None


_SERVICE: Optional[ReviewsService] = None


def get_service() -> ReviewsService:
    global _SERVICE
    if _SERVICE is None:
        _SERVICE = build_reviews_service()
    return _SERVICE


def set_service(service: Optional[ReviewsService]) -> None:
    """Allow tests to swap the reviews service (None rebuilds lazily from env)."""
    global _SERVICE
    _SERVICE = service


__all__ = ["build_reviews_service", "build_change_feed", "get_service", "set_service"]
