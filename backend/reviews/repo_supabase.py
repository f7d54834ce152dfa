"""
Supabase-backed review store and course catalog.

This adapter talks to the hosted `review` / `courses` tables through a provided
supabase client (`supabase.create_client(...)`). It is duck-typed so tests can
pass a fake; the client is expected to expose:

- table(name) -> query builder with select/insert/update/delete/eq/ilike/order/limit/execute
- rpc(fn, params) -> builder with execute()

`execute()` returns an object with a `.data` attribute (list of rows, a single
row, or None). Client errors propagate as raised exceptions.

Two insert access paths are offered: `insert_review` (structured insert) and
`insert_review_rpc` (server-side procedure `insert_review(p_review jsonb)`).
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .config import COURSES_TABLE, INSERT_REVIEW_RPC, REVIEW_TABLE
from .models import Course, Review, ReviewDraft
from .ports import ReviewStoreError


def _rows(res: Any) -> List[Dict[str, Any]]:
    """Normalize `execute()` results across client versions into a list of rows."""
    data = getattr(res, "data", None)
    if data is None and isinstance(res, Mapping):
        data = res.get("data")
    if data is None:
        return []
    if isinstance(data, Mapping):
        return [dict(data)]
    if isinstance(data, (list, tuple)):
        return [dict(r) for r in data if isinstance(r, Mapping)]
    return []


class SupabaseReviewStore:
    """Review store using a supabase client for table and RPC access."""

    def __init__(self, client: Any):
        self._client = client

    def _reviews(self) -> Any:
        return self._client.table(REVIEW_TABLE)

    # --- Reviews -------------------------------------------------------------------

    def list_reviews(self) -> List[Review]:
        res = self._reviews().select("*").order("created_at", desc=True).execute()
        return [Review.from_row(r) for r in _rows(res)]

    def get_review(self, review_id: int) -> Optional[Review]:
        res = self._reviews().select("*").eq("id", int(review_id)).limit(1).execute()
        rows = _rows(res)
        return Review.from_row(rows[0]) if rows else None

    def insert_review(self, draft: ReviewDraft) -> Review:
        res = self._reviews().insert([draft.to_row()]).execute()
        rows = _rows(res)
        if not rows:
            raise ReviewStoreError("insert_returned_no_row")
        return Review.from_row(rows[0])

    def insert_review_rpc(self, draft: ReviewDraft) -> Review:
        res = self._client.rpc(INSERT_REVIEW_RPC, {"p_review": draft.to_row()}).execute()
        rows = _rows(res)
        if not rows:
            raise ReviewStoreError("rpc_returned_no_row")
        return Review.from_row(rows[0])

    def update_review(self, review_id: int, draft: ReviewDraft) -> Optional[Review]:
        row = draft.to_row()
        row["updated_at"] = datetime.now(timezone.utc).isoformat()
        res = self._reviews().update(row).eq("id", int(review_id)).execute()
        rows = _rows(res)
        return Review.from_row(rows[0]) if rows else None

    def delete_review(self, review_id: int) -> bool:
        res = self._reviews().delete().eq("id", int(review_id)).execute()
        return bool(_rows(res))

    # --- Courses -------------------------------------------------------------------

    def find_course_exact(self, title: str) -> Optional[Course]:
        res = self._client.table(COURSES_TABLE).select("id, title").eq("title", title).limit(1).execute()
        rows = _rows(res)
        return Course.from_row(rows[0]) if rows else None

    def search_courses(self, fragment: str, *, limit: int) -> List[Course]:
        escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        res = (
            self._client.table(COURSES_TABLE)
            .select("id, title")
            .ilike("title", f"%{escaped}%")
            .order("title")
            .limit(int(limit))
            .execute()
        )
        return [Course.from_row(r) for r in _rows(res)]


def create_supabase_client(config: Any) -> Any:
    """Construct a sync supabase client for a `DataAccessConfig`."""
    from supabase import create_client

    return create_client(config.url, config.key)


async def create_async_supabase_client(config: Any) -> Any:
    """Construct an async supabase client (needed for Realtime subscriptions)."""
    from supabase import acreate_client

    return await acreate_client(config.url, config.key)


__all__ = ["SupabaseReviewStore", "create_supabase_client", "create_async_supabase_client"]
