"""
Ordered write path: insert, procedure call, direct PostgreSQL.

The path stops at the first success and, when everything fails, reports the
first error observed.
"""
from __future__ import annotations

from typing import List, Optional

import pytest

from backend.reviews.models import Review, ReviewDraft
from backend.reviews.services.write_path import WriteAttempt, WritePath, build_write_path


DRAFT = ReviewDraft(
    full_name="Ada Lovelace",
    text="Loved every session of it",
    course="Intro to X",
    course_link="/courses/c-1",
)


class _FakeSupabaseStore:
    def __init__(self, *, insert_error: Optional[Exception] = None, rpc_error: Optional[Exception] = None):
        self.insert_error = insert_error
        self.rpc_error = rpc_error
        self.calls: List[str] = []

    def insert_review(self, draft: ReviewDraft) -> Review:
        self.calls.append("insert")
        if self.insert_error:
            raise self.insert_error
        return Review(id=1, full_name=draft.full_name, text=draft.text, course=draft.course, course_link=draft.course_link)

    def insert_review_rpc(self, draft: ReviewDraft) -> Review:
        self.calls.append("rpc")
        if self.rpc_error:
            raise self.rpc_error
        return Review(id=2, full_name=draft.full_name, text=draft.text, course=draft.course, course_link=draft.course_link)


class _FakeDBStore:
    def __init__(self, *, error: Optional[Exception] = None):
        self.error = error
        self.calls = 0

    def insert_review(self, draft: ReviewDraft) -> Review:
        self.calls += 1
        if self.error:
            raise self.error
        return Review(id=3, full_name=draft.full_name, text=draft.text, course=draft.course)


def test_first_success_wins_and_later_attempts_are_skipped():
    sb = _FakeSupabaseStore()
    db = _FakeDBStore()

    result = build_write_path(supabase_store=sb, db_store=db).run(DRAFT)

    assert result.ok is True
    assert result.method == "insert"
    assert result.review is not None and result.review.id == 1
    assert sb.calls == ["insert"]
    assert db.calls == 0


def test_primary_failure_falls_back_to_rpc():
    sb = _FakeSupabaseStore(insert_error=RuntimeError("permission denied for table review"))
    db = _FakeDBStore()

    result = build_write_path(supabase_store=sb, db_store=db).run(DRAFT)

    assert result.ok is True
    assert result.method == "rpc"
    assert result.review is not None and result.review.id == 2
    assert result.error is None
    assert result.attempts == [("insert", False), ("rpc", True)]
    assert db.calls == 0


def test_direct_pg_is_last_resort():
    sb = _FakeSupabaseStore(insert_error=RuntimeError("a"), rpc_error=RuntimeError("b"))
    db = _FakeDBStore()

    result = build_write_path(supabase_store=sb, db_store=db).run(DRAFT)

    assert result.ok is True
    assert result.method == "direct_pg"
    assert result.review is not None and result.review.id == 3


def test_all_attempts_failing_report_the_first_error():
    sb = _FakeSupabaseStore(insert_error=RuntimeError("first"), rpc_error=RuntimeError("second"))
    db = _FakeDBStore(error=RuntimeError("third"))

    result = build_write_path(supabase_store=sb, db_store=db).run(DRAFT)

    assert result.ok is False
    assert result.review is None
    assert result.error is not None
    assert result.error.to_dict() == {"method": "insert", "message": "first"}
    assert [m for m, ok in result.attempts] == ["insert", "rpc", "direct_pg"]
    assert not any(ok for _, ok in result.attempts)


def test_fallback_store_only_used_without_configured_backends():
    sb = _FakeSupabaseStore()
    fallback = _FakeDBStore()

    path = build_write_path(supabase_store=sb, fallback_store=fallback)

    assert path.methods == ["insert", "rpc"]
    path.run(DRAFT)
    assert fallback.calls == 0


def test_build_without_any_store_is_rejected():
    with pytest.raises(ValueError):
        build_write_path()


def test_exception_without_message_uses_class_name():
    def _boom(draft: ReviewDraft) -> Review:
        raise TimeoutError()

    result = WritePath([WriteAttempt("insert", _boom)]).run(DRAFT)

    assert result.error is not None
    assert result.error.message == "TimeoutError"
