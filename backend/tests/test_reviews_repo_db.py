"""
Direct PostgreSQL store.

Construction rules run everywhere; the round trip against a real database
runs only when REVIEWS_TEST_DSN points to a reachable instance with the
`review` and `courses` tables.
"""
from __future__ import annotations

import os
import uuid

import pytest

from backend.reviews.models import ReviewDraft
from backend.reviews.repo_db import HAVE_PSYCOPG, DBReviewStore


def test_missing_dsn_is_rejected():
    if not HAVE_PSYCOPG:
        pytest.skip("psycopg not installed")
    with pytest.raises(RuntimeError):
        DBReviewStore()


def _live_store() -> DBReviewStore:
    dsn = os.getenv("REVIEWS_TEST_DSN")
    if not HAVE_PSYCOPG or not dsn:
        pytest.skip("REVIEWS_TEST_DSN not set or psycopg missing")
    import psycopg

    try:
        with psycopg.connect(dsn, connect_timeout=3):
            pass
    except Exception:
        pytest.skip("database not reachable")
    return DBReviewStore(dsn)


def test_live_insert_update_delete_roundtrip():
    store = _live_store()
    marker = uuid.uuid4().hex[:8]
    created = store.insert_review(
        ReviewDraft(
            full_name=f"Test Student {marker}",
            text="Written by the store test",
            course="Intro to X",
            course_link="/courses/1",
            student_picture=None,
        )
    )
    try:
        assert created.id > 0
        assert store.get_review(created.id).full_name == f"Test Student {marker}"

        updated = store.update_review(
            created.id,
            ReviewDraft(
                full_name=f"Test Student {marker}",
                text="Edited by the store test",
                course="Intro to X",
                course_link="/courses/1",
                has_picture=False,
            ),
        )
        assert updated is not None and updated.text == "Edited by the store test"
    finally:
        assert store.delete_review(created.id) is True
    assert store.get_review(created.id) is None
    assert store.delete_review(created.id) is False
