"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend (the live list and the change
feeds are asyncio-based) and keep env-driven toggles from leaking across tests.
"""
from __future__ import annotations

import pytest

from backend.reviews.models import Course
from backend.reviews.repo_memory import InMemoryReviewStore
from backend.reviews.services.course_lookup import CourseLookupService
from backend.reviews.services.reviews import ReviewsService
from backend.reviews.services.write_path import build_write_path


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_env_toggles(monkeypatch: pytest.MonkeyPatch):
    """Keep every test on dev semantics with no backend configured.

    Why:
        A developer shell may export SUPABASE_URL or DATABASE_URL; tests must
        never reach a hosted database by accident. Tests opt into prod, strict
        CSRF or proxy trust explicitly.
    """
    for var in (
        "DASHBOARD_ENV",
        "DASHBOARD_TRUST_PROXY",
        "STRICT_CSRF_REVIEWS",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_SERVICE_ROLE_KEY",
        "DATABASE_URL",
        "REVIEWS_REFRESH_SECONDS",
        "REVIEW_PHOTO_MAX_CHARS",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_reviews_service():
    """Drop the lazily built reviews service so each test wires its own."""
    from backend.web import service_wiring

    service_wiring.set_service(None)
    yield
    service_wiring.set_service(None)


@pytest.fixture
def courses() -> list[Course]:
    return [
        Course(id="c-1", title="Intro to X"),
        Course(id="c-2", title="Advanced X"),
        Course(id="c-3", title="Data Science Basics"),
    ]


@pytest.fixture
def memory_store(courses: list[Course]) -> InMemoryReviewStore:
    return InMemoryReviewStore(courses=courses)


@pytest.fixture
def reviews_service(memory_store: InMemoryReviewStore) -> ReviewsService:
    write_path = build_write_path(fallback_store=memory_store)
    return ReviewsService(memory_store, write_path, CourseLookupService(memory_store))
