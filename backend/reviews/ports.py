"""
Ports for the reviews domain: store/feed protocols, change events and errors.

Intent:
    Keep services, the live list and concrete adapters (Supabase, psycopg,
    in-memory) decoupled. Services only see these contracts, so tests can
    swap in fakes without touching FastAPI or a database.

Design:
    - Protocols: ReviewStoreProtocol, CourseCatalogProtocol, ChangeFeedProtocol
    - Change events: ChangeEvent (INSERT/UPDATE/DELETE)
    - Error taxonomy: validation, course confirmation, store failure, not found
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from .models import Course, Review, ReviewDraft


# ----------------------------- Protocols ------------------------------------


class ReviewStoreProtocol(Protocol):
    """A single access path to the `review` table."""

    def list_reviews(self) -> List[Review]:
        ...

    def get_review(self, review_id: int) -> Optional[Review]:
        ...

    def insert_review(self, draft: ReviewDraft) -> Review:
        ...

    def update_review(self, review_id: int, draft: ReviewDraft) -> Optional[Review]:
        ...

    def delete_review(self, review_id: int) -> bool:
        ...


class CourseCatalogProtocol(Protocol):
    """Read access to the `courses` table."""

    def find_course_exact(self, title: str) -> Optional[Course]:
        ...

    def search_courses(self, fragment: str, *, limit: int) -> List[Course]:
        """Case-insensitive substring match ordered by title."""
        ...


class Subscription(Protocol):
    async def close(self) -> None:
        ...


ChangeHandler = Callable[["ChangeEvent"], None]


class ChangeFeedProtocol(Protocol):
    """Push notifications for row changes of the `review` table."""

    async def subscribe(self, handler: ChangeHandler) -> Subscription:
        ...


# ----------------------------- Change events --------------------------------

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """One row change. `new` carries the row for INSERT/UPDATE, `old` for DELETE."""

    kind: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)

    @property
    def review_id(self) -> Optional[int]:
        source = self.old if self.kind == DELETE else self.new
        raw = source.get("id")
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            return None


# ------------------------------ Errors --------------------------------------


class ReviewValidationError(ValueError):
    """Payload rejected before any network call.

    Parameters:
        code: machine-readable reason, e.g. `invalid_full_name`.
        field: wire name of the offending field.
    """

    def __init__(self, code: str, field: str) -> None:
        super().__init__(code)
        self.code = code
        self.field = field


class CourseNotConfirmedError(Exception):
    """The referenced course could not be matched to an existing course."""

    def __init__(self, course: str, suggestions: Optional[List[Course]] = None) -> None:
        super().__init__("course_not_confirmed")
        self.course = course
        self.suggestions = list(suggestions or [])


class ReviewStoreError(Exception):
    """An access path to the record store failed."""


class ReviewNotFoundError(Exception):
    """No review exists with the given identifier."""

    def __init__(self, review_id: int) -> None:
        super().__init__(f"review_not_found:{review_id}")
        self.review_id = review_id


__all__ = [
    "ReviewStoreProtocol",
    "CourseCatalogProtocol",
    "ChangeFeedProtocol",
    "ChangeHandler",
    "Subscription",
    "ChangeEvent",
    "INSERT",
    "UPDATE",
    "DELETE",
    "ReviewValidationError",
    "CourseNotConfirmedError",
    "ReviewStoreError",
    "ReviewNotFoundError",
]
