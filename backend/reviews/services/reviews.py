"""Review use cases (list/get/create/update/delete) behind the web and CLI adapters.

Why:
    Keep validation, course confirmation and the write path out of FastAPI so
    they can be unit-tested with fake stores.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from ..models import Review, ReviewDraft
from ..ports import CourseNotConfirmedError, ReviewNotFoundError, ReviewStoreProtocol
from ..validation import validate_review_payload
from .course_lookup import CourseLookupService
from .write_path import WritePath, WriteResult

logger = logging.getLogger("dashboard.reviews.service")


class ReviewsService:
    def __init__(
        self,
        store: ReviewStoreProtocol,
        write_path: WritePath,
        courses: CourseLookupService,
        *,
        max_picture_chars: Optional[int] = None,
    ) -> None:
        self._store = store
        self._write_path = write_path
        self._courses = courses
        self._max_picture_chars = max_picture_chars

    @property
    def store(self) -> ReviewStoreProtocol:
        return self._store

    @property
    def courses(self) -> CourseLookupService:
        return self._courses

    def _confirm_course(self, draft: ReviewDraft) -> ReviewDraft:
        """Resolve the course and pin `courseLink` to the confirmed course."""
        check = self._courses.check(draft.course)
        if not check.exists or not check.course_link:
            raise CourseNotConfirmedError(draft.course, check.suggestions)
        return ReviewDraft(
            full_name=draft.full_name,
            text=draft.text,
            course=draft.course,
            course_link=check.course_link,
            student_picture=draft.student_picture,
            has_picture=draft.has_picture,
        )

    def list_reviews(self) -> List[Review]:
        return self._store.list_reviews()

    def get_review(self, review_id: int) -> Review:
        review = self._store.get_review(review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)
        return review

    def create_review(self, payload: Mapping[str, Any]) -> WriteResult:
        """Validate, confirm the course, then run the write path.

        Raises:
            ReviewValidationError: before any store or lookup call.
            CourseNotConfirmedError: when the course lookup finds no match.
        """
        draft = validate_review_payload(payload, max_picture_chars=self._max_picture_chars)
        draft = self._confirm_course(draft)
        logger.info("Creating review %s", draft.describe())
        return self._write_path.run(draft)

    def update_review(self, review_id: int, payload: Mapping[str, Any]) -> Review:
        """Replace the editable fields of an existing review."""
        draft = validate_review_payload(payload, max_picture_chars=self._max_picture_chars)
        draft = self._confirm_course(draft)
        logger.info("Updating review %s with %s", review_id, draft.describe())
        updated = self._store.update_review(review_id, draft)
        if updated is None:
            raise ReviewNotFoundError(review_id)
        return updated

    def delete_review(self, review_id: int) -> None:
        if not self._store.delete_review(review_id):
            raise ReviewNotFoundError(review_id)
        logger.info("Deleted review %s", review_id)


__all__ = ["ReviewsService"]
