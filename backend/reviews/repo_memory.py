"""
In-memory review store and course catalog.

Used when neither Supabase nor a DSN is configured (local offline work) and by
tests. Writes are announced on an optional `LocalChangeFeed`, mirroring what
Supabase Realtime does for the hosted table.
"""
from __future__ import annotations

from datetime import datetime, timezone
import threading
from typing import Dict, Iterable, List, Optional

from .feeds import LocalChangeFeed
from .models import Course, Review, ReviewDraft, sort_newest_first
from .ports import DELETE, INSERT, UPDATE, ChangeEvent


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryReviewStore:
    def __init__(self, *, courses: Iterable[Course] = (), feed: Optional[LocalChangeFeed] = None) -> None:
        self.reviews: Dict[int, Review] = {}
        self.courses: Dict[str, Course] = {c.id: c for c in courses}
        self.feed = feed
        self._next_id = 1
        self._lock = threading.Lock()

    def _publish(self, event: ChangeEvent) -> None:
        if self.feed is not None:
            self.feed.publish(event)

    # --- Reviews -------------------------------------------------------------------

    def list_reviews(self) -> List[Review]:
        with self._lock:
            snapshot = list(self.reviews.values())
        return sort_newest_first(snapshot)

    def get_review(self, review_id: int) -> Optional[Review]:
        return self.reviews.get(int(review_id))

    def insert_review(self, draft: ReviewDraft) -> Review:
        now = _now()
        with self._lock:
            rid = self._next_id
            self._next_id += 1
            review = Review(
                id=rid,
                full_name=draft.full_name,
                text=draft.text,
                course=draft.course,
                course_link=draft.course_link,
                student_picture=draft.student_picture,
                created_at=now,
                updated_at=now,
            )
            self.reviews[rid] = review
        self._publish(ChangeEvent(kind=INSERT, new=review.to_dict()))
        return review

    def update_review(self, review_id: int, draft: ReviewDraft) -> Optional[Review]:
        changes = draft.to_row()
        changes["updated_at"] = _now()
        with self._lock:
            current = self.reviews.get(int(review_id))
            if current is None:
                return None
            updated = current.merged(changes)
            self.reviews[current.id] = updated
        self._publish(ChangeEvent(kind=UPDATE, new=updated.to_dict(), old={"id": current.id}))
        return updated

    def delete_review(self, review_id: int) -> bool:
        with self._lock:
            existed = self.reviews.pop(int(review_id), None)
        if existed is None:
            return False
        self._publish(ChangeEvent(kind=DELETE, old={"id": existed.id}))
        return True

    # --- Courses -------------------------------------------------------------------

    def add_course(self, course: Course) -> None:
        self.courses[course.id] = course

    def find_course_exact(self, title: str) -> Optional[Course]:
        for course in sorted(self.courses.values(), key=lambda c: c.title):
            if course.title == title:
                return course
        return None

    def search_courses(self, fragment: str, *, limit: int) -> List[Course]:
        needle = fragment.lower()
        hits = [c for c in self.courses.values() if needle in c.title.lower()]
        hits.sort(key=lambda c: c.title)
        return hits[:limit]


__all__ = ["InMemoryReviewStore"]
