"""Course lookup: resolve a free-text course title to an existing course."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import SUGGESTION_LIMIT
from ..models import Course
from ..ports import CourseCatalogProtocol


@dataclass
class CourseCheck:
    exists: bool
    course: Optional[Course] = None
    course_link: Optional[str] = None
    suggestions: List[Course] = field(default_factory=list)
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.exists:
            return {"exists": False, "message": self.message or "Course not found"}
        body: Dict[str, Any] = {
            "exists": True,
            "course": self.course.to_dict() if self.course else None,
            "courseLink": self.course_link,
        }
        if self.suggestions:
            body["suggestions"] = [c.to_dict() for c in self.suggestions]
        return body


class CourseLookupService:
    def __init__(self, catalog: CourseCatalogProtocol) -> None:
        self._catalog = catalog

    def check(self, title: object) -> CourseCheck:
        """Return whether `title` names an existing course.

        Behavior:
            - Exact (case-sensitive) match wins and carries no suggestions.
            - Otherwise a case-insensitive substring search returns up to 5
              courses ordered by title; the first is the presumptive match and
              all of them are returned as suggestions.
            - Blank titles raise ValueError("title_required").
        """
        if not isinstance(title, str) or not title.strip():
            raise ValueError("title_required")
        exact = self._catalog.find_course_exact(title)
        if exact is not None:
            return CourseCheck(exists=True, course=exact, course_link=exact.link)
        candidates = self._catalog.search_courses(title, limit=SUGGESTION_LIMIT)
        if candidates:
            first = candidates[0]
            return CourseCheck(exists=True, course=first, course_link=first.link, suggestions=list(candidates))
        return CourseCheck(exists=False, message="Course not found")


__all__ = ["CourseCheck", "CourseLookupService"]
