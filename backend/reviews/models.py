"""
Review and course records shared by stores, services and the live list.

Wire format:
    Rows use the column names of the `review` table (`fullName`, `courseLink`,
    `student_picture`, ...). Python attributes are snake_case; `to_dict()` and
    `from_row()` translate between both so JSON responses keep the table shape.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional


# Python attribute -> column/wire name
_WIRE_NAMES = {
    "id": "id",
    "full_name": "fullName",
    "text": "text",
    "course": "course",
    "course_link": "courseLink",
    "student_picture": "student_picture",
    "created_at": "created_at",
    "updated_at": "updated_at",
}
_ATTR_NAMES = {wire: attr for attr, wire in _WIRE_NAMES.items()}
# Some drivers/RPC helpers hand back snake_case columns.
_ATTR_NAMES.update({"full_name": "full_name", "course_link": "course_link"})


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Review:
    id: int
    full_name: str
    text: str
    course: str
    course_link: Optional[str] = None
    student_picture: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Review":
        """Build a Review from a store row using either wire or snake_case keys."""
        values: Dict[str, Any] = {}
        for key, value in row.items():
            attr = _ATTR_NAMES.get(key)
            if attr:
                values[attr] = value
        if values.get("id") is None:
            raise ValueError("missing_id")
        return cls(
            id=int(values["id"]),
            full_name=str(values.get("full_name") or ""),
            text=str(values.get("text") or ""),
            course=str(values.get("course") or ""),
            course_link=_opt_str(values.get("course_link")),
            student_picture=_opt_str(values.get("student_picture")),
            created_at=_opt_str(values.get("created_at")),
            updated_at=_opt_str(values.get("updated_at")),
        )

    def merged(self, changes: Mapping[str, Any]) -> "Review":
        """Return a copy with the fields present in `changes` replaced (shallow merge).

        Keys may be wire names or attribute names; unknown keys are ignored and
        the identifier never changes.
        """
        updates: Dict[str, Any] = {}
        for key, value in changes.items():
            attr = _ATTR_NAMES.get(key)
            if not attr or attr == "id":
                continue
            if attr in ("course_link", "student_picture", "created_at", "updated_at"):
                updates[attr] = _opt_str(value)
            else:
                updates[attr] = "" if value is None else str(value)
        if not updates:
            return self
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        return {wire: getattr(self, attr) for attr, wire in _WIRE_NAMES.items()}


@dataclass(frozen=True)
class ReviewDraft:
    """Validated payload for create/update (no identifier, no timestamps)."""

    full_name: str
    text: str
    course: str
    course_link: str = ""
    student_picture: Optional[str] = None
    # Edits only replace the photo when the submission carried the key.
    has_picture: bool = field(default=True, compare=False)

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "fullName": self.full_name,
            "text": self.text,
            "course": self.course,
            "courseLink": self.course_link,
        }
        if self.has_picture:
            row["student_picture"] = self.student_picture
        return row

    def describe(self) -> Dict[str, Any]:
        """Loggable summary that never includes the image payload."""
        return {
            "fullName": self.full_name,
            "course": self.course,
            "courseLink": self.course_link,
            "picture_chars": len(self.student_picture) if self.student_picture else 0,
        }


@dataclass(frozen=True)
class Course:
    id: str
    title: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Course":
        return cls(id=str(row["id"]), title=str(row["title"]))

    @property
    def link(self) -> str:
        return f"/courses/{self.id}"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title}


def sort_newest_first(reviews: list[Review]) -> list[Review]:
    """Order reviews by creation time, newest first (ties: higher id first)."""
    return sorted(reviews, key=lambda r: (r.created_at or "", r.id), reverse=True)


__all__ = ["Review", "ReviewDraft", "Course", "sort_newest_first"]
