"""Input normalisation for review submissions (create and edit)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .models import ReviewDraft
from .photos import normalize_photo
from .ports import ReviewValidationError


def _bounded_text(value: object, *, field: str, code: str, min_len: int, max_len: int) -> str:
    if value is None or not isinstance(value, str):
        raise ReviewValidationError(code, field)
    trimmed = value.strip()
    if len(trimmed) < min_len or len(trimmed) > max_len:
        raise ReviewValidationError(code, field)
    return trimmed


def _normalize_full_name(value: object) -> str:
    return _bounded_text(value, field="fullName", code="invalid_full_name", min_len=2, max_len=100)


def _normalize_text(value: object) -> str:
    return _bounded_text(value, field="text", code="invalid_text", min_len=5, max_len=1000)


def _normalize_course(value: object) -> str:
    return _bounded_text(value, field="course", code="invalid_course", min_len=2, max_len=100)


def _normalize_course_link(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ReviewValidationError("invalid_course_link", "courseLink")
    return value.strip()


def validate_review_payload(payload: Mapping[str, Any], *, max_picture_chars: Optional[int] = None) -> ReviewDraft:
    """Return a validated draft or raise `ReviewValidationError` on the first bad field.

    Fields are checked in form order (fullName, text, course, courseLink,
    student_picture). A missing `student_picture` key marks the draft so that
    edits keep the stored photo.
    """
    if not isinstance(payload, Mapping):
        raise ReviewValidationError("invalid_payload", "body")
    full_name = _normalize_full_name(payload.get("fullName"))
    text = _normalize_text(payload.get("text"))
    course = _normalize_course(payload.get("course"))
    course_link = _normalize_course_link(payload.get("courseLink"))
    has_picture = "student_picture" in payload
    picture = normalize_photo(payload.get("student_picture"), max_chars=max_picture_chars) if has_picture else None
    return ReviewDraft(
        full_name=full_name,
        text=text,
        course=course,
        course_link=course_link,
        student_picture=picture,
        has_picture=has_picture,
    )


__all__ = ["validate_review_payload"]
