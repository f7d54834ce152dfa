"""Course lookup endpoint used by the review forms to confirm a course title."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .. import service_wiring

courses_router = APIRouter(tags=["Courses"])
logger = logging.getLogger("dashboard.web.courses")


def _private_response(body: dict, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers={"Cache-Control": "private, no-store"})


@courses_router.get("/api/courses/check")
async def check_course(title: Optional[str] = None):
    """
    Check whether a course with the given title exists.

    Behavior:
        - 200 `{exists: true, course, courseLink, suggestions?}` on a match
        - 200 `{exists: false, message}` when nothing matches
        - 400 when `title` is missing or blank
        - 500 when the catalog cannot be queried
    """
    if not title or not title.strip():
        return _private_response({"exists": False, "message": "Course title is required"}, status_code=400)
    lookup = service_wiring.get_service().courses
    try:
        check = await asyncio.to_thread(lookup.check, title)
    except Exception as exc:
        logger.warning("Course check failed: %s: %s", exc.__class__.__name__, str(exc))
        return _private_response(
            {"exists": False, "message": "Error checking course", "error": str(exc)},
            status_code=500,
        )
    return _private_response(check.to_dict())


__all__ = ["courses_router"]
