"""
Review API routes for the admin dashboard.

Why:
    Provide JSON endpoints to list, create, read, edit and delete student
    reviews. The adapter maps domain errors to HTTP responses and delegates
    everything else to `ReviewsService` (see backend.reviews.services).

Notes:
    - Validation failures are answered before any store or lookup call.
    - Creation runs the ordered write path; only when every access path fails
      does the endpoint report an error (the first one observed).
    - Write endpoints enforce a same-origin check (CSRF).
    - Responses use "private, no-store".
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from backend.reviews.ports import (
    CourseNotConfirmedError,
    ReviewNotFoundError,
    ReviewValidationError,
)

from .. import service_wiring
from ..security import csrf_violation

reviews_router = APIRouter(tags=["Reviews"])
logger = logging.getLogger("dashboard.web.reviews")


def _json_private(payload: Dict[str, Any], *, status_code: int = 200) -> JSONResponse:
    """Return JSON with caching disabled for shared caches and browsers."""
    return JSONResponse(content=payload, status_code=status_code, headers={"Cache-Control": "private, no-store"})


def _parse_review_id(raw: str) -> Optional[int]:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


async def _json_body(request: Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _validation_error(exc: ReviewValidationError) -> JSONResponse:
    return _json_private(
        {"success": False, "error": "validation_failed", "detail": exc.code, "field": exc.field},
        status_code=400,
    )


def _course_not_confirmed(exc: CourseNotConfirmedError) -> JSONResponse:
    return _json_private(
        {
            "success": False,
            "error": "course_not_confirmed",
            "course": exc.course,
            "suggestions": [c.to_dict() for c in exc.suggestions],
        },
        status_code=400,
    )


def _csrf_error() -> JSONResponse:
    return _json_private({"success": False, "error": "forbidden", "detail": "csrf_violation"}, status_code=403)


@reviews_router.get("/api/reviews")
async def list_reviews():
    """Return all reviews, newest first.

    Behavior:
        - 200 `{success, reviews, count}`
        - 500 `{success: false, error}` when the store is unreachable
    """
    service = service_wiring.get_service()
    try:
        reviews = await asyncio.to_thread(service.list_reviews)
    except Exception as exc:
        logger.warning("Review list failed: %s: %s", exc.__class__.__name__, str(exc))
        return _json_private({"success": False, "error": "Failed to fetch reviews"}, status_code=500)
    ids = [r.id for r in reviews]
    if len(ids) != len(set(ids)):
        logger.warning("Review list contains duplicate ids")
    return _json_private({"success": True, "reviews": [r.to_dict() for r in reviews], "count": len(reviews)})


@reviews_router.post("/api/reviews")
async def create_review(request: Request):
    """Create a review through the ordered write path.

    Behavior:
        - 201 `{success, message, method, data: [review]}`
        - 400 on invalid payload or unconfirmed course (no store call made)
        - 403 on CSRF violation
        - 500 when every write attempt failed; `details` carries the first error
    """
    if csrf_violation(request):
        return _csrf_error()
    payload = await _json_body(request)
    if payload is None:
        return _json_private({"success": False, "error": "validation_failed", "detail": "invalid_payload", "field": "body"}, status_code=400)
    service = service_wiring.get_service()
    try:
        result = await asyncio.to_thread(service.create_review, payload)
    except ReviewValidationError as exc:
        return _validation_error(exc)
    except CourseNotConfirmedError as exc:
        return _course_not_confirmed(exc)
    except Exception as exc:
        logger.exception("Review create failed unexpectedly")
        return _json_private({"success": False, "error": "Internal server error", "details": str(exc)}, status_code=500)
    if not result.ok or result.review is None:
        return _json_private(
            {
                "success": False,
                "error": "Could not insert review using any method",
                "details": result.error.to_dict() if result.error else None,
            },
            status_code=500,
        )
    return _json_private(
        {
            "success": True,
            "message": "Review successfully inserted",
            "method": result.method,
            "data": [result.review.to_dict()],
        },
        status_code=201,
    )


@reviews_router.get("/api/reviews/{review_id}")
async def get_review(review_id: str):
    rid = _parse_review_id(review_id)
    if rid is None:
        return _json_private({"success": False, "error": "bad_request", "detail": "invalid_review_id"}, status_code=400)
    service = service_wiring.get_service()
    try:
        review = await asyncio.to_thread(service.get_review, rid)
    except ReviewNotFoundError:
        return _json_private({"success": False, "error": "not_found"}, status_code=404)
    return _json_private({"success": True, "data": review.to_dict()})


@reviews_router.patch("/api/reviews/{review_id}")
async def update_review(request: Request, review_id: str):
    """Replace the editable fields of a review (fullName, text, course, courseLink, photo when sent)."""
    if csrf_violation(request):
        return _csrf_error()
    rid = _parse_review_id(review_id)
    if rid is None:
        return _json_private({"success": False, "error": "bad_request", "detail": "invalid_review_id"}, status_code=400)
    payload = await _json_body(request)
    if payload is None:
        return _json_private({"success": False, "error": "validation_failed", "detail": "invalid_payload", "field": "body"}, status_code=400)
    service = service_wiring.get_service()
    try:
        review = await asyncio.to_thread(service.update_review, rid, payload)
    except ReviewValidationError as exc:
        return _validation_error(exc)
    except CourseNotConfirmedError as exc:
        return _course_not_confirmed(exc)
    except ReviewNotFoundError:
        return _json_private({"success": False, "error": "not_found"}, status_code=404)
    except Exception as exc:
        logger.exception("Review update failed unexpectedly")
        return _json_private({"success": False, "error": "Internal server error", "details": str(exc)}, status_code=500)
    return _json_private({"success": True, "data": review.to_dict()})


@reviews_router.delete("/api/reviews/{review_id}")
async def delete_review(request: Request, review_id: str):
    if csrf_violation(request):
        return _csrf_error()
    rid = _parse_review_id(review_id)
    if rid is None:
        return _json_private({"success": False, "error": "bad_request", "detail": "invalid_review_id"}, status_code=400)
    service = service_wiring.get_service()
    try:
        await asyncio.to_thread(service.delete_review, rid)
    except ReviewNotFoundError:
        return _json_private({"success": False, "error": "not_found"}, status_code=404)
    except Exception as exc:
        logger.exception("Review delete failed unexpectedly")
        return _json_private({"success": False, "error": "Internal server error", "details": str(exc)}, status_code=500)
    return _json_private({"success": True})


__all__ = ["reviews_router"]
