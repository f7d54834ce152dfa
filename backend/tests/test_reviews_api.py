"""
Reviews and course-check API contract (in-memory store).

Why:
    Pin status codes, bodies and cache headers of the JSON endpoints the
    dashboard UI talks to.
"""
from __future__ import annotations

import base64
from io import BytesIO

import httpx
import pytest
from httpx import ASGITransport
from PIL import Image

from backend.reviews.services.course_lookup import CourseLookupService
from backend.reviews.services.reviews import ReviewsService
from backend.reviews.services.write_path import WriteAttempt, WritePath
from backend.web import main
from backend.web import service_wiring


pytestmark = pytest.mark.anyio("asyncio")


def _payload(**overrides) -> dict:
    payload = {
        "fullName": "Ada Lovelace",
        "text": "Loved every session of it",
        "course": "Intro to X",
        "courseLink": "",
    }
    payload.update(overrides)
    return payload


def _png_uri() -> str:
    buf = BytesIO()
    Image.new("RGB", (1, 1)).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test")


@pytest.fixture(autouse=True)
def _wire_service(reviews_service):
    service_wiring.set_service(reviews_service)
    yield


# --- Course check ------------------------------------------------------------------


async def test_course_check_requires_title():
    async with _client() as c:
        r = await c.get("/api/courses/check")
        r_blank = await c.get("/api/courses/check", params={"title": "  "})

    assert r.status_code == 400
    assert r.json() == {"exists": False, "message": "Course title is required"}
    assert r_blank.status_code == 400


async def test_course_check_exact_match():
    async with _client() as c:
        r = await c.get("/api/courses/check", params={"title": "Intro to X"})

    assert r.status_code == 200
    assert r.json() == {"exists": True, "course": {"id": "c-1", "title": "Intro to X"}, "courseLink": "/courses/c-1"}
    assert "no-store" in r.headers.get("Cache-Control", "")


async def test_course_check_substring_returns_suggestions():
    async with _client() as c:
        r = await c.get("/api/courses/check", params={"title": "intro"})

    body = r.json()
    assert r.status_code == 200
    assert body["exists"] is True
    assert body["courseLink"] == "/courses/c-1"
    assert body["suggestions"] == [{"id": "c-1", "title": "Intro to X"}]


async def test_course_check_unknown_title():
    async with _client() as c:
        r = await c.get("/api/courses/check", params={"title": "Underwater Chess"})

    assert r.status_code == 200
    assert r.json() == {"exists": False, "message": "Course not found"}


async def test_course_check_catalog_failure_returns_500(reviews_service, monkeypatch):
    def _boom(title):
        raise RuntimeError("catalog down")

    monkeypatch.setattr(reviews_service.courses, "check", _boom)
    async with _client() as c:
        r = await c.get("/api/courses/check", params={"title": "Intro to X"})

    assert r.status_code == 500
    assert r.json()["message"] == "Error checking course"


# --- Create ------------------------------------------------------------------------


async def test_create_review_returns_201_with_inserted_row(memory_store):
    async with _client() as c:
        r = await c.post("/api/reviews", json=_payload(student_picture=_png_uri()))

    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Review successfully inserted"
    assert body["method"] == "insert"
    row = body["data"][0]
    assert row["fullName"] == "Ada Lovelace"
    # courseLink is pinned to the confirmed course, not taken from the client.
    assert row["courseLink"] == "/courses/c-1"
    assert row["student_picture"].startswith("data:image/png;base64,")
    assert list(memory_store.reviews) == [row["id"]]


async def test_create_review_validation_error_makes_no_store_call(memory_store):
    async with _client() as c:
        r = await c.post("/api/reviews", json=_payload(fullName="A", course=""))

    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "validation_failed", "detail": "invalid_full_name", "field": "fullName"}
    assert memory_store.reviews == {}


async def test_create_review_rejects_non_object_body(memory_store):
    async with _client() as c:
        r = await c.post("/api/reviews", content=b"[1, 2]", headers={"content-type": "application/json"})
        r_garbage = await c.post("/api/reviews", content=b"{not json", headers={"content-type": "application/json"})

    assert r.status_code == 400
    assert r.json()["detail"] == "invalid_payload"
    assert r_garbage.status_code == 400
    assert memory_store.reviews == {}


async def test_create_review_unknown_course_is_rejected(memory_store):
    async with _client() as c:
        r = await c.post("/api/reviews", json=_payload(course="Underwater Chess"))

    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "course_not_confirmed"
    assert body["course"] == "Underwater Chess"
    assert body["suggestions"] == []
    assert memory_store.reviews == {}


async def test_create_review_all_methods_failing_returns_500(memory_store):
    def _fail(draft):
        raise RuntimeError("permission denied")

    service_wiring.set_service(
        ReviewsService(
            memory_store,
            WritePath([WriteAttempt("insert", _fail), WriteAttempt("rpc", _fail)]),
            CourseLookupService(memory_store),
        )
    )
    async with _client() as c:
        r = await c.post("/api/reviews", json=_payload())

    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Could not insert review using any method"
    assert body["details"] == {"method": "insert", "message": "permission denied"}


async def test_create_review_cross_origin_is_forbidden(memory_store):
    async with _client() as c:
        r = await c.post("/api/reviews", json=_payload(), headers={"Origin": "http://evil.example"})

    assert r.status_code == 403
    assert r.json()["detail"] == "csrf_violation"
    assert memory_store.reviews == {}


async def test_create_review_same_origin_is_allowed():
    async with _client() as c:
        r = await c.post("/api/reviews", json=_payload(), headers={"Origin": "http://test"})

    assert r.status_code == 201


async def test_strict_csrf_requires_origin(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("STRICT_CSRF_REVIEWS", "true")
    async with _client() as c:
        r = await c.post("/api/reviews", json=_payload())

    assert r.status_code == 403


# --- List / get / edit / delete ------------------------------------------------------


async def test_list_reviews_newest_first():
    async with _client() as c:
        await c.post("/api/reviews", json=_payload(fullName="First Student"))
        await c.post("/api/reviews", json=_payload(fullName="Second Student"))
        r = await c.get("/api/reviews")

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert [row["fullName"] for row in body["reviews"]] == ["Second Student", "First Student"]
    assert "private" in r.headers.get("Cache-Control", "")


async def test_list_reviews_store_failure_returns_500(memory_store, monkeypatch):
    def _boom():
        raise RuntimeError("timeout")

    monkeypatch.setattr(memory_store, "list_reviews", _boom)
    async with _client() as c:
        r = await c.get("/api/reviews")

    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Failed to fetch reviews"}


async def test_get_review_and_not_found():
    async with _client() as c:
        created = (await c.post("/api/reviews", json=_payload())).json()["data"][0]
        r = await c.get(f"/api/reviews/{created['id']}")
        r_missing = await c.get("/api/reviews/999")
        r_bad = await c.get("/api/reviews/abc")

    assert r.status_code == 200
    assert r.json()["data"]["id"] == created["id"]
    assert r_missing.status_code == 404
    assert r_missing.json() == {"success": False, "error": "not_found"}
    assert r_bad.status_code == 400


async def test_patch_review_keeps_photo_when_not_sent():
    uri = _png_uri()
    async with _client() as c:
        created = (await c.post("/api/reviews", json=_payload(student_picture=uri))).json()["data"][0]
        r = await c.patch(
            f"/api/reviews/{created['id']}",
            json=_payload(text="Edited after the final exam", course="Advanced X"),
        )

    assert r.status_code == 200
    row = r.json()["data"]
    assert row["id"] == created["id"]
    assert row["text"] == "Edited after the final exam"
    assert row["course"] == "Advanced X"
    assert row["courseLink"] == "/courses/c-2"
    assert row["student_picture"] == uri


async def test_patch_review_can_clear_photo():
    async with _client() as c:
        created = (await c.post("/api/reviews", json=_payload(student_picture=_png_uri()))).json()["data"][0]
        r = await c.patch(f"/api/reviews/{created['id']}", json=_payload(student_picture=None))

    assert r.status_code == 200
    assert r.json()["data"]["student_picture"] is None


async def test_patch_review_validation_and_not_found():
    async with _client() as c:
        created = (await c.post("/api/reviews", json=_payload())).json()["data"][0]
        r_invalid = await c.patch(f"/api/reviews/{created['id']}", json=_payload(text="no"))
        r_missing = await c.patch("/api/reviews/999", json=_payload())

    assert r_invalid.status_code == 400
    assert r_invalid.json()["field"] == "text"
    assert r_missing.status_code == 404


async def test_delete_review_then_404(memory_store):
    async with _client() as c:
        created = (await c.post("/api/reviews", json=_payload())).json()["data"][0]
        r = await c.delete(f"/api/reviews/{created['id']}")
        r_again = await c.delete(f"/api/reviews/{created['id']}")

    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert r_again.status_code == 404
    assert memory_store.reviews == {}
