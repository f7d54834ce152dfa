"Idearoom dashboard"
from __future__ import annotations

import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

from backend.web import config as _cfg

if _cfg.should_load_dotenv():
    load_dotenv()

from backend.web.routes.courses import courses_router
from backend.web.routes.reviews import reviews_router

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()


app = FastAPI(
    title="Idearoom Dashboard",
    description="Admin dashboard for student course reviews",
    version="0.1.0",
)

app.include_router(reviews_router)
app.include_router(courses_router)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    supabase_url = (os.getenv("SUPABASE_URL") or "").strip().rstrip("/")
    connect_src = "'self'" + (f" {supabase_url}" if supabase_url else "")
    if _cfg.current_environment() == "prod":
        csp = (
            "default-src 'self'; script-src 'self'; style-src 'self'; "
            f"img-src 'self' data:; font-src 'self' data:; connect-src {connect_src};"
        )
    else:
        # Developer experience: allow inline scripts/styles for local tooling.
        csp = (
            "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'; "
            f"img-src 'self' data:; font-src 'self' data:; connect-src {connect_src};"
        )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    if _cfg.current_environment() == "prod":
        response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


@app.get("/health")
async def health_check():
    # Minimal health endpoint used by orchestrators and tests.
    return JSONResponse({"status": "healthy"}, headers={"Cache-Control": "private, no-store"})
