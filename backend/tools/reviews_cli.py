"""
Operator CLI for the review table.

Commands:
    list          print all reviews, newest first
    check-course  run the course lookup for a title
    watch         keep a live list (refresh + change feed) and print changes
    serve         run the dashboard API with uvicorn

Configuration is read from the same environment as the web app
(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, DATABASE_URL, ...).
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import click
from dotenv import load_dotenv
import uvicorn

from backend.reviews.live import LiveReviewList
from backend.reviews.models import Review
from backend.reviews.photos import is_data_uri_image
from backend.web.config import should_load_dotenv
from backend.web.service_wiring import build_change_feed, build_reviews_service


def _format_review(review: Review) -> str:
    created = review.created_at or "-"
    picture = " [photo]" if is_data_uri_image(review.student_picture) else ""
    return f"{review.id:>5}  {created}  {review.full_name} ({review.course}){picture}"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Inspect and watch student course reviews."""
    if should_load_dotenv():
        load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("list")
def list_command() -> None:
    service = build_reviews_service()
    reviews = service.list_reviews()
    for review in reviews:
        click.echo(_format_review(review))
    click.echo(f"{len(reviews)} review(s)")


@cli.command("check-course")
@click.argument("title")
def check_course_command(title: str) -> None:
    """Check whether TITLE names an existing course."""
    service = build_reviews_service()
    try:
        check = service.courses.check(title)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="TITLE")
    if not check.exists:
        click.echo(check.message or "Course not found")
        raise SystemExit(1)
    click.echo(f"{check.course.title if check.course else title} -> {check.course_link}")
    for suggestion in check.suggestions:
        click.echo(f"  also: {suggestion.title} ({suggestion.link})")


async def _watch(refresh_seconds: Optional[float], duration: Optional[float]) -> None:
    service = build_reviews_service()
    feed = await build_change_feed(service.store)
    if feed is None:
        click.echo("No change feed available; relying on periodic refresh.")

    def _on_change(reviews: List[Review]) -> None:
        click.echo(f"{len(reviews)} review(s); newest: {_format_review(reviews[0]) if reviews else '-'}")

    async with LiveReviewList(service.store, feed, refresh_seconds=refresh_seconds, on_change=_on_change):
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)


@cli.command("watch")
@click.option("--refresh-seconds", type=float, default=None, help="Full refresh interval (default REVIEWS_REFRESH_SECONDS or 30).")
@click.option("--duration", type=float, default=None, help="Stop after this many seconds (default: run until interrupted).")
def watch_command(refresh_seconds: Optional[float], duration: Optional[float]) -> None:
    """Keep a live review list and print every change."""
    if refresh_seconds is not None and refresh_seconds <= 0:
        raise click.BadParameter("must be positive", param_hint="--refresh-seconds")
    try:
        asyncio.run(_watch(refresh_seconds, duration))
    except KeyboardInterrupt:
        click.echo("Stopped.")


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=8000, show_default=True)
@click.option("--reload", is_flag=True, help="Restart on code changes (development only).")
def serve_command(host: str, port: int, reload: bool) -> None:
    """Serve the dashboard API (backend.web.main:app)."""
    uvicorn.run("backend.web.main:app", host=host, port=port, reload=reload, proxy_headers=True)


if __name__ == "__main__":
    cli()
