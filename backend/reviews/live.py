"""
Live review list: drives a ListReconciler from polling and push sources.

Intent:
    Keep one consistent view of the review table for a consumer (CLI watcher,
    dashboard session) by combining:
      1. an initial snapshot (optional seed),
      2. a full refresh on start and every `refresh_seconds`,
      3. change notifications from a `ChangeFeedProtocol`,
      4. local delete confirmations.

Concurrency:
    Everything mutating the reconciler runs on the event loop. Blocking store
    calls go through `asyncio.to_thread`; their results are applied back on the
    loop with the request id issued before the fetch, so a slow reply cannot
    overwrite a newer snapshot. Eventual consistency within one refresh
    interval is the guarantee, not exact real-time ordering.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable, List, Optional

from .config import get_refresh_seconds
from .models import Review
from .ports import ChangeEvent, ChangeFeedProtocol, ReviewStoreProtocol, Subscription
from .reconciler import ListReconciler

logger = logging.getLogger("dashboard.reviews.live")

ChangeListener = Callable[[List[Review]], None]


class LiveReviewList:
    def __init__(
        self,
        store: ReviewStoreProtocol,
        feed: Optional[ChangeFeedProtocol] = None,
        *,
        refresh_seconds: Optional[float] = None,
        initial: Iterable[Review] = (),
        on_change: Optional[ChangeListener] = None,
    ) -> None:
        self._store = store
        self._feed = feed
        self._refresh_seconds = float(refresh_seconds if refresh_seconds is not None else get_refresh_seconds())
        self._reconciler = ListReconciler(initial)
        self._on_change = on_change
        self._subscription: Optional[Subscription] = None
        self._timer: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def reviews(self) -> List[Review]:
        return self._reconciler.current_sequence

    @property
    def reconciler(self) -> ListReconciler:
        return self._reconciler

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self._reconciler.current_sequence)
        except Exception:
            logger.exception("Review list listener failed")

    # --- Event handlers ------------------------------------------------------------

    def handle_event(self, event: ChangeEvent) -> None:
        if self._closed:
            return
        if self._reconciler.handle(event):
            logger.info("Applied %s for review %s", event.kind, event.review_id)
            self._notify()

    async def refresh(self) -> bool:
        """Fetch a full snapshot and apply it unless a newer refresh was issued."""
        request_id = self._reconciler.begin_refresh()
        try:
            snapshot = await asyncio.to_thread(self._store.list_reviews)
        except Exception as exc:
            logger.warning("Review refresh %s failed: %s: %s", request_id, exc.__class__.__name__, str(exc))
            return False
        if self._closed:
            return False
        applied = self._reconciler.apply_refresh(request_id, snapshot)
        if applied:
            logger.info("Refresh %s loaded %s reviews", request_id, len(snapshot))
            self._notify()
        return applied

    async def delete(self, review_id: int) -> bool:
        """Delete through the store, then drop the id locally without waiting for the feed."""
        deleted = await asyncio.to_thread(self._store.delete_review, review_id)
        if deleted and self._reconciler.confirm_local_delete(review_id):
            self._notify()
        return deleted

    # --- Lifecycle -------------------------------------------------------------------

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._refresh_seconds)
            await self.refresh()

    async def start(self) -> None:
        if self._closed:
            raise RuntimeError("live_list_closed")
        if self._timer is not None:
            return
        if self._feed is not None:
            self._subscription = await self._feed.subscribe(self.handle_event)
        await self.refresh()
        self._timer = asyncio.create_task(self._refresh_loop())

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None
        if self._subscription is not None:
            await self._subscription.close()
            self._subscription = None

    async def __aenter__(self) -> "LiveReviewList":
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()


__all__ = ["LiveReviewList"]
