"""
Change feeds for the `review` table.

Two adapters implement `ChangeFeedProtocol`:

- `LocalChangeFeed`: in-process fan-out used by the in-memory store (offline
  development and tests). Events are delivered on the subscriber's event loop
  so store writes from worker threads never mutate listener state directly.
- `SupabaseRealtimeFeed`: wraps an async supabase client and listens to
  `postgres_changes` on `public.review`. The client is duck-typed; it must
  expose `.channel(name)` returning an object with
  `on_postgres_changes(event, schema=, table=, callback=)` and async
  `subscribe()`, plus async `remove_channel(channel)` on the client.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import REVIEW_TABLE
from .ports import DELETE, INSERT, UPDATE, ChangeEvent, ChangeHandler

logger = logging.getLogger("dashboard.reviews.feeds")

_KINDS = {INSERT, UPDATE, DELETE}


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def change_event_from_payload(payload: Any) -> Optional[ChangeEvent]:
    """Normalize a realtime payload into a ChangeEvent, or None when unusable.

    Accepted shapes:
        {"eventType": "INSERT", "new": {...}, "old": {...}}
        {"data": {"type": "INSERT", "record": {...}, "old_record": {...}}}
    """
    if not isinstance(payload, Mapping):
        return None
    data = payload.get("data")
    if isinstance(data, Mapping) and ("type" in data or "record" in data):
        kind = data.get("type") or data.get("eventType")
        new = _as_dict(data.get("record"))
        old = _as_dict(data.get("old_record"))
    else:
        kind = payload.get("eventType") or payload.get("type")
        new = _as_dict(payload.get("new") or payload.get("record"))
        old = _as_dict(payload.get("old") or payload.get("old_record"))
    # realtime validates the kind into a str-Enum whose str() is the member name.
    kind = getattr(kind, "value", kind)
    kind = str(kind or "").upper()
    if kind not in _KINDS:
        return None
    event = ChangeEvent(kind=kind, new=new, old=old)
    if event.review_id is None:
        return None
    return event


# --- In-process feed ------------------------------------------------------------


class _LocalSubscription:
    def __init__(self, feed: "LocalChangeFeed", entry: Tuple[asyncio.AbstractEventLoop, ChangeHandler]) -> None:
        self._feed = feed
        self._entry = entry

    async def close(self) -> None:
        self._feed._remove(self._entry)


class LocalChangeFeed:
    """Fan-out feed; `publish()` may be called from any thread."""

    def __init__(self) -> None:
        self._subscribers: List[Tuple[asyncio.AbstractEventLoop, ChangeHandler]] = []

    async def subscribe(self, handler: ChangeHandler) -> _LocalSubscription:
        entry = (asyncio.get_running_loop(), handler)
        self._subscribers.append(entry)
        return _LocalSubscription(self, entry)

    def _remove(self, entry: Tuple[asyncio.AbstractEventLoop, ChangeHandler]) -> None:
        try:
            self._subscribers.remove(entry)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: ChangeEvent) -> None:
        for loop, handler in list(self._subscribers):
            if loop.is_closed():
                self._remove((loop, handler))
                continue
            loop.call_soon_threadsafe(handler, event)


# --- Supabase Realtime ------------------------------------------------------------


class _RealtimeSubscription:
    def __init__(self, client: Any, channel: Any) -> None:
        self._client = client
        self._channel = channel
        self._closed = False

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._client.remove_channel(self._channel)
        except Exception as exc:  # pragma: no cover - network teardown
            logger.warning("Realtime channel removal failed: %s: %s", exc.__class__.__name__, str(exc))


class SupabaseRealtimeFeed:
    """Listen to row changes through Supabase Realtime."""

    def __init__(self, client: Any, *, channel_name: str = "reviews-channel", schema: str = "public") -> None:
        self._client = client
        self._channel_name = channel_name
        self._schema = schema

    async def subscribe(self, handler: ChangeHandler) -> _RealtimeSubscription:
        def _on_change(payload: Any) -> None:
            event = change_event_from_payload(payload)
            if event is None:
                logger.warning("Ignoring realtime payload without usable review row")
                return
            logger.info("Realtime %s for review %s", event.kind, event.review_id)
            handler(event)

        channel = self._client.channel(self._channel_name)
        channel.on_postgres_changes("*", schema=self._schema, table=REVIEW_TABLE, callback=_on_change)
        await channel.subscribe()
        logger.info("Realtime subscription active: %s.%s", self._schema, REVIEW_TABLE)
        return _RealtimeSubscription(self._client, channel)


__all__ = ["change_event_from_payload", "LocalChangeFeed", "SupabaseRealtimeFeed"]
