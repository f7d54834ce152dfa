"""
List reconciler: the authoritative in-memory list of reviews for one view.

Inputs are full refresh snapshots (one-shot and periodic) and row change
notifications. The reconciler is transport-free and synchronous; callers run
every handler to completion on one event loop, so no locking is needed.

Rules:
    - Full refresh replaces the whole list, but only for the latest issued
      request id; slower replies to superseded requests are discarded.
    - Insert prepends unless the id is already held (duplicate delivery).
    - Update shallow-merges into the held entry, or inserts when absent.
    - Delete and local delete confirmation remove the id; repeats are no-ops.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from .models import Review
from .ports import DELETE, INSERT, UPDATE, ChangeEvent

logger = logging.getLogger("dashboard.reviews.reconciler")


class ListReconciler:
    def __init__(self, initial: Iterable[Review] = ()) -> None:
        self._items: List[Review] = list(initial)
        self._last_request_id = 0

    @property
    def current_sequence(self) -> List[Review]:
        return list(self._items)

    @property
    def last_request_id(self) -> int:
        return self._last_request_id

    def ids(self) -> List[int]:
        return [r.id for r in self._items]

    def _index_of(self, review_id: int) -> Optional[int]:
        for i, review in enumerate(self._items):
            if review.id == review_id:
                return i
        return None

    # --- Full refresh ----------------------------------------------------------------

    def begin_refresh(self) -> int:
        self._last_request_id += 1
        return self._last_request_id

    def apply_refresh(self, request_id: int, snapshot: Iterable[Review]) -> bool:
        """Replace the list with `snapshot` when `request_id` is still the latest."""
        if request_id != self._last_request_id:
            logger.info("Discarding stale refresh %s (latest %s)", request_id, self._last_request_id)
            return False
        self._items = list(snapshot)
        return True

    # --- Change notifications ------------------------------------------------------------

    def on_insert(self, row: Mapping[str, Any]) -> bool:
        review = Review.from_row(row)
        if self._index_of(review.id) is not None:
            return False
        self._items.insert(0, review)
        return True

    def on_update(self, row: Mapping[str, Any]) -> bool:
        review_id = int(row["id"])
        idx = self._index_of(review_id)
        if idx is None:
            return self.on_insert(row)
        merged = self._items[idx].merged(row)
        if merged == self._items[idx]:
            return False
        self._items[idx] = merged
        return True

    def on_delete(self, review_id: int) -> bool:
        idx = self._index_of(int(review_id))
        if idx is None:
            return False
        del self._items[idx]
        return True

    def confirm_local_delete(self, review_id: int) -> bool:
        return self.on_delete(review_id)

    def handle(self, event: ChangeEvent) -> bool:
        """Dispatch a change event to the matching handler."""
        if event.review_id is None:
            return False
        if event.kind == INSERT:
            return self.on_insert(event.new)
        if event.kind == UPDATE:
            return self.on_update(event.new)
        if event.kind == DELETE:
            return self.on_delete(event.review_id)
        return False


__all__ = ["ListReconciler"]
