"""
Review write path: an ordered chain of parameterized insert attempts.

Why:
    The hosted table is reachable through several access paths (structured
    insert, procedure call, direct PostgreSQL). We try them in order and stop
    at the first success. Attempts are independent and not transactional, so
    a failed earlier attempt may still have left side effects behind; callers
    treat an early failure as advisory only.

Behavior:
    - Every attempt is logged (method, outcome); photo bytes are never logged.
    - On success the result carries the winning method and its returned row.
    - When all attempts fail, the reported error is the first one observed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..models import Review, ReviewDraft

logger = logging.getLogger("dashboard.reviews.write_path")

InsertFn = Callable[[ReviewDraft], Review]


@dataclass(frozen=True)
class WriteError:
    method: str
    message: str

    def to_dict(self) -> dict:
        return {"method": self.method, "message": self.message}


@dataclass
class WriteResult:
    """Typed outcome of the write path (ok + review, or error)."""

    ok: bool
    review: Optional[Review] = None
    method: Optional[str] = None
    error: Optional[WriteError] = None
    attempts: List[Tuple[str, bool]] = field(default_factory=list)


@dataclass(frozen=True)
class WriteAttempt:
    method: str
    insert: InsertFn


class WritePath:
    def __init__(self, attempts: Sequence[WriteAttempt]) -> None:
        if not attempts:
            raise ValueError("write_path_requires_attempts")
        self._attempts = list(attempts)

    @property
    def methods(self) -> List[str]:
        return [a.method for a in self._attempts]

    def run(self, draft: ReviewDraft) -> WriteResult:
        first_error: Optional[WriteError] = None
        outcomes: List[Tuple[str, bool]] = []
        for attempt in self._attempts:
            try:
                review = attempt.insert(draft)
            except Exception as exc:
                message = str(exc) or exc.__class__.__name__
                logger.warning("Review insert via %s failed: %s: %s", attempt.method, exc.__class__.__name__, message)
                outcomes.append((attempt.method, False))
                if first_error is None:
                    first_error = WriteError(method=attempt.method, message=message)
                continue
            outcomes.append((attempt.method, True))
            logger.info("Review insert via %s succeeded (id=%s)", attempt.method, review.id)
            return WriteResult(ok=True, review=review, method=attempt.method, attempts=outcomes)
        logger.error("Review insert failed on all methods: %s", ", ".join(m for m, _ in outcomes))
        return WriteResult(ok=False, error=first_error, attempts=outcomes)


def build_write_path(*, supabase_store=None, db_store=None, fallback_store=None) -> WritePath:
    """Assemble the attempt chain from whichever stores are configured.

    Order: supabase insert, supabase rpc, direct PostgreSQL; `fallback_store`
    (typically in-memory) is used only when nothing else is configured.
    """
    attempts: List[WriteAttempt] = []
    if supabase_store is not None:
        attempts.append(WriteAttempt("insert", supabase_store.insert_review))
        attempts.append(WriteAttempt("rpc", supabase_store.insert_review_rpc))
    if db_store is not None:
        attempts.append(WriteAttempt("direct_pg", db_store.insert_review))
    if not attempts and fallback_store is not None:
        attempts.append(WriteAttempt("insert", fallback_store.insert_review))
    return WritePath(attempts)


__all__ = ["WriteAttempt", "WriteError", "WritePath", "WriteResult", "build_write_path"]
