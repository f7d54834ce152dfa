"""
Postgres-backed review store and course catalog (direct driver path).

Security:
- Every statement is parameterized; user text is never interpolated into SQL.
- Use a DSN with TLS in production (see web.config startup guard).

Design:
- Minimal psycopg3 usage; each call opens a short-lived connection.
- Columns keep the table's quoted camelCase names ("fullName", "courseLink").
"""
from __future__ import annotations

from typing import Any, List, Optional, Tuple

try:
    import psycopg
    HAVE_PSYCOPG = True
except Exception:  # pragma: no cover - optional in some dev envs
    psycopg = None  # type: ignore
    HAVE_PSYCOPG = False

from .config import get_database_dsn
from .models import Course, Review, ReviewDraft
from .ports import ReviewStoreError


_REVIEW_COLUMNS_SQL = """
    id,
    "fullName",
    text,
    course,
    "courseLink",
    student_picture,
    to_char(created_at at time zone 'utc', 'YYYY-MM-DD"T"HH24:MI:SS"+00:00"'),
    to_char(updated_at at time zone 'utc', 'YYYY-MM-DD"T"HH24:MI:SS"+00:00"')
"""


def _review_from_row(row: Tuple[Any, ...]) -> Review:
    return Review(
        id=int(row[0]),
        full_name=row[1] or "",
        text=row[2] or "",
        course=row[3] or "",
        course_link=row[4],
        student_picture=row[5],
        created_at=row[6],
        updated_at=row[7],
    )


class DBReviewStore:
    def __init__(self, dsn: Optional[str] = None) -> None:
        """Create a store bound to `dsn` (defaults to DATABASE_URL).

        Behavior:
            - Raises RuntimeError when psycopg is missing or no DSN is configured.
            - Does not open a connection eagerly; connections are per-call.
        """
        if not HAVE_PSYCOPG:
            raise RuntimeError("psycopg3 is required for DBReviewStore")
        resolved = dsn or get_database_dsn()
        if not resolved:
            raise RuntimeError("Database DSN unavailable for DBReviewStore")
        self._dsn = resolved

    # --- Reviews -----------------------------------------------------------------
    def list_reviews(self) -> List[Review]:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    select {_REVIEW_COLUMNS_SQL}
                    from public.review
                    order by created_at desc, id desc
                    """
                )
                rows = cur.fetchall() or []
        return [_review_from_row(r) for r in rows]

    def get_review(self, review_id: int) -> Optional[Review]:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"select {_REVIEW_COLUMNS_SQL} from public.review where id = %s",
                    (int(review_id),),
                )
                row = cur.fetchone()
        return _review_from_row(row) if row else None

    def insert_review(self, draft: ReviewDraft) -> Review:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    insert into public.review ("fullName", text, course, "courseLink", student_picture)
                    values (%s, %s, %s, %s, %s)
                    returning {_REVIEW_COLUMNS_SQL}
                    """,
                    (draft.full_name, draft.text, draft.course, draft.course_link, draft.student_picture),
                )
                row = cur.fetchone()
                conn.commit()
        if not row:
            raise ReviewStoreError("insert_returned_no_row")
        return _review_from_row(row)

    def update_review(self, review_id: int, draft: ReviewDraft) -> Optional[Review]:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                if draft.has_picture:
                    cur.execute(
                        f"""
                        update public.review
                           set "fullName" = %s, text = %s, course = %s, "courseLink" = %s,
                               student_picture = %s, updated_at = now()
                         where id = %s
                        returning {_REVIEW_COLUMNS_SQL}
                        """,
                        (draft.full_name, draft.text, draft.course, draft.course_link, draft.student_picture, int(review_id)),
                    )
                else:
                    cur.execute(
                        f"""
                        update public.review
                           set "fullName" = %s, text = %s, course = %s, "courseLink" = %s,
                               updated_at = now()
                         where id = %s
                        returning {_REVIEW_COLUMNS_SQL}
                        """,
                        (draft.full_name, draft.text, draft.course, draft.course_link, int(review_id)),
                    )
                row = cur.fetchone()
                conn.commit()
        return _review_from_row(row) if row else None

    def delete_review(self, review_id: int) -> bool:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute("delete from public.review where id = %s", (int(review_id),))
                deleted = cur.rowcount or 0
                conn.commit()
        return deleted > 0

    # --- Courses -----------------------------------------------------------------
    def find_course_exact(self, title: str) -> Optional[Course]:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "select id::text, title from public.courses where title = %s order by title limit 1",
                    (title,),
                )
                row = cur.fetchone()
        return Course(id=row[0], title=row[1]) if row else None

    def search_courses(self, fragment: str, *, limit: int) -> List[Course]:
        # Escape LIKE wildcards so the fragment matches literally.
        escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    select id::text, title from public.courses
                    where title ilike %s
                    order by title
                    limit %s
                    """,
                    (f"%{escaped}%", int(limit)),
                )
                rows = cur.fetchall() or []
        return [Course(id=r[0], title=r[1]) for r in rows]


__all__ = ["DBReviewStore", "HAVE_PSYCOPG"]
