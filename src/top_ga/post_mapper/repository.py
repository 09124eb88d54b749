"""Content items and their metadata in SQLite."""

from __future__ import annotations

import logging

from src.common.database import get_connection

from .models import Post

logger = logging.getLogger(__name__)


class PostRepository:
    """Looks up posts by slug and reads/writes per-post metadata."""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path

    def add_post(self, slug: str, title: str, post_type: str = "post", status: str = "publish") -> Post:
        """Insert a content item and return it."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "INSERT INTO posts (post_type, slug, title, status) VALUES (?, ?, ?, ?)",
                (post_type, slug, title, status),
            )
            conn.commit()
            post_id = cursor.lastrowid
        finally:
            conn.close()
        return Post(id=post_id, slug=slug, title=title, post_type=post_type, status=status)

    def find_by_slug(self, slug: str, post_type: str = "post") -> Post | None:
        if not slug:
            return None
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT id, slug, title, post_type, status FROM posts "
                "WHERE slug = ? AND post_type = ?",
                (slug, post_type),
            ).fetchone()
        finally:
            conn.close()
        return _to_post(row) if row else None

    def set_meta(self, post_id: int, key: str, value: int | str) -> None:
        """Overwrite one metadata value."""
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT INTO post_meta (post_id, meta_key, meta_value) VALUES (?, ?, ?) "
                "ON CONFLICT(post_id, meta_key) DO UPDATE SET meta_value = excluded.meta_value",
                (post_id, key, str(value)),
            )
            conn.commit()
        finally:
            conn.close()

    def get_meta(self, post_id: int, key: str) -> str | None:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT meta_value FROM post_meta WHERE post_id = ? AND meta_key = ?",
                (post_id, key),
            ).fetchone()
        finally:
            conn.close()
        return row["meta_value"] if row else None

    def top_by_meta(self, post_type: str, key: str, limit: int) -> list[tuple[Post, str]]:
        """Published posts that carry `key`, ordered by its numeric value descending."""
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                """
                SELECT p.id, p.slug, p.title, p.post_type, p.status, m.meta_value
                  FROM posts p
                  JOIN post_meta m ON m.post_id = p.id
                 WHERE p.post_type = ?
                   AND p.status = 'publish'
                   AND m.meta_key = ?
                 ORDER BY CAST(m.meta_value AS INTEGER) DESC, p.id ASC
                 LIMIT ?
                """,
                (post_type, key, limit),
            ).fetchall()
        finally:
            conn.close()
        return [(_to_post(row), row["meta_value"]) for row in rows]


def _to_post(row) -> Post:
    return Post(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        post_type=row["post_type"],
        status=row["status"],
    )
