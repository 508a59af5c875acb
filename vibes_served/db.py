from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from pathlib import Path
from sqlite3 import Row
from typing import Any, Optional


MAX_PAGE_SIZE = 100


def clamp(value: int, low: int, high: Optional[int] = None) -> int:
    value = max(low, value)
    if high is not None:
        value = min(high, value)
    return value


def _row_to_dict(row: Row) -> dict[str, Any]:
    return {"id": row["id"], "content": row["content"], "createdAt": row["created_at"]}


class ContentStore:
    """Content-keyed idea rows in a native SQLite file.

    Rows carry an auto-assigned integer id; ``content`` is the dedup key.
    The connection is shared across request threads, so writers must be
    serialized by the caller.
    """

    def __init__(self, path: str | Path) -> None:
        db_path = Path(path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.path = db_path
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.row_factory = Row
        cur = self._conn.cursor()
        cur.execute("PRAGMA journal_mode=WAL;")
        cur.execute("PRAGMA synchronous=NORMAL;")
        self.ensure_schema()

    def ensure_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS ideas (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                content TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            );
            """
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> ContentStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def count(self) -> int:
        cur = self._conn.execute("SELECT COUNT(*) AS c FROM ideas")
        return int(cur.fetchone()["c"])

    def existing_contents(self) -> set[str]:
        cur = self._conn.execute("SELECT content FROM ideas")
        return {row["content"] for row in cur.fetchall()}

    def clear(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM ideas")

    def insert_many(self, items: Iterable[dict[str, Any]]) -> int:
        """Insert ``{content, createdAt?}`` items in a single transaction."""
        inserted = 0
        with self._conn:
            for item in items:
                created_at = item.get("createdAt")
                if created_at:
                    self._conn.execute(
                        "INSERT INTO ideas (content, created_at) VALUES (?, ?)",
                        (item["content"], created_at),
                    )
                else:
                    self._conn.execute("INSERT INTO ideas (content) VALUES (?)", (item["content"],))
                inserted += 1
        return inserted

    def list_page(self, limit: int = 20, offset: int = 0) -> dict[str, Any]:
        limit = clamp(limit, 1, MAX_PAGE_SIZE)
        offset = clamp(offset, 0)
        total = self.count()
        cur = self._conn.execute(
            "SELECT id, content, created_at FROM ideas ORDER BY id ASC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        items = [_row_to_dict(row) for row in cur.fetchall()]
        has_more = offset + len(items) < total
        page: dict[str, Any] = {
            "items": items,
            "total": total,
            "limit": limit,
            "offset": offset,
            "hasMore": has_more,
        }
        if has_more:
            page["nextOffset"] = offset + len(items)
        return page

    def random_sample(self, count: int = 1) -> list[dict[str, Any]]:
        count = clamp(count, 1, MAX_PAGE_SIZE)
        cur = self._conn.execute(
            "SELECT id, content, created_at FROM ideas ORDER BY RANDOM() LIMIT ?",
            (count,),
        )
        return [_row_to_dict(row) for row in cur.fetchall()]
