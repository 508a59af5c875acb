from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator, Mapping
from pathlib import Path
from sqlite3 import Row
from typing import Any, Optional

from ..models import Idea


DEFAULT_BATCH_SIZE = 100

_COLUMNS = "id, title, summary, objective, tags"


class IdeaStoreError(Exception):
    pass


class ValidationError(IdeaStoreError):
    pass


class DuplicateIdError(IdeaStoreError):
    def __init__(self, idea_id: str) -> None:
        super().__init__(f"Idea with id '{idea_id}' already exists")
        self.idea_id = idea_id


class InvalidArgument(IdeaStoreError):
    pass


def _validate_for_insert(candidate: Any) -> dict[str, Any]:
    prefix = "Invalid idea: "
    if isinstance(candidate, Idea):
        candidate = candidate.model_dump()
    if not isinstance(candidate, Mapping):
        raise ValidationError(prefix + "must be an object")
    for field in ("id", "title", "summary", "objective"):
        value = candidate.get(field)
        if not value or not isinstance(value, str):
            raise ValidationError(prefix + f"{field} must be a non-empty string")
    tags = candidate.get("tags", [])
    if tags is None:
        tags = []
    if not isinstance(tags, list):
        raise ValidationError(prefix + "tags must be an array")
    if not all(isinstance(t, str) for t in tags):
        raise ValidationError(prefix + "tags must be an array of strings")
    return {
        "id": candidate["id"],
        "title": candidate["title"],
        "summary": candidate["summary"],
        "objective": candidate["objective"],
        "tags": list(tags),
    }


def _parse_tags(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return []
    if isinstance(parsed, list):
        return [str(t) for t in parsed]
    return []


def _row_to_idea(row: Row) -> Idea:
    return Idea(
        id=str(row["id"]),
        title=str(row["title"]),
        summary=str(row["summary"]),
        objective=str(row["objective"]),
        tags=_parse_tags(row["tags"]),
    )


def _require_id(idea_id: Any) -> str:
    if not idea_id or not isinstance(idea_id, str):
        raise InvalidArgument("id must be a non-empty string")
    return idea_id


class IdeaStore:
    """Idea records held in an in-memory SQLite database.

    When ``storage_file_path`` is given, an existing file is loaded on open and
    the whole database image is written back by ``persist()``. With
    ``auto_persist`` (the default whenever a path is set) every successful
    write is flushed before the call returns. ``close()`` never persists.
    """

    def __init__(self, storage_file_path: str | Path | None = None, auto_persist: Optional[bool] = None) -> None:
        self._path = Path(storage_file_path) if storage_file_path else None
        self._auto_persist = bool(self._path) if auto_persist is None else bool(auto_persist)
        self._conn: sqlite3.Connection | None = sqlite3.connect(":memory:", check_same_thread=False)
        self._conn.row_factory = Row
        if self._path is not None and self._path.exists():
            src = sqlite3.connect(str(self._path))
            try:
                src.backup(self._conn)
            finally:
                src.close()
        self._ensure_schema()

    @property
    def storage_file_path(self) -> Path | None:
        return self._path

    def _db(self) -> sqlite3.Connection:
        if self._conn is None:
            raise IdeaStoreError("Store is closed")
        return self._conn

    def _ensure_schema(self) -> None:
        conn = self._db()
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS ideas (
                id TEXT PRIMARY KEY NOT NULL,
                title TEXT NOT NULL,
                summary TEXT NOT NULL,
                objective TEXT NOT NULL,
                tags TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def persist(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        dst = sqlite3.connect(str(self._path))
        try:
            self._db().backup(dst)
        finally:
            dst.close()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> IdeaStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def create(self, idea: Mapping[str, Any] | Idea) -> Idea:
        data = _validate_for_insert(idea)
        conn = self._db()
        try:
            conn.execute(
                f"INSERT INTO ideas ({_COLUMNS}) VALUES (?,?,?,?,?)",
                (
                    data["id"],
                    data["title"],
                    data["summary"],
                    data["objective"],
                    json.dumps(data["tags"], ensure_ascii=False),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "UNIQUE constraint failed" in str(e):
                raise DuplicateIdError(data["id"]) from e
            raise
        if self._auto_persist:
            self.persist()
        return Idea(**data)

    def get_by_id(self, idea_id: str) -> Idea | None:
        _require_id(idea_id)
        cur = self._db().execute(f"SELECT {_COLUMNS} FROM ideas WHERE id = ?", (idea_id,))
        row = cur.fetchone()
        if not row:
            return None
        return _row_to_idea(row)

    def list(self) -> list[Idea]:
        cur = self._db().execute(f"SELECT {_COLUMNS} FROM ideas ORDER BY rowid ASC")
        return [_row_to_idea(row) for row in cur.fetchall()]

    def iterate(self, batch_size: int = DEFAULT_BATCH_SIZE) -> Iterator[list[Idea]]:
        """Yield ideas in insertion order, at most ``batch_size`` per batch.

        Every call starts a fresh pass from the first row.
        """
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size <= 0:
            batch_size = DEFAULT_BATCH_SIZE
        offset = 0
        while True:
            cur = self._db().execute(
                f"SELECT {_COLUMNS} FROM ideas ORDER BY rowid ASC LIMIT ? OFFSET ?",
                (batch_size, offset),
            )
            batch = [_row_to_idea(row) for row in cur.fetchall()]
            if not batch:
                return
            yield batch
            offset += len(batch)

    def delete_by_id(self, idea_id: str) -> bool:
        _require_id(idea_id)
        conn = self._db()
        cur = conn.execute("DELETE FROM ideas WHERE id = ?", (idea_id,))
        conn.commit()
        removed = cur.rowcount > 0
        if self._auto_persist:
            self.persist()
        return removed
