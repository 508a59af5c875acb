"""Load directories of JSON files into the idea stores.

Two pipelines share the directory scan:

- ``seed_ideas_directory`` feeds string-id ideas through ``IdeaStore.create``
  (dedup by id, per-record auto-persist, forced persist at the end).
- ``seed_contents`` loads content-keyed rows into a ``ContentStore`` in one
  transaction (dedup by trimmed content, optional clear and dry run).
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from ..db import ContentStore
from .idea_store import DuplicateIdError, IdeaStore


_logger = logging.getLogger("vibes_served.seed")

DEFAULT_DB_PATH = Path("./data/app.db")
DEFAULT_SEEDS_DIR = Path("./seeds")


class SeedError(Exception):
    pass


@dataclass
class SeedSummary:
    files_processed: int = 0
    ideas_read: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class ContentSeedResult:
    total_files: int = 0
    total_read: int = 0
    total_deduped: int = 0
    inserted: int = 0
    skipped_existing: int = 0
    cleared: bool = False

    def summary_line(self) -> str:
        parts = [
            f"files={self.total_files}",
            f"read={self.total_read}",
            f"deduped={self.total_deduped}",
            f"inserted={self.inserted}",
            f"skipped={self.skipped_existing}",
        ]
        if self.cleared:
            parts.append("cleared=true")
        return " ".join(parts)


def _require_dir(seed_dir: Path) -> None:
    if not seed_dir.is_dir():
        raise SeedError(f"Seed directory not found or not a directory: {seed_dir}")


def list_json_files(seed_dir: Path, case_insensitive: bool = True) -> list[Path]:
    """Regular ``.json`` files directly under ``seed_dir``, sorted by name."""
    files = []
    for p in seed_dir.iterdir():
        name = p.name.lower() if case_insensitive else p.name
        if p.is_file() and name.endswith(".json"):
            files.append(p)
    return sorted(files, key=lambda p: p.name)


# -----------------------------
# Id-keyed ideas
# -----------------------------

def normalize_ideas(value: Any, source: str) -> list[Any]:
    """Accept ``[...]``, ``{"ideas": [...]}`` or a single idea object.

    Items are returned as-is; ``IdeaStore.create`` validates them.
    """
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        ideas = value.get("ideas")
        if isinstance(ideas, list):
            return ideas
        return [value]
    raise SeedError(
        f"Unsupported JSON structure in {source}. Expected an array, {{ ideas: [] }}, or single object."
    )


def read_ideas_from_directory(seed_dir: Path) -> tuple[list[Path], list[Any]]:
    files = list_json_files(seed_dir)
    collected: list[Any] = []
    for path in files:
        try:
            value = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SeedError(f"Failed to parse JSON in {path}: {e}") from e
        collected.extend(normalize_ideas(value, str(path)))
    return files, collected


def seed_ideas_directory(
    seed_dir: str | Path,
    db_file_path: str | Path,
    strict: bool = False,
    skip_duplicates: bool = True,
    logger: Optional[logging.Logger] = None,
) -> SeedSummary:
    log = logger or _logger
    if not seed_dir:
        raise SeedError("seed_dir is required")
    if not db_file_path:
        raise SeedError("db_file_path is required")
    seed_path = Path(seed_dir)
    _require_dir(seed_path)

    files, ideas = read_ideas_from_directory(seed_path)
    summary = SeedSummary(files_processed=len(files), ideas_read=len(ideas))

    store = IdeaStore(storage_file_path=db_file_path)
    try:
        for index, idea in enumerate(ideas):
            idea_id = idea.get("id") if isinstance(idea, dict) else None
            try:
                store.create(idea)
                summary.inserted += 1
            except DuplicateIdError as e:
                if skip_duplicates:
                    log.warning(f"Skipping duplicate id '{idea_id}' (item #{index + 1})")
                    summary.skipped += 1
                    continue
                summary.errors += 1
                log.error(f"Failed to insert idea at index {index} (id='{idea_id}'): {e}")
                if strict:
                    raise SeedError("Aborting due to strict mode and an insertion error") from e
            except Exception as e:
                summary.errors += 1
                log.error(f"Failed to insert idea at index {index} (id='{idea_id or '<missing>'}'): {e}")
                if strict:
                    raise SeedError("Aborting due to strict mode and an insertion error") from e
        store.persist()
    finally:
        store.close()

    log.info(
        f"Seed complete: files={summary.files_processed} ideas_read={summary.ideas_read} "
        f"inserted={summary.inserted} skipped={summary.skipped} errors={summary.errors}"
    )
    return summary


# -----------------------------
# Content-keyed ideas
# -----------------------------

def normalize_content_item(item: Any) -> dict[str, str] | None:
    if isinstance(item, str):
        content = item.strip()
        return {"content": content} if content else None
    if isinstance(item, dict):
        raw = item.get("content")
        content = raw.strip() if isinstance(raw, str) else ""
        if not content:
            return None
        created_at = item.get("createdAt")
        if isinstance(created_at, str) and created_at:
            return {"content": content, "createdAt": created_at}
        return {"content": content}
    return None


def extract_content_items(value: Any) -> list[dict[str, str]]:
    if isinstance(value, list):
        raw_items = value
    elif isinstance(value, dict):
        if isinstance(value.get("ideas"), list):
            raw_items = value["ideas"]
        elif value.get("idea"):
            raw_items = [value["idea"]]
        else:
            raw_items = [value]
    elif isinstance(value, str):
        raw_items = [value]
    else:
        raw_items = []
    items = []
    for raw in raw_items:
        normalized = normalize_content_item(raw)
        if normalized:
            items.append(normalized)
    return items


def collect_contents_from_directory(seeds_dir: Path) -> tuple[list[Path], list[dict[str, str]]]:
    files = list_json_files(seeds_dir, case_insensitive=False)
    items: list[dict[str, str]] = []
    for path in files:
        try:
            value = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            _logger.warning(f"Skipping unreadable seed file: {e}", extra={"file": str(path)})
            continue
        items.extend(extract_content_items(value))
    return files, items


def dedupe_contents(items: list[dict[str, str]]) -> list[dict[str, str]]:
    seen: set[str] = set()
    out = []
    for item in items:
        if item["content"] in seen:
            continue
        seen.add(item["content"])
        out.append(item)
    return out


def seed_contents(
    db_path: str | Path | None = None,
    seeds_dir: str | Path | None = None,
    clear: bool = False,
    dry_run: bool = False,
) -> ContentSeedResult:
    resolved_db = Path(db_path) if db_path else DEFAULT_DB_PATH
    resolved_dir = Path(seeds_dir) if seeds_dir else DEFAULT_SEEDS_DIR
    if not resolved_dir.is_dir():
        raise SeedError(f"Seeds directory not found: {resolved_dir}")

    with ContentStore(resolved_db) as store:
        files, items = collect_contents_from_directory(resolved_dir)
        deduped = dedupe_contents(items)
        result = ContentSeedResult(total_files=len(files), total_read=len(items), total_deduped=len(deduped))

        if clear and not dry_run:
            store.clear()
            result.cleared = True

        existing = store.existing_contents()
        pending = []
        for item in deduped:
            if item["content"] in existing:
                result.skipped_existing += 1
                continue
            pending.append(item)
            existing.add(item["content"])

        if dry_run:
            result.inserted = len(pending)
        else:
            result.inserted = store.insert_many(pending)

    _logger.info(f"Content seed complete: {result.summary_line()}")
    return result
