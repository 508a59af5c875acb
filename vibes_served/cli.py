"""Command line entry points for seeding and serving."""
from __future__ import annotations

import argparse
import os
import sys
from typing import Optional, Sequence

from .config import Settings, load_settings
from .log import configure_logging
from .services.seed_service import seed_contents, seed_ideas_directory


SEED_USAGE = """\
Usage: vibes-seed --dir <seedDir> --db <dbFilePath> [--strict] [--no-skip-duplicates]

Arguments:
  --dir, -d                Directory containing .json files (or use SEED_DIR env)
  --db, -f                 Target DB file path (or use DB_FILE_PATH env)
  --strict                 Abort on first non-duplicate error (default: false)
  --no-skip-duplicates     Fail on duplicate IDs instead of skipping (default: skip)

JSON shapes supported per file:
  - [ { id, title, summary, objective, tags: [] }, ... ]
  - { ideas: [ ... ] }
  - { id, title, summary, objective, tags: [] }
"""


def _seed_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vibes-seed", add_help=False, usage=argparse.SUPPRESS)
    p.add_argument("--dir", "-d", dest="dir", default=settings.seed_dir)
    p.add_argument("--db", "-f", "-b", dest="db", default=settings.db_file_path)
    p.add_argument("--strict", action="store_true")
    p.add_argument("--no-skip-duplicates", dest="skip_duplicates", action="store_false")
    p.add_argument("--help", "-h", action="store_true")
    return p


def seed_main(argv: Optional[Sequence[str]] = None) -> int:
    """Seed string-id ideas into a SQLite image file."""
    settings = load_settings()
    # unknown flags are ignored
    args, _ = _seed_parser(settings).parse_known_args(argv)
    if args.help or not args.dir or not args.db:
        sys.stderr.write(SEED_USAGE)
        return 2
    configure_logging(settings.log_level)
    try:
        result = seed_ideas_directory(
            args.dir,
            args.db,
            strict=args.strict,
            skip_duplicates=args.skip_duplicates,
        )
    except Exception as e:
        print(str(e), file=sys.stderr)
        return 1
    if args.strict and result.errors > 0:
        return 1
    return 0


def _seed_content_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vibes-seed-content",
        description="Seed content-keyed ideas from a directory of JSON files",
    )
    p.add_argument("path", nargs="?", help="Seeds directory (same as --dir)")
    p.add_argument("--dir", "-d", dest="dir", default=settings.seed_dir, help="Seeds directory (or SEED_DIR env; default: ./seeds)")
    p.add_argument("--db", "-b", dest="db", default=settings.db_path, help="SQLite file (or DB_PATH env, database.path in config; default: ./data/app.db)")
    p.add_argument("--clear", action="store_true", help="Delete existing rows before inserting")
    p.add_argument("--dry-run", "--dry", dest="dry_run", action="store_true", help="Report counts without writing")
    return p


def seed_content_main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings()
    args, _ = _seed_content_parser(settings).parse_known_args(argv)
    seeds_dir = args.path or args.dir
    configure_logging(settings.log_level)
    try:
        result = seed_contents(
            db_path=args.db,
            seeds_dir=os.path.abspath(seeds_dir) if seeds_dir else None,
            clear=args.clear,
            dry_run=args.dry_run,
        )
    except Exception as e:
        print(f"Seeding failed: {e}", file=sys.stderr)
        return 1
    print(result.summary_line())
    return 0


def serve_main() -> None:
    from .main import main

    main()


def run_seed() -> None:
    sys.exit(seed_main())


def run_seed_content() -> None:
    sys.exit(seed_content_main())
