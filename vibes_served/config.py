from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, cast

import yaml
from pydantic import BaseModel


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    app_version: str = "v0.1.0"
    git_commit: str = "local"
    ai_provider: str = "dummy"
    ideas_backend: Literal["file", "content"] = "file"
    db_file_path: Optional[Path] = None
    db_path: Path = Path("./data/app.db")
    seed_dir: Optional[Path] = None
    log_level: str = "INFO"


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    return cast(dict[str, Any], value) if isinstance(value, dict) else {}


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        loaded: Any = yaml.safe_load(f) or {}
    return cast(dict[str, Any], loaded) if isinstance(loaded, dict) else {}


def load_settings(config_path: str | Path | None = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Defaults, then the YAML file, then environment variables."""
    env = os.environ if environ is None else environ
    cfg_path = Path(config_path or env.get("VIBES_CONFIG") or Path.cwd() / "config.yaml")
    data = _read_config_file(cfg_path)

    server = _section(data, "server")
    app = _section(data, "app")
    database = _section(data, "database")
    ai = _section(data, "ai")
    seed = _section(data, "seed")
    logging_cfg = _section(data, "logging")

    defaults = Settings()
    port_raw = env.get("PORT") or server.get("port")
    try:
        port = int(port_raw) if port_raw else defaults.port
    except (TypeError, ValueError):
        port = defaults.port
    if port <= 0:
        port = defaults.port

    db_file_path = env.get("DB_FILE_PATH") or database.get("file_path")
    seed_dir = env.get("SEED_DIR") or seed.get("dir")
    backend = str(env.get("IDEAS_BACKEND") or database.get("backend") or defaults.ideas_backend).lower()

    return Settings(
        host=server.get("host", defaults.host),
        port=port,
        app_version=env.get("APP_VERSION") or app.get("version") or defaults.app_version,
        git_commit=env.get("GIT_COMMIT") or app.get("commit") or defaults.git_commit,
        ai_provider=str(env.get("AI_PROVIDER") or ai.get("provider") or defaults.ai_provider).lower(),
        ideas_backend=backend if backend in ("file", "content") else defaults.ideas_backend,
        db_file_path=Path(db_file_path) if db_file_path else None,
        db_path=Path(env.get("DB_PATH") or database.get("path") or defaults.db_path),
        seed_dir=Path(seed_dir) if seed_dir else None,
        log_level=str(env.get("LOG_LEVEL") or logging_cfg.get("level") or defaults.log_level),
    )
