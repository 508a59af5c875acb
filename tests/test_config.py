from pathlib import Path

from vibes_served.config import load_settings


def test_defaults(tmp_path):
    s = load_settings(config_path=tmp_path / "absent.yaml", environ={})
    assert s.port == 3000
    assert s.app_version == "v0.1.0"
    assert s.git_commit == "local"
    assert s.ai_provider == "dummy"
    assert s.ideas_backend == "file"
    assert s.db_file_path is None
    assert s.seed_dir is None


def test_yaml_then_env_override(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "server:\n  port: 8080\napp:\n  version: v2\n  commit: deadbeef\n"
        "database:\n  backend: content\n  path: ./x.db\n",
        encoding="utf-8",
    )
    s = load_settings(config_path=cfg, environ={})
    assert s.port == 8080
    assert s.app_version == "v2"
    assert s.git_commit == "deadbeef"
    assert s.ideas_backend == "content"
    assert s.db_path == Path("./x.db")

    s = load_settings(
        config_path=cfg,
        environ={"PORT": "4000", "APP_VERSION": "v3", "AI_PROVIDER": "Dummy", "DB_FILE_PATH": "/tmp/i.sqlite", "SEED_DIR": "seeds"},
    )
    assert s.port == 4000
    assert s.app_version == "v3"
    assert s.ai_provider == "dummy"
    assert s.db_file_path == Path("/tmp/i.sqlite")
    assert s.seed_dir == Path("seeds")


def test_invalid_values_fall_back(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("- not\n- a mapping\n", encoding="utf-8")
    s = load_settings(config_path=cfg, environ={"PORT": "abc", "IDEAS_BACKEND": "redis"})
    assert s.port == 3000
    assert s.ideas_backend == "file"
