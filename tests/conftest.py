from pathlib import Path

import pytest

import config
from db import database


def _write_test_config(config_path: Path) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[scheduler]",
                "good_second_interval = 3",
                "default_session_limit = 50",
                "timezone = \"\"",
                "",
                "[logging]",
                "level = \"warning\"",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    """Point config and database at a temporary directory and create the schema."""
    config_dir = tmp_path / ".readcompanion"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    _write_test_config(config_path)

    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "readcompanion.db")

    database.init_db()
    return config_dir
