from datetime import datetime, timezone

import pytest

import config
from db.store import Store

NOW = datetime(2025, 1, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    with Store(tmp_path / "cardbox.db") as store:
        yield store


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    config_dir = tmp_path / ".cardbox"
    config_dir.mkdir()
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_dir / "config.toml")
    for name in ("CARDBOX_DB_PATH", "CARDBOX_DUE_LIMIT", "CARDBOX_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return config_dir
