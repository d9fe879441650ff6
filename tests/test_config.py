from pathlib import Path

import config


def test_load_config_copies_example_on_first_run(config_dir):
    loaded = config.load_config()

    assert (config_dir / "config.toml").exists()
    assert loaded["database"]["path"] == config_dir / "cardbox.db"
    assert loaded["review"] == {"due_limit": 50, "random_pool": 100}
    assert loaded["logging"]["level"] == "INFO"


def test_load_config_reads_toml_values(config_dir, tmp_path):
    db_path = tmp_path / "elsewhere.db"
    (config_dir / "config.toml").write_text(
        "\n".join(
            [
                "[database]",
                f'path = "{db_path.as_posix()}"',
                "",
                "[review]",
                "due_limit = 10",
                "random_pool = 20",
                "",
                "[logging]",
                'level = "debug"',
            ]
        ),
        encoding="utf-8",
    )

    loaded = config.load_config()

    assert loaded["database"]["path"] == Path(db_path.as_posix())
    assert loaded["review"] == {"due_limit": 10, "random_pool": 20}
    assert loaded["logging"]["level"] == "DEBUG"


def test_environment_overrides_file(config_dir, monkeypatch, tmp_path):
    monkeypatch.setenv("CARDBOX_DB_PATH", str(tmp_path / "env.db"))
    monkeypatch.setenv("CARDBOX_DUE_LIMIT", "5")

    loaded = config.load_config()

    assert loaded["database"]["path"] == tmp_path / "env.db"
    assert config.get_config_value("review", "due_limit") == 5
    assert config.get_config_value("review", "missing", "fallback") == "fallback"
