import logging
import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".cardbox"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def load_config() -> Dict[str, Any]:
    """Load config from ~/.cardbox/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., CARDBOX_DB_PATH env var)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    database_cfg = config.get("database", {})
    db_path = os.getenv("CARDBOX_DB_PATH") or database_cfg.get("path") or ""
    config["database"] = {
        "path": Path(db_path).expanduser() if db_path else CONFIG_DIR / "cardbox.db",
    }
    review_cfg = config.get("review", {})
    config["review"] = {
        "due_limit": int(os.getenv("CARDBOX_DUE_LIMIT", review_cfg.get("due_limit", 50))),
        "random_pool": int(review_cfg.get("random_pool", 100)),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("CARDBOX_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('review', 'due_limit')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value


def configure_logging(config: Optional[Dict[str, Any]] = None) -> None:
    """Set up root logging once from the [logging] section."""
    config = config or load_config()
    level = getattr(logging, config["logging"]["level"], logging.INFO)
    logging.basicConfig(format=LOG_FORMAT, level=level)
