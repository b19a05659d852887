import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
from utils.sm2 import SchedulerPolicy
import os

CONFIG_DIR = Path.home() / ".readcompanion"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

SCHEDULER_DEFAULTS: Dict[str, Any] = {
    "initial_ease": 2.5,
    "min_ease": 1.3,
    "again_penalty": 0.20,
    "hard_penalty": 0.15,
    "easy_bonus": 0.15,
    "relearn_interval": 1,
    "hard_multiplier": 1.2,
    "easy_multiplier": 1.3,
    "good_first_interval": 1,
    "good_second_interval": 3,
    "easy_first_interval": 4,
    "easy_second_interval": 7,
}

_INT_KEYS = {
    "relearn_interval",
    "good_first_interval",
    "good_second_interval",
    "easy_first_interval",
    "easy_second_interval",
}


def load_config() -> Dict[str, Any]:
    """Load config from ~/.readcompanion/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., READCOMPANION_TIMEZONE env var)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    scheduler_cfg = config.get("scheduler", {})
    scheduler: Dict[str, Any] = {}
    for key, default in SCHEDULER_DEFAULTS.items():
        raw = os.getenv(f"READCOMPANION_{key.upper()}", scheduler_cfg.get(key, default))
        scheduler[key] = int(raw) if key in _INT_KEYS else float(raw)
    scheduler["default_session_limit"] = int(os.getenv(
        "READCOMPANION_SESSION_LIMIT",
        scheduler_cfg.get("default_session_limit", 50),
    ))
    scheduler["timezone"] = os.getenv(
        "READCOMPANION_TIMEZONE", scheduler_cfg.get("timezone", "")
    ) or None
    config["scheduler"] = scheduler

    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("READCOMPANION_LOG_LEVEL", logging_cfg.get("level", "info")).lower(),
    }
    return config


def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('scheduler', 'timezone')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value


def scheduler_policy_from_config(config: Optional[Dict[str, Any]] = None) -> SchedulerPolicy:
    """Build the scheduling policy from the [scheduler] table."""
    if config is None:
        config = load_config()
    return SchedulerPolicy.from_mapping(config.get("scheduler", {}))
