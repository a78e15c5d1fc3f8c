"""Configuration loading for the trade journal.

Configuration lives in ``~/.config/tradejournal/config.toml``; the
``TRADEJOURNAL_CONFIG`` environment variable or the CLI ``--config`` option
point elsewhere. A missing file means defaults.
"""

import copy
import os
from pathlib import Path
from typing import Optional

import toml

CONFIG_DIR = Path.home() / ".config" / "tradejournal"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "journal.db"

DEFAULT_CONFIG = {
    "journal": {
        "db_path": str(DEFAULT_DB_PATH),
        "timezone": "UTC",
        "currency": "$",
    },
    "logging": {
        "level": "WARNING",
    },
}


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    """Pick the config file: explicit path, then env var, then default."""
    if config_path is not None:
        return Path(config_path).expanduser()
    env_path = os.environ.get("TRADEJOURNAL_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration merged over the defaults.

    Args:
        config_path: Optional explicit config file.

    Returns:
        Config dict with every default section present.

    Raises:
        toml.TomlDecodeError: If the file exists but is not valid TOML.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    path = resolve_config_path(config_path)
    if not path.exists():
        return config

    loaded = toml.load(path)
    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values
    return config


def create_template_config(config_path: Optional[Path] = None) -> Path:
    """Write the default configuration to disk.

    Returns:
        Path of the written file.
    """
    path = resolve_config_path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        toml.dump(DEFAULT_CONFIG, f)
    return path


def get_db_path(config: dict) -> Path:
    """Database path from config."""
    return Path(config.get("journal", {}).get("db_path", str(DEFAULT_DB_PATH))).expanduser()


def get_data_store(config: dict):
    """Get the data store instance for a config."""
    from tradejournal.db.store import DataStore

    return DataStore(get_db_path(config))
