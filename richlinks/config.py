"""Configuration management for richlinks."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from .models.config import DEFAULT_USER_AGENT, RichlinksConfig

APP_NAME = "richlinks"

DEFAULT_CONFIG: dict[str, Any] = {
    "fetch": {
        "timeout_seconds": 10.0,
        "user_agent": DEFAULT_USER_AGENT,
        "follow_redirects": True,
        "max_bytes": 2_000_000,  # HTML beyond this is not parsed
    },
    "image": {
        "timeout_seconds": 10.0,
        "max_bytes": 5_000_000,
        "frame_width": 16,  # terminal cells
        "frame_height": 8,  # terminal rows, two pixels each
    },
    "display": {
        "spinner": "dots",
        "refresh_per_second": 12,
        "untitled_text": "Untitled",
        "card_width": 72,
    },
}


def get_xdg_config_home() -> Path:
    """Base directory for user config, honoring XDG_CONFIG_HOME."""
    configured = os.environ.get("XDG_CONFIG_HOME")
    return Path(configured) if configured else Path.home() / ".config"


def get_config_path() -> Path:
    return get_xdg_config_home() / APP_NAME / "config.json"


def load_config() -> dict[str, Any]:
    """Defaults overlaid with the user's config file and environment."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    path = get_config_path()
    if path.is_file():
        config = deep_merge(config, json.loads(path.read_text()))

    user_agent = os.environ.get("RICHLINKS_USER_AGENT")
    if user_agent:
        config["fetch"]["user_agent"] = user_agent

    return config


def save_config(config: dict[str, Any]) -> None:
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config, indent=2) + "\n")


def deep_merge(base: dict, override: dict) -> dict:
    """Return ``base`` with ``override`` applied; nested sections merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = deep_merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def get_settings() -> RichlinksConfig:
    """Load configuration as a validated model."""
    return RichlinksConfig.model_validate(load_config())
