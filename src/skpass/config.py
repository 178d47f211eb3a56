"""
Configuration loading -- ~/.skpass/config.yaml.

    store_path: ~/.password-store
    use_git: true
    auto_push: true

PASSWORD_STORE_DIR, when set, wins over store_path like it does for pass.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from . import SKPASS_HOME
from .models import PassConfig

logger = logging.getLogger("skpass.config")

CONFIG_NAME = "config.yaml"


def config_file(home: Optional[Path] = None) -> Path:
    return Path(home or SKPASS_HOME).expanduser() / CONFIG_NAME


def load_config(path: Optional[Path] = None) -> PassConfig:
    """Load configuration from disk.

    Missing or broken files fall back to defaults with a warning.

    Args:
        path: Config file. Defaults to $SKPASS_HOME/config.yaml.

    Returns:
        PassConfig with environment overrides applied.
    """
    path = path or config_file()
    data: dict = {}
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (yaml.YAMLError, OSError) as exc:
            logger.warning("Failed to read config %s: %s", path, exc)
            data = {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: not a mapping", path)
            data = {}

    store_dir = os.environ.get("PASSWORD_STORE_DIR")
    if store_dir:
        data["store_path"] = store_dir

    try:
        return PassConfig(**data)
    except ValidationError as exc:
        logger.warning("Invalid config %s: %s", path, exc)
        return PassConfig(store_path=store_dir) if store_dir else PassConfig()


def save_config(config: PassConfig, path: Optional[Path] = None) -> Path:
    """Persist configuration as YAML.

    Returns:
        The file written.
    """
    path = path or config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    path.write_text(yaml.dump(data, default_flow_style=False), encoding="utf-8")
    logger.info("Saved config to %s", path)
    return path
