"""
Configuration Persistence

Save/load the bridge configuration to a YAML file.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

from .tidal_config import BridgeConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "tidal_osc_lib" / "config.yaml"


def save_config(config: BridgeConfig, path: Optional[Path] = None) -> bool:
    """
    Save bridge configuration to YAML file.

    Args:
        config: Configuration to persist
        path: File path (default: ~/.config/tidal_osc_lib/config.yaml)

    Returns:
        True if saved successfully
    """
    path = Path(path) if path else DEFAULT_CONFIG_PATH

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump({"bridge": config.to_dict()}, f, default_flow_style=False)
        logger.info(f"Saved config to {path}")
        return True

    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save config: {e}")
        return False


def load_config(path: Optional[Path] = None) -> BridgeConfig:
    """
    Load bridge configuration from YAML file.

    Options may sit at the top level or under a "bridge" key, in
    snake_case or the legacy camelCase spelling. Missing options take
    their defaults.

    Args:
        path: File path (default: ~/.config/tidal_osc_lib/config.yaml)

    Returns:
        Loaded config, or defaults if the file is missing or unreadable
    """
    path = Path(path) if path else DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.info(f"No config file at {path}")
        return BridgeConfig()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config: {e}")
        return BridgeConfig()

    if not data:
        return BridgeConfig()

    options = data.get("bridge", data) if isinstance(data, dict) else data
    if not isinstance(options, dict):
        logger.error(f"Config at {path} is not a mapping")
        return BridgeConfig()

    try:
        config = BridgeConfig.from_mapping(options)
    except TypeError as e:
        logger.error(f"Invalid config at {path}: {e}")
        return BridgeConfig()

    logger.info(f"Loaded config from {path}")
    return config
