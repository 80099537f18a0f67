from __future__ import annotations

"""
Configuration Domain Management.

Provides the default runtime configuration and loads persisted overrides
from ``~/.boxdu/config.json``. A missing file is normal; a corrupted one
falls back to the defaults.
"""

import json
import logging
import os
from typing import Any, Dict

from boxdu.domain.constants import (
    DEFAULT_FLUSH_THRESHOLD,
    DEFAULT_QUERY_ARGUMENTS,
    DEFAULT_QUERY_COMMAND,
    DEFAULT_VISUALIZER_COMMAND,
)
from boxdu.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # IO
        "input_path": None,
        "output_path": None,

        # External collaborators
        "query_command": DEFAULT_QUERY_COMMAND,
        "query_arguments": list(DEFAULT_QUERY_ARGUMENTS),
        "visualizer_command": DEFAULT_VISUALIZER_COMMAND,

        # Conversion
        "flush_threshold": DEFAULT_FLUSH_THRESHOLD,
        "use_cache": True,

        # Diagnostics
        "show_progress": True,
        "timing": False,
    }


def load_config() -> Dict[str, Any]:
    """
    Merge the persisted configuration file over the defaults.

    Returns:
        Dict[str, Any]: The merged configuration, or the defaults on failure.
    """
    config = get_default_config()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Using defaults.")
        return config

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config '{CONFIG_FILE}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return config

    for key, value in data.items():
        if key in config:
            config[key] = value
        else:
            logger.debug(f"Ignoring unknown config key '{key}'")
    return config
