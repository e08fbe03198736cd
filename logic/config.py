"""
Map configuration module.

This module provides utilities for loading the map configuration (initial
view, clustering thresholds, tile sources, animation timings) from an optional
map_config.json, filling in defaults for anything the file leaves out.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import json
import logging
import os
from typing import Dict, Any

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.getenv("MAP_CONFIG_PATH", os.path.join(BASE_DIR, "map_config.json"))

OSM_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
SATELLITE_URL = (
    "https://server.arcgisonline.com/ArcGIS/rest/services/"
    "World_Imagery/MapServer/tile/{z}/{y}/{x}"
)
TRANSPORTATION_URL = (
    "https://server.arcgisonline.com/ArcGIS/rest/services/"
    "Reference/World_Transportation/MapServer/tile/{z}/{y}/{x}"
)
PLACES_URL = (
    "https://server.arcgisonline.com/ArcGIS/rest/services/"
    "Reference/World_Boundaries_and_Places/MapServer/tile/{z}/{y}/{x}"
)


def load_config(path: str = None) -> Dict[str, Any]:
    """Load map configuration from map_config.json.

    A missing file is not an error: the defaults are used.

    Args:
        path: Override for the configuration file path.

    Returns:
        Configuration dictionary with all required fields ensured.

    Raises:
        ValueError: If the file exists but is not a JSON object.
    """
    path = path or CONFIG_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        config = get_default_config()

    if not isinstance(config, dict):
        raise ValueError(f"Map configuration must be a JSON object: {path}")

    # Ensure all required fields are present
    config = ensure_config_fields(config)
    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration structure.

    Returns:
        Default configuration dictionary.
    """
    return {
        # lon, lat
        "initial_center": [24.74376, 45.82746],
        "initial_zoom": 7,
        "max_zoom": 19,
        "clustering": {
            "distance": 40,
            "min_distance": 20,
        },
        "animation": {
            "cluster_zoom_duration_ms": 500,
            "user_zoom_duration_ms": 800,
            "user_zoom_level": 14,
            "cluster_zoom_margin": 0.5,
        },
        "geolocation": {
            "timeout_ms": 10000,
            "high_accuracy": True,
        },
        "tile_sources": {
            "standard": {"url": OSM_URL, "max_zoom": 19},
            "satellite": {"url": SATELLITE_URL, "max_zoom": 19},
            "transportation": {"url": TRANSPORTATION_URL, "max_zoom": 19},
            "places": {"url": PLACES_URL, "max_zoom": 19},
        },
    }


def ensure_config_fields(config: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure all required fields are present in the configuration.

    Nested sections are filled key by key so a file may override a single
    value without repeating the rest of its section.

    Args:
        config: Configuration dictionary to update.

    Returns:
        Updated configuration dictionary.
    """
    defaults = get_default_config()

    for key, default in defaults.items():
        if isinstance(default, dict):
            section = config.setdefault(key, {})
            if not isinstance(section, dict):
                logger.warning("Ignoring malformed '%s' section in map config", key)
                config[key] = section = {}
            for sub_key, sub_default in default.items():
                section.setdefault(sub_key, sub_default)
        else:
            config.setdefault(key, default)

    return config
