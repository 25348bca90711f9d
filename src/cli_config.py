"""Configuration loading and CLI overrides for runtime tunables.

Values come from an optional YAML file (``importmap`` section) and from the
command line, which has the highest precedence. Both are applied onto
``Constants``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

# YAML key -> Constants attribute
_CONFIG_KEYS = {
    "importmap_file": "IMPORT_MAP_CONFIG_FILE",
    "asset_dirs": "ASSET_DIRS",
    "vendor_dir": "VENDOR_DIR",
    "public_dir": "PUBLIC_DIR",
    "public_prefix": "PUBLIC_PREFIX",
    "registry_url": "REGISTRY_URL_NPM",
    "cdn_url": "CDN_URL_JSDELIVR",
    "request_timeout": "REQUEST_TIMEOUT",
    "http_retry_max": "HTTP_RETRY_MAX",
    "http_cache_ttl": "HTTP_CACHE_TTL_SEC",
    "http_cache_max_entries": "HTTP_CACHE_MAX_ENTRIES",
}

_INT_KEYS = {"request_timeout", "http_retry_max", "http_cache_ttl", "http_cache_max_entries"}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the ``importmap`` section of a YAML config file.

    The path defaults to the ``IMPORTMAP_CONFIG`` environment variable. A
    missing or unreadable file yields an empty config and a warning.
    """
    config_path = config_path or os.environ.get(Constants.ENV_CONFIG)
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        return {}

    if not isinstance(data, dict):
        return {}
    section = data.get("importmap", data)
    return section if isinstance(section, dict) else {}


def apply_config_overrides(cfg: Dict[str, Any], args=None) -> None:
    """Apply config file values, then CLI values, onto ``Constants``."""
    for key, value in cfg.items():
        attribute = _CONFIG_KEYS.get(key)
        if attribute is None:
            logger.warning("Ignoring unknown config key: %s", key)
            continue
        if key in _INT_KEYS:
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring non-integer value for %s: %r", key, value)
                continue
        if key == "asset_dirs" and isinstance(value, str):
            value = [value]
        setattr(Constants, attribute, value)

    if args is None:
        return
    if getattr(args, "IMPORT_MAP_FILE", None):
        Constants.IMPORT_MAP_CONFIG_FILE = args.IMPORT_MAP_FILE
    if getattr(args, "PUBLIC_DIR", None):
        Constants.PUBLIC_DIR = args.PUBLIC_DIR
