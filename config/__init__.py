# PATH: config/__init__.py
"""
Configuration loading utilities for swaplens.

sources.yaml holds base URLs and timeouts per external source. Missing keys
fall back to the defaults in core.constants, so an empty or absent file is
valid.
"""

from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

from core.constants import (
    CATALOG_TIMEOUT_S,
    DEFAULT_RPC_URL,
    JUPITER_QUOTE_URL,
    METEORA_QUOTE_URL,
    ORCA_QUOTE_URL,
    RAYDIUM_API_BASE,
    RAYDIUM_QUOTE_URL,
    REGISTRY_TIMEOUT_S,
    RPC_TIMEOUT_S,
    TOKEN_CATALOG_URL,
    VENUE_TIMEOUT_S,
)

CONFIG_DIR = Path(__file__).parent
SOURCES_FILE = "sources.yaml"

DEFAULT_SOURCES: Dict[str, Dict[str, Any]] = {
    "rpc": {"url": DEFAULT_RPC_URL, "timeout_seconds": RPC_TIMEOUT_S},
    "raydium_api": {"url": RAYDIUM_API_BASE, "timeout_seconds": REGISTRY_TIMEOUT_S},
    "catalog": {"url": TOKEN_CATALOG_URL, "timeout_seconds": CATALOG_TIMEOUT_S},
    "jupiter": {"url": JUPITER_QUOTE_URL, "timeout_seconds": VENUE_TIMEOUT_S},
    "raydium": {"url": RAYDIUM_QUOTE_URL, "timeout_seconds": VENUE_TIMEOUT_S},
    "orca": {"url": ORCA_QUOTE_URL, "timeout_seconds": VENUE_TIMEOUT_S},
    "meteora": {"url": METEORA_QUOTE_URL, "timeout_seconds": VENUE_TIMEOUT_S},
}

# Environment (.env) is loaded once on import; SOLANA_RPC_URL lives there
load_dotenv()


def load_yaml(filename: str, config_dir: Path = CONFIG_DIR) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory
        config_dir: Directory to read from

    Returns:
        Parsed YAML as dict
    """
    filepath = config_dir / filename
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_sources(config_dir: Path = CONFIG_DIR) -> Dict[str, Dict[str, Any]]:
    """Per-source settings, file values merged over defaults."""
    try:
        overrides = load_yaml(SOURCES_FILE, config_dir).get("sources", {}) or {}
    except FileNotFoundError:
        overrides = {}

    merged = {name: dict(values) for name, values in DEFAULT_SOURCES.items()}
    for name, values in overrides.items():
        merged.setdefault(name, {}).update(values or {})
    return merged


def get_source(name: str, config_dir: Path = CONFIG_DIR) -> Dict[str, Any]:
    """
    Settings for one source.

    Raises:
        KeyError: If the source is unknown
    """
    sources = load_sources(config_dir)
    if name not in sources:
        raise KeyError(f"Unknown source: {name}")
    return sources[name]
