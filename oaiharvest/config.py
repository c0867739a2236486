"""TOML-based configuration for oaiharvest.

Loads settings from a TOML file (default ``~/.oaiharvest/config.toml``) and
provides typed dataclass access to all configuration sections.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from oaiharvest.formats.base import DateRange

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path("~/.oaiharvest").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"


@dataclass
class ClientConfig:
    base_url: str = ""
    timeout: float = 30.0
    user_agent: str = ""


@dataclass
class HarvestConfig:
    metadata_prefix: str = "oai_dc"
    from_date: str = ""
    until_date: str = ""
    max_pages: int = 0  # 0 = no limit


@dataclass
class AppConfig:
    client: ClientConfig = field(default_factory=ClientConfig)
    harvest: HarvestConfig = field(default_factory=HarvestConfig)
    log_level: str = "INFO"

    def date_range(self) -> DateRange | None:
        """The configured selective-harvesting window, or None if unset."""
        dr = DateRange(self.harvest.from_date, self.harvest.until_date)
        return None if dr.is_empty() else dr


def _apply_section(dc: Any, data: dict) -> None:
    """Apply dict values onto a dataclass, ignoring unknown keys."""
    for key, value in data.items():
        if hasattr(dc, key):
            setattr(dc, key, value)
        else:
            logger.debug("Ignoring unknown config key %r", key)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if the file doesn't exist.
    """
    config = AppConfig()

    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path).expanduser()

    if not path.exists():
        logger.info("Config file not found at %s, using defaults", path)
        return config

    logger.info("Loading config from %s", path)
    with open(path, "rb") as f:
        raw = tomllib.load(f)

    if "log_level" in raw.get("general", {}):
        config.log_level = raw["general"]["log_level"]

    section_map = {
        "client": config.client,
        "harvest": config.harvest,
    }

    for section_name, dc in section_map.items():
        if section_name in raw:
            _apply_section(dc, raw[section_name])

    return config


def write_default_config(path: str | Path | None = None) -> Path:
    """Write a default config file if one doesn't exist. Returns the path."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path).expanduser()

    if path.exists():
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
    logger.info("Created default config: %s", path)
    return path


DEFAULT_CONFIG_TOML = """\
[general]
log_level = "INFO"

[client]
# base_url = "https://example.org/oai"
timeout = 30.0
# user_agent = "oaiharvest/0.1.0"

[harvest]
metadata_prefix = "oai_dc"
# Selective harvesting window, YYYY-MM-DD or YYYY-MM-DDThh:mm:ssZ
# from_date = "2024-01-01"
# until_date = "2024-12-31"
# Stop after this many pages (0 = harvest everything)
max_pages = 0
"""
