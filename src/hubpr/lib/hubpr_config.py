"""Loader for the optional ~/.config/hubpr/config.yml.

Provides a single cached HubPrConfig object with typed accessors.
Every field has a default, so a missing config file means stock behaviour.

Usage:
    from hubpr.lib.hubpr_config import load_config

    cfg = load_config()
    cfg.defaults.base_branch   # "master"
    cfg.defaults.wip_label     # "wip"
    cfg.api.url                # "https://api.github.com"
    cfg.api.timeout_seconds    # None (block until the server answers)

Example file:
    defaults:
      base_branch: main
    api:
      url: https://github.example.com/api/v3
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/hubpr/config.yml")


class Defaults(BaseModel):
    base_branch: str = "master"
    wip_label: str = "wip"


class ApiConfig(BaseModel):
    url: str = "https://api.github.com"
    timeout_seconds: Optional[float] = None  # None: no timeout


class HubPrConfig(BaseModel):
    defaults: Defaults = Field(default_factory=Defaults)
    api: ApiConfig = Field(default_factory=ApiConfig)


@lru_cache(maxsize=4)
def load_config(config_path: Optional[Path] = None) -> HubPrConfig:
    """Load and parse the config file, caching the result.

    Args:
        config_path: Explicit path to a config file. When None, the default
            location is tried and silently skipped if absent.

    Returns:
        Parsed HubPrConfig with typed sub-objects.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
        pydantic.ValidationError: If a value has the wrong type.
    """
    if config_path is None:
        path = DEFAULT_CONFIG_PATH.expanduser()
        if not path.exists():
            logger.debug(f"No config file at {path}; using defaults")
            return HubPrConfig()
    else:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"hubpr config not found at {path}.")

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    logger.debug(f"Loaded hubpr config from {path}")

    return HubPrConfig.model_validate(raw or {})
