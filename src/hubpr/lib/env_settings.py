"""Pydantic settings for environment variable validation.

Groups related env vars into typed settings classes. Pydantic-settings
reads from the process environment automatically; everything here has a
default so a bare environment is valid.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_token_file() -> Path:
    return Path.home() / ".github_token"


class PathSettings(BaseSettings):
    """Locations of the token file and the optional config file."""

    model_config = SettingsConfigDict(env_prefix="HUBPR_")

    token_file: Path = Field(default_factory=_default_token_file)
    config_path: Optional[Path] = None


class EditorSettings(BaseSettings):
    """The user's editor preference, in the order git honours it."""

    visual: str = ""
    editor: str = ""

    @property
    def command(self) -> str:
        return self.visual.strip() or self.editor.strip() or "vi"
