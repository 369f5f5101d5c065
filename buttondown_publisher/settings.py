"""
Persisted settings

Settings live in a small JSON file using the same keys the editor plugin
stored (APIKey, sidePreference, resizeLimit). They are loaded once per
command into an immutable Settings model and passed explicitly to the
pipeline.
"""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import ResizeConfig, ResizeMode

DEFAULT_SETTINGS_PATH: Path = Path(
    os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
) / "buttondown-publisher" / "settings.json"


class SettingsError(Exception):
    """Settings file cannot be read or holds invalid values."""


class Settings(BaseModel):
    """
    User configuration

    Attributes:
        api_key: Buttondown API key; empty disables all network actions
        side_preference: Which side the resize limit applies to
        resize_limit: Resize limit in pixels
    """

    # Field names in code, plugin key names in the settings file
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(default="", strict=True, alias="APIKey")
    side_preference: ResizeMode = Field(default=ResizeMode.LONGEST, alias="sidePreference")
    resize_limit: int = Field(default=1200, gt=0, strict=True, alias="resizeLimit")

    @property
    def resize_config(self) -> ResizeConfig:
        """
        Resize rule for a pipeline run

        Returns:
            ResizeConfig built from the side preference and limit
        """
        return ResizeConfig(mode=self.side_preference, limit_pixels=self.resize_limit)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())

    def with_overrides(self, **changes: Any) -> "Settings":
        """
        Copy with the given non-None fields replaced

        Args:
            **changes: Field names and new values

        Returns:
            New validated Settings

        Raises:
            SettingsError: If an override is invalid
        """
        values: dict[str, Any] = self.model_dump()
        values.update({k: v for k, v in changes.items() if v is not None})
        try:
            return Settings.model_validate(values)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings: {e}") from e


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> Settings:
    """
    Load settings from a JSON file

    Unknown keys are ignored and missing keys fall back to defaults.

    Args:
        path: Settings file location

    Returns:
        Settings from the file, or defaults if the file does not exist

    Raises:
        SettingsError: If the file is unreadable or holds invalid values
    """
    if not path.exists():
        logger.debug(f"No settings file at {path}, using defaults")
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data: Any = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SettingsError(f"Cannot read settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a JSON object")

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings file {path}: {e}") from e


def save_settings(settings: Settings, path: Path = DEFAULT_SETTINGS_PATH) -> None:
    """
    Write settings to a JSON file, creating parent directories

    Args:
        settings: Settings to persist
        path: Settings file location
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.model_dump(mode="json", by_alias=True), f, indent=2, ensure_ascii=False)

    logger.debug(f"Saved settings to {path}")
