"""Configuration management for mech-boilerplate.

Settings are typed pydantic-settings models. They are read from a YAML file
discovered in the current directory (or any parent), can be overridden through
``MECH_BOILERPLATE_*`` environment variables, and can be replaced
programmatically from tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from mech_boilerplate.errors import ConfigError


class TraceSettings(BaseModel):
    """Where generated-method trace lines go."""

    enabled: bool = True
    sink: Literal["logging", "console", "none"] = "logging"
    indent_unit: str = "\t"
    logger_name: str = "mech_boilerplate.trace"


class BrowserSettings(BaseModel):
    """Options for the default Playwright browser."""

    engine: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    base_url: Optional[str] = None
    timeout_ms: int = 30000


class BoilerplateSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MECH_BOILERPLATE_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    trace: TraceSettings = Field(default_factory=TraceSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)

    # YAML macro declarations registered by BoilerplateClient.from_settings()
    macro_files: List[str] = Field(default_factory=list)


CONFIG_FILENAMES = [
    "mech-boilerplate.yaml",
    "mech-boilerplate.yml",
    ".mech-boilerplate/config.yaml",
    ".mech-boilerplate/config.yml",
]

# Global configuration state
_current_settings: Optional[BoilerplateSettings] = None


def _search_upwards_for(paths: List[str]) -> Optional[Path]:
    """Search the current and parent directories for the first matching path."""
    cur = Path.cwd()
    while True:
        for p in paths:
            candidate = cur / p
            if candidate.exists():
                return candidate
        if cur == cur.parent:
            return None
        cur = cur.parent


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read config file [{path}]: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file [{path}] must contain a mapping")
    return data


def load_config(config_path: Optional[Union[str, Path]] = None) -> BoilerplateSettings:
    """Load configuration with full validation.

    An explicit ``config_path`` wins; otherwise the nearest config file found
    walking up from the working directory is used. With no file at all the
    defaults (plus environment overrides) apply.
    """
    global _current_settings

    data: Dict[str, Any] = {}
    path: Optional[Path] = None
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file [{path}] does not exist")
    else:
        path = _search_upwards_for(CONFIG_FILENAMES)

    if path is not None:
        data = _read_yaml(path)
        # Relative macro files are relative to the config file
        data["macro_files"] = [
            str((path.parent / f).resolve()) if not Path(f).is_absolute() else f
            for f in data.get("macro_files") or []
        ]

    try:
        _current_settings = BoilerplateSettings(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in [{path}]: {exc}") from exc
    return _current_settings


def get_settings() -> BoilerplateSettings:
    """Get current typed settings object, loading it on first use."""
    if _current_settings is None:
        load_config()
    return _current_settings  # type: ignore[return-value]


def set_settings(settings: Union[BoilerplateSettings, Dict[str, Any]]):
    """Programmatically set settings (bypass file discovery).

    Accepts either a BoilerplateSettings instance or a raw dict that will be
    validated against BoilerplateSettings.
    """
    global _current_settings
    if isinstance(settings, BoilerplateSettings):
        _current_settings = settings
    elif isinstance(settings, dict):
        _current_settings = BoilerplateSettings(**settings)
    else:
        raise TypeError("settings must be BoilerplateSettings or dict")


def update_config(config: Dict[str, Any]):
    """Update fields of the current configuration."""
    settings = get_settings()
    for key, value in config.items():
        if hasattr(settings, key):
            setattr(settings, key, value)


def reset_settings():
    """Forget the loaded settings; the next get_settings() reloads."""
    global _current_settings
    _current_settings = None
