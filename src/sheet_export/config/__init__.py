"""Config – 12-factor settings, loaders and validation errors."""

from sheet_export.config.settings import (
    EnvSettingsLoader,
    ExportSettings,
    ParamsSettingsLoader,
    Settings,
    SettingsFactory,
    SettingsLoader,
)
from sheet_export.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
    UnsupportedFormatError,
)

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "ExportSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "ParamsSettingsLoader",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
    "UnsupportedFormatError",
]
