"""Config settings – 12-factor env-based configuration."""
from sheet_export.config.settings.base import Settings
from sheet_export.config.settings.export import ExportSettings
from sheet_export.config.settings.factory import SettingsFactory
from sheet_export.config.settings.loaders import EnvSettingsLoader, ParamsSettingsLoader, SettingsLoader

__all__ = [
    "EnvSettingsLoader",
    "ExportSettings",
    "ParamsSettingsLoader",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
]
