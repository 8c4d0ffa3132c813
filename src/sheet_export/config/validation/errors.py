"""Config validation errors raised while reading export settings."""
from sheet_export.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Export settings could not be loaded or constructed."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A setting without a default was supplied by no source."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(
            f"Required setting '{setting_name}' is missing",
            detail={"setting": setting_name},
        )
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting was supplied but cannot be used, e.g. ``append.header=maybe``."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(
            f"Setting '{setting_name}' has invalid value {value!r}: {reason}",
            detail={"setting": setting_name, "value": repr(value)},
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


class UnsupportedFormatError(InvalidSettingValueError):
    """The requested output format has no sheet writer."""
    default_code = "unsupported_format"

    def __init__(self, format: str, supported: tuple[str, ...]) -> None:  # noqa: A002
        super().__init__("format", format, f"expected one of {', '.join(supported)}")
        self.supported = supported


__all__ = [
    "ConfigError",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "UnsupportedFormatError",
]
