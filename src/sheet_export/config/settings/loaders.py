"""Config settings – EnvSettingsLoader, ParamsSettingsLoader."""
from __future__ import annotations

import abc
import dataclasses
import os
from typing import Any, Mapping, TypeVar

from sheet_export.config.settings.base import Settings
from sheet_export.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

T = TypeVar("T", bound=Settings)


def _coerce(name: str, value: str, type_hint: Any) -> Any:  # noqa: PLR0911
    origin = getattr(type_hint, "__origin__", None)
    if type_hint is bool or type_hint == "bool":
        return value.strip().lower() in ("1", "true", "yes", "on")
    try:
        if type_hint is int or type_hint == "int":
            return int(value)
        if type_hint is float or type_hint == "float":
            return float(value)
    except ValueError as exc:
        raise InvalidSettingValueError(name, value, str(exc)) from exc
    if origin is list or (isinstance(type_hint, str) and type_hint.startswith("list")):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


class SettingsLoader(abc.ABC):
    """Port: load settings from an external source."""

    @abc.abstractmethod
    def load(self, settings_class: type[T]) -> T: ...


class EnvSettingsLoader(SettingsLoader):
    """Load settings from OS environment variables (``<PREFIX>_<FIELD>``)."""

    def load(self, settings_class: type[T]) -> T:
        prefix = getattr(settings_class, "_prefix", "").upper()
        kwargs: dict[str, Any] = {}

        for field in dataclasses.fields(settings_class):  # type: ignore[arg-type]
            env_key = f"{prefix}_{field.name}".upper().lstrip("_")
            raw = os.environ.get(env_key)

            if raw is None:
                if (
                    field.default is dataclasses.MISSING
                    and field.default_factory is dataclasses.MISSING  # type: ignore[misc]
                ):
                    raise MissingRequiredSettingError(env_key)
                continue

            kwargs[field.name] = _coerce(env_key, raw, field.type)

        try:
            return settings_class(**kwargs)
        except ConfigError:
            raise
        except Exception as exc:
            raise ConfigError(f"Failed to load settings: {exc}") from exc


class ParamsSettingsLoader(SettingsLoader):
    """Load settings from request-style parameters.

    Parameter names map onto fields through *aliases*; by default the
    dotted names used on export URLs are understood::

        ?append.header=false&fl=id,user.name&scroll=5m&format=csv

    Values may be plain strings or sequences of strings (repeated query
    parameters); sequences are joined with commas before coercion.
    """

    DEFAULT_ALIASES: dict[str, str] = {
        "append.header": "append_header",
        "fl": "fields",
        "scroll": "scroll",
        "format": "format",
        "search_type": "first_scan",
    }

    def __init__(self, params: Mapping[str, Any], aliases: Mapping[str, str] | None = None) -> None:
        self._params = params
        self._aliases = dict(aliases) if aliases is not None else dict(self.DEFAULT_ALIASES)

    def load(self, settings_class: type[T]) -> T:
        fields = {f.name: f for f in dataclasses.fields(settings_class)}  # type: ignore[arg-type]
        kwargs: dict[str, Any] = {}

        for param, raw in self._params.items():
            name = self._aliases.get(param, param)
            if name not in fields:
                continue
            if not isinstance(raw, str):
                raw = ",".join(str(v) for v in raw)
            if name == "first_scan" and param == "search_type":
                kwargs[name] = raw.strip().lower() == "scan"
                continue
            kwargs[name] = _coerce(param, raw, fields[name].type)

        try:
            return settings_class(**kwargs)
        except ConfigError:
            raise
        except Exception as exc:
            raise ConfigError(f"Failed to load settings: {exc}") from exc


__all__ = ["EnvSettingsLoader", "ParamsSettingsLoader", "SettingsLoader"]
