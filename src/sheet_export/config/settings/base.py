"""Config settings – Settings base class shared by export configuration."""
from __future__ import annotations

import dataclasses
from typing import Any


@dataclasses.dataclass
class Settings:
    """Dataclass settings readable from the environment or request params.

    ``_prefix`` names the environment namespace (``<PREFIX>_<FIELD>``).
    Subclasses validate themselves on construction through :meth:`_validate`.
    """

    _prefix: dataclasses.ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    @classmethod
    def defaults(cls) -> dict[str, Any]:
        """Default value of every field that has one; required fields are absent."""
        out: dict[str, Any] = {}
        for field in dataclasses.fields(cls):  # type: ignore[arg-type]
            if field.default is not dataclasses.MISSING:
                out[field.name] = field.default
            elif field.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
                out[field.name] = field.default_factory()  # type: ignore[misc]
        return out

    def _validate(self) -> None:
        """Override to reject values an export cannot run with."""


__all__ = ["Settings"]
