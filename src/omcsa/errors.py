"""Exceptions raised at the omcsa boundaries."""

from typing import Iterable


class InvalidChoiceError(ValueError):
    """A caller supplied a value outside a fixed enumeration."""

    def __init__(self, kind: str, value: str, valid: Iterable[str]):
        self.kind = kind
        self.value = value
        self.valid = tuple(valid)
        super().__init__(
            f'Invalid {kind}: "{value}". Valid {kind}s: {" | ".join(self.valid)}'
        )


class GlobalSettingsError(RuntimeError):
    """Reading or rewriting the global Claude settings file failed."""


class ConfigError(ValueError):
    """The project config file exists but could not be used as-is."""
