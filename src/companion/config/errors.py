"""Configuration error raised by every settings loader in the bot."""

from __future__ import annotations

from typing import Any, Optional


class ConfigurationError(RuntimeError):
    """A setting is missing, malformed, or names something that cannot be loaded.

    ``setting`` carries the environment variable or option name when one is
    known so callers can point the operator at it.
    """

    def __init__(self, message: str, *, setting: Optional[str] = None) -> None:
        super().__init__(message)
        self.setting = setting

    @classmethod
    def missing_value(cls, setting: str, context: str = "") -> "ConfigurationError":
        message = f"{setting} must be set"
        if context:
            message += f" ({context})"
        return cls(message, setting=setting)

    @classmethod
    def invalid_value(cls, setting: str, value: Any, reason: str = "") -> "ConfigurationError":
        message = f"{setting}={value!r} is not usable"
        if reason:
            message += f": {reason}"
        return cls(message, setting=setting)

    @classmethod
    def invalid_format(cls, setting: str, value: Any, expected: str) -> "ConfigurationError":
        return cls(f"{setting}={value!r} does not match the form {expected}", setting=setting)

    @classmethod
    def load_failed(cls, target: str, source: str = "") -> "ConfigurationError":
        message = f"Could not load {target}"
        if source:
            message += f" from {source}"
        return cls(message)


__all__ = ["ConfigurationError"]
