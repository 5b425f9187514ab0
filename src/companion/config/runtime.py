"""
Environment lookups for the bot's settings.

A value set in the process environment wins; otherwise the first ``.env``
file that defines it (working directory, then home) supplies it. The files
are parsed once per process.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

from .errors import ConfigurationError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".env")

_DEFAULT_VALUES: Optional[Dict[str, str]] = None


def _dotenv_values() -> Dict[str, str]:
    from .runtime_helpers import DotenvLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is None:
        merged: Dict[str, str] = {}
        for path in _DOTENV_CANDIDATES:
            for key, value in DotenvLoader.load_from_file(path).items():
                merged.setdefault(key, value)
        _DEFAULT_VALUES = merged
    return _DEFAULT_VALUES


def reset_default_values() -> None:
    """Forget cached .env values so the next lookup re-reads the files."""
    global _DEFAULT_VALUES
    _DEFAULT_VALUES = None


def _lookup(name: str) -> Optional[str]:
    """Return the trimmed value for ``name``, or None when unset or blank everywhere."""
    for source in (os.environ, _dotenv_values()):
        raw = source.get(name)
        if raw is not None and raw.strip():
            return raw.strip()
    return None


def env_str(name: str, or_value: Optional[str] = None, *, required: bool = False) -> Optional[str]:
    """String setting; blank counts as unset."""
    value = _lookup(name)
    if value is None:
        if required:
            raise ConfigurationError.missing_value(name)
        return or_value
    return value


def env_int(name: str, or_value: Optional[int] = None, *, required: bool = False) -> Optional[int]:
    """Integer setting."""
    raw = env_str(name, required=required and or_value is None)
    if raw is None:
        return or_value
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError.invalid_value(name, raw, "expected an integer") from exc


def env_bool(name: str, or_value: Optional[bool] = None, *, required: bool = False) -> Optional[bool]:
    """Boolean setting accepting 1/0, true/false, yes/no and on/off."""
    raw = env_str(name, required=required and or_value is None)
    if raw is None:
        return or_value
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError.invalid_value(name, raw, "expected one of " + ", ".join(sorted(_TRUE_VALUES | _FALSE_VALUES)))


def env_milliseconds(name: str, or_value: int) -> float:
    """Duration configured in milliseconds, returned in seconds."""
    value = env_int(name, or_value=or_value)
    if value is None or value < 0:
        raise ConfigurationError.invalid_value(name, value, "durations must be non-negative")
    return value / 1000.0
