"""Parser for ``.env`` files."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

from ..errors import ConfigurationError


class DotenvLoader:
    """Reads ``KEY=value`` lines the way the bot's deployment tooling writes them."""

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """
        Parse ``path`` into a dict.

        Blank lines, ``#`` comments and lines without ``=`` are skipped. A
        leading ``export`` is dropped and one pair of matching quotes around a
        value is removed. A missing file yields an empty dict.

        Raises:
            ConfigurationError: If the file exists but cannot be read
        """
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise ConfigurationError.load_failed("dotenv file", str(path)) from exc

        values: Dict[str, str] = {}
        for line in text.splitlines():
            entry = DotenvLoader._parse_line(line)
            if entry is not None:
                values[entry[0]] = entry[1]
        return values

    @staticmethod
    def _parse_line(line: str) -> Optional[Tuple[str, str]]:
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            return None
        key, _, value = stripped.partition("=")
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export ") :].strip()
        if not key:
            return None
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        return key, value
