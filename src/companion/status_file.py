"""
Write controller snapshots to a JSON status file for external inspection.

The service only writes. ``StatusFileWriter.read`` is the reader for
diagnostics tools and operators that inspect a running service's file.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

import orjson

logger = logging.getLogger(__name__)

_RUNTIME_DIR_ENV = "SERVICE_RUNTIME_DIR"


def default_runtime_dir() -> Path:
    env_override = os.getenv(_RUNTIME_DIR_ENV)
    return Path(env_override) if env_override else Path.cwd() / "runtime"


class StatusFileWriter:
    """State listener that mirrors every snapshot into ``<runtime>/<service>.status.json``."""

    def __init__(self, service_name: str, runtime_dir: Optional[Path] = None):
        self.service_name = service_name
        self.runtime_dir = runtime_dir or default_runtime_dir()
        self.path = self.runtime_dir / f"{service_name}.status.json"

    def __call__(self, snapshot: Dict[str, Any]) -> None:
        self.write(snapshot)

    def write(self, snapshot: Dict[str, Any]) -> None:
        payload = {
            "service_name": self.service_name,
            "updated_at": time.time(),
            **snapshot,
        }
        self.runtime_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS))
        os.replace(tmp_path, self.path)
        logger.debug("Status written to %s (%s)", self.path, snapshot.get("status"))

    def read(self) -> Dict[str, Any]:
        """Load the last written snapshot."""
        try:
            return orjson.loads(self.path.read_bytes())
        except orjson.JSONDecodeError as exc:
            raise ValueError(f"Status file {self.path} is not valid JSON") from exc
