"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from core.models import Size


class JsonSettings:
    """JSON settings reader with dotted-key access and typed fallbacks."""

    def __init__(self, settings_path: str | Path | None = None, data: dict | None = None) -> None:
        """Read `settings_path`, or use `data` directly when no path is given."""
        self._path = Path(settings_path) if settings_path is not None else None
        if self._path is None:
            self._data: dict[str, Any] = dict(data or {})
            return
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        node: Any = self._data
        for part in key.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def get_int(self, key: str, default: int) -> int:
        """Return `key` as int; malformed values fall back to `default`."""
        raw = self.get(key, default)
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Invalid integer setting {}: {}", key, raw)
            return default

    def get_size(self, key: str, default: Size) -> Size:
        """Return `key` as a Size from `[w, h]` or a single side."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            if isinstance(raw, (list, tuple)) and len(raw) == 2:
                return Size(int(raw[0]), int(raw[1]))
            side = int(raw)
            return Size(side, side)
        except (TypeError, ValueError):
            logger.warning("Invalid size setting {}: {}", key, raw)
            return default
