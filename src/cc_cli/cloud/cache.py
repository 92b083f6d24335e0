"""Time-limited JSON cache for raw cloud CLI listings."""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 24 * 60 * 60


class InstanceCache:
    """A single cached JSON document with an mtime-based TTL."""

    def __init__(self, path: Path, ttl: int = CACHE_TTL_SECONDS):
        self.path = path
        self.ttl = ttl

    def exists(self) -> bool:
        return self.path.exists()

    def age(self, now: float | None = None) -> float:
        current = time.time() if now is None else now
        return current - self.path.stat().st_mtime

    def is_valid(self, now: float | None = None) -> bool:
        """True when the file exists and is no older than the TTL."""
        if not self.exists():
            return False
        return self.age(now) <= self.ttl

    def read(self) -> Any:
        """Return the cached document.

        Raises:
            FileNotFoundError: If nothing has been cached yet
            ValueError: If the cache file is not valid JSON
        """
        with open(self.path, encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Corrupt cache file {self.path}: {exc}") from exc

    def write(self, data: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)
        logger.info("Cached %s", self.path)
