from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
CACHE_SUFFIX = ".xml"


@dataclass
class ResponseCache:
    """Raw issue documents stored one file per issue key.

    Read if present, written after a successful fetch, never invalidated.
    """

    directory: Path

    def path_for(self, key: str) -> Path:
        return self.directory / (_UNSAFE_CHARS.sub("_", key) + CACHE_SUFFIX)

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.debug("Failed to read cached issue %s at %s: %s", key, path, exc)
            return None

    def write(self, key: str, payload: str) -> Path | None:
        """Store ``payload`` atomically. Returns None if the directory is not writable."""
        path = self.path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            logger.debug("Failed to cache issue %s at %s: %s", key, path, exc)
            return None
        return path

    def clear(self) -> int:
        if not self.directory.exists():
            return 0
        removed = 0
        for entry in self.directory.glob(f"*{CACHE_SUFFIX}"):
            entry.unlink()
            removed += 1
        return removed


__all__ = ["ResponseCache"]
