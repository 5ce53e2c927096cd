"""Durable key-value store (one JSON file per key, fcntl.flock + atomic write)."""

import fcntl
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStore:
    """Stores JSON documents under ``root`` keyed by file name.

    Reads take a shared lock. Writes go to a temp file in the same directory
    and are swapped in with ``os.replace``, so a reader never sees a partial
    document. Errors propagate; callers decide how much durability they need.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> Any | None:
        """Return the decoded document, or None if the key was never written."""
        path = self.path_for(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            try:
                return json.load(f)
            finally:
                fcntl.flock(f, fcntl.LOCK_UN)

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        self.root.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", dir=self.root, delete=False, suffix=".json", encoding="utf-8"
        ) as tmp:
            try:
                json.dump(value, tmp, ensure_ascii=False)
            except Exception:
                tmp.close()
                os.unlink(tmp.name)
                raise
        os.replace(tmp.name, path)

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
