"""
Durable cart storage.

A cart document is a JSON-compatible dict written whole after every
mutation and read once when the session's cart is created, the same
load-once/sync-on-change pattern a browser cart uses with localStorage.

Backends:
    MemoryCartStorage    process lifetime only (tests, single-process dev)
    JsonFileCartStorage  one <key>.json file per browsing session
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class CartStorage(Protocol):
    def load(self, key: str) -> Optional[Any]:
        ...

    def save(self, key: str, document: Any) -> None:
        ...


class MemoryCartStorage:
    """Keeps serialized documents in a dict; survives for the process lifetime."""

    def __init__(self):
        self._documents: dict[str, str] = {}

    def load(self, key: str) -> Optional[Any]:
        raw = self._documents.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, document: Any) -> None:
        # Serialize so callers can never alias the stored document
        self._documents[key] = json.dumps(document)


class JsonFileCartStorage:
    """
    One JSON file per cart key under `directory`.

    Reads and writes are synchronous and happen on the event loop; meant for
    development and single-node demos.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid cart key: {key!r}")
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable cart file {path}, starting empty: {e}")
            return None

    def save(self, key: str, document: Any) -> None:
        path = self._path(key)
        # Write-then-rename so a crash never leaves half a cart on disk
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
