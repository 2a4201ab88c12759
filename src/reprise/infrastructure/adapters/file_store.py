"""
JSON File Store — Infrastructure adapter for a single-file key-value store.

The whole store is one JSON object. Writes go to a temp file in the same
directory and replace the existing file, so a crash never leaves half a file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from reprise.domain.ports import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted as a JSON object on disk.

    A missing file is an empty store. A file that is not valid JSON raises on
    first access; it is never silently overwritten.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    async def get(self, key: str) -> Any | None:
        return self._load().get(key)

    async def set(self, key: str, value: Any) -> None:
        self._flush({**self._load(), key: value})

    async def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            self._flush({k: v for k, v in data.items() if k != key})

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(raw, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        self._data = raw
        return self._data

    def _flush(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        # The cache only changes once the file on disk does.
        self._data = data
        logger.debug(f"Wrote {len(data)} keys to {self.path}")
