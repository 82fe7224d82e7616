from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def default_data_dir() -> Path:
    """~/.pulsearcade unless PULSEARCADE_HOME points elsewhere."""
    override = os.environ.get("PULSEARCADE_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".pulsearcade"


class KeyValueStore:
    """Opaque byte blobs by key. ``load`` returns None for a missing key."""

    def load(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def save(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    def flush(self) -> bool:
        """Make every saved value durable. Returns False if something is still pending."""
        return True


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})

    def load(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def save(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per key under a data directory.

    Writes go straight to disk through a temp file and ``os.replace``. A write
    that fails is kept in memory and retried by :meth:`flush`, so the host can
    make one last attempt before the app exits.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = Path(root) if root is not None else default_data_dir()
        self._pending: Dict[str, bytes] = {}

    @property
    def root(self) -> Path:
        return self._root

    @property
    def pending_keys(self) -> list[str]:
        return sorted(self._pending)

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._root / f"{key}.json"

    def load(self, key: str) -> Optional[bytes]:
        if key in self._pending:
            return self._pending[key]
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

    def save(self, key: str, data: bytes) -> None:
        self._pending[key] = bytes(data)
        self._write(key)

    def flush(self) -> bool:
        for key in list(self._pending):
            self._write(key)
        return not self._pending

    def _write(self, key: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(self._pending[key])
            os.replace(tmp_path, path)
        except OSError as e:
            logger.warning("Could not save %s: %s", path, e)
            return
        del self._pending[key]
