"""File and in-memory snapshot backends for the credential store."""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol


class SnapshotBackend(Protocol):
    """Persistence strategy used by :class:`CredentialStore`."""

    def load(self) -> Optional[Dict[str, Any]]: ...

    def save(self, snapshot: Dict[str, Any]) -> None: ...


class JsonFileSnapshotStore:
    """Write the whole snapshot to a JSON file, replacing it atomically."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[Dict[str, Any]]:
        if not self._path.exists():
            return None
        return json.loads(self._path.read_text(encoding="utf-8"))

    def save(self, snapshot: Dict[str, Any]) -> None:
        directory = self._path.parent
        if directory and not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=directory or None
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(snapshot, handle, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class InMemorySnapshotStore:
    """Keep the last snapshot in process memory only."""

    def __init__(self) -> None:
        self._snapshot: Optional[Dict[str, Any]] = None

    def load(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._snapshot)

    def save(self, snapshot: Dict[str, Any]) -> None:
        self._snapshot = copy.deepcopy(snapshot)


__all__ = ["InMemorySnapshotStore", "JsonFileSnapshotStore", "SnapshotBackend"]
