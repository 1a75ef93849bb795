"""Persistence of manually arranged node positions for a single local profile."""

from __future__ import annotations

import json
import os
import re
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

from route_inspector.services.models import Position, RouteNode
from route_inspector.utils.logging import Logger

DEFAULT_LAYOUT_KEY = "ecm-node-positions"


class KeyValueStore(Protocol):
    """Client-local record storage holding opaque strings."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileKeyValueStore:
    """One JSON file per key inside a profile directory.

    Writes go to a temporary file that replaces the target, so a crash mid-write leaves the previous snapshot.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{_safe_key(key)}.json"

    def get(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        target = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{target.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class LayoutStore:
    """Saves and restores the whole node-position snapshot under a single key.

    Snapshots are always complete (last write wins, no merging). Reads never fail: a missing or unparsable record is
    treated as "no saved layout" so callers fall back to the computed grid.
    """

    def __init__(self, store: KeyValueStore, logger: Logger, key: str = DEFAULT_LAYOUT_KEY) -> None:
        self._store = store
        self._logger = logger
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def save(self, positions: Mapping[str, Position]) -> None:
        payload = {node_id: position.to_dict() for node_id, position in positions.items()}
        self._store.set(self._key, json.dumps(payload))

    def load(self) -> dict[str, Position]:
        try:
            raw = self._store.get(self._key)
            if raw is None:
                return {}
            payload = json.loads(raw)
        except (OSError, ValueError) as exc:
            self._logger.warning("layout_snapshot_corrupt", extra={"key": self._key, "error": str(exc)})
            return {}
        if not isinstance(payload, dict):
            self._logger.warning(
                "layout_snapshot_corrupt",
                extra={"key": self._key, "error": f"expected object, got {type(payload).__name__}"},
            )
            return {}

        positions: dict[str, Position] = {}
        for node_id, entry in payload.items():
            position = Position.from_payload(entry)
            if position is None:
                self._logger.warning("layout_entry_skipped", extra={"key": self._key, "node": node_id})
                continue
            positions[str(node_id)] = position
        return positions

    def clear(self) -> None:
        self._store.delete(self._key)


def next_positions(nodes: Iterable[RouteNode], changes: Mapping[str, Position]) -> dict[str, Position]:
    """Compute the full snapshot after a drag.

    Changed nodes take their new position and every other node keeps its current one. Changes for ids that are not
    in ``nodes`` are dropped.
    """

    snapshot: dict[str, Position] = {}
    for node in nodes:
        moved = changes.get(node.id)
        source = moved if moved is not None else node.position
        snapshot[node.id] = Position(source.x, source.y)
    return snapshot


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _safe_key(key: str) -> str:
    return _UNSAFE_KEY_CHARS.sub("_", key) or "_"


__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "LayoutStore",
    "next_positions",
    "DEFAULT_LAYOUT_KEY",
]
