# -*- coding: utf-8 -*-
"""Key-value persistence — one JSON blob per key."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, value: str) -> None:
        ...


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


class JsonFileStore:
    """Stores each key as ``<root>/<key>.json``. Last write wins."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        fp = self._path_for(key)
        if not fp.exists():
            return None
        return fp.read_text(encoding="utf-8")

    def save(self, key: str, value: str) -> None:
        _ensure_dir(self.root)
        fp = self._path_for(key)
        tmp = fp.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(fp)


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.data[key] = value


def load_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """Decode a stored value; absent keys and corrupt blobs both yield ``default``."""
    raw = store.load(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored value for %s is corrupt. Using defaults.", key)
        return default


def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.save(key, json.dumps(value, ensure_ascii=False))
