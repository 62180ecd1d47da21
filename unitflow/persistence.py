"""
unitflow Persistence - Key/Value Storage Bridge for Persistent Units
====================================================================

Persistent Units write their value through to a key/value `Storage` on every
accepted dispatch, and seed themselves from it on construction.

Entries are stored as JSON of the form ``{"value": <value>}`` under a
namespaced key (`KEY_PREFIX` + unit id). The wrapper distinguishes "nothing
stored" from "the stored value is None"; the prefix keeps unitflow entries
apart from anything else kept in the same storage, so that
`clear_persistent_storage` only ever removes unitflow's own entries.

Storages
--------

Any object implementing the `Storage` protocol can be used:

- **MemoryStorage**: in-process storage, optionally bounded with an LRU policy
- **JsonFileStorage**: a single JSON document on disk

```python
from unitflow import NumUnit
from unitflow.persistence import JsonFileStorage

storage = JsonFileStorage("state.json")
counter = NumUnit(id="counter", persistent=True, storage=storage)
counter.dispatch(5)
# later, in another process
NumUnit(id="counter", persistent=True, storage=storage).value()  # 5
```
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional, Protocol, Union, runtime_checkable

from cachetools import LRUCache

from .configuration import Configuration
from .utils import to_json

KEY_PREFIX = "_UNITFLOW_UNIT_"


# ============================================================================
# STORAGE PROTOCOL
# ============================================================================


@runtime_checkable
class Storage(Protocol):
    """The read/write contract persistent Units consume."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> List[str]: ...


# ============================================================================
# STORAGE IMPLEMENTATIONS
# ============================================================================


class MemoryStorage:
    """
    In-process string storage.

    Features:
    - O(1) get, set and remove
    - Thread-safe operations
    - Optional LRU bound: with `maxsize`, the least recently used entries are
      evicted once the storage is full

    Usage:
        storage = MemoryStorage()
        storage.set_item("key", "value")
        storage.get_item("key")  # "value"
    """

    def __init__(self, maxsize: Optional[int] = None):
        self._data: MutableMapping[str, str] = (
            LRUCache(maxsize=maxsize) if maxsize else {}
        )
        self._lock = threading.RLock()
        self._stats = {"gets": 0, "sets": 0, "removes": 0}

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            self._stats["gets"] += 1
            return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._stats["sets"] += 1
            self._data[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._stats["removes"] += 1
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._stats, size=len(self._data))

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data


class JsonFileStorage:
    """
    String storage kept as one JSON object in a file.

    The file is read once on construction and rewritten atomically after every
    change. A missing file starts out empty; an unreadable one is logged and
    replaced on the next write.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._lock = threading.RLock()
        self._data: Dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logging.warning(f"Ignoring unreadable storage file {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logging.warning(f"Ignoring storage file {self._path}: not a JSON object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(self._data), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            self._flush()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._flush()

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)


_default_storage = MemoryStorage()


def default_storage() -> Storage:
    """The storage used when neither the Unit nor `Configuration` names one."""
    if Configuration.storage is not None:
        return Configuration.storage
    return _default_storage


def _resolve(storage: Optional[Storage]) -> Storage:
    return storage if storage is not None else default_storage()


# ============================================================================
# BRIDGE
# ============================================================================


def save(key: str, value: Any, storage: Optional[Storage] = None) -> None:
    """Serialize ``{"value": value}`` and store it under the namespaced key."""
    try:
        payload = to_json({"value": value})
    except (TypeError, ValueError):
        logging.warning(f"Value for '{key}' is not JSON serializable, persisting str() of it")
        payload = to_json({"value": str(value)})
    _resolve(storage).set_item(KEY_PREFIX + key, payload)


def retrieve(key: str, storage: Optional[Storage] = None) -> Optional[Dict[str, Any]]:
    """Return the stored ``{"value": ...}`` wrapper, or None if absent or corrupt."""
    raw = _resolve(storage).get_item(KEY_PREFIX + key)
    if raw is None:
        return None
    try:
        saved = json.loads(raw)
    except (TypeError, ValueError):
        logging.debug(f"Discarding corrupt persisted value for '{key}'")
        return None
    if not isinstance(saved, dict) or "value" not in saved:
        logging.debug(f"Discarding malformed persisted value for '{key}'")
        return None
    return saved


def remove(key: str, storage: Optional[Storage] = None) -> None:
    _resolve(storage).remove_item(KEY_PREFIX + key)


def clear_persistent_storage(storage: Optional[Storage] = None) -> None:
    """
    Remove every persisted Unit value from ``storage``.

    Only keys carrying `KEY_PREFIX` are touched; Unit values in memory are
    left as they are.
    """
    target = _resolve(storage)
    for key in target.keys():
        if key.startswith(KEY_PREFIX):
            target.remove_item(key)
