"""
unitflow Utilities
==================

Small, dependency-free helpers shared by Units, Systems and Selections:

- the `MISSING` sentinel for "no value supplied"
- value predicates (`is_valid_id`, `is_number`, `is_serializable`, ...)
- strict equality used by distinct checks and selections
- deep copying and deep freezing of list/dict structures
- path plucking for Selections
- the `Debouncer` used for debounced dispatch
"""

import json
import os
import threading
import traceback
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import ImmutabilityError

# ============================================================================
# SENTINEL VALUES
# ============================================================================


class _Missing:
    """Sentinel for 'no value supplied', distinct from None."""

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING = _Missing()

PathKey = Union[str, int]

DEBOUNCE_MODES = ("START", "END", "BOTH")
DEFAULT_DEBOUNCE_WAIT_MS = 200

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


# ============================================================================
# PREDICATES
# ============================================================================


def is_valid_id(id_: Any) -> bool:
    return isinstance(id_, str) and bool(id_.strip())


def is_dict(o: Any) -> bool:
    return isinstance(o, dict)


def is_int(n: Any) -> bool:
    """True for ints, excluding bools."""
    return isinstance(n, (int, np.integer)) and not isinstance(n, (bool, np.bool_))


def is_number(n: Any) -> bool:
    """True for real numbers (numpy scalars included), excluding bools and NaN."""
    if isinstance(n, (bool, np.bool_)):
        return False
    if not isinstance(n, (int, float, np.integer, np.floating)):
        return False
    return bool(n == n)


def is_valid_key(key: Any) -> bool:
    """A valid Selection path key: a str, or a non-negative int."""
    if isinstance(key, str):
        return True
    return is_int(key) and key >= 0


_SCALAR_TYPES = (str, bytes, int, float, complex, type(None), np.generic)


def strict_equal(a: Any, b: Any) -> bool:
    """
    Reference equality, widened to value equality for scalars.

    Containers (lists, dicts, arbitrary objects) are only equal when they are
    the same object. No structural comparison is ever performed.
    """
    if a is b:
        return True
    if isinstance(a, (bool, np.bool_)) or isinstance(b, (bool, np.bool_)):
        return type(a) is type(b) and bool(a == b)
    if isinstance(a, _SCALAR_TYPES) and isinstance(b, _SCALAR_TYPES):
        if isinstance(a, (str, bytes)) or isinstance(b, (str, bytes)):
            return type(a) is type(b) and a == b
        return bool(a == b)
    return False


def is_serializable(o: Any) -> Tuple[bool, Any]:
    """
    Check whether a value survives a JSON round-trip unchanged.

    Returns ``(True, None)`` or ``(False, offending_value)``.
    """
    if o is None or isinstance(o, (str, bool, int, float)):
        return True, None
    if isinstance(o, np.generic) and not isinstance(o, (np.void, np.object_)):
        return True, None
    if isinstance(o, list):
        for item in o:
            ok, bad = is_serializable(item)
            if not ok:
                return ok, bad
        return True, None
    if isinstance(o, dict):
        for key, item in o.items():
            if not isinstance(key, str):
                return False, key
            ok, bad = is_serializable(item)
            if not ok:
                return ok, bad
        return True, None
    return False, o


def _json_default(o: Any) -> Any:
    if isinstance(o, np.generic):
        return o.item()
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    """JSON-encode a value; numpy scalars are encoded as plain numbers."""
    return json.dumps(value, default=_json_default)


# ============================================================================
# COPYING AND FREEZING
# ============================================================================


class FrozenDict(dict):
    """A dict that raises ImmutabilityError on every mutation."""

    def _readonly(self, *args, **kwargs):
        raise ImmutabilityError("Cannot mutate a frozen value; dispatch a new one instead")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def __repr__(self):
        return f"FrozenDict({dict.__repr__(self)})"


class FrozenList(list):
    """A list that raises ImmutabilityError on every mutation."""

    def _readonly(self, *args, **kwargs):
        raise ImmutabilityError("Cannot mutate a frozen value; dispatch a new one instead")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __iadd__ = _readonly
    __imul__ = _readonly
    append = _readonly
    extend = _readonly
    insert = _readonly
    pop = _readonly
    remove = _readonly
    clear = _readonly
    sort = _readonly
    reverse = _readonly

    def __repr__(self):
        return f"FrozenList({list.__repr__(self)})"


def deep_copy(o: Any) -> Any:
    """
    Copy lists and dicts recursively; every other value is returned as is.

    Frozen structures come back as plain, mutable lists and dicts.
    """
    if isinstance(o, list):
        return [deep_copy(v) for v in o]
    if isinstance(o, dict):
        return {k: deep_copy(v) for k, v in o.items()}
    return o


def deep_freeze(o: Any) -> Any:
    """
    Return a deep-frozen version of a list/dict structure.

    Already frozen branches are reused as they are, so their identity is kept.
    """
    if isinstance(o, (FrozenList, FrozenDict)):
        return o
    if isinstance(o, list):
        return FrozenList(deep_freeze(v) for v in o)
    if isinstance(o, dict):
        return FrozenDict((k, deep_freeze(v)) for k, v in o.items())
    return o


# ============================================================================
# LOOKUPS
# ============================================================================


def plucker(o: Any, path: Sequence[PathKey]) -> Any:
    """
    Walk ``path`` through ``o`` using own-key lookups only.

    Dicts are indexed by key membership, lists and tuples by in-range index.
    Returns None as soon as a segment is missing or the value is not traversable.
    """
    for key in path:
        if isinstance(o, dict):
            if key not in o:
                return None
            o = o[key]
        elif isinstance(o, (list, tuple)):
            if not is_int(key) or not 0 <= key < len(o):
                return None
            o = o[key]
        else:
            return None
    return o


def find_index(
    items: List[Any], predicate: Callable[[Any], bool], from_index: Optional[int] = None
) -> int:
    i = max(0, min(from_index, len(items) - 1)) if is_int(from_index) else 0
    while i < len(items):
        if predicate(items[i]):
            return i
        i += 1
    return -1


def find_index_backwards(
    items: List[Any], predicate: Callable[[Any], bool], from_index: Optional[int] = None
) -> int:
    i = (
        max(0, min(from_index, len(items) - 1))
        if is_int(from_index)
        else len(items) - 1
    )
    while i > -1:
        if predicate(items[i]):
            return i
        i -= 1
    return -1


def generate_async_system_ids(
    system_id: Optional[str],
    query_config: Optional[Dict[str, Any]],
    data_config: Optional[Dict[str, Any]],
    error_config: Optional[Dict[str, Any]],
    pending_config: Optional[Dict[str, Any]],
) -> Dict[str, Optional[str]]:
    """
    Derive member ids from the system id, as ``<id>_QUERY`` etc.

    An id set explicitly in a member's own config always wins.
    """
    roles = (
        ("query", query_config),
        ("data", data_config),
        ("error", error_config),
        ("pending", pending_config),
    )
    ids: Dict[str, Optional[str]] = {}
    for role, config in roles:
        if config and "id" in config:
            ids[role] = config["id"]
        elif is_valid_id(system_id):
            ids[role] = f"{system_id}_{role.upper()}"
        else:
            ids[role] = None
    return ids


def get_location_id() -> str:
    """Identify the first stack frame outside of unitflow, as ``file:line``."""
    for frame in reversed(traceback.extract_stack()[:-1]):
        if not os.path.abspath(frame.filename).startswith(_PACKAGE_DIR):
            return f"{frame.filename}:{frame.lineno}"
    return ""


# ============================================================================
# DEBOUNCE
# ============================================================================


class Debouncer:
    """
    Wraps a function so that bursts of calls are collapsed.

    Modes:
    - START: the first call of a quiet window runs immediately, the rest are dropped
    - END: only the last call runs, once the window elapses
    - BOTH: the first call runs immediately and the last one after the window

    Each call restarts the window. Deferred calls run on a `threading.Timer`.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        wait_ms: Any = None,
        mode: Optional[str] = None,
    ):
        self._func = func
        self._wait_ms = wait_ms if is_number(wait_ms) else DEFAULT_DEBOUNCE_WAIT_MS
        self._mode = mode if mode in DEBOUNCE_MODES else "END"
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def wait_ms(self) -> float:
        return self._wait_ms

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def is_waiting(self) -> bool:
        return self._timer is not None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            call_now = self._mode != "END" and self._timer is None
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = threading.Timer(
                self._wait_ms / 1000, self._later, (self._generation, args, kwargs)
            )
            self._timer.daemon = True
            self._timer.start()

        if call_now:
            return self._func(*args, **kwargs)
        return None

    def cancel(self) -> None:
        """Drop the pending trailing call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def _later(self, generation: int, args: Iterable[Any], kwargs: Dict[str, Any]) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        if self._mode != "START":
            self._func(*args, **kwargs)
