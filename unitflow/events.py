"""
unitflow Events
===============

Event types pushed on the on-demand `events` side-channel of Units and
Systems. The side-channel is separate from the value stream and only exists
once somebody accesses it.

Every event is a small frozen dataclass, so events can be compared in tests
and matched with `isinstance`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class DispatchOptions:
    """Options accepted by `UnitBase.dispatch`."""

    force: bool = False
    cache_replace: bool = False
    bypass_debounce: bool = False


@dataclass(frozen=True)
class ClearCacheOptions:
    """Options accepted by `UnitBase.clear_cache`, `clear` and `reset`."""

    leave_first: bool = False
    leave_last: bool = False


class DispatchFailReason(Enum):
    """Why a dispatch was rejected, in the order the checks run."""

    FROZEN = "FROZEN"
    INVALID_VALUE = "INVALID_VALUE"
    CUSTOM_CHECK = "CUSTOM_CHECK"
    DISTINCT_CHECK = "DISTINCT_CHECK"


# ============================================================================
# COMMON EVENTS
# ============================================================================


@dataclass(frozen=True)
class EventReplay:
    """The last emitted value was re-emitted via `replay()`."""

    value: Any


# ============================================================================
# UNIT EVENTS
# ============================================================================


@dataclass(frozen=True)
class EventUnitDispatch:
    value: Any
    options: Optional[DispatchOptions] = None


@dataclass(frozen=True)
class EventUnitDispatchFail:
    value: Any
    reason: DispatchFailReason
    options: Optional[DispatchOptions] = None


@dataclass(frozen=True)
class EventUnitUnmute:
    pass


@dataclass(frozen=True)
class EventUnitFreeze:
    pass


@dataclass(frozen=True)
class EventUnitUnfreeze:
    pass


@dataclass(frozen=True)
class EventUnitJump:
    """Cache navigation by `steps`, landing on `new_cache_index`."""

    steps: int
    new_cache_index: int


@dataclass(frozen=True)
class EventUnitClearCache:
    options: ClearCacheOptions


@dataclass(frozen=True)
class EventUnitClearValue:
    pass


@dataclass(frozen=True)
class EventUnitClear:
    options: ClearCacheOptions


@dataclass(frozen=True)
class EventUnitResetValue:
    pass


@dataclass(frozen=True)
class EventUnitReset:
    options: ClearCacheOptions


@dataclass(frozen=True)
class EventUnitClearPersistedValue:
    pass


# ============================================================================
# STRUCTURED UNIT EVENTS
# ============================================================================


@dataclass(frozen=True)
class EventDictUnitSet:
    key: str
    value: Any


@dataclass(frozen=True)
class EventDictUnitDelete:
    deleted_props: Any


@dataclass(frozen=True)
class EventDictUnitAssign:
    new_props: Any


@dataclass(frozen=True)
class EventListUnitSet:
    index: int
    item: Any


@dataclass(frozen=True)
class EventListUnitPush:
    items: Any


@dataclass(frozen=True)
class EventListUnitPop:
    item: Any
