"""
unitflow UnitBase - The Value Container Engine
==============================================

`UnitBase` implements everything the Unit flavors have in common. A Unit
holds exactly one current value of a fixed `ValueKind` and keeps a bounded
history of accepted values.

Admission Pipeline
------------------

Every `dispatch` runs the candidate value through these checks, in order:

1. the Unit must not be frozen
2. the value must pass the kind's validator
3. `force=True` skips the remaining checks
4. the `custom_dispatch_check(current, candidate)` predicate, if configured
5. the distinct check, if `distinct_dispatch_check` is enabled

The first failing check is reported as the `reason` of an
`EventUnitDispatchFail` on the `events` stream.

History
-------

Accepted values are appended to the cache, which never holds more than
`cache_size` entries (the oldest are evicted). `cache_index` points at the
entry equal to the current value. `jump` moves that pointer without adding
entries (undo/redo), and dispatching while not at the newest entry discards
all entries after it, just like typing after an undo in an editor.

```python
from unitflow import NumUnit

counter = NumUnit(cache_size=3)
counter.dispatch(1)
counter.dispatch(2)
counter.go_back()        # value is 1 again
counter.go_forward()     # value is 2 again
counter.cached_values()  # [0, 1, 2]
```

Freeze and Mute
---------------

A frozen Unit rejects every value-changing operation. A muted Unit still
accepts values but does not emit them; unmuting emits the latest value once,
if it changed while muted.
"""

import logging
from typing import Any, List, Optional

from ..base import Base, T
from ..checks import check_serializability
from ..configuration import Configuration, UnitConfig, resolve_config
from ..events import (
    ClearCacheOptions,
    DispatchFailReason,
    DispatchOptions,
    EventUnitClear,
    EventUnitClearCache,
    EventUnitClearPersistedValue,
    EventUnitClearValue,
    EventUnitDispatch,
    EventUnitDispatchFail,
    EventUnitFreeze,
    EventUnitJump,
    EventUnitReset,
    EventUnitResetValue,
    EventUnitUnfreeze,
    EventUnitUnmute,
)
from ..persistence import remove, retrieve, save
from ..utils import (
    MISSING,
    Debouncer,
    deep_copy,
    deep_freeze,
    is_int,
    is_number,
    strict_equal,
)
from .kinds import ValueKind, default_for, is_empty_value, validator_for


class UnitBase(Base[T]):
    """
    Abstract base of all Units.

    Subclasses pick a `kind` and the `Configuration` section holding their
    flavor defaults; everything else is shared.
    """

    kind: ValueKind = ValueKind.ANY
    _config_section: str = "GENERIC_UNIT"

    def __init__(self, **config: Any) -> None:
        resolved: UnitConfig = resolve_config(
            UnitConfig,
            Configuration.UNITS,
            getattr(Configuration, self._config_section),
            config,
        )
        super().__init__(resolved)

        self._is_valid_value = validator_for(self.kind)
        self._is_frozen = False
        self._is_muted = False
        self._emit_on_unmute = False

        self._value: Any = None
        self._initial_value: Any = MISSING
        self._cached_values: List[Any] = []
        self._cache_index = 0

        cache_size = resolved.cache_size
        self._cache_size = max(1, cache_size) if is_number(cache_size) else 2

        self._debouncer: Optional[Debouncer] = None
        debounce = resolved.dispatch_debounce
        if debounce is True or is_number(debounce):
            self._debouncer = Debouncer(
                self._dispatch_actual,
                debounce if is_number(debounce) else None,
                resolved.dispatch_debounce_mode,
            )

        if resolved.persistent:
            self._restore_value_from_persistent_storage()
        else:
            self._check_serializability_maybe(resolved.initial_value)
            self._dispatch_initial_value(self._deep_copy_maybe(resolved.initial_value))

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def value(self) -> T:
        """The current value; a deep copy for immutable Units."""
        return self._deep_copy_maybe(self._value)

    def raw_value(self) -> T:
        """The current value as stored, never copied."""
        return self._value

    def initial_value(self) -> T:
        return self._deep_copy_maybe(self._initial_value)

    def cached_values(self) -> List[T]:
        return [self._deep_copy_maybe(v) for v in self._cached_values]

    def get_cached_value(self, index: int) -> Optional[T]:
        """The cached value at `index`, or None if there is none."""
        if is_int(index) and 0 <= index < len(self._cached_values):
            return self._deep_copy_maybe(self._cached_values[index])
        return None

    @property
    def cached_values_count(self) -> int:
        return len(self._cached_values)

    @property
    def cache_index(self) -> int:
        return self._cache_index

    @property
    def cache_size(self) -> Any:
        return self._cache_size

    @property
    def is_frozen(self) -> bool:
        return self._is_frozen

    @property
    def is_muted(self) -> bool:
        return self._is_muted

    def is_empty(self) -> bool:
        return is_empty_value(self.kind, self._value)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def would_dispatch(self, value: Any, force: bool = False) -> bool:
        """Whether `dispatch(value, force=force)` would be accepted right now."""
        return self._rejection_reason(value, force) is None

    def dispatch(
        self,
        value_or_producer: Any,
        *,
        force: bool = False,
        cache_replace: bool = False,
        bypass_debounce: bool = False,
    ) -> Optional[bool]:
        """
        Offer a new value; a callable is called with the current value to produce it.

        Returns True if the value was accepted, False if it was rejected, and
        None when the call was handed to the debouncer.
        """
        options = DispatchOptions(force, cache_replace, bypass_debounce)
        if self._debouncer is not None and not bypass_debounce:
            self._debouncer(value_or_producer, options)
            return None
        return self._dispatch_actual(value_or_producer, options)

    def _dispatch_actual(self, value_or_producer: Any, options: DispatchOptions) -> bool:
        if callable(value_or_producer):
            value = value_or_producer(self.value())
        else:
            value = value_or_producer
        self._check_serializability_maybe(value)

        reason = self._rejection_reason(value, options.force)
        if reason is None:
            self._update_value_and_cache(self._deep_copy_maybe(value), options)
            if not self._is_muted:
                self._push_event(EventUnitDispatch(value, options))
            return True

        logging.debug(f"{type(self).__name__} {self.config.id!r} rejected {value!r}: {reason.name}")
        if not self._is_muted:
            self._push_event(EventUnitDispatchFail(value, reason, options))
        return False

    def _rejection_reason(self, value: Any, force: bool) -> Optional[DispatchFailReason]:
        if self._is_frozen:
            return DispatchFailReason.FROZEN
        if not self._is_valid_value(value):
            return DispatchFailReason.INVALID_VALUE
        if force:
            return None
        check = self.config.custom_dispatch_check
        if check is not None and not check(self._value, value):
            return DispatchFailReason.CUSTOM_CHECK
        if self.config.distinct_dispatch_check and strict_equal(value, self._value):
            return DispatchFailReason.DISTINCT_CHECK
        return None

    def _dispatch_initial_value(self, value: Any) -> None:
        if value is MISSING or not self._is_valid_value(value):
            value = default_for(self.kind)
        if self._environment.check_immutability:
            value = deep_freeze(value)
        self._initial_value = value
        self._update_value_and_cache(value)

    def _update_value_and_cache(
        self, value: Any, options: Optional[DispatchOptions] = None, skip_cache: bool = False
    ) -> None:
        if self._environment.check_immutability:
            value = deep_freeze(value)
        if not skip_cache:
            self._update_cache(value, options is not None and options.cache_replace)
        self._value = value

        if self._is_muted:
            self._emit_on_unmute = True
        else:
            self._emit_on_unmute = False
            self._emit()

        self._update_value_in_persistent_storage()

    def _update_cache(self, value: Any, cache_replace: bool) -> None:
        count = len(self._cached_values)
        if cache_replace and count:
            self._cached_values[self._cache_index] = value
        elif count == 0 or self._cache_index == count - 1:
            self._cached_values.append(value)
            if len(self._cached_values) > self._cache_size:
                del self._cached_values[0]
            self._cache_index = len(self._cached_values) - 1
        else:
            # Branching after navigating back drops the forward history
            del self._cached_values[self._cache_index + 1 :]
            self._cached_values.append(value)
            self._cache_index += 1

    # ------------------------------------------------------------------
    # History navigation
    # ------------------------------------------------------------------

    def jump(self, steps: int) -> bool:
        """
        Move through the cache by `steps` (negative is back) and make that entry current.

        Fails without side effects when frozen, when `steps` is not an int, or
        when the target is out of range or the current position.
        """
        if self._is_frozen or not is_int(steps):
            return False
        new_index = self._cache_index + steps
        if new_index < 0 or new_index == self._cache_index or new_index > len(self._cached_values) - 1:
            return False

        self._cache_index = new_index
        self._update_value_and_cache(self._cached_values[new_index], skip_cache=True)
        if not self._is_muted:
            self._push_event(EventUnitJump(steps, new_index))
        return True

    def go_back(self) -> bool:
        return self.jump(-1)

    def go_forward(self) -> bool:
        return self.jump(1)

    def jump_to_start(self) -> bool:
        return self.jump(-self._cache_index)

    def jump_to_end(self) -> bool:
        return self.jump(len(self._cached_values) - 1 - self._cache_index)

    # ------------------------------------------------------------------
    # Clearing and resetting
    # ------------------------------------------------------------------

    def clear_cache(self, leave_first: bool = False, leave_last: bool = False) -> bool:
        """Drop cached values, optionally keeping the first and/or last entry."""
        count = len(self._cached_values)
        if (
            self._is_frozen
            or count == 0
            or (count == 1 and (leave_first or leave_last))
            or (count == 2 and leave_first and leave_last)
        ):
            return False

        start = 1 if leave_first else 0
        end = count - 1 if leave_last else count
        del self._cached_values[start:end]
        self._cache_index = max(0, len(self._cached_values) - 1)

        if not self._is_muted:
            self._push_event(EventUnitClearCache(ClearCacheOptions(leave_first, leave_last)))
        return True

    def clear_value(self) -> bool:
        """Replace the value with the kind's default, unless it already is empty."""
        if self._is_frozen or self._emit_count == 0 or self.is_empty():
            return False
        self._update_value_and_cache(default_for(self.kind))
        if not self._is_muted:
            self._push_event(EventUnitClearValue())
        return True

    def reset_value(self) -> bool:
        """Replace the value with the initial value, unless it already is it."""
        if self._is_frozen or strict_equal(self._value, self._initial_value):
            return False
        self._update_value_and_cache(self._initial_value)
        if not self._is_muted:
            self._push_event(EventUnitResetValue())
        return True

    def clear(self, leave_first: bool = False, leave_last: bool = False) -> None:
        """Unfreeze, clear the value, then clear the cache."""
        self.unfreeze()
        self.clear_value()
        self.clear_cache(leave_first, leave_last)
        if not self._is_muted:
            self._push_event(EventUnitClear(ClearCacheOptions(leave_first, leave_last)))

    def reset(self, leave_first: bool = False, leave_last: bool = True) -> None:
        """Unfreeze, reset the value, then clear the cache keeping the last entry."""
        self.unfreeze()
        self.reset_value()
        self.clear_cache(leave_first, leave_last)
        if not self._is_muted:
            self._push_event(EventUnitReset(ClearCacheOptions(leave_first, leave_last)))

    # ------------------------------------------------------------------
    # Freeze, mute and replay
    # ------------------------------------------------------------------

    def freeze(self) -> None:
        if self._is_frozen:
            return
        self._is_frozen = True
        if not self._is_muted:
            self._push_event(EventUnitFreeze())

    def unfreeze(self) -> None:
        if not self._is_frozen:
            return
        self._is_frozen = False
        if not self._is_muted:
            self._push_event(EventUnitUnfreeze())

    def mute(self) -> None:
        self._is_muted = True

    def unmute(self) -> None:
        if not self._is_muted:
            return
        self._is_muted = False
        if self._emit_on_unmute:
            self._emit_on_unmute = False
            self._emit()
        self._push_event(EventUnitUnmute())

    def replay(self) -> bool:
        """Re-emit the last emitted value; not possible while frozen or muted."""
        if self._is_frozen or self._is_muted:
            return False
        super().replay()
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def clear_persisted_value(self) -> bool:
        """Remove this Unit's entry from its storage; the value in memory is kept."""
        if not self.config.persistent:
            return False
        remove(self.config.id, self.config.storage)
        if not self._is_muted:
            self._push_event(EventUnitClearPersistedValue())
        return True

    def _restore_value_from_persistent_storage(self) -> None:
        saved = retrieve(self.config.id, self.config.storage)
        if saved is not None:
            self._dispatch_initial_value(saved["value"])
            return
        self._check_serializability_maybe(self.config.initial_value)
        self._dispatch_initial_value(self._deep_copy_maybe(self.config.initial_value))

    def _update_value_in_persistent_storage(self) -> None:
        if self.config.persistent:
            save(self.config.id, self._value, self.config.storage)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _deep_copy_maybe(self, o: Any) -> Any:
        return deep_copy(o) if self.config.immutable else o

    def _check_serializability_maybe(self, o: Any) -> None:
        if o is not MISSING and self._environment.check_serializability:
            check_serializability(o)
