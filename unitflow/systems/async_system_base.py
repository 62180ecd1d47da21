"""
unitflow AsyncSystemBase - Coordinating Query, Data, Error and Pending Units
============================================================================

An async task (a request, a computation, ...) has four moving parts: what was
asked (query), what came back (data), what went wrong (error), and whether
an answer is outstanding (pending). `AsyncSystemBase` ties four Units
playing those roles together and keeps them consistent.

Relationships
-------------

The system listens to the `future` stream of every member and reacts:

- **query** emits: pending becomes True; data and error are cleared if
  `clear_data_on_query` / `clear_error_on_query` are set
- **data** emits: pending becomes False; error is cleared (unless
  `clear_error_on_data` is False or `clear_error_on_query` is set); query is
  cleared if `clear_query_on_data` is set
- **error** emits: pending becomes False; data is cleared if
  `clear_data_on_error` is set (and `clear_data_on_query` is not); query is
  cleared if `clear_query_on_error` is set
- **pending** emits: with `freeze_query_while_pending`, the query Unit is
  frozen while pending and unfrozen afterwards

While a relationship runs, relationships are paused automatically, so the
writes it makes do not trigger further relationships. Each relationship ends
with exactly one emission of the combined system value.

```python
from unitflow import AsyncSystem

system = AsyncSystem(id="user")
system.subscribe(print)
system.query_unit.dispatch({"user_id": 1})
# {'query': {'user_id': 1}, 'data': None, 'error': None, 'pending': True}
system.data_unit.dispatch({"name": "Ada"})
# {'query': {'user_id': 1}, 'data': {'name': 'Ada'}, 'error': None, 'pending': False}
```
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from ..base import Base
from ..checks import check_async_system_config
from ..configuration import AsyncSystemConfig, Configuration, resolve_config
from ..observable import Observable, Subscription
from ..stream import Stream
from ..units import BoolUnit, UnitBase
from ..utils import MISSING, FrozenDict

AsyncSystemValue = Dict[str, Any]


class AsyncSystemBase(Base[AsyncSystemValue]):
    """Composes any four Units into an AsyncSystem; pending must be a BoolUnit."""

    def __init__(
        self,
        query_unit: UnitBase[Any],
        data_unit: UnitBase[Any],
        error_unit: UnitBase[Any],
        pending_unit: BoolUnit,
        **config: Any,
    ) -> None:
        for role, unit in (("query", query_unit), ("data", data_unit), ("error", error_unit)):
            if not isinstance(unit, UnitBase):
                raise TypeError(f"Expected a Unit as the {role} unit, got {unit!r}")
        if not isinstance(pending_unit, BoolUnit):
            raise TypeError(f"Expected a BoolUnit as the pending unit, got {pending_unit!r}")

        super().__init__(resolve_config(AsyncSystemConfig, Configuration.ASYNC_SYSTEM, config))
        check_async_system_config({**Configuration.ASYNC_SYSTEM, **config})

        self.query_unit = query_unit
        self.data_unit = data_unit
        self.error_unit = error_unit
        self.pending_unit = pending_unit

        self._relationships_auto_paused = False
        self._relationships_manually_paused = False
        self._emit_counts_before_pausing: Optional[Tuple[int, int, int, int]] = None
        self._relationship_subscriptions: List[Subscription] = []

        self._emit()
        self._create_relationships()

    @property
    def relationships_working(self) -> bool:
        return not self._relationships_auto_paused and not self._relationships_manually_paused

    def value(self) -> AsyncSystemValue:
        """The current values of the members, by role."""
        value = {
            "query": self.query_unit.value(),
            "data": self.data_unit.value(),
            "error": self.error_unit.value(),
            "pending": self.pending_unit.value(),
        }
        if self._environment.check_immutability:
            return FrozenDict(value)
        return value

    def create_stream(self, observable_producer: Callable[..., Observable[Any]]) -> Stream:
        """Create a Stream from `observable_producer(query, data, error, pending)`."""
        return Stream(
            observable_producer(self.query_unit, self.data_unit, self.error_unit, self.pending_unit)
        )

    # ------------------------------------------------------------------
    # Pausing
    # ------------------------------------------------------------------

    def pause_relationships(self) -> None:
        if self._relationships_manually_paused:
            return
        self._relationships_manually_paused = True
        self._emit_counts_before_pausing = self._units_emit_counts()

    def resume_relationships(self) -> None:
        """Resume, emitting once if any member emitted while paused."""
        if not self._relationships_manually_paused:
            return
        self._relationships_manually_paused = False
        if self._emit_counts_before_pausing != self._units_emit_counts():
            self._emit()

    def _units_emit_counts(self) -> Tuple[int, int, int, int]:
        return (
            self.query_unit.emit_count,
            self.data_unit.emit_count,
            self.error_unit.emit_count,
            self.pending_unit.emit_count,
        )

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def _create_relationships(self) -> None:
        def when_working(relationship):
            def on_emit(_):
                if self.relationships_working:
                    relationship()

            return on_emit

        def on_pending(is_pending):
            if not self._relationships_manually_paused:
                self._toggle_query_unit_freeze_maybe(is_pending)
            if self.relationships_working:
                self._emit()

        self._relationship_subscriptions = [
            self.query_unit.future.subscribe(when_working(self._on_query)),
            self.data_unit.future.subscribe(when_working(self._on_data)),
            self.error_unit.future.subscribe(when_working(self._on_error)),
            self.pending_unit.future.subscribe(on_pending),
        ]

    def _on_query(self) -> None:
        self._relationships_auto_paused = True
        try:
            self._auto_update_pending_value(True)
            if self.config.clear_data_on_query:
                self.data_unit.clear_value()
            if self.config.clear_error_on_query:
                self.error_unit.clear_value()
        finally:
            self._relationships_auto_paused = False
        self._emit()

    def _on_data(self) -> None:
        self._relationships_auto_paused = True
        try:
            self._auto_update_pending_value(False)
            if not self.config.clear_error_on_query and self.config.clear_error_on_data:
                self.error_unit.clear_value()
            if self.config.clear_query_on_data:
                self.query_unit.clear_value()
        finally:
            self._relationships_auto_paused = False
        self._emit()

    def _on_error(self) -> None:
        self._relationships_auto_paused = True
        try:
            self._auto_update_pending_value(False)
            if not self.config.clear_data_on_query and self.config.clear_data_on_error:
                self.data_unit.clear_value()
            if self.config.clear_query_on_error:
                self.query_unit.clear_value()
        finally:
            self._relationships_auto_paused = False
        self._emit()

    def _toggle_query_unit_freeze_maybe(self, is_pending: bool) -> None:
        if not self.config.freeze_query_while_pending:
            return
        if is_pending:
            self.query_unit.freeze()
        else:
            self.query_unit.unfreeze()

    def _auto_update_pending_value(self, is_pending: bool) -> None:
        if self.config.auto_update_pending_value:
            self.pending_unit.dispatch(is_pending, bypass_debounce=True)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit(self, value: Any = MISSING) -> None:
        if value is MISSING:
            value = self._combined_emitted_values()
        super()._emit(value)

    def _combined_emitted_values(self) -> AsyncSystemValue:
        return {
            "query": self.query_unit.emitted_value,
            "data": self.data_unit.emitted_value,
            "error": self.error_unit.emitted_value,
            "pending": self.pending_unit.emitted_value,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.config.id!r}, value={self._emitted_value!r})"
