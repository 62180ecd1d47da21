"""
unitflow Base - Common Foundation of Units, Systems and Actions
===============================================================

`Base` owns the two value streams every construct exposes:

- the default stream (`subscribe`, `as_observable`), which replays the last
  emitted value to new subscribers unless the construct is configured with
  ``replay=False``
- the `future` stream, which never replays and only carries values emitted
  after subscribing

It also owns the lazily created `events` side-channel and the `emit_count`
counter, which is incremented exactly once per emission.
"""

from typing import Any, Callable, Generic, Optional, TypeVar

from .checks import check_id
from .configuration import Configuration
from .events import EventReplay
from .observable import BehaviorSubject, Observable, Subject, Subscription
from .stream import Stream
from .utils import MISSING, deep_freeze, to_json

T = TypeVar("T")


class Base(Generic[T]):
    """Abstract base of every unitflow construct."""

    def __init__(self, config: Any) -> None:
        self.config = config
        # Environment checks are fixed for the lifetime of the construct
        self._environment = Configuration.environment()
        check_id(config.id, getattr(config, "persistent", False))

        self._future_subject: Subject[T] = Subject()
        if config.replay is False:
            self._source_subject: Subject[T] = self._future_subject
        else:
            self._source_subject = BehaviorSubject(None)

        # Created on first access of `events`; pushes before that are dropped
        self._events_subject: Optional[Subject[Any]] = None

        self._emitted_value: Any = None
        self._emit_count = 0

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def value(self) -> T:
        raise NotImplementedError

    def raw_value(self) -> T:
        """Current value without copying; defaults to `value()`."""
        return self.value()

    @property
    def emit_count(self) -> int:
        return self._emit_count

    @property
    def emitted_value(self) -> Any:
        """The value pushed by the most recent emission."""
        return self._emitted_value

    @property
    def future(self) -> Observable[T]:
        """Observable of future values only; it never replays."""
        return self._future_subject.as_observable()

    @property
    def events(self) -> Observable[Any]:
        """On-demand side-channel of structural events (dispatch, freeze, jump, ...)."""
        if self._events_subject is None:
            self._events_subject = Subject()
        return self._events_subject.as_observable()

    def subscribe(self, callback: Callable[[T], Any]) -> Subscription:
        return self._source_subject.subscribe(callback)

    def as_observable(self) -> Observable[T]:
        """The default stream, without any of the construct's other methods."""
        return self._source_subject.as_observable()

    def create_stream(self, observable_producer: Callable[..., Observable[Any]]) -> Stream:
        return Stream(observable_producer(self))

    def to_json_string(self) -> str:
        return to_json(self.raw_value())

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def replay(self) -> Any:
        """Re-emit the last emitted value."""
        self._emit(self._emitted_value)
        self._push_event(EventReplay(self._emitted_value))

    def _emit(self, value: Any = MISSING) -> None:
        if value is MISSING:
            value = self.value()
        if self._environment.check_immutability:
            value = deep_freeze(value)
        self._emit_count += 1
        self._emitted_value = value

        if self._source_subject is not self._future_subject:
            self._source_subject.next(value)
        self._future_subject.next(value)

    def _push_event(self, event: Any) -> None:
        if self._events_subject is not None:
            self._events_subject.next(event)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.config.id!r}, value={self.raw_value()!r})"
