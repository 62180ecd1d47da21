"""
unitflow Observable - Push-Based Multicast Streams
==================================================

This module provides the reactive value stream every unitflow construct is
built on. It is deliberately small and fully synchronous.

Core Components
---------------

**Subject**: A multicast, future-only source. Subscribers only receive values
pushed after they subscribed.

**BehaviorSubject**: A multicast replay source. It remembers exactly one
current value and hands it to every new subscriber immediately.

**Observable**: A read-only, cold view built from a subscribe function.
Operators (`then`, `filter`, `distinct_until_changed`) return new Observables
and only attach to their source when subscribed to.

**Subscription**: The handle returned by every `subscribe` call.

Delivery Semantics
------------------

Pushes are delivered synchronously, in subscription order, to a snapshot of
the observers taken at push time. A callback that pushes again (re-entrancy)
runs its nested push to completion before the outer push continues.

```python
from unitflow.observable import BehaviorSubject

subject = BehaviorSubject(1)
subject.subscribe(print)   # prints 1 immediately
subject.next(2)            # prints 2
```
"""

import threading
from typing import Any, Callable, Generic, List, Optional, TypeVar

from .utils import MISSING, strict_equal

T = TypeVar("T")
U = TypeVar("U")

Observer = Callable[[Any], None]


# ============================================================================
# SUBSCRIPTION
# ============================================================================


class Subscription:
    """Handle for a live subscription; `unsubscribe()` is idempotent."""

    __slots__ = ("_teardown", "_closed")

    def __init__(self, teardown: Optional[Callable[[], None]] = None):
        self._teardown = teardown
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        teardown, self._teardown = self._teardown, None
        if teardown is not None:
            teardown()

    def __repr__(self) -> str:
        return f"Subscription(closed={self._closed})"


# ============================================================================
# OBSERVABLE - cold, read-only view
# ============================================================================


class Observable(Generic[T]):
    """
    A read-only stream defined by a subscribe function.

    The subscribe function receives the observer callback and returns a
    Subscription (or a teardown callable, or None).
    """

    def __init__(self, subscribe_fn: Callable[[Observer], Any]):
        self._subscribe_fn = subscribe_fn

    def subscribe(self, callback: Observer) -> Subscription:
        result = self._subscribe_fn(callback)
        if isinstance(result, Subscription):
            return result
        return Subscription(result if callable(result) else None)

    def then(self, func: Callable[[T], U]) -> "Observable[U]":
        """Transform every value with `func` (a map)."""

        def subscribe_fn(callback: Observer) -> Subscription:
            return self.subscribe(lambda value: callback(func(value)))

        return Observable(subscribe_fn)

    def filter(self, predicate: Callable[[T], bool]) -> "Observable[T]":
        """Only forward values for which `predicate` is truthy."""

        def subscribe_fn(callback: Observer) -> Subscription:
            def on_value(value):
                if predicate(value):
                    callback(value)

            return self.subscribe(on_value)

        return Observable(subscribe_fn)

    def distinct_until_changed(
        self, comparator: Callable[[Any, Any], bool] = strict_equal
    ) -> "Observable[T]":
        """Drop values equal to the previously forwarded one."""

        def subscribe_fn(callback: Observer) -> Subscription:
            last = [MISSING]

            def on_value(value):
                if last[0] is not MISSING and comparator(last[0], value):
                    return
                last[0] = value
                callback(value)

            return self.subscribe(on_value)

        return Observable(subscribe_fn)


# ============================================================================
# SUBJECTS - hot, multicast sources
# ============================================================================


class Subject(Observable[T]):
    """Multicast source; subscribers only see values pushed after subscribing."""

    def __init__(self) -> None:
        self._observers: List[Observer] = []
        self._lock = threading.RLock()
        super().__init__(self._add_observer)

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    @property
    def observed(self) -> bool:
        return self.observer_count > 0

    def _add_observer(self, callback: Observer) -> Subscription:
        # Wrap so the same callable can be subscribed twice and removed independently
        entry = lambda value: callback(value)  # noqa: E731
        with self._lock:
            self._observers.append(entry)

        def teardown():
            with self._lock:
                if entry in self._observers:
                    self._observers.remove(entry)

        return Subscription(teardown)

    def next(self, value: T) -> None:
        with self._lock:
            observers_snapshot = tuple(self._observers)
        for observer in observers_snapshot:
            # Skip observers removed earlier in this push
            with self._lock:
                if observer not in self._observers:
                    continue
            observer(value)

    def as_observable(self) -> Observable[T]:
        """Hide the pushing side of the Subject."""
        return Observable(self._add_observer)


class BehaviorSubject(Subject[T]):
    """Multicast source that replays its current value to new subscribers."""

    def __init__(self, initial_value: Any = None) -> None:
        super().__init__()
        self._value = initial_value

    @property
    def value(self) -> Any:
        return self._value

    def _add_observer(self, callback: Observer) -> Subscription:
        subscription = super()._add_observer(callback)
        callback(self._value)
        return subscription

    def next(self, value: T) -> None:
        self._value = value
        super().next(value)
