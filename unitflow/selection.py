"""
unitflow Selection - Derived Views on Nested Paths
==================================================

A Selection is a read-only view of the value found at a path inside a
ListUnit, DictUnit or GenericUnit. It is created with `unit.select(*path)`.

```python
from unitflow import DictUnit

user = DictUnit(initial_value={"name": "Ada", "address": {"city": "London"}})
city = user.select("address", "city")
city.value()                 # "London"
city.subscribe(print)        # prints "London"
user.set("name", "Grace")    # nothing printed, the city did not change
```

Change Detection
----------------

For a mutable Unit, each pushed value is walked down the path and
consecutive strict-equal results are dropped.

For an immutable Unit, pushed values are fresh deep copies, so every path
would look changed. The Selection therefore compares the path value inside
the Unit's stored value by identity, and only forwards the path value of the
emitted copy when the stored branch actually changed.
"""

from typing import Any, Callable, Generic, Tuple, TypeVar

from .checks import check_path
from .observable import Observable, Subscription
from .utils import PathKey, plucker

T = TypeVar("T")


class Selection(Generic[T]):
    def __init__(self, unit: Any, path: Tuple[PathKey, ...]):
        from .units.non_primitive import NonPrimitiveUnitBase

        if not isinstance(unit, NonPrimitiveUnitBase):
            raise TypeError(
                f"Expected the unit to be one of ListUnit, DictUnit, GenericUnit, but got {unit!r}"
            )
        check_path(path)
        self._unit = unit
        self._path = tuple(path)

    @property
    def unit(self) -> Any:
        return self._unit

    @property
    def path(self) -> Tuple[PathKey, ...]:
        return self._path

    def value(self) -> T:
        """The value at the path, or None if the path does not resolve."""
        return self._unit._deep_copy_maybe(plucker(self._unit.raw_value(), self._path))

    def as_observable(self) -> Observable[T]:
        unit, path = self._unit, self._path

        if unit.config.immutable:
            return (
                unit.as_observable()
                .then(lambda _: plucker(unit.raw_value(), path))
                .distinct_until_changed()
                .then(lambda _: plucker(unit.emitted_value, path))
            )

        return unit.as_observable().then(lambda value: plucker(value, path)).distinct_until_changed()

    def subscribe(self, callback: Callable[[T], Any]) -> Subscription:
        return self.as_observable().subscribe(callback)

    def __repr__(self) -> str:
        return f"Selection({self._unit!r}, path={self._path!r})"
