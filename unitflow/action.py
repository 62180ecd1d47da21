"""
unitflow Action - A Plain Value Dispatcher
==========================================

An Action forwards dispatched values to its subscribers without any checks,
history or persistence. It does not replay by default, which makes it a
good fit for commands and notifications.

```python
from unitflow import Action

refresh = Action()
refresh.subscribe(lambda reason: print("refresh:", reason))
refresh.dispatch("button")   # refresh: button
```
"""

from typing import Any

from .base import Base, T
from .configuration import ActionConfig, Configuration, resolve_config
from .utils import deep_freeze


class Action(Base[T]):
    def __init__(self, **config: Any) -> None:
        super().__init__(resolve_config(ActionConfig, Configuration.ACTION, config))
        self._value: Any = None
        self.dispatch(self.config.initial_value)

    def value(self) -> T:
        return self._value

    def dispatch(self, value_or_producer: Any) -> None:
        """Emit a value; a callable is called with the current value to produce it."""
        if callable(value_or_producer):
            value = value_or_producer(self._value)
        else:
            value = value_or_producer
        if self._environment.check_immutability:
            value = deep_freeze(value)
        self._value = value
        self._emit()
