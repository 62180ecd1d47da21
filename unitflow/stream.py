"""
unitflow Stream - Resubscribable Subscriptions
==============================================

A Stream subscribes to an Observable immediately and keeps both the
Observable and the live Subscription, so the side effects wired into the
Observable can be stopped and restarted at will.

Streams are usually created with `create_stream` on a Unit, System or Action:

```python
from unitflow import AsyncSystem

system = AsyncSystem()
stream = system.create_stream(
    lambda query, data, error, pending: query.future.then(fetch).then(data.dispatch)
)
stream.unsubscribe()   # stop reacting to queries
stream.resubscribe()   # start again
```
"""

from typing import Any, Optional

from .observable import Observable, Subscription


class Stream:
    """Keeps an Observable subscribed, with unsubscribe/resubscribe control."""

    def __init__(self, observable: Observable[Any]):
        if not isinstance(observable, Observable):
            raise TypeError(f"Expected an Observable, got {observable!r}")
        self._observable = observable
        self._subscription: Optional[Subscription] = None
        self._subscribe()

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._subscription

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    def _subscribe(self) -> Subscription:
        self._subscription = self._observable.subscribe(lambda _: None)
        return self._subscription

    def unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def resubscribe(self) -> Subscription:
        self.unsubscribe()
        return self._subscribe()
