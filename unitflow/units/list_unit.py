"""
ListUnit - A Unit Holding a list
================================

Like DictUnit, the helpers below commit a shallow copy of the current list,
so untouched items keep their identity. Negative indexes count from the end.
"""

from typing import Any, List, Optional

from ..events import EventListUnitPop, EventListUnitPush, EventListUnitSet
from ..utils import is_int
from .kinds import ValueKind
from .non_primitive import NonPrimitiveUnitBase


class ListUnit(NonPrimitiveUnitBase[List[Any]]):
    kind = ValueKind.LIST
    _config_section = "LIST_UNIT"

    @property
    def length(self) -> int:
        return len(self.raw_value())

    def _normalize_index(self, index: int) -> int:
        return index + self.length if index < 0 else index

    def get(self, index: int) -> Any:
        """The item at `index`, or None if there is none."""
        if not is_int(index):
            return None
        index = self._normalize_index(index)
        if not 0 <= index < self.length:
            return None
        return self._deep_copy_maybe(self.raw_value()[index])

    def set(self, index: int, item: Any) -> None:
        """
        Set the item at `index` in a new copy of the list.

        Setting past the end pads the gap with None.
        """
        if self._is_frozen or not is_int(index):
            return
        index = self._normalize_index(index)
        if index < 0:
            return
        self._check_serializability_maybe(item)

        list_shallow_copy = list(self.raw_value())
        if index >= len(list_shallow_copy):
            list_shallow_copy.extend([None] * (index + 1 - len(list_shallow_copy)))
        list_shallow_copy[index] = self._deep_copy_maybe(item)
        self._update_value_and_cache(list_shallow_copy)

        if not self._is_muted:
            self._push_event(EventListUnitSet(index, item))

    def push(self, *items: Any) -> int:
        """Append `items` to a new copy of the list and return the new length."""
        if self._is_frozen or not items:
            return self.length
        self._check_serializability_maybe(list(items))

        list_shallow_copy = list(self.raw_value())
        list_shallow_copy.extend(self._deep_copy_maybe(list(items)))
        self._update_value_and_cache(list_shallow_copy)

        if not self._is_muted:
            self._push_event(EventListUnitPush(items))
        return len(list_shallow_copy)

    def pop(self) -> Optional[Any]:
        """Remove the last item from a new copy of the list and return it."""
        if self._is_frozen or self.is_empty():
            return None

        list_shallow_copy = list(self.raw_value())
        popped_item = self._deep_copy_maybe(list_shallow_copy.pop())
        self._update_value_and_cache(list_shallow_copy)

        if not self._is_muted:
            self._push_event(EventListUnitPop(popped_item))
        return popped_item
