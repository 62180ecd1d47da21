"""
DictUnit - A Unit Holding a dict
================================

Besides `dispatch`, a DictUnit offers a few helpers that build the next
value from a shallow copy of the current one. Entries that are not touched
keep their identity, so Selections of other keys do not emit.

The helpers honor freeze and the immutable-copy rule, but skip the custom
and distinct dispatch checks.
"""

from typing import Any, Dict, Mapping

from ..events import EventDictUnitAssign, EventDictUnitDelete, EventDictUnitSet
from .kinds import ValueKind
from .non_primitive import NonPrimitiveUnitBase


class DictUnit(NonPrimitiveUnitBase[Dict[str, Any]]):
    kind = ValueKind.DICT
    _config_section = "DICT_UNIT"

    @property
    def length(self) -> int:
        return len(self.raw_value())

    def has(self, key: Any) -> bool:
        return key in self.raw_value()

    def get(self, key: Any, default: Any = None) -> Any:
        if key not in self.raw_value():
            return default
        return self._deep_copy_maybe(self.raw_value()[key])

    def set(self, key: Any, value: Any) -> None:
        """Set `key` to `value` in a new copy of the dict."""
        if self._is_frozen:
            return
        self._check_serializability_maybe(value)

        dict_shallow_copy = dict(self.raw_value())
        dict_shallow_copy[key] = self._deep_copy_maybe(value)
        self._update_value_and_cache(dict_shallow_copy)

        if not self._is_muted:
            self._push_event(EventDictUnitSet(key, value))

    def delete(self, *keys: Any) -> Dict[Any, Any]:
        """Remove `keys` from a new copy of the dict and return the removed entries."""
        keys = tuple(key for key in keys if self.has(key))
        if self._is_frozen or not keys:
            return {}

        dict_shallow_copy = dict(self.raw_value())
        removed = {key: self._deep_copy_maybe(dict_shallow_copy.pop(key)) for key in keys}
        self._update_value_and_cache(dict_shallow_copy)

        if not self._is_muted:
            self._push_event(EventDictUnitDelete(removed))
        return removed

    def assign(self, *sources: Mapping[Any, Any]) -> None:
        """Merge `sources` into a new copy of the dict; later sources win."""
        sources = tuple(source for source in sources if isinstance(source, Mapping))
        if self._is_frozen or not sources:
            return

        new_props: Dict[Any, Any] = {}
        for source in sources:
            new_props.update(source)
        self._check_serializability_maybe(new_props)

        dict_shallow_copy = dict(self.raw_value())
        dict_shallow_copy.update(self._deep_copy_maybe(new_props))
        self._update_value_and_cache(dict_shallow_copy)

        if not self._is_muted:
            self._push_event(EventDictUnitAssign(new_props))
