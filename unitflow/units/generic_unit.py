from typing import Any

from ..utils import find_index, find_index_backwards
from .kinds import ValueKind
from .non_primitive import NonPrimitiveUnitBase


class GenericUnit(NonPrimitiveUnitBase[Any]):
    """
    A Unit that accepts any value; defaults to None.

    Callables are treated as value producers by `dispatch`, so a callable
    can only be stored by returning it from a producer.
    """

    kind = ValueKind.ANY
    _config_section = "GENERIC_UNIT"

    def go_back(self, skip_nil_values: bool = False) -> bool:
        """Go one step back, or with `skip_nil_values` to the closest earlier non-None value."""
        if skip_nil_values:
            return self._go_to_non_nil_value(backwards=True)
        return super().go_back()

    def go_forward(self, skip_nil_values: bool = False) -> bool:
        """Go one step forward, or with `skip_nil_values` to the closest later non-None value."""
        if skip_nil_values:
            return self._go_to_non_nil_value(backwards=False)
        return super().go_forward()

    def _go_to_non_nil_value(self, backwards: bool) -> bool:
        if self._is_frozen:
            return False

        def is_not_none(v):
            return v is not None

        if backwards:
            if self._cache_index - 1 < 0:
                return False
            index = find_index_backwards(self._cached_values, is_not_none, self._cache_index - 1)
        else:
            if self._cache_index + 1 > len(self._cached_values) - 1:
                return False
            index = find_index(self._cached_values, is_not_none, self._cache_index + 1)

        if index == -1:
            return False
        return self.jump(index - self._cache_index)
