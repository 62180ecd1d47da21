"""
Base of the Units whose values can be traversed: ListUnit, DictUnit and GenericUnit.
"""

from typing import Any, List, Tuple

from ..base import T
from ..selection import Selection
from ..utils import PathKey
from .base import UnitBase


class NonPrimitiveUnitBase(UnitBase[T]):
    def select(self, *path: PathKey) -> Selection[Any]:
        """Create a Selection of the value at `path`."""
        return Selection(self, path)

    def object_keys(self) -> List[Any]:
        raw = self.raw_value()
        if isinstance(raw, dict):
            return list(raw.keys())
        if isinstance(raw, list):
            return list(range(len(raw)))
        return []

    def object_values(self) -> List[Any]:
        value = self.value()
        if isinstance(value, dict):
            return list(value.values())
        if isinstance(value, list):
            return list(value)
        return []

    def object_entries(self) -> List[Tuple[Any, Any]]:
        value = self.value()
        if isinstance(value, dict):
            return list(value.items())
        if isinstance(value, list):
            return list(enumerate(value))
        return []
