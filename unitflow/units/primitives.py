"""
Units holding scalar values: BoolUnit, NumUnit and StringUnit.
"""

from .base import UnitBase
from .kinds import ValueKind


class BoolUnit(UnitBase[bool]):
    """A Unit that only accepts `bool` values; defaults to False."""

    kind = ValueKind.BOOLEAN
    _config_section = "BOOL_UNIT"

    def toggle(self) -> bool:
        """Dispatch the negation of the current value."""
        return self.dispatch(lambda value: not value)


class NumUnit(UnitBase[float]):
    """
    A Unit that only accepts real numbers; defaults to 0.

    ints, floats and numpy numbers are accepted. bools and NaN are not.
    """

    kind = ValueKind.NUMBER
    _config_section = "NUM_UNIT"


class StringUnit(UnitBase[str]):
    """A Unit that only accepts `str` values; defaults to ""."""

    kind = ValueKind.STRING
    _config_section = "STRING_UNIT"

    @property
    def length(self) -> int:
        return len(self.raw_value())
