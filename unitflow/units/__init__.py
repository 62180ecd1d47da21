"""
unitflow Units
==============

Typed value containers with history, freeze, mute and persistence.

- **BoolUnit**, **NumUnit**, **StringUnit**: scalar values
- **ListUnit**, **DictUnit**: structured values, selectable by path
- **GenericUnit**: any value, selectable by path
"""

from .base import UnitBase
from .dict_unit import DictUnit
from .generic_unit import GenericUnit
from .kinds import ValueKind
from .list_unit import ListUnit
from .non_primitive import NonPrimitiveUnitBase
from .primitives import BoolUnit, NumUnit, StringUnit

__all__ = [
    "UnitBase",
    "NonPrimitiveUnitBase",
    "ValueKind",
    "BoolUnit",
    "NumUnit",
    "StringUnit",
    "ListUnit",
    "DictUnit",
    "GenericUnit",
]
