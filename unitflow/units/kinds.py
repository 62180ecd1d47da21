"""
unitflow Value Kinds
====================

Every Unit flavor is tagged with one `ValueKind`. The kind fixes, for the
whole lifetime of the Unit:

- the type validator, which no dispatch (not even a forced one) can bypass
- the default value, which stands in for "no value"
- the emptiness test used by `clear_value`

The kind table below is closed; there is no runtime registration.
"""

from enum import Enum
from typing import Any, Callable, Dict

from ..utils import is_number, strict_equal


class ValueKind(Enum):
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    DICT = "dict"
    ANY = "any"


_VALIDATORS: Dict[ValueKind, Callable[[Any], bool]] = {
    ValueKind.BOOLEAN: lambda v: isinstance(v, bool),
    ValueKind.NUMBER: is_number,
    ValueKind.STRING: lambda v: isinstance(v, str),
    ValueKind.LIST: lambda v: isinstance(v, list),
    ValueKind.DICT: lambda v: isinstance(v, dict),
    ValueKind.ANY: lambda v: True,
}

# Factories, so structured kinds never share a default instance
_DEFAULTS: Dict[ValueKind, Callable[[], Any]] = {
    ValueKind.BOOLEAN: lambda: False,
    ValueKind.NUMBER: lambda: 0,
    ValueKind.STRING: lambda: "",
    ValueKind.LIST: list,
    ValueKind.DICT: dict,
    ValueKind.ANY: lambda: None,
}


def validator_for(kind: ValueKind) -> Callable[[Any], bool]:
    return _VALIDATORS[kind]


def default_for(kind: ValueKind) -> Any:
    return _DEFAULTS[kind]()


def is_empty_value(kind: ValueKind, value: Any) -> bool:
    """Whether `value` is the kind's default (an empty list/dict for structured kinds)."""
    if kind in (ValueKind.LIST, ValueKind.DICT):
        return isinstance(value, (list, dict)) and len(value) == 0
    return strict_equal(value, default_for(kind))
