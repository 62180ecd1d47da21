"""
unitflow Configuration - Global Defaults and Config Resolution
==============================================================

Every unitflow construct is configured once, at construction time, from
three layers:

1. global defaults shared by every Unit (`Configuration.UNITS`)
2. defaults for one flavor of Unit (`Configuration.BOOL_UNIT`, ...)
3. the keyword arguments passed on instantiation

`resolve_config` merges those layers into a frozen dataclass snapshot. After
construction nothing is looked up from the global registry again, so
calling `Configuration.set()` only affects constructs created afterwards.

```python
from unitflow import Configuration, NumUnit

Configuration.set(units={"cache_size": 10}, num_unit={"distinct_dispatch_check": True})
counter = NumUnit(initial_value=1)
counter.config.cache_size              # 10
counter.config.distinct_dispatch_check  # True
```

Environment checks (`check_immutability`, `check_serializability`,
`check_unique_id`) are developer aids; `Configuration.enable_prod_mode()`
turns all of them off.
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar, Union

from .utils import MISSING

C = TypeVar("C")

_EMPTY: Mapping[str, Any] = MappingProxyType({})


# ============================================================================
# CONFIG SNAPSHOTS
# ============================================================================


@dataclass(frozen=True)
class EnvironmentConfig:
    """Developer checks; all off by default."""

    check_immutability: bool = False
    check_serializability: bool = False
    check_unique_id: bool = False


@dataclass(frozen=True)
class BaseConfig:
    id: Optional[str] = None
    replay: bool = True


@dataclass(frozen=True)
class UnitConfig(BaseConfig):
    initial_value: Any = MISSING
    cache_size: int = 2
    immutable: bool = False
    persistent: bool = False
    storage: Any = None
    distinct_dispatch_check: bool = False
    custom_dispatch_check: Optional[Callable[[Any, Any], Any]] = None
    dispatch_debounce: Union[bool, int, float] = False
    dispatch_debounce_mode: str = "END"


@dataclass(frozen=True)
class ActionConfig(BaseConfig):
    replay: bool = False
    initial_value: Any = None


@dataclass(frozen=True)
class AsyncSystemConfig(BaseConfig):
    initial_value: Optional[Mapping[str, Any]] = None
    clear_error_on_data: bool = True
    clear_error_on_query: bool = False
    clear_data_on_query: bool = False
    clear_data_on_error: bool = False
    clear_query_on_data: bool = False
    clear_query_on_error: bool = False
    auto_update_pending_value: bool = True
    freeze_query_while_pending: bool = False
    # Member unit overrides, only used by AsyncSystem
    units: Mapping[str, Any] = field(default_factory=dict)
    query_unit: Mapping[str, Any] = field(default_factory=dict)
    data_unit: Mapping[str, Any] = field(default_factory=dict)
    error_unit: Mapping[str, Any] = field(default_factory=dict)
    pending_unit: Mapping[str, Any] = field(default_factory=dict)


_MEMBER_OVERRIDE_OPTIONS = frozenset(
    ("units", "query_unit", "data_unit", "error_unit", "pending_unit")
)


def config_fields(config_cls: Type[Any]) -> frozenset:
    return frozenset(f.name for f in fields(config_cls))


def resolve_config(config_cls: Type[C], *layers: Optional[Mapping[str, Any]]) -> C:
    """
    Merge config layers, later layers winning, into a frozen `config_cls`.

    Member override mappings are copied into read-only proxies. Unknown
    option names raise TypeError.
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged.update(layer)

    unknown = set(merged) - config_fields(config_cls)
    if unknown:
        raise TypeError(
            f"Unknown {config_cls.__name__} option(s): {', '.join(sorted(unknown))}"
        )

    for key in _MEMBER_OVERRIDE_OPTIONS & set(merged):
        merged[key] = _freeze_section(merged[key])
    return config_cls(**merged)


# ============================================================================
# GLOBAL REGISTRY
# ============================================================================


def _freeze_section(section: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(section)) if section else _EMPTY


class Configuration:
    """
    Global defaults for all unitflow constructs.

    `set()` replaces (does not merge with) the previous global configuration.
    """

    _is_dev_mode = True

    storage: Any = None
    ENVIRONMENT: EnvironmentConfig = EnvironmentConfig()
    UNITS: Mapping[str, Any] = _EMPTY
    BOOL_UNIT: Mapping[str, Any] = _EMPTY
    NUM_UNIT: Mapping[str, Any] = _EMPTY
    STRING_UNIT: Mapping[str, Any] = _EMPTY
    LIST_UNIT: Mapping[str, Any] = _EMPTY
    DICT_UNIT: Mapping[str, Any] = _EMPTY
    GENERIC_UNIT: Mapping[str, Any] = _EMPTY
    ASYNC_SYSTEM: Mapping[str, Any] = _EMPTY
    ACTION: Mapping[str, Any] = _EMPTY

    # id -> location of first use, for the check_unique_id environment check
    _unique_ids: Dict[str, str] = {}

    @classmethod
    def set(
        cls,
        *,
        storage: Any = None,
        environment: Union[EnvironmentConfig, Mapping[str, Any], None] = None,
        units: Optional[Mapping[str, Any]] = None,
        bool_unit: Optional[Mapping[str, Any]] = None,
        num_unit: Optional[Mapping[str, Any]] = None,
        string_unit: Optional[Mapping[str, Any]] = None,
        list_unit: Optional[Mapping[str, Any]] = None,
        dict_unit: Optional[Mapping[str, Any]] = None,
        generic_unit: Optional[Mapping[str, Any]] = None,
        async_system: Optional[Mapping[str, Any]] = None,
        action: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if environment is None:
            environment = EnvironmentConfig()
        elif not isinstance(environment, EnvironmentConfig):
            environment = EnvironmentConfig(**environment)

        cls.storage = storage
        cls.ENVIRONMENT = environment
        cls.UNITS = _freeze_section(units)
        cls.BOOL_UNIT = _freeze_section(bool_unit)
        cls.NUM_UNIT = _freeze_section(num_unit)
        cls.STRING_UNIT = _freeze_section(string_unit)
        cls.LIST_UNIT = _freeze_section(list_unit)
        cls.DICT_UNIT = _freeze_section(dict_unit)
        cls.GENERIC_UNIT = _freeze_section(generic_unit)
        cls.ASYNC_SYSTEM = _freeze_section(async_system)
        cls.ACTION = _freeze_section(action)
        cls._unique_ids.clear()

    @classmethod
    def reset(cls) -> None:
        """Restore the empty defaults; existing instances are unaffected."""
        cls.set()

    @classmethod
    def environment(cls) -> EnvironmentConfig:
        """Effective environment checks; always all-off in prod mode."""
        if cls._is_dev_mode:
            return cls.ENVIRONMENT
        return EnvironmentConfig()

    @classmethod
    def enable_prod_mode(cls) -> None:
        cls._is_dev_mode = False

    @classmethod
    def enable_dev_mode(cls) -> None:
        cls._is_dev_mode = True

    @classmethod
    def is_dev_mode(cls) -> bool:
        return cls._is_dev_mode
