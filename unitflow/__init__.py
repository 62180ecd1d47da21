"""
unitflow - Typed Reactive Value Containers

Units hold a single typed value, push every accepted change to their
subscribers and keep a bounded, navigable history. AsyncSystems coordinate
query, data, error and pending Units. Selections observe nested paths of
structured Units without spurious notifications.
"""

# Core streams
from .observable import BehaviorSubject, Observable, Subject, Subscription

# Units
from .units import (
    BoolUnit,
    DictUnit,
    GenericUnit,
    ListUnit,
    NonPrimitiveUnitBase,
    NumUnit,
    StringUnit,
    UnitBase,
    ValueKind,
)

# Derived views, systems and actions
from .action import Action
from .selection import Selection
from .stream import Stream
from .systems import AsyncSystem, AsyncSystemBase

# Configuration and persistence
from .configuration import Configuration, EnvironmentConfig
from .persistence import JsonFileStorage, MemoryStorage, Storage, clear_persistent_storage

# Events and errors
from .events import DispatchFailReason, DispatchOptions
from .exceptions import (
    ConfigurationError,
    ImmutabilityError,
    SelectionPathError,
    SerializabilityError,
    UnitflowError,
)

__all__ = [
    # Core streams
    "Observable",
    "Subject",
    "BehaviorSubject",
    "Subscription",
    # Units
    "UnitBase",
    "NonPrimitiveUnitBase",
    "ValueKind",
    "BoolUnit",
    "NumUnit",
    "StringUnit",
    "ListUnit",
    "DictUnit",
    "GenericUnit",
    # Derived views, systems and actions
    "Selection",
    "AsyncSystem",
    "AsyncSystemBase",
    "Action",
    "Stream",
    # Configuration and persistence
    "Configuration",
    "EnvironmentConfig",
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
    "clear_persistent_storage",
    # Events and errors
    "DispatchFailReason",
    "DispatchOptions",
    "UnitflowError",
    "ConfigurationError",
    "SerializabilityError",
    "ImmutabilityError",
    "SelectionPathError",
]
