"""
unitflow Exceptions
===================

Every error raised by unitflow derives from `UnitflowError`. The concrete
classes also derive from `TypeError`, since each of them reports a value or
configuration of the wrong shape.

Admission rejections are *not* errors; they are reported through the
`events` side-channel of a Unit with a `DispatchFailReason`.
"""


class UnitflowError(Exception):
    """Base class for all unitflow errors."""

    pass


class ConfigurationError(UnitflowError, TypeError):
    """Invalid construction-time configuration (bad id, persistence without id)."""

    pass


class SerializabilityError(UnitflowError, TypeError):
    """A dispatched value cannot round-trip through the persistence format."""

    pass


class ImmutabilityError(UnitflowError, TypeError):
    """Attempt to mutate a deep-frozen value."""

    pass


class SelectionPathError(UnitflowError, TypeError):
    """A Selection path is empty or contains an invalid key."""

    pass
