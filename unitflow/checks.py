"""
unitflow Checks
===============

Construction-time and developer-time validations. Each check either raises
one of the errors from `unitflow.exceptions` or logs a warning.
"""

import logging
from typing import Any, Mapping, Sequence

from .configuration import Configuration
from .exceptions import ConfigurationError, SelectionPathError, SerializabilityError
from .utils import get_location_id, is_serializable, is_valid_id, is_valid_key


def check_id(id_: Any, persistent: bool = False) -> None:
    """Validate an optional construct id; persistence requires one."""
    if id_ is None:
        if persistent:
            raise ConfigurationError("An id is required for persistence to work.")
        return

    if not is_valid_id(id_):
        raise ConfigurationError(
            f"Invalid id provided, expected a non-empty string, got {id_!r}"
        )

    if Configuration.environment().check_unique_id:
        location = get_location_id()
        known = Configuration._unique_ids.get(id_)
        if known is not None and known != location:
            raise ConfigurationError(
                f'Duplicate id "{id_}" detected by "check_unique_id" check, '
                "consider assigning a unique id."
            )
        Configuration._unique_ids[id_] = location


def check_serializability(o: Any) -> None:
    ok, offending = is_serializable(o)
    if not ok:
        raise SerializabilityError(
            f"Non-serializable value {offending!r} of type {type(offending).__name__} "
            'detected by "check_serializability" check. Consider a serializable alternative.'
        )


def check_path(path: Sequence[Any]) -> None:
    if not path:
        raise SelectionPathError("Expected at least one key")
    for key in path:
        if not is_valid_key(key):
            raise SelectionPathError(
                f"Expected strings and non-negative integers, but got {key!r} "
                f"of type {type(key).__name__}"
            )


def check_async_system_config(options: Mapping[str, Any]) -> None:
    """
    Warn about explicitly set option pairs where only one of the two can take effect.
    """
    if options.get("clear_data_on_error") is True and options.get("clear_data_on_query") is True:
        logging.warning(
            'When "clear_data_on_query" is set to True, "clear_data_on_error" stops working, '
            "as only one of them can work at a time. Consider only setting one at a time."
        )
    if options.get("clear_error_on_data") is True and options.get("clear_error_on_query") is True:
        logging.warning(
            'When "clear_error_on_query" is set to True, "clear_error_on_data" stops working, '
            "as only one of them can work at a time. Consider only setting one at a time."
        )
