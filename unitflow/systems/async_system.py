from typing import Any, Dict, Mapping

from ..configuration import Configuration
from ..units import BoolUnit, GenericUnit
from ..utils import MISSING, generate_async_system_ids
from .async_system_base import AsyncSystemBase


class AsyncSystem(AsyncSystemBase):
    """
    An AsyncSystem built from three GenericUnits and a BoolUnit.

    Member Units are configured from, in order of precedence: the role's own
    section (`query_unit`, `data_unit`, `error_unit`, `pending_unit`), the
    shared `units` section, and the system's `initial_value`. With a system
    `id`, members get derived ids like ``<id>_QUERY`` unless their section
    sets one.
    """

    def __init__(self, **config: Any) -> None:
        options: Dict[str, Any] = {**Configuration.ASYNC_SYSTEM, **config}
        ids = generate_async_system_ids(
            options.get("id"),
            options.get("query_unit"),
            options.get("data_unit"),
            options.get("error_unit"),
            options.get("pending_unit"),
        )
        initial_value: Mapping[str, Any] = options.get("initial_value") or {}
        shared: Mapping[str, Any] = options.get("units") or {}

        def member_config(role: str) -> Dict[str, Any]:
            return {
                "initial_value": initial_value.get(role, MISSING),
                **shared,
                **(options.get(f"{role}_unit") or {}),
                "id": ids[role],
            }

        super().__init__(
            GenericUnit(**member_config("query")),
            GenericUnit(**member_config("data")),
            GenericUnit(**member_config("error")),
            BoolUnit(**member_config("pending")),
            **config,
        )
