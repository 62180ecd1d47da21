from .async_system import AsyncSystem
from .async_system_base import AsyncSystemBase, AsyncSystemValue

__all__ = ["AsyncSystem", "AsyncSystemBase", "AsyncSystemValue"]
