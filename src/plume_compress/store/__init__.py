"""统计存储包。"""

from .base import StatsStore
from .memory_store import InMemoryStatsStore
from .sql_store import SqlStatsStore


__all__ = [
    "InMemoryStatsStore",
    "SqlStatsStore",
    "StatsStore",
]
