"""内存统计存储，与 SqlStatsStore 语义一致，主要用于测试。"""

from ..models.stats import CompressionStat, StatsCriteria
from .base import StatsStore


class InMemoryStatsStore(StatsStore):
    """列表实现的统计存储，ID 从 1 开始递增"""

    def __init__(self) -> None:
        super().__init__()
        self._rows: list[CompressionStat] = []
        self._next_id = 1

    def _select(self, criteria: StatsCriteria) -> list[CompressionStat]:
        return [row for row in self._rows if criteria.matches(row)]

    def _insert(self, stat: CompressionStat) -> int:
        stat_id = self._next_id
        self._rows.append(stat.model_copy(update={"id": stat_id}))
        self._next_id += 1
        return stat_id

    def _delete_all(self) -> None:
        self._rows.clear()

    def _count(self) -> int:
        return len(self._rows)

    def _delete_oldest(self, keep: int) -> int:
        excess = max(0, len(self._rows) - keep)
        del self._rows[:excess]
        return excess

    def _recent(self, limit: int) -> list[CompressionStat]:
        return list(reversed(self._rows[-limit:])) if limit > 0 else []
