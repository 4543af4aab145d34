"""统计存储接口。

查询逻辑集中在基类，后端只需实现行筛选和写入原语，
因此 SQL 与内存两种实现的估算语义完全一致。
"""

import threading
from abc import ABC, abstractmethod

from ..config import get_config
from ..core.statistics import (
    calculate_confidence,
    estimate_compression,
    get_size_range,
    summarize_samples,
    timing_confidence,
)
from ..exceptions import InvalidQueryError
from ..models.constants import clamp_quality, normalize_format
from ..models.progress import ProgressEstimation, ProgressEstimationQuery
from ..models.stats import (
    CompressionStat,
    EstimationQuery,
    EstimationResult,
    StatsCriteria,
)
from ..utils.logging_helpers import get_logger
from .seed import seed_stats


logger = get_logger()


class StatsStore(ABC):
    """压缩统计存储

    所有公共方法都在同一把锁内执行，save_stat 是单次原子插入。
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # 后端原语
    # ------------------------------------------------------------------

    @abstractmethod
    def _select(self, criteria: StatsCriteria) -> list[CompressionStat]:
        """返回满足条件的全部记录"""

    @abstractmethod
    def _insert(self, stat: CompressionStat) -> int:
        """插入一条记录并返回分配的 ID"""

    @abstractmethod
    def _delete_all(self) -> None: ...

    @abstractmethod
    def _count(self) -> int: ...

    @abstractmethod
    def _delete_oldest(self, keep: int) -> int:
        """只保留最新的 keep 条记录，返回删除数量"""

    @abstractmethod
    def _recent(self, limit: int) -> list[CompressionStat]: ...

    # ------------------------------------------------------------------
    # 公共接口
    # ------------------------------------------------------------------

    def save_stat(self, stat: CompressionStat) -> int:
        """保存统计记录，返回行 ID"""
        with self._lock:
            stat_id = self._insert(stat)
        logger.debug(
            f"记录统计 #{stat_id}: {stat.input_format}→{stat.output_format} "
            f"{stat.size_reduction_percent:.1f}%"
        )
        return stat_id

    def clear_all(self) -> None:
        with self._lock:
            self._delete_all()

    def count_stats(self) -> int:
        with self._lock:
            return self._count()

    def prune_old_stats(self, max_records: int) -> int:
        """删除最旧的记录直到总数不超过 max_records"""
        if max_records < 0:
            raise InvalidQueryError(f"max_records 不能为负数: {max_records}")
        with self._lock:
            deleted = self._delete_oldest(max_records)
        if deleted:
            logger.info(f"清理了 {deleted} 条旧统计记录")
        return deleted

    def get_recent_stats(self, limit: int = 20) -> list[CompressionStat]:
        """最新的 limit 条记录，按时间倒序"""
        if limit < 0:
            raise InvalidQueryError(f"limit 不能为负数: {limit}")
        with self._lock:
            return self._recent(limit)

    def get_estimation(self, query: EstimationQuery) -> EstimationResult:
        """基于历史数据估算体积减少

        匹配格式对、质量 ±窗口、相同的有损标志；没有匹配记录时返回启发式估算。
        """
        window = get_config().stats.QUALITY_WINDOW
        criteria = StatsCriteria(
            input_format=query.input_format,
            output_format=query.output_format,
            min_quality=clamp_quality(query.quality_setting - window),
            max_quality=clamp_quality(query.quality_setting + window),
            lossy_mode=query.lossy_mode,
        )
        with self._lock:
            rows = self._select(criteria)

        if not rows:
            return estimate_compression(
                query.input_format,
                query.output_format,
                query.original_size,
                query.quality_setting,
                query.lossy_mode,
            )

        percents = [row.size_reduction_percent for row in rows]
        mean = summarize_samples(percents).mean
        # 方差以比例（0-1）计算，保证 1/(1+方差) 有意义
        variance = summarize_samples([p / 100.0 for p in percents]).variance
        return EstimationResult.from_percent(
            mean, calculate_confidence(len(rows), variance), len(rows)
        )

    def get_time_estimation(
        self, query: ProgressEstimationQuery
    ) -> ProgressEstimation | None:
        """基于带耗时的历史记录估算耗时，没有数据时返回 None"""
        criteria = StatsCriteria(
            input_format=query.input_format,
            output_format=query.output_format,
            size_range=get_size_range(query.original_size),
            lossy_mode=query.lossy_mode,
            require_time=True,
        )
        with self._lock:
            rows = self._select(criteria)

        durations = [float(r.compression_time_ms or 0) for r in rows]
        summary = summarize_samples(durations)
        if summary.count == 0:
            return None

        if summary.mean > 0:
            variance = summarize_samples([d / summary.mean for d in durations]).variance
        else:
            variance = 0.0
        return ProgressEstimation(
            estimated_duration_ms=round(summary.mean),
            confidence=timing_confidence(summary.count, variance),
            sample_count=summary.count,
        )

    def get_pair_summary(self, input_format: str, output_format: str) -> tuple[float, int]:
        """格式对的平均体积减少和记录数，没有记录时为 (0.0, 0)"""
        criteria = StatsCriteria(
            input_format=normalize_format(input_format),
            output_format=normalize_format(output_format),
        )
        with self._lock:
            rows = self._select(criteria)
        summary = summarize_samples([r.size_reduction_percent for r in rows])
        return summary.mean, summary.count

    def seed_defaults(self) -> int:
        """空存储时写入初始样本，返回插入数量"""
        with self._lock:
            if self._count() > 0:
                logger.debug("统计存储已有数据，跳过初始化")
                return 0
            for stat in seed_stats():
                self._insert(stat)
            inserted = self._count()
        logger.info(f"写入了 {inserted} 条初始统计数据")
        return inserted
