"""体积估算服务。

估算只是参考信息：存储不可用时记录警告并回退到启发式表，从不向调用方抛出统计错误。
"""

from typing import TYPE_CHECKING

from ..exceptions import StatsError
from ..models.settings import CompressionSettings
from ..models.stats import EstimationQuery, EstimationResult
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .statistics import estimate_compression


if TYPE_CHECKING:
    from ..store.base import StatsStore


logger = get_logger()


class EstimationService:
    """基于历史统计的体积估算"""

    def __init__(self, store: "StatsStore | None" = None):
        self.store = store

    def _heuristic(self, query: EstimationQuery) -> EstimationResult:
        return estimate_compression(
            query.input_format,
            query.output_format,
            query.original_size,
            query.quality_setting,
            query.lossy_mode,
        )

    def estimate(self, query: EstimationQuery) -> EstimationResult:
        if self.store is None:
            return self._heuristic(query)
        try:
            return self.store.get_estimation(query)
        except StatsError as e:
            logger.warning(MessageFormatter.stats_fallback("体积估算", e))
            return self._heuristic(query)

    def estimate_for(
        self, input_format: str, settings: CompressionSettings, original_size: int
    ) -> EstimationResult:
        """按压缩设置估算"""
        return self.estimate(
            EstimationQuery(
                input_format=input_format,
                output_format=settings.format.value,
                original_size=original_size,
                quality_setting=settings.quality,
                lossy_mode=settings.is_lossy,
            )
        )
