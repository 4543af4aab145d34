"""压缩预测服务。

在格式对的历史平均值之上叠加尺寸修正，没有历史数据时使用默认表。
"""

from typing import TYPE_CHECKING, Final

from ..config import get_config
from ..exceptions import StatsError, StatsNotAvailableError
from ..models.constants import SizeRange, normalize_format
from ..models.stats import EstimationResult
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .statistics import create_stat_with_time, get_size_range


if TYPE_CHECKING:
    from ..store.base import StatsStore


logger = get_logger()


DEFAULT_REDUCTIONS: Final[dict[tuple[str, str], float]] = {
    ("png", "webp"): 70.0,
    ("jpeg", "webp"): 25.0,
    ("png", "png"): 15.0,
    ("jpeg", "jpeg"): 20.0,
}
FALLBACK_REDUCTION: Final[float] = 10.0

DEFAULT_CONFIDENCE: Final[float] = 0.3
HISTORICAL_CONFIDENCE: Final[float] = 0.8

SIZE_ADJUSTMENTS: Final[dict[SizeRange, float]] = {
    SizeRange.SMALL: 0.8,
    SizeRange.MEDIUM: 1.0,
    SizeRange.LARGE: 1.1,
}


def adjust_for_size(base_reduction: float, file_size: int) -> float:
    """小文件 ×0.8，中等不变，大文件 ×1.1，结果不超过 100"""
    return min(100.0, base_reduction * SIZE_ADJUSTMENTS[get_size_range(file_size)])


def approximate_sample_count(input_format: str, output_format: str) -> int:
    """没有确切记录数时的近似样本数"""
    input_format = normalize_format(input_format)
    output_format = normalize_format(output_format)
    if output_format == "webp" and input_format in ("png", "jpeg"):
        return 50
    if input_format == output_format and input_format in ("png", "jpeg"):
        return 30
    return 10


def sample_factor(sample_count: int) -> float:
    if sample_count <= 5:
        return 0.3
    if sample_count <= 20:
        return 0.6
    if sample_count <= 50:
        return 0.8
    return 1.0


def prediction_confidence(base: float, sample_count: int) -> float:
    return min(1.0, base * sample_factor(sample_count))


class CompressionPredictionService:
    """压缩预测与结果记录"""

    def __init__(self, store: "StatsStore | None" = None):
        self.store = store

    def get_compression_stats(
        self, input_format: str, output_format: str
    ) -> tuple[float, int]:
        """格式对的 (历史平均减少百分比, 样本数)

        没有记录时平均值为 0，样本数为近似值。
        """
        mean, count = self._pair_summary(input_format, output_format)
        if count == 0:
            count = approximate_sample_count(input_format, output_format)
        return mean, count

    def _pair_summary(self, input_format: str, output_format: str) -> tuple[float, int]:
        if self.store is None:
            return 0.0, 0
        try:
            return self.store.get_pair_summary(input_format, output_format)
        except StatsError as e:
            logger.warning(MessageFormatter.stats_fallback("压缩预测", e))
            return 0.0, 0

    def predict_compression(
        self, input_format: str, output_format: str, original_size: int
    ) -> EstimationResult:
        input_format = normalize_format(input_format)
        output_format = normalize_format(output_format)
        mean, count = self._pair_summary(input_format, output_format)

        if count == 0:
            base = DEFAULT_REDUCTIONS.get((input_format, output_format), FALLBACK_REDUCTION)
            base_confidence = DEFAULT_CONFIDENCE
            sample_count = approximate_sample_count(input_format, output_format)
        else:
            base = mean
            base_confidence = HISTORICAL_CONFIDENCE
            sample_count = count

        return EstimationResult.from_percent(
            adjust_for_size(base, original_size),
            prediction_confidence(base_confidence, sample_count),
            sample_count,
        )

    def record_compression_result(
        self,
        input_format: str,
        output_format: str,
        original_size: int,
        compressed_size: int,
        quality: int,
        compression_time_ms: int = 0,
    ) -> int:
        """保存一次压缩结果并把存储裁剪到上限

        Raises:
            StatsNotAvailableError: 未配置存储
            DatabaseError: 保存失败（裁剪失败只记录日志）
        """
        if self.store is None:
            raise StatsNotAvailableError("未配置统计存储")

        stat = create_stat_with_time(
            input_format,
            output_format,
            original_size,
            compressed_size,
            quality,
            compression_time_ms,
        )
        stat_id = self.store.save_stat(stat)

        try:
            self.store.prune_old_stats(get_config().stats.MAX_RECORDS)
        except StatsError as e:
            logger.warning(MessageFormatter.operation_failed("清理旧统计数据", "store", e))
        return stat_id
