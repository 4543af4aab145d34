"""进度估算与进度动画。

ProgressEstimationService 预测一次压缩的耗时，ProgressCalculator 把已用时间
转换为平滑的显示进度。计算器本身不阻塞也不休眠，由宿主轮询。
"""

import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Final

from ..exceptions import StatsError
from ..models.constants import SizeRange, normalize_format
from ..models.progress import (
    EasingFunction,
    ProgressConfig,
    ProgressEstimation,
    ProgressEstimationQuery,
)
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .statistics import TIMING_FALLBACK_CONFIDENCE, get_size_range


if TYPE_CHECKING:
    from ..store.base import StatsStore


logger = get_logger()


# (输入格式, 输出格式, 尺寸分档) → 默认耗时（毫秒）
# PNG 重新优化比 PNG→WebP 慢，JPEG 同格式最快
DEFAULT_COMPRESSION_TIMES: Final[tuple[tuple[tuple[str, str, SizeRange], int], ...]] = (
    (("png", "webp", SizeRange.SMALL), 300),
    (("png", "webp", SizeRange.MEDIUM), 1200),
    (("png", "webp", SizeRange.LARGE), 3000),
    (("png", "png", SizeRange.SMALL), 800),
    (("png", "png", SizeRange.MEDIUM), 2500),
    (("png", "png", SizeRange.LARGE), 6000),
    (("jpeg", "webp", SizeRange.SMALL), 200),
    (("jpeg", "webp", SizeRange.MEDIUM), 800),
    (("jpeg", "webp", SizeRange.LARGE), 2000),
    (("jpeg", "jpeg", SizeRange.SMALL), 150),
    (("jpeg", "jpeg", SizeRange.MEDIUM), 500),
    (("jpeg", "jpeg", SizeRange.LARGE), 1200),
    (("webp", "webp", SizeRange.SMALL), 250),
    (("webp", "webp", SizeRange.MEDIUM), 900),
    (("webp", "webp", SizeRange.LARGE), 2200),
)

SIZE_ONLY_FALLBACK_TIMES: Final[dict[SizeRange, int]] = {
    SizeRange.SMALL: 300,
    SizeRange.MEDIUM: 1000,
    SizeRange.LARGE: 2500,
}

# 无损 WebP 编码比有损慢约 25%
LOSSLESS_WEBP_FACTOR: Final[float] = 1.25
FALLBACK_CONFIDENCE: Final[float] = TIMING_FALLBACK_CONFIDENCE


def lookup_default_time(
    input_format: str, output_format: str, size_range: SizeRange
) -> int | None:
    key = (normalize_format(input_format), normalize_format(output_format), size_range)
    for entry, duration in DEFAULT_COMPRESSION_TIMES:
        if entry == key:
            return duration
    return None


class ProgressEstimationService:
    """压缩耗时估算"""

    def __init__(self, store: "StatsStore | None" = None):
        self.store = store

    def estimate_duration(self, query: ProgressEstimationQuery) -> ProgressEstimation:
        """优先使用历史耗时数据，存储不可用或无数据时使用默认表"""
        if self.store is not None:
            try:
                historical = self.store.get_time_estimation(query)
            except StatsError as e:
                logger.warning(MessageFormatter.stats_fallback("耗时估算", e))
                historical = None
            if historical is not None:
                return historical
        return self.fallback_estimation(query)

    @staticmethod
    def fallback_estimation(query: ProgressEstimationQuery) -> ProgressEstimation:
        size_range = get_size_range(query.original_size)
        input_format = normalize_format(query.input_format)
        output_format = normalize_format(query.output_format)

        duration = lookup_default_time(input_format, output_format, size_range)
        if duration is None:
            duration = SIZE_ONLY_FALLBACK_TIMES[size_range]

        if output_format == "webp" and input_format != "webp" and not query.lossy_mode:
            duration = int(duration * LOSSLESS_WEBP_FACTOR)

        return ProgressEstimation(
            estimated_duration_ms=duration,
            confidence=FALLBACK_CONFIDENCE,
            sample_count=0,
        )


# ============================================================================
# 进度动画
# ============================================================================


def apply_easing(easing: EasingFunction, ratio: float) -> float:
    """把线性时间比例映射为缓动后的比例"""
    match easing:
        case EasingFunction.LINEAR:
            return ratio
        case EasingFunction.EASE_OUT:
            return 1.0 - (1.0 - ratio) ** 3
        case EasingFunction.BEZIER:
            # 二次近似，控制点暂不参与计算
            return 1.0 - (1.0 - ratio) ** 2
    return ratio


class ProgressState(str, Enum):
    RUNNING = "running"
    CAPPED = "capped"


class ProgressCalculator:
    """平滑进度计算器

    显示进度随时间单调不减，在真正完成之前永远不会超过 completion_threshold。
    每个压缩操作使用独立实例。
    """

    def __init__(
        self,
        config: ProgressConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or ProgressConfig()
        self._clock = clock
        self._start = clock()

    def elapsed_ms(self) -> float:
        return max(0.0, (self._clock() - self._start) * 1000.0)

    def progress_at(self, elapsed_ms: float) -> float:
        """给定已用时间的显示进度（0 到 completion_threshold）"""
        duration = self.config.estimated_duration_ms
        if duration > 0:
            ratio = min(1.0, max(0.0, elapsed_ms / duration))
        else:
            # 零耗时视为已到达阈值
            ratio = 1.0

        eased = apply_easing(self.config.easing_function, ratio)
        threshold = self.config.completion_threshold
        # eased × (threshold / 100) 换算为百分比
        return min(threshold, eased * threshold)

    def current_progress(self) -> float:
        return self.progress_at(self.elapsed_ms())

    def should_continue_updates(self) -> bool:
        """宿主动画循环的唯一终止信号"""
        return self.current_progress() < self.config.completion_threshold

    @property
    def state(self) -> ProgressState:
        if self.should_continue_updates():
            return ProgressState.RUNNING
        return ProgressState.CAPPED

    def estimated_remaining_ms(self) -> int:
        return max(0, round(self.config.estimated_duration_ms - self.elapsed_ms()))
