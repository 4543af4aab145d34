"""压缩统计基础函数。

尺寸分档、置信度计算、启发式节省表以及统计记录的构造。
"""

from collections.abc import Sequence
from typing import Final, NamedTuple

from ..models.constants import SizeRange, SizeThresholds, is_lossy_quality, normalize_format
from ..models.stats import CompressionStat, EstimationResult


def get_size_range(size_bytes: int) -> SizeRange:
    """按原始大小分档：<=1MB small，<=5MB medium，其余 large"""
    if size_bytes <= SizeThresholds.SMALL_MAX:
        return SizeRange.SMALL
    if size_bytes <= SizeThresholds.MEDIUM_MAX:
        return SizeRange.MEDIUM
    return SizeRange.LARGE


def base_confidence(sample_count: int) -> float:
    """样本数量对应的基础置信度"""
    if sample_count <= 0:
        return 0.0
    if sample_count <= 5:
        return 0.3
    if sample_count <= 20:
        return 0.6
    if sample_count <= 50:
        return 0.8
    return 0.9


def calculate_confidence(sample_count: int, variance: float) -> float:
    """置信度 = 基础置信度 × 1/(1+方差)，结果限制在 [0, 1]"""
    confidence = base_confidence(sample_count) * (1.0 / (1.0 + max(0.0, variance)))
    return max(0.0, min(1.0, confidence))


# 默认耗时表的置信度；实测耗时至少要比它可信
TIMING_FALLBACK_CONFIDENCE: Final[float] = 0.4
TIMING_HISTORY_MIN_CONFIDENCE: Final[float] = 0.5


def timing_confidence(sample_count: int, variance: float) -> float:
    """历史耗时的置信度，映射到 [0.5, 1] 区间，始终高于默认表"""
    span = 1.0 - TIMING_HISTORY_MIN_CONFIDENCE
    return TIMING_HISTORY_MIN_CONFIDENCE + span * calculate_confidence(sample_count, variance)


class Savings(NamedTuple):
    percent: float
    confidence: float


# (输入, 输出, 是否有损) → 默认节省；None 表示不区分有损/无损
DEFAULT_SAVINGS: Final[dict[tuple[str, str, bool | None], Savings]] = {
    ("png", "webp", True): Savings(85.0, 0.9),
    ("png", "webp", False): Savings(43.0, 0.8),
    ("jpeg", "webp", None): Savings(25.0, 0.7),
    ("png", "png", None): Savings(15.0, 0.9),
    ("jpeg", "jpeg", None): Savings(20.0, 0.8),
    ("webp", "webp", None): Savings(10.0, 0.6),
}

FALLBACK_SAVINGS: Final[Savings] = Savings(5.0, 0.3)


def lookup_default_savings(input_format: str, output_format: str, lossy: bool) -> Savings:
    """在启发式表中查找格式对的默认节省"""
    input_format = normalize_format(input_format)
    output_format = normalize_format(output_format)
    return (
        DEFAULT_SAVINGS.get((input_format, output_format, lossy))
        or DEFAULT_SAVINGS.get((input_format, output_format, None))
        or FALLBACK_SAVINGS
    )


def estimate_compression(
    input_format: str,
    output_format: str,
    original_size: int,
    quality: int,
    lossy: bool,
) -> EstimationResult:
    """无历史数据时的启发式估算，sample_count 恒为 0"""
    _ = original_size, quality
    savings = lookup_default_savings(input_format, output_format, lossy)
    return EstimationResult.from_percent(savings.percent, savings.confidence, 0)


def create_stat(
    input_format: str,
    output_format: str,
    original_size: int,
    compressed_size: int,
    quality: int,
) -> CompressionStat:
    """由一次压缩的结果构造统计记录（不含耗时）"""
    if original_size > 0:
        reduction = (original_size - compressed_size) / original_size * 100.0
    else:
        reduction = 0.0
    return CompressionStat(
        input_format=input_format,
        output_format=output_format,
        input_size_range=get_size_range(original_size),
        quality_setting=quality,
        lossy_mode=is_lossy_quality(quality),
        size_reduction_percent=reduction,
        original_size=original_size,
        compressed_size=compressed_size,
    )


def create_stat_with_time(
    input_format: str,
    output_format: str,
    original_size: int,
    compressed_size: int,
    quality: int,
    compression_time_ms: int,
) -> CompressionStat:
    """同 create_stat，附带耗时"""
    stat = create_stat(input_format, output_format, original_size, compressed_size, quality)
    return stat.model_copy(update={"compression_time_ms": max(0, compression_time_ms)})


class SampleSummary(NamedTuple):
    mean: float
    variance: float
    count: int


def summarize_samples(values: Sequence[float]) -> SampleSummary:
    """均值与总体方差，空序列返回全零"""
    count = len(values)
    if count == 0:
        return SampleSummary(0.0, 0.0, 0)
    mean = sum(values) / count
    variance = sum((v - mean) ** 2 for v in values) / count
    return SampleSummary(mean, variance, count)
