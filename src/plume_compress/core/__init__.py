"""核心模块包。

压缩引擎、格式压缩器以及基于统计的体积/耗时估算。
"""

from .statistics import (
    DEFAULT_SAVINGS,
    calculate_confidence,
    create_stat,
    create_stat_with_time,
    estimate_compression,
    get_size_range,
)
from .compressors import (
    BaseCompressor,
    JpegCompressor,
    PngCompressor,
    WebpCompressor,
)
from .compression_engine import (
    CompressionEngine,
    create_compression_stat,
    detect_input_format,
)
from .estimation import EstimationService
from .prediction import CompressionPredictionService
from .progress import (
    DEFAULT_COMPRESSION_TIMES,
    ProgressCalculator,
    ProgressEstimationService,
    ProgressState,
)


__all__ = [
    "DEFAULT_COMPRESSION_TIMES",
    "DEFAULT_SAVINGS",
    "BaseCompressor",
    "CompressionEngine",
    "CompressionPredictionService",
    "EstimationService",
    "JpegCompressor",
    "PngCompressor",
    "ProgressCalculator",
    "ProgressEstimationService",
    "ProgressState",
    "WebpCompressor",
    "calculate_confidence",
    "create_compression_stat",
    "create_stat",
    "create_stat_with_time",
    "detect_input_format",
    "estimate_compression",
    "get_size_range",
]
