"""数据模型包。

定义压缩设置、结果、统计记录和进度估算相关的数据结构。
"""

from .compression_result import (
    BatchProgressEvent,
    BatchResult,
    CompressionOutput,
    CompressionProgressEvent,
    CompressionStage,
    FileCompressionResult,
)
from .constants import (
    ImageFormats,
    OutputFormat,
    QualityDefaults,
    SizeRange,
    normalize_format,
)
from .progress import (
    EasingFunction,
    ProgressConfig,
    ProgressEstimation,
    ProgressEstimationQuery,
)
from .settings import CompressionSettings
from .stats import (
    CompressionStat,
    EstimationQuery,
    EstimationResult,
    StatsCriteria,
    StatsSummary,
)


__all__ = [
    "BatchProgressEvent",
    "BatchResult",
    "CompressionOutput",
    "CompressionProgressEvent",
    "CompressionSettings",
    "CompressionStage",
    "CompressionStat",
    "EasingFunction",
    "EstimationQuery",
    "EstimationResult",
    "FileCompressionResult",
    "ImageFormats",
    "OutputFormat",
    "ProgressConfig",
    "ProgressEstimation",
    "ProgressEstimationQuery",
    "QualityDefaults",
    "SizeRange",
    "StatsCriteria",
    "StatsSummary",
    "normalize_format",
]
