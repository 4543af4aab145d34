"""Plume 图像压缩库。

PNG/JPEG/WebP 压缩引擎，以及基于历史统计的体积与耗时估算。
"""

__version__ = "0.1.0"
__description__ = "图像压缩引擎与自适应体积/耗时估算"

# 核心功能导出
from .compressor import ImageCompressor
from .core.compression_engine import CompressionEngine
from .models.compression_result import BatchResult, FileCompressionResult
from .models.settings import CompressionSettings
from .store import InMemoryStatsStore, SqlStatsStore, StatsStore


__all__ = [
    "BatchResult",
    "CompressionEngine",
    "CompressionSettings",
    "FileCompressionResult",
    "ImageCompressor",
    "InMemoryStatsStore",
    "SqlStatsStore",
    "StatsStore",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
