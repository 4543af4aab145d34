"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CompressionDefaults:
    """压缩相关的默认配置"""

    DEFAULT_QUALITY: int = 80
    # quality >= 此值时 WebP 使用无损模式
    WEBP_LOSSLESS_THRESHOLD: int = 90
    WEBP_METHOD: int = 6
    WEBP_LOSSLESS_EFFORT: int = 80

    OXIPNG_LEVEL: int = 3

    # 单文件大小上限，超过视为 IO 错误
    MAX_FILE_SIZE_MB: float = 100.0


@dataclass(frozen=True)
class StatsDefaults:
    """统计存储相关的默认配置"""

    DB_PATH: str = str(Path.home() / ".plume" / "compression_stats.db")
    # 估算时匹配的质量窗口（±）
    QUALITY_WINDOW: int = 10
    MAX_RECORDS: int = 1000
    SEED_ON_FIRST_USE: bool = True


@dataclass(frozen=True)
class ProgressDefaults:
    """进度动画默认配置"""

    UPDATE_INTERVAL_MS: int = 50
    COMPLETION_THRESHOLD: float = 95.0
    EASING: str = "ease_out"


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "plume_compress.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.compression = CompressionDefaults()
        self.stats = StatsDefaults()
        self.progress = ProgressDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 压缩配置
        if quality := os.getenv("PLUME_DEFAULT_QUALITY"):
            object.__setattr__(self.compression, "DEFAULT_QUALITY", int(quality))

        if oxipng_level := os.getenv("PLUME_OXIPNG_LEVEL"):
            object.__setattr__(self.compression, "OXIPNG_LEVEL", int(oxipng_level))

        # 统计配置
        if db_path := os.getenv("PLUME_STATS_DB"):
            object.__setattr__(self.stats, "DB_PATH", db_path)

        if max_records := os.getenv("PLUME_STATS_MAX_RECORDS"):
            object.__setattr__(self.stats, "MAX_RECORDS", int(max_records))

        if seed := os.getenv("PLUME_STATS_SEED"):
            object.__setattr__(self.stats, "SEED_ON_FIRST_USE", _env_flag(seed))

        # 进度配置
        if easing := os.getenv("PLUME_PROGRESS_EASING"):
            object.__setattr__(self.progress, "EASING", easing.lower())

        # 日志配置
        if log_level := os.getenv("PLUME_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("PLUME_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging, "ENABLE_FILE_LOGGING", _env_flag(enable_file_log)
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
