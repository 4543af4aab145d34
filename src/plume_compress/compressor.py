"""图像压缩器接口。

把压缩引擎、统计存储和估算服务组合成面向调用方的接口：
压缩文件、记录带耗时的统计数据、估算体积与耗时。
"""

import time
import uuid
from collections.abc import Callable, Sequence
from pathlib import Path

from .config import get_config
from .core.compression_engine import CompressionEngine, create_compression_stat
from .core.estimation import EstimationService
from .core.prediction import CompressionPredictionService
from .core.progress import ProgressCalculator, ProgressEstimationService
from .engine.batch import BatchProcessor, BatchProgressCallback
from .engine.config import SettingsBuilder
from .exceptions import (
    CompressionError,
    ErrorHandler,
    StatsError,
    StatsNotAvailableError,
    UnsupportedFormatError,
)
from .models.compression_result import (
    BatchResult,
    CompressionProgressEvent,
    CompressionStage,
    FileCompressionResult,
)
from .models.constants import detect_format_from_path
from .models.progress import (
    EasingFunction,
    ProgressConfig,
    ProgressEstimation,
    ProgressEstimationQuery,
)
from .models.settings import CompressionSettings
from .models.stats import CompressionStat, EstimationResult, StatsSummary
from .store.base import StatsStore
from .utils.file_helpers import resolve_output_path
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()

ProgressCallback = Callable[[CompressionProgressEvent], None]

# 统计概览中作为参考的格式对
SUMMARY_PAIR = ("png", "webp")
SUMMARY_REFERENCE_SIZE = 1_000_000


class ImageCompressor:
    """图像压缩器。

    store 为空时不记录统计数据，估算全部使用启发式默认值。
    """

    def __init__(
        self,
        store: StatsStore | None = None,
        engine: CompressionEngine | None = None,
        settings_builder: SettingsBuilder | None = None,
    ):
        self.store = store
        self.engine = engine or CompressionEngine()
        self.settings_builder = settings_builder or SettingsBuilder()
        self.estimation = EstimationService(store)
        self.prediction = CompressionPredictionService(store)
        self.progress_estimation = ProgressEstimationService(store)
        self.batch_processor = BatchProcessor(self)

        logger.debug(f"初始化图像压缩器 (统计存储: {type(store).__name__})")

    # ------------------------------------------------------------------
    # 压缩
    # ------------------------------------------------------------------

    def compress_image(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        quality: int | None = None,
        format: str | None = None,
        image_id: str | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> FileCompressionResult:
        """压缩单个图像文件。

        失败不会抛出异常，而是返回 success=False 的结果。

        Args:
            input_path: 输入文件路径
            output_path: 输出文件或目录（可选，默认 <原名>_compressed.<扩展名>）
            quality: 压缩质量 1-100，默认 80
            format: 输出格式 png/jpeg/webp/auto，默认 WebP
            image_id: 进度事件中使用的标识
            progress_callback: 接收 Started/Processing/Completed/Error 事件

        Examples:
            >>> compressor = ImageCompressor(InMemoryStatsStore())
            >>> result = compressor.compress_image("photo.png", quality=80)
            >>> print(result.get_summary())
        """
        input_path = Path(input_path)
        image_id = image_id or uuid.uuid4().hex
        input_format = detect_format_from_path(input_path)

        def emit(stage: CompressionStage, progress: float, remaining: int | None = None):
            if progress_callback is not None:
                progress_callback(
                    CompressionProgressEvent(
                        image_id=image_id,
                        image_name=input_path.name,
                        stage=stage,
                        progress=progress,
                        estimated_time_remaining=remaining,
                    )
                )

        emit(CompressionStage.STARTED, 0.0)
        try:
            if input_format is None:
                raise UnsupportedFormatError(
                    MessageFormatter.unsupported_format(input_path.suffix or None),
                    input_path,
                )
            settings = self.settings_builder.build(
                quality=quality, format=format, input_format=input_format.value
            )
            target = resolve_output_path(input_path, settings.format, output_path)

            original_size = input_path.stat().st_size if input_path.is_file() else 0
            expected = self._duration_for(input_format.value, settings, original_size)
            emit(CompressionStage.PROCESSING, 25.0, expected.estimated_duration_ms)

            started = time.perf_counter()
            output = self.engine.compress_file_to_file(input_path, target, settings)
            elapsed_ms = round((time.perf_counter() - started) * 1000)
        except (CompressionError, OSError) as e:
            emit(CompressionStage.ERROR, 0.0)
            return ErrorHandler.handle_compression_error(
                e,
                image_id,
                input_path,
                input_format=input_format.value if input_format else None,
            )

        stat_id = self.record_stat(
            create_compression_stat(input_format.value, output, settings, elapsed_ms)
        )
        emit(CompressionStage.COMPLETED, 100.0, 0)
        logger.info(f"{input_path.name}: {output.get_summary()} ({elapsed_ms}ms)")

        return FileCompressionResult(
            image_id=image_id,
            input_path=input_path,
            output=output,
            input_format=input_format.value,
            quality_used=settings.quality,
            elapsed_ms=elapsed_ms,
            stat_id=stat_id,
            success=True,
        )

    def compress_batch(
        self,
        files: Sequence[str | Path],
        output_dir: str | Path | None = None,
        quality: int | None = None,
        format: str | None = None,
        progress_callback: BatchProgressCallback | None = None,
    ) -> BatchResult:
        """按顺序压缩多个文件"""
        return self.batch_processor.process_files(
            files, output_dir, quality, format, progress_callback
        )

    def compress_directory(
        self,
        input_dir: str | Path,
        output_dir: str | Path | None = None,
        quality: int | None = None,
        format: str | None = None,
        recursive: bool = False,
    ) -> BatchResult:
        """压缩目录中的所有图像"""
        return self.batch_processor.process_directory(
            input_dir, output_dir, quality, format, recursive
        )

    # ------------------------------------------------------------------
    # 统计
    # ------------------------------------------------------------------

    def record_stat(self, stat: CompressionStat) -> int | None:
        """保存统计记录并裁剪旧数据，存储失败只记录日志"""
        if self.store is None:
            return None
        try:
            stat_id = self.store.save_stat(stat)
            self.store.prune_old_stats(get_config().stats.MAX_RECORDS)
        except StatsError as e:
            logger.warning(MessageFormatter.operation_failed("记录统计数据", "store", e))
            return None
        return stat_id

    def _require_store(self) -> StatsStore:
        if self.store is None:
            raise StatsNotAvailableError("未配置统计存储")
        return self.store

    def count_stats(self) -> int:
        return self._require_store().count_stats()

    def reset_stats(self) -> None:
        """清空所有统计数据"""
        self._require_store().clear_all()
        logger.info("统计数据已清空")

    def stats_summary(self) -> StatsSummary:
        """统计概览：总记录数以及 PNG→WebP 的参考估算"""
        total = self.store.count_stats() if self.store is not None else 0
        reference = self.estimate(
            SUMMARY_PAIR[0],
            SUMMARY_REFERENCE_SIZE,
            format=SUMMARY_PAIR[1],
        )
        return StatsSummary(
            total_compressions=total,
            webp_estimation_percent=reference.percent,
            webp_confidence=reference.confidence,
            sample_count=reference.sample_count,
        )

    # ------------------------------------------------------------------
    # 估算
    # ------------------------------------------------------------------

    def estimate(
        self,
        input_format: str,
        original_size: int,
        quality: int | None = None,
        format: str | None = None,
    ) -> EstimationResult:
        """估算体积减少"""
        settings = self.settings_builder.build(
            quality=quality, format=format, input_format=input_format
        )
        return self.estimation.estimate_for(input_format, settings, original_size)

    def predict(
        self, input_format: str, output_format: str, original_size: int
    ) -> EstimationResult:
        """带尺寸修正的压缩预测"""
        return self.prediction.predict_compression(
            input_format, output_format, original_size
        )

    def estimate_duration(
        self,
        input_format: str,
        original_size: int,
        quality: int | None = None,
        format: str | None = None,
    ) -> ProgressEstimation:
        """估算压缩耗时"""
        settings = self.settings_builder.build(
            quality=quality, format=format, input_format=input_format
        )
        return self._duration_for(input_format, settings, original_size)

    def _duration_for(
        self, input_format: str, settings: CompressionSettings, original_size: int
    ) -> ProgressEstimation:
        return self.progress_estimation.estimate_duration(
            ProgressEstimationQuery(
                input_format=input_format,
                output_format=settings.format.value,
                original_size=original_size,
                quality_setting=settings.quality,
                lossy_mode=settings.is_lossy,
            )
        )

    def start_progress(
        self,
        estimation: ProgressEstimation | int,
        clock: Callable[[], float] = time.monotonic,
    ) -> ProgressCalculator:
        """为一次压缩创建进度计算器"""
        duration = (
            estimation.estimated_duration_ms
            if isinstance(estimation, ProgressEstimation)
            else estimation
        )
        defaults = get_config().progress
        config = ProgressConfig(
            estimated_duration_ms=duration,
            update_interval_ms=defaults.UPDATE_INTERVAL_MS,
            easing_function=EasingFunction(defaults.EASING),
            completion_threshold=defaults.COMPLETION_THRESHOLD,
        )
        return ProgressCalculator(config, clock=clock)
