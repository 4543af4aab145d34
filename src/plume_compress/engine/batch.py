"""批量处理器模块。

按给定顺序逐个压缩文件，每个文件开始前发出批量进度事件；
单个文件失败只记录在结果中，不会中断批处理。
"""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import ErrorHandler
from ..models.compression_result import (
    BatchProgressEvent,
    BatchResult,
    CompressionProgressEvent,
    FileCompressionResult,
)
from ..models.constants import detect_format_from_path
from ..utils import claim_output_path, find_image_files, resolve_output_path
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .config import SettingsBuilder


if TYPE_CHECKING:
    from ..compressor import ImageCompressor


logger = get_logger()

BatchProgressCallback = Callable[[BatchProgressEvent], None]


class BatchProcessor:
    """顺序批量处理器"""

    def __init__(self, compressor: "ImageCompressor"):
        self.compressor = compressor

    def process_files(
        self,
        files: Sequence[str | Path],
        output_dir: str | Path | None = None,
        quality: int | None = None,
        format: str | None = None,
        progress_callback: BatchProgressCallback | None = None,
        file_progress_callback: Callable[[CompressionProgressEvent], None] | None = None,
    ) -> BatchResult:
        """逐个压缩文件列表

        Args:
            files: 输入文件，按此顺序处理
            output_dir: 输出目录（可选，默认写在输入文件旁）
            quality: 压缩质量
            format: 输出格式
            progress_callback: 每个文件开始前调用

        Returns:
            BatchResult: 批量处理结果
        """
        output_dir = self._prepare_output_dir(output_dir)
        total = len(files)
        results: list[FileCompressionResult] = []
        claimed: set[Path] = set()

        for index, file_path in enumerate(files, start=1):
            file_path = Path(file_path)
            if progress_callback is not None:
                progress_callback(
                    BatchProgressEvent(current=index, total=total, file_name=file_path.name)
                )

            result = self.compressor.compress_image(
                file_path,
                output_path=self._claim_target(file_path, output_dir, format, claimed),
                quality=quality,
                format=format,
                progress_callback=file_progress_callback,
            )
            results.append(result)
            logger.debug(f"[{index}/{total}] {file_path.name}: {result.get_summary()}")

        return self._create_batch_result(output_dir, results)

    def process_directory(
        self,
        input_dir: str | Path,
        output_dir: str | Path | None = None,
        quality: int | None = None,
        format: str | None = None,
        recursive: bool = False,
        progress_callback: BatchProgressCallback | None = None,
    ) -> BatchResult:
        """压缩目录中的所有 PNG/JPEG/WebP 文件"""
        input_dir = Path(input_dir)
        if not input_dir.is_dir():
            logger.warning(MessageFormatter.directory_not_found(input_dir))
            return ErrorHandler.create_error_batch_result(
                Path(output_dir) if output_dir else None,
                MessageFormatter.directory_not_found(input_dir),
            )

        exclude_dirs: list[str] = []
        if output_dir is not None:
            # 输出目录在输入目录内时不再重复处理其中的文件
            try:
                Path(output_dir).relative_to(input_dir)
                exclude_dirs.append(Path(output_dir).name)
            except ValueError:
                pass

        files = list(find_image_files(input_dir, recursive, exclude_dirs))
        if not files:
            return BatchResult(
                output_dir=Path(output_dir) if output_dir else None,
                results=[],
                success=True,
                error="未找到图像文件",
            )
        return self.process_files(
            files, output_dir, quality, format, progress_callback=progress_callback
        )

    @staticmethod
    def _claim_target(
        file_path: Path,
        output_dir: Path | None,
        format: str | None,
        claimed: set[Path],
    ) -> Path | None:
        """批次内同名不同扩展名的文件会得到相同输出路径，在此处改名"""
        input_format = detect_format_from_path(file_path)
        if input_format is None:
            # 交给 compress_image 报告不支持的格式
            return output_dir
        output_format = SettingsBuilder.resolve_format(format, input_format.value)
        target = resolve_output_path(file_path, output_format, output_dir)
        return claim_output_path(target, claimed, file_path)

    @staticmethod
    def _prepare_output_dir(output_dir: str | Path | None) -> Path | None:
        if output_dir is None:
            return None
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

    @staticmethod
    def _create_batch_result(
        output_dir: Path | None, results: list[FileCompressionResult]
    ) -> BatchResult:
        """创建批量处理结果"""
        success_count = sum(1 for r in results if r.success)
        success = success_count > 0 or not results
        failed = len(results) - success_count
        if failed:
            logger.info(f"批量处理完成: {success_count} 成功, {failed} 失败")
        else:
            logger.info(f"批量处理完成: {success_count} 个文件")

        return BatchResult(
            output_dir=output_dir,
            results=results,
            success=success,
            error=None if success else "所有文件处理都失败",
        )
