"""压缩引擎模块。

按目标格式把请求分发给已注册的压缩器。引擎本身不记录统计数据，
持久化由调用方负责。
"""

from collections.abc import Iterable
from pathlib import Path

from ..config import get_config
from ..exceptions import (
    CompressionError,
    CompressionIOError,
    InvalidSettingsError,
    UnsupportedFormatError,
)
from ..models.compression_result import CompressionOutput
from ..models.constants import (
    OutputFormat,
    detect_format_from_bytes,
    detect_format_from_path,
)
from ..models.settings import CompressionSettings
from ..models.stats import CompressionStat
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .compressors import BaseCompressor, default_compressors
from .statistics import create_stat, create_stat_with_time


logger = get_logger()


def detect_input_format(source: bytes | str | Path) -> OutputFormat | None:
    """识别输入格式：字节按签名，路径按扩展名"""
    if isinstance(source, bytes):
        return detect_format_from_bytes(source)
    return detect_format_from_path(source)


def create_compression_stat(
    input_format: str,
    output: CompressionOutput,
    settings: CompressionSettings,
    time_ms: int | None = None,
) -> CompressionStat:
    """由压缩输出构造统计记录，time_ms 为空时不带耗时"""
    if time_ms is None:
        return create_stat(
            input_format,
            output.format.value,
            output.original_size,
            output.compressed_size,
            settings.quality,
        )
    return create_stat_with_time(
        input_format,
        output.format.value,
        output.original_size,
        output.compressed_size,
        settings.quality,
        time_ms,
    )


class CompressionEngine:
    """格式路由器

    维护 OutputFormat → BaseCompressor 的注册表，注册是纯追加的，
    不需要修改分发逻辑。
    """

    def __init__(self, compressors: dict[OutputFormat, BaseCompressor] | None = None):
        self._compressors = dict(
            compressors if compressors is not None else default_compressors()
        )

    def register(self, output_format: OutputFormat, compressor: BaseCompressor) -> None:
        """注册或替换某个输出格式的压缩器"""
        self._compressors[output_format] = compressor

    @property
    def supported_formats(self) -> list[OutputFormat]:
        return list(self._compressors)

    def _validate(self, settings: CompressionSettings) -> None:
        if not settings.is_valid():
            raise InvalidSettingsError(MessageFormatter.invalid_quality(settings.quality))

    def _compressor_for(self, settings: CompressionSettings) -> BaseCompressor:
        compressor = self._compressors.get(settings.format)
        if compressor is None:
            raise UnsupportedFormatError(
                MessageFormatter.unsupported_format(settings.format.value, "未注册压缩器")
            )
        return compressor

    def compress(self, data: bytes, settings: CompressionSettings) -> CompressionOutput:
        """内存模式压缩

        Raises:
            InvalidSettingsError: 设置无效
            UnsupportedFormatError: 输入签名无法识别或输出格式未注册
            ProcessingError: 编解码失败
        """
        self._validate(settings)
        if detect_format_from_bytes(data) is None:
            raise UnsupportedFormatError(
                MessageFormatter.unsupported_format(None, "无法识别的文件签名")
            )

        output_data = self._compressor_for(settings).compress(data, settings)
        return CompressionOutput(
            original_size=len(data),
            compressed_size=len(output_data),
            format=settings.format,
            data=output_data,
        )

    def compress_file_to_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        settings: CompressionSettings,
    ) -> CompressionOutput:
        """文件到文件压缩，输出目录不存在时自动创建

        Raises:
            InvalidSettingsError: 设置无效
            CompressionIOError: 文件读写失败
            UnsupportedFormatError: 扩展名缺失或不支持
            ProcessingError: 编解码失败
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        self._validate(settings)

        try:
            original_size = input_path.stat().st_size
        except OSError as e:
            raise CompressionIOError(
                MessageFormatter.file_not_found(input_path), input_path
            ) from e

        max_bytes = int(get_config().compression.MAX_FILE_SIZE_MB * 1024 * 1024)
        if original_size > max_bytes:
            raise CompressionIOError(
                f"文件过大: {input_path} ({original_size} bytes)", input_path
            )

        if detect_format_from_path(input_path) is None:
            raise UnsupportedFormatError(
                MessageFormatter.unsupported_format(input_path.suffix or None),
                input_path,
            )

        try:
            data = input_path.read_bytes()
        except OSError as e:
            raise CompressionIOError(
                MessageFormatter.operation_failed("读取文件", input_path, e), input_path
            ) from e

        try:
            output = self.compress(data, settings)
        except CompressionError as e:
            e.input_path = e.input_path or input_path
            raise

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(output.data or b"")
            compressed_size = output_path.stat().st_size
        except OSError as e:
            raise CompressionIOError(
                MessageFormatter.operation_failed("写入文件", output_path, e), input_path
            ) from e

        logger.debug(f"{input_path.name} → {output_path.name}: {output.get_summary()}")
        return CompressionOutput(
            output_path=output_path,
            original_size=original_size,
            compressed_size=compressed_size,
            format=settings.format,
        )

    def compress_batch_files(
        self,
        pairs: Iterable[tuple[str | Path, str | Path]],
        settings: CompressionSettings,
    ) -> list[CompressionOutput | CompressionError]:
        """逐个压缩 (输入, 输出) 路径对，单个失败不影响其余文件"""
        results: list[CompressionOutput | CompressionError] = []
        for input_path, output_path in pairs:
            try:
                results.append(self.compress_file_to_file(input_path, output_path, settings))
            except CompressionError as e:
                logger.warning(MessageFormatter.format_error("批量压缩", input_path, e))
                results.append(e)
        return results
