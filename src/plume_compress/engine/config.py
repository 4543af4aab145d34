"""设置构建器模块。

把调用方传入的原始参数（质量、格式名）转换为 CompressionSettings，
并在这一边界完成参数验证。
"""

from typing import Any

from ..config import get_config
from ..exceptions import InvalidSettingsError, UnsupportedFormatError
from ..models.constants import OutputFormat, QualityDefaults
from ..models.settings import CompressionSettings
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

AUTO_FORMAT = "auto"


class SettingsBuilder:
    """压缩设置构建器"""

    def __init__(self, default_quality: int | None = None):
        self.default_quality = (
            default_quality
            if default_quality is not None
            else get_config().compression.DEFAULT_QUALITY
        )

    def build(
        self,
        quality: int | None = None,
        format: str | OutputFormat | None = None,
        input_format: str | None = None,
        preserve_metadata: bool = False,
        optimize_alpha: bool = True,
    ) -> CompressionSettings:
        """构建压缩设置

        Args:
            quality: 质量 1-100，None 使用默认值
            format: 输出格式；"auto" 保持输入格式；None 或未知格式使用 WebP
            input_format: 输入格式，"auto" 时使用

        Raises:
            InvalidSettingsError: 质量值超出 1-100
        """
        quality = self._validate_quality(quality)
        output_format = self.resolve_format(format, input_format)
        return CompressionSettings(
            quality=quality,
            format=output_format,
            preserve_metadata=preserve_metadata,
            optimize_alpha=optimize_alpha,
        )

    def _validate_quality(self, quality: Any) -> int:
        if quality is None:
            return self.default_quality
        if isinstance(quality, bool) or not isinstance(quality, int):
            raise InvalidSettingsError(MessageFormatter.invalid_quality(quality))
        if not QualityDefaults.MIN_QUALITY <= quality <= QualityDefaults.MAX_QUALITY:
            raise InvalidSettingsError(MessageFormatter.invalid_quality(quality))
        return quality

    @staticmethod
    def resolve_format(
        format: str | OutputFormat | None, input_format: str | None = None
    ) -> OutputFormat:
        """解析目标格式"""
        if isinstance(format, OutputFormat):
            return format

        if format and format.strip().lower() == AUTO_FORMAT:
            if input_format is None:
                raise UnsupportedFormatError(
                    MessageFormatter.unsupported_format(None, "auto 模式需要输入格式")
                )
            return CompressionSettings.preserve_input_format(input_format)

        parsed = OutputFormat.from_string(format)
        if parsed is None:
            if format:
                logger.warning(
                    f"{MessageFormatter.unsupported_format(format)}，使用 WebP"
                )
            return CompressionSettings.optimal_format_for_input(input_format or "")
        return parsed
