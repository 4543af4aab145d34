"""压缩设置模型。

不可变的压缩参数值对象，质量值在构造和每次 with_* 复制时都会被限制在 1-100。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    OutputFormat,
    QualityDefaults,
    clamp_quality,
    is_lossy_quality,
)


class CompressionSettings(BaseModel):
    """压缩设置"""

    model_config = ConfigDict(frozen=True)

    quality: int = Field(QualityDefaults.DEFAULT, description="质量值 1-100")
    format: OutputFormat = Field(OutputFormat.WEBP, description="目标格式")
    preserve_metadata: bool = Field(False, description="保留 EXIF/ICC 等元数据")
    optimize_alpha: bool = Field(True, description="允许修改完全透明像素的颜色值")

    @field_validator("quality", mode="before")
    @classmethod
    def clamp_quality_value(cls, v: Any) -> int:
        return clamp_quality(int(v))

    @field_validator("format", mode="before")
    @classmethod
    def parse_format(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, OutputFormat):
            parsed = OutputFormat.from_string(v)
            if parsed is None:
                raise ValueError(f"不支持的输出格式: {v}")
            return parsed
        return v

    @classmethod
    def create(cls, quality: int, format: OutputFormat | str) -> "CompressionSettings":
        """以质量和格式创建设置"""
        return cls(quality=quality, format=format)

    def _copy_with(self, **changes: Any) -> "CompressionSettings":
        # 重新走一遍校验，保证 quality 仍被限制
        return type(self)(**{**self.model_dump(), **changes})

    def with_quality(self, quality: int) -> "CompressionSettings":
        return self._copy_with(quality=quality)

    def with_format(self, format: OutputFormat | str) -> "CompressionSettings":
        return self._copy_with(format=format)

    def with_metadata_preservation(self, preserve: bool) -> "CompressionSettings":
        return self._copy_with(preserve_metadata=preserve)

    def with_alpha_optimization(self, optimize: bool) -> "CompressionSettings":
        return self._copy_with(optimize_alpha=optimize)

    def is_valid(self) -> bool:
        """质量值是否在合法范围内"""
        return QualityDefaults.MIN_QUALITY <= self.quality <= QualityDefaults.MAX_QUALITY

    @property
    def is_lossy(self) -> bool:
        """是否为有损模式（quality < 90）"""
        return is_lossy_quality(self.quality)

    @staticmethod
    def optimal_format_for_input(input_format: str) -> OutputFormat:
        """为输入格式推荐输出格式：任何输入都以 WebP 获得最佳压缩"""
        _ = input_format
        return OutputFormat.WEBP

    @staticmethod
    def preserve_input_format(input_format: str) -> OutputFormat:
        """保持输入格式，未知格式回退到 WebP"""
        return OutputFormat.from_string(input_format) or OutputFormat.WEBP

    # 预设
    @classmethod
    def web_optimized(cls) -> "CompressionSettings":
        """面向网页的默认设置"""
        return cls(quality=85, format=OutputFormat.WEBP).with_alpha_optimization(True)

    @classmethod
    def high_quality(cls) -> "CompressionSettings":
        """高质量设置（WebP 无损，保留元数据）"""
        return cls(quality=95, format=OutputFormat.WEBP).with_metadata_preservation(
            True
        )

    @classmethod
    def max_compression(cls) -> "CompressionSettings":
        """最大压缩设置"""
        return cls(quality=70, format=OutputFormat.WEBP).with_alpha_optimization(True)
