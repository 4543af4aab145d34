"""压缩统计模型。

持久化的压缩观测记录以及估算查询/结果。
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from .constants import SizeRange, normalize_format


def utc_timestamp() -> str:
    """RFC 3339 格式的当前 UTC 时间"""
    return datetime.now(timezone.utc).isoformat()


class CompressionStat(BaseModel):
    """一次完成的压缩的观测记录（只写一次，无更新路径）"""

    id: int | None = Field(None, description="行 ID，保存后分配")
    input_format: str = Field(description="输入格式")
    output_format: str = Field(description="输出格式")
    input_size_range: SizeRange = Field(description="输入尺寸分档")
    quality_setting: int = Field(ge=1, le=100, description="质量设置")
    lossy_mode: bool = Field(description="是否有损（quality < 90）")
    size_reduction_percent: float = Field(description="体积减少百分比")
    original_size: int = Field(ge=0, description="原始大小（字节）")
    compressed_size: int = Field(ge=0, description="压缩后大小（字节）")
    compression_time_ms: int | None = Field(None, ge=0, description="压缩耗时")
    timestamp: str = Field(default_factory=utc_timestamp, description="记录时间")
    image_type: str | None = Field(None, description="图片类型 photo/logo/graphic")

    @field_validator("input_format", "output_format")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_format(v)


class _FormatPairQuery(BaseModel):
    input_format: str = Field(description="输入格式")
    output_format: str = Field(description="输出格式")
    original_size: int = Field(ge=0, description="原始大小（字节）")
    quality_setting: int = Field(ge=1, le=100, description="质量设置")
    lossy_mode: bool = Field(description="是否有损")

    @field_validator("input_format", "output_format")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_format(v)


class EstimationQuery(_FormatPairQuery):
    """体积估算查询"""


class EstimationResult(BaseModel):
    """体积估算结果"""

    percent: float = Field(description="预计体积减少百分比")
    ratio: float = Field(description="预计压缩比 (100 - percent) / 100")
    confidence: float = Field(ge=0.0, le=1.0, description="置信度")
    sample_count: int = Field(ge=0, description="样本数量")

    @classmethod
    def from_percent(
        cls, percent: float, confidence: float, sample_count: int
    ) -> "EstimationResult":
        return cls(
            percent=percent,
            ratio=(100.0 - percent) / 100.0,
            confidence=confidence,
            sample_count=sample_count,
        )


class StatsCriteria(BaseModel):
    """存储层的行筛选条件，None 表示不限"""

    input_format: str | None = None
    output_format: str | None = None
    min_quality: int | None = None
    max_quality: int | None = None
    lossy_mode: bool | None = None
    size_range: SizeRange | None = None
    require_time: bool = False

    def matches(self, stat: CompressionStat) -> bool:
        """内存实现使用的匹配逻辑，与 SQL 条件保持一致"""
        if self.input_format is not None and stat.input_format != self.input_format:
            return False
        if self.output_format is not None and stat.output_format != self.output_format:
            return False
        if self.min_quality is not None and stat.quality_setting < self.min_quality:
            return False
        if self.max_quality is not None and stat.quality_setting > self.max_quality:
            return False
        if self.lossy_mode is not None and stat.lossy_mode != self.lossy_mode:
            return False
        if self.size_range is not None and stat.input_size_range != self.size_range:
            return False
        if self.require_time and stat.compression_time_ms is None:
            return False
        return True


class StatsSummary(BaseModel):
    """统计概览"""

    total_compressions: int
    webp_estimation_percent: float
    webp_confidence: float
    sample_count: int
