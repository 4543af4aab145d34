"""压缩结果模型。

定义图片压缩操作的结果数据结构和进度事件。
"""

from enum import Enum
from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .constants import OutputFormat


def calculate_savings_percent(original_size: int, compressed_size: int) -> float:
    """节省百分比 = (原始 - 压缩) / 原始 × 100，原始大小为 0 时返回 0"""
    if original_size == 0:
        return 0.0
    return ((original_size - compressed_size) / original_size) * 100


def format_size(size_bytes: int) -> str:
    """格式化文件大小为人类可读格式"""
    return naturalsize(size_bytes, binary=True)


class CompressionOutput(BaseModel):
    """单次编码的结果

    compressed_size 可能大于 original_size，此时 savings_percent 为负。
    """

    model_config = ConfigDict(frozen=True)

    output_path: Path | None = Field(None, description="输出文件路径（内存模式为空）")
    original_size: int = Field(ge=0, description="原始大小（字节）")
    compressed_size: int = Field(ge=0, description="压缩后大小（字节）")
    format: OutputFormat = Field(description="输出格式")
    data: bytes | None = Field(None, repr=False, description="编码后的字节（内存模式）")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def savings_percent(self) -> float:
        return calculate_savings_percent(self.original_size, self.compressed_size)

    @property
    def compression_ratio(self) -> float:
        """压缩比 = 压缩后 / 原始"""
        if self.original_size == 0:
            return 0.0
        return self.compressed_size / self.original_size

    def get_summary(self) -> str:
        return (
            f"{format_size(self.original_size)} → {format_size(self.compressed_size)} "
            f"({self.savings_percent:.1f}% 节省, {self.format})"
        )


class BaseResult(BaseModel):
    """结果基类，包含通用字段和方法"""

    success: bool = Field(description="是否成功")
    error: str | None = Field(None, description="错误信息")


class FileCompressionResult(BaseResult):
    """单个文件的压缩结果（面向调用方，失败也以结果返回）"""

    image_id: str = Field(description="图片标识")
    input_path: Path = Field(description="输入文件路径")
    output: CompressionOutput | None = Field(None, description="压缩输出")
    input_format: str | None = Field(None, description="声明的输入格式")
    quality_used: int | None = Field(None, description="使用的质量值")
    elapsed_ms: int | None = Field(None, description="压缩耗时（毫秒）")
    stat_id: int | None = Field(None, description="已记录的统计数据 ID")

    @property
    def output_path(self) -> Path | None:
        return self.output.output_path if self.output else None

    def get_summary(self) -> str:
        """压缩结果摘要"""
        if not self.success or self.output is None:
            return f"失败: {self.error}"
        return self.output.get_summary()


class BatchResult(BaseResult):
    """批量处理结果"""

    results: list[FileCompressionResult] = Field(description="所有文件的处理结果")
    output_dir: Path | None = Field(None, description="输出目录")

    @property
    def total_files(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total_files - self.successful

    def get_success_rate(self) -> float:
        """获取成功率（百分比）"""
        if self.total_files == 0:
            return 0.0
        return (self.successful / self.total_files) * 100

    def get_total_original_size(self) -> int:
        return sum(r.output.original_size for r in self.results if r.output)

    def get_total_size_saved(self) -> int:
        """总节省大小"""
        return sum(
            max(0, r.output.original_size - r.output.compressed_size)
            for r in self.results
            if r.output
        )

    def get_summary(self) -> str:
        """批量处理摘要"""
        if not self.success:
            return f"批量处理失败: {self.error}"

        return (
            f"处理 {self.successful}/{self.total_files} 个文件 "
            f"(成功率 {self.get_success_rate():.1f}%), "
            f"总节省 {format_size(self.get_total_size_saved())}"
        )


# ============================================================================
# 进度事件
# ============================================================================


class CompressionStage(str, Enum):
    """单文件压缩阶段"""

    STARTED = "started"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class CompressionProgressEvent(BaseModel):
    """单文件压缩进度事件"""

    image_id: str
    image_name: str
    stage: CompressionStage
    progress: float = Field(ge=0.0, le=100.0)
    estimated_time_remaining: int | None = Field(None, description="剩余时间（毫秒）")


class BatchProgressEvent(BaseModel):
    """批量处理进度事件，在每个文件开始前发出"""

    current: int = Field(ge=1)
    total: int = Field(ge=1)
    file_name: str
