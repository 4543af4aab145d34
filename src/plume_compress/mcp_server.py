"""图像压缩 MCP 服务器。

MCP 工具层，同时是组合根：统计存储和压缩器在这里按配置创建一次并缓存。
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

from fastmcp import FastMCP
from pydantic import ValidationError as PydanticValidationError

from .compressor import ImageCompressor
from .config import get_config
from .exceptions import CompressionError, StatsError
from .models.compression_result import BatchResult, FileCompressionResult
from .models.stats import EstimationResult
from .store.sql_store import SqlStatsStore
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> MCPResponse:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result: MCPResponse = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str, field: str | None = None) -> MCPResponse:
        """构建验证错误结果。"""
        details = {"field": field} if field else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="validation",
            details=details,
        )

    @staticmethod
    def stats_error(message: str) -> MCPResponse:
        """构建统计存储错误结果。"""
        return MCPResponseBuilder.error(message=message, error_type="stats")

    @staticmethod
    def file_result(result: FileCompressionResult) -> MCPResponse:
        """单文件压缩结果"""
        response: MCPResponse = {
            "success": result.success,
            "image_id": result.image_id,
            "input_path": str(result.input_path),
            "error": result.error,
        }
        if result.output is not None:
            response.update(
                {
                    "output_path": str(result.output_path),
                    "format": result.output.format.value,
                    "original_size": result.output.original_size,
                    "compressed_size": result.output.compressed_size,
                    "savings_percent": round(result.output.savings_percent, 2),
                    "quality_used": result.quality_used,
                    "elapsed_ms": result.elapsed_ms,
                    "summary": result.get_summary(),
                }
            )
        return response

    @staticmethod
    def batch_result(result: BatchResult) -> MCPResponse:
        """批量压缩结果"""
        return {
            "success": result.success,
            "error": result.error,
            "total_files": result.total_files,
            "successful_files": result.successful,
            "failed_files": result.failed,
            "success_rate": result.get_success_rate(),
            "total_original_size": result.get_total_original_size(),
            "total_size_saved": result.get_total_size_saved(),
            "summary": result.get_summary(),
            "results": [MCPResponseBuilder.file_result(r) for r in result.results],
        }

    @staticmethod
    def estimation(result: EstimationResult) -> MCPResponse:
        return {"success": True, **result.model_dump()}


logger = get_logger()

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("图像压缩与估算服务")


@lru_cache(maxsize=1)
def get_compressor() -> ImageCompressor:
    """按配置创建压缩器（进程内缓存，测试中可 cache_clear）"""
    stats_config = get_config().stats
    if stats_config.DB_PATH == ":memory:":
        store = SqlStatsStore()
    else:
        store = SqlStatsStore(path=stats_config.DB_PATH)
    if stats_config.SEED_ON_FIRST_USE:
        store.seed_defaults()
    return ImageCompressor(store)


# ============================================================================
# 压缩工具
# ============================================================================


@mcp.tool()
def compress_image(
    input_path: str,
    output_path: str | None = None,
    quality: int | None = None,
    format: str | None = None,
) -> MCPResponse:
    """压缩单个图像文件并记录压缩统计。

    Args:
        input_path: 输入文件路径（PNG/JPEG/WebP）
        output_path: 输出文件或目录（可选，默认 <原名>_compressed.<扩展名>）
        quality: 压缩质量 1-100，默认 80；WebP 下 >= 90 为无损
        format: 输出格式 png/jpeg/webp，"auto" 保持输入格式，默认 webp

    Returns:
        dict: 压缩结果
    """
    if not Path(input_path).exists():
        return MCPResponseBuilder.error(
            MessageFormatter.file_not_found(input_path), "file"
        )
    result = get_compressor().compress_image(input_path, output_path, quality, format)
    return MCPResponseBuilder.file_result(result)


@mcp.tool()
def compress_batch(
    input_paths: list[str],
    output_dir: str | None = None,
    quality: int | None = None,
    format: str | None = None,
) -> MCPResponse:
    """按顺序压缩多个文件，单个文件失败不影响其余文件。

    Args:
        input_paths: 输入文件列表
        output_dir: 输出目录（可选）
        quality: 压缩质量 1-100
        format: 输出格式 png/jpeg/webp/auto

    Returns:
        dict: 批量结果，包含成功/失败数量和每个文件的结果
    """
    result = get_compressor().compress_batch(input_paths, output_dir, quality, format)
    return MCPResponseBuilder.batch_result(result)


# ============================================================================
# 估算工具
# ============================================================================


@mcp.tool()
def get_compression_estimation(
    input_format: str,
    original_size: int,
    quality: int | None = None,
    format: str | None = None,
) -> MCPResponse:
    """基于历史统计估算体积减少百分比。

    Args:
        input_format: 输入格式 png/jpeg/jpg/webp
        original_size: 原始大小（字节）
        quality: 压缩质量 1-100
        format: 输出格式

    Returns:
        dict: percent / ratio / confidence / sample_count
    """
    try:
        return MCPResponseBuilder.estimation(
            get_compressor().estimate(input_format, original_size, quality, format)
        )
    except (CompressionError, PydanticValidationError) as e:
        return MCPResponseBuilder.validation_error(str(e))


@mcp.tool()
def predict_compression(
    input_format: str, output_format: str, original_size: int
) -> MCPResponse:
    """按格式对预测压缩效果（含尺寸修正）。"""
    try:
        return MCPResponseBuilder.estimation(
            get_compressor().predict(input_format, output_format, original_size)
        )
    except PydanticValidationError as e:
        return MCPResponseBuilder.validation_error(str(e))


@mcp.tool()
def estimate_compression_time(
    input_format: str,
    original_size: int,
    quality: int | None = None,
    format: str | None = None,
) -> MCPResponse:
    """估算压缩耗时（毫秒）。"""
    try:
        estimation = get_compressor().estimate_duration(
            input_format, original_size, quality, format
        )
    except (CompressionError, PydanticValidationError) as e:
        return MCPResponseBuilder.validation_error(str(e))
    return {"success": True, **estimation.model_dump()}


# ============================================================================
# 统计工具
# ============================================================================


@mcp.tool()
def get_stats_summary() -> MCPResponse:
    """统计概览：记录总数与 PNG→WebP 的参考估算。"""
    try:
        summary = get_compressor().stats_summary()
    except StatsError as e:
        logger.error(MessageFormatter.operation_failed("获取统计概览", "store", e))
        return MCPResponseBuilder.stats_error(e.message)
    return {"success": True, **summary.model_dump()}


@mcp.tool()
def reset_compression_stats() -> MCPResponse:
    """清空所有压缩统计数据。"""
    try:
        get_compressor().reset_stats()
    except StatsError as e:
        logger.error(MessageFormatter.operation_failed("清空统计数据", "store", e))
        return MCPResponseBuilder.stats_error(e.message)
    return {"success": True}


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    configure_logging()
    logger.info("启动图片压缩 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
