"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path
from typing import Any


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def directory_not_found(dir_path: str | Path) -> str:
        """目录不存在错误消息"""
        return f"目录不存在: {dir_path}"

    @staticmethod
    def path_not_directory(path: str | Path) -> str:
        """路径不是目录错误消息"""
        return f"路径不是目录: {path}"

    @staticmethod
    def permission_error(path: str | Path, operation: str = "访问") -> str:
        """权限错误消息"""
        return f"权限不足，无法{operation}: {path}"

    @staticmethod
    def unsupported_format(format_name: str | None, context: str = "") -> str:
        """不支持的格式错误消息"""
        msg = f"不支持的图像格式: {format_name or '无扩展名'}"
        if context:
            msg += f" ({context})"
        return msg

    @staticmethod
    def invalid_quality(quality: Any) -> str:
        """质量参数无效错误消息"""
        return f"质量值必须在 1-100 之间，得到: {quality}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"

    @staticmethod
    def stats_fallback(operation: str, error: Exception) -> str:
        """统计数据不可用、回退到启发式估算的消息"""
        return f"{operation}: 统计数据不可用，使用默认估算 - {error}"

