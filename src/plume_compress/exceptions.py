"""图像压缩异常处理模块。

定义压缩与统计两套异常类型以及统一的错误处理机制。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.compression_result import BatchResult, FileCompressionResult
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# ============================================================================
# 压缩错误
# ============================================================================


class CompressionError(Exception):
    """压缩相关错误基类"""

    def __init__(self, message: str, input_path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.input_path = input_path


class InvalidSettingsError(CompressionError):
    """压缩设置无效（质量值超出范围等）"""

    pass


class UnsupportedFormatError(CompressionError):
    """不支持的格式错误"""

    pass


class ProcessingError(CompressionError):
    """解码、编码或优化过程错误"""

    pass


class CompressionIOError(CompressionError):
    """文件读写错误"""

    pass


class InsufficientCompressionError(CompressionError):
    """压缩效果不足（保留类型，引擎不会主动抛出）"""

    def __init__(self, ratio: float, input_path: Path | None = None):
        super().__init__(f"压缩效果不足，压缩比: {ratio:.2f}", input_path)
        self.ratio = ratio


# ============================================================================
# 统计错误
# ============================================================================


class StatsError(Exception):
    """统计存储相关错误基类"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DatabaseError(StatsError):
    """底层存储错误"""

    pass


class InvalidQueryError(StatsError):
    """查询参数无效"""

    pass


class StatsNotAvailableError(StatsError):
    """统计数据不可用"""

    pass


class StatsSerializationError(StatsError):
    """统计记录序列化失败"""

    pass


# 异常处理装饰器
def handle_image_errors(operation_name: str = "图像处理"):
    """统一的图像处理异常处理装饰器

    已属于 CompressionError 的异常原样抛出，其余映射为对应的压缩错误类型。

    Args:
        operation_name: 操作名称，用于日志记录
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except CompressionError:
                raise
            except UnidentifiedImageError as e:
                # 签名已匹配，解码失败说明数据损坏
                logger.error(f"{operation_name} - 图像数据损坏: {e}")
                raise ProcessingError(f"无法解码图像数据: {e}") from e
            except DecompressionBombError as e:
                logger.error(f"{operation_name} - 图像过大: {e}")
                raise ProcessingError(f"图像文件过大，可能存在安全风险: {e}") from e
            except OSError as e:
                logger.error(f"{operation_name} - 编解码失败: {e}")
                raise ProcessingError(f"编解码失败: {e}") from e
            except (ValueError, TypeError) as e:
                logger.error(f"{operation_name} - 参数错误: {e}")
                raise ProcessingError(f"参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    把单个文件的失败转换为失败结果，批量处理因此不会中断。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"图像压缩"、"文件读取"等）
            path: 相关文件路径
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def _create_error_result(
        image_id: str,
        input_path: Path,
        error_msg: str,
        input_format: str | None = None,
    ) -> FileCompressionResult:
        return FileCompressionResult(
            image_id=image_id,
            input_path=input_path,
            input_format=input_format,
            success=False,
            error=error_msg,
        )

    @staticmethod
    def handle_with_context(
        error: Exception,
        image_id: str,
        input_path: Path,
        operation: str = "未知操作",
        log_level: str = "error",
        input_format: str | None = None,
    ) -> FileCompressionResult:
        """记录日志并返回失败结果"""
        ErrorHandler._log_error(operation, input_path, error, log_level)
        message = error.message if isinstance(error, CompressionError) else str(error)
        return ErrorHandler._create_error_result(
            image_id, input_path, f"{operation}: {message}", input_format
        )

    @staticmethod
    def handle_compression_error(
        error: Exception,
        image_id: str,
        input_path: Path,
        operation: str = "图像压缩",
        input_format: str | None = None,
    ) -> FileCompressionResult:
        """统一的压缩错误处理，支持 match-case 错误分发"""
        match error:
            case InvalidSettingsError() as ise:
                return ErrorHandler.handle_with_context(
                    ise, image_id, input_path, "参数验证", "warning", input_format
                )
            case UnsupportedFormatError() as ufe:
                return ErrorHandler.handle_with_context(
                    ufe, image_id, input_path, operation, "warning", input_format
                )
            case CompressionIOError() | FileNotFoundError() as ioe:
                return ErrorHandler.handle_with_context(
                    ioe, image_id, input_path, f"{operation} - 文件错误", "warning",
                    input_format,
                )
            case PermissionError() as pe:
                return ErrorHandler.handle_with_context(
                    pe, image_id, input_path, f"{operation} - 权限错误", "error",
                    input_format,
                )
            case _:
                return ErrorHandler.handle_with_context(
                    error, image_id, input_path, operation, "error", input_format
                )

    @staticmethod
    def create_error_batch_result(
        output_dir: Path | None,
        error_message: str,
    ) -> BatchResult:
        """创建错误的批量处理结果"""
        return BatchResult(
            output_dir=output_dir,
            results=[],
            success=False,
            error=error_message,
        )
