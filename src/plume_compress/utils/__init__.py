"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .file_helpers import claim_output_path, find_image_files, resolve_output_path
from .logging_helpers import configure_logging, get_logger
from .message_formatter import MessageFormatter


__all__ = [
    "MessageFormatter",
    "claim_output_path",
    "configure_logging",
    "find_image_files",
    "get_logger",
    "resolve_output_path",
]
