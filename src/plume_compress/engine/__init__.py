"""图像压缩处理引擎模块。

包含批量处理和设置构建等处理逻辑。
"""

from .batch import BatchProcessor
from .config import SettingsBuilder


__all__ = [
    "BatchProcessor",
    "SettingsBuilder",
]
