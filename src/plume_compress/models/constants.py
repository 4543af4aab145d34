"""图像格式相关常量定义。

输出格式、尺寸分档以及输入格式识别（扩展名/文件签名）。
"""

from enum import Enum
from pathlib import Path
from typing import Final


class OutputFormat(str, Enum):
    """支持的输出格式（封闭集合）"""

    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"

    @property
    def extension(self) -> str:
        """首选文件扩展名（不含点）"""
        return ImageFormats.EXTENSIONS[self]

    @property
    def mime_type(self) -> str:
        """MIME 类型"""
        return f"image/{self.value}"

    @property
    def display_name(self) -> str:
        """用户可读的格式名称"""
        return ImageFormats.DISPLAY_NAMES[self]

    @property
    def supports_lossless(self) -> bool:
        """是否支持无损压缩"""
        return self in ImageFormats.LOSSLESS_FORMATS

    @classmethod
    def from_string(cls, format_str: str | None) -> "OutputFormat | None":
        """从字符串解析格式，大小写不敏感，未知格式返回 None"""
        if not format_str:
            return None
        try:
            return cls(normalize_format(format_str))
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.display_name


class SizeRange(str, Enum):
    """输入文件尺寸分档"""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class ImageFormats:
    """格式映射表"""

    # 用户友好的别名
    ALIASES: Final[dict[str, str]] = {
        "jpg": "jpeg",
    }

    EXTENSIONS: Final[dict[OutputFormat, str]] = {
        OutputFormat.PNG: "png",
        OutputFormat.JPEG: "jpg",
        OutputFormat.WEBP: "webp",
    }

    DISPLAY_NAMES: Final[dict[OutputFormat, str]] = {
        OutputFormat.PNG: "PNG",
        OutputFormat.JPEG: "JPEG",
        OutputFormat.WEBP: "WebP",
    }

    LOSSLESS_FORMATS: Final[frozenset[OutputFormat]] = frozenset(
        {OutputFormat.PNG, OutputFormat.WEBP}
    )

    # Pillow 解码时允许的输入格式
    DECODABLE_FORMATS: Final[tuple[str, ...]] = ("PNG", "JPEG", "WEBP")

    PNG_SIGNATURE: Final[bytes] = b"\x89PNG\r\n\x1a\n"
    JPEG_SIGNATURE: Final[bytes] = b"\xff\xd8\xff"


class SizeThresholds:
    """尺寸分档边界（字节，含上界）"""

    SMALL_MAX: Final[int] = 1_000_000
    MEDIUM_MAX: Final[int] = 5_000_000


class QualityDefaults:
    """质量相关默认值"""

    DEFAULT: Final[int] = 80
    MIN_QUALITY: Final[int] = 1
    MAX_QUALITY: Final[int] = 100

    # 有损/无损判定阈值：quality >= 90 视为无损
    LOSSLESS_THRESHOLD: Final[int] = 90


def normalize_format(format_str: str) -> str:
    """标准化格式名称：小写，jpg → jpeg"""
    lowered = format_str.strip().lower().lstrip(".")
    return ImageFormats.ALIASES.get(lowered, lowered)


def detect_format_from_bytes(data: bytes) -> OutputFormat | None:
    """根据文件签名识别输入格式"""
    if len(data) < 8:
        return None
    if data.startswith(ImageFormats.PNG_SIGNATURE):
        return OutputFormat.PNG
    if data.startswith(ImageFormats.JPEG_SIGNATURE):
        return OutputFormat.JPEG
    if len(data) >= 12 and data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return OutputFormat.WEBP
    return None


def detect_format_from_path(path: str | Path) -> OutputFormat | None:
    """根据扩展名识别输入格式"""
    suffix = Path(path).suffix
    if not suffix:
        return None
    return OutputFormat.from_string(suffix)


def clamp_quality(quality: int) -> int:
    """将质量值限制在 [1, 100]"""
    return max(QualityDefaults.MIN_QUALITY, min(QualityDefaults.MAX_QUALITY, quality))


def is_lossy_quality(quality: int) -> bool:
    """quality < 90 视为有损模式"""
    return quality < QualityDefaults.LOSSLESS_THRESHOLD
