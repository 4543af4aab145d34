"""格式压缩器模块。

每个输出格式一个压缩器，输入为任意支持格式的原始字节，输出为目标格式的字节。
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from io import BytesIO
from typing import Any

import oxipng
from PIL import Image

from ..config import get_config
from ..exceptions import ProcessingError, UnsupportedFormatError, handle_image_errors
from ..models.constants import ImageFormats, OutputFormat, detect_format_from_bytes
from ..models.settings import CompressionSettings
from ..utils.logging_helpers import get_logger


logger = get_logger()

# (原始 PNG 字节, 设置) -> 优化后的字节
PngOptimizer = Callable[[bytes, CompressionSettings], bytes]


class BaseCompressor(ABC):
    """格式压缩器基类"""

    format: OutputFormat

    def supports(self, output_format: OutputFormat) -> bool:
        return output_format == self.format

    def compress(self, data: bytes, settings: CompressionSettings) -> bytes:
        """把输入字节压缩为 self.format

        Raises:
            UnsupportedFormatError: settings.format 与本压缩器格式不一致
            ProcessingError: 解码或编码失败
        """
        if not self.supports(settings.format):
            raise UnsupportedFormatError(
                f"{type(self).__name__} 不支持输出格式: {settings.format}"
            )
        return self._compress(data, settings)

    @abstractmethod
    def _compress(self, data: bytes, settings: CompressionSettings) -> bytes: ...


# ============================================================================
# 解码与图像准备
# ============================================================================


def decode_image(data: bytes) -> Image.Image:
    """解码 PNG/JPEG/WebP 输入，其余格式不接受"""
    img = Image.open(BytesIO(data), formats=ImageFormats.DECODABLE_FORMATS)
    img.load()
    return img


def _metadata_params(img: Image.Image, settings: CompressionSettings) -> dict[str, Any]:
    """preserve_metadata 时携带 EXIF/ICC"""
    if not settings.preserve_metadata:
        return {}
    params: dict[str, Any] = {}
    if exif := img.info.get("exif"):
        params["exif"] = exif
    if icc := img.info.get("icc_profile"):
        params["icc_profile"] = icc
    return params


def prepare_for_jpeg(img: Image.Image) -> Image.Image:
    """JPEG 不支持透明度：alpha 合成到白色背景，其他模式转 RGB"""
    if img.mode == "P":
        if "transparency" not in img.info:
            return img.convert("RGB")
        img = img.convert("RGBA")

    if img.mode in ("RGBA", "LA"):
        if img.mode == "LA":
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background

    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def prepare_for_webp(img: Image.Image) -> Image.Image:
    """WebP 支持 RGB 和 RGBA"""
    if img.mode == "P":
        if "transparency" in img.info:
            return img.convert("RGBA")
        return img.convert("RGB")
    if img.mode == "LA":
        return img.convert("RGBA")
    if img.mode not in ("RGB", "RGBA"):
        return img.convert("RGB")
    return img


def prepare_for_png(img: Image.Image) -> Image.Image:
    """PNG 支持大多数模式，仅 CMYK 需要转换"""
    if img.mode == "CMYK":
        return img.convert("RGB")
    return img


# ============================================================================
# 编码参数
# ============================================================================


def get_jpeg_params(settings: CompressionSettings) -> dict[str, Any]:
    """JPEG 编码参数，色度子采样按质量分级"""
    quality = settings.quality
    if quality >= 90:
        subsampling = 0  # 4:4:4
    elif quality >= 75:
        subsampling = 1  # 4:2:2
    else:
        subsampling = 2  # 4:2:0
    return {"quality": quality, "optimize": True, "subsampling": subsampling}


def get_webp_params(settings: CompressionSettings) -> dict[str, Any]:
    """WebP 编码参数

    quality >= 阈值使用无损模式；否则按 quality 有损编码，
    alpha_quality 随质量分级。
    """
    defaults = get_config().compression
    if settings.quality >= defaults.WEBP_LOSSLESS_THRESHOLD:
        return {
            "lossless": True,
            "quality": defaults.WEBP_LOSSLESS_EFFORT,
            "method": defaults.WEBP_METHOD,
            # 不允许改写透明像素时保留其 RGB 值
            "exact": not settings.optimize_alpha,
        }

    quality = settings.quality
    if quality >= 85:
        alpha_quality = 100
    elif quality >= 70:
        alpha_quality = min(100, quality + 10)
    else:
        alpha_quality = quality
    return {
        "quality": quality,
        "method": defaults.WEBP_METHOD,
        "alpha_quality": alpha_quality,
    }


def oxipng_optimize(data: bytes, settings: CompressionSettings) -> bytes:
    """oxipng 无损重新优化 PNG 字节"""
    if settings.preserve_metadata:
        strip = oxipng.StripChunks.none()
    else:
        strip = oxipng.StripChunks.safe()
    return oxipng.optimize_from_memory(
        data,
        level=get_config().compression.OXIPNG_LEVEL,
        optimize_alpha=settings.optimize_alpha,
        strip=strip,
    )


# ============================================================================
# 压缩器实现
# ============================================================================


class PngCompressor(BaseCompressor):
    """PNG 压缩器：PNG 输入直接优化，其他输入先转码再优化"""

    format = OutputFormat.PNG

    def __init__(self, optimizer: PngOptimizer | None = None):
        self._optimizer = optimizer or oxipng_optimize

    def _optimize_or(self, png_data: bytes, settings: CompressionSettings) -> bytes:
        """优化失败时返回传入的 PNG 字节"""
        try:
            return self._optimizer(png_data, settings)
        except Exception as e:
            logger.warning(f"PNG 优化失败，保留未优化数据: {e}")
            return png_data

    def _compress(self, data: bytes, settings: CompressionSettings) -> bytes:
        if detect_format_from_bytes(data) == OutputFormat.PNG:
            return self._optimize_or(data, settings)
        return self._optimize_or(self._encode(data, settings), settings)

    @handle_image_errors("PNG 编码")
    def _encode(self, data: bytes, settings: CompressionSettings) -> bytes:
        with decode_image(data) as img:
            prepared = prepare_for_png(img)
            buffer = BytesIO()
            prepared.save(buffer, format="PNG", **_metadata_params(img, settings))
            return buffer.getvalue()


class JpegCompressor(BaseCompressor):
    """JPEG 压缩器：透明度合成到白色背景后按质量编码"""

    format = OutputFormat.JPEG

    @handle_image_errors("JPEG 编码")
    def _compress(self, data: bytes, settings: CompressionSettings) -> bytes:
        with decode_image(data) as img:
            prepared = prepare_for_jpeg(img)
            buffer = BytesIO()
            prepared.save(
                buffer,
                format="JPEG",
                **get_jpeg_params(settings),
                **_metadata_params(img, settings),
            )
            return buffer.getvalue()


class WebpCompressor(BaseCompressor):
    """WebP 压缩器：quality >= 90 无损，否则有损"""

    format = OutputFormat.WEBP

    @handle_image_errors("WebP 编码")
    def _compress(self, data: bytes, settings: CompressionSettings) -> bytes:
        with decode_image(data) as img:
            prepared = prepare_for_webp(img)
            buffer = BytesIO()
            prepared.save(
                buffer,
                format="WEBP",
                **get_webp_params(settings),
                **_metadata_params(img, settings),
            )
            data_out = buffer.getvalue()
        if not data_out:
            raise ProcessingError("WebP 编码结果为空")
        return data_out


def default_compressors() -> dict[OutputFormat, BaseCompressor]:
    """默认的压缩器注册表"""
    return {
        OutputFormat.PNG: PngCompressor(),
        OutputFormat.JPEG: JpegCompressor(),
        OutputFormat.WEBP: WebpCompressor(),
    }
