"""异常处理测试。"""

from pathlib import Path

import pytest
from PIL import UnidentifiedImageError

from plume_compress.exceptions import (
    CompressionError,
    CompressionIOError,
    ErrorHandler,
    InsufficientCompressionError,
    InvalidSettingsError,
    ProcessingError,
    UnsupportedFormatError,
    handle_image_errors,
)


class TestHandleImageErrors:
    """异常映射装饰器测试"""

    @pytest.mark.parametrize(
        ("raised", "expected"),
        [
            (UnidentifiedImageError("bad"), ProcessingError),
            (OSError("truncated"), ProcessingError),
            (ValueError("bad mode"), ProcessingError),
            (TypeError("bad arg"), ProcessingError),
        ],
    )
    def test_maps_to_taxonomy(self, raised: Exception, expected: type):
        @handle_image_errors("测试")
        def boom():
            raise raised

        with pytest.raises(expected) as exc_info:
            boom()
        assert exc_info.value.__cause__ is raised

    def test_compression_errors_pass_through(self):
        original = InvalidSettingsError("质量无效")

        @handle_image_errors("测试")
        def boom():
            raise original

        with pytest.raises(InvalidSettingsError) as exc_info:
            boom()
        assert exc_info.value is original


class TestErrorHandler:
    """错误处理器测试"""

    @pytest.mark.parametrize(
        ("error", "prefix"),
        [
            (InvalidSettingsError("质量无效"), "参数验证"),
            (UnsupportedFormatError("gif"), "图像压缩"),
            (CompressionIOError("读不到"), "图像压缩 - 文件错误"),
            (PermissionError("denied"), "图像压缩 - 权限错误"),
            (ProcessingError("编码失败"), "图像压缩"),
        ],
    )
    def test_failed_result(self, error: Exception, prefix: str, tmp_path: Path):
        result = ErrorHandler.handle_compression_error(
            error, "id-1", tmp_path / "a.png", input_format="png"
        )
        assert not result.success
        assert result.image_id == "id-1"
        assert result.input_format == "png"
        assert result.error.startswith(prefix)

    def test_error_batch_result(self):
        result = ErrorHandler.create_error_batch_result(None, "目录不存在")
        assert not result.success
        assert result.total_files == 0


class TestErrorTypes:
    def test_insufficient_compression(self, tmp_path: Path):
        error = InsufficientCompressionError(0.98, tmp_path / "a.png")
        assert isinstance(error, CompressionError)
        assert error.ratio == 0.98
        assert "0.98" in error.message
