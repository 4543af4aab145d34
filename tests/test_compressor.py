"""集成测试。

测试压缩器的完整流程：压缩、统计记录、进度事件和批量处理。
"""

from pathlib import Path

import pytest
from PIL import Image

from plume_compress.compressor import ImageCompressor
from plume_compress.exceptions import StatsNotAvailableError
from plume_compress.models.compression_result import (
    BatchProgressEvent,
    CompressionProgressEvent,
    CompressionStage,
)
from plume_compress.models.constants import OutputFormat, SizeRange
from plume_compress.store import InMemoryStatsStore


class TestCompressImage:
    """单文件压缩测试"""

    def test_medium_png_to_webp(self, compressor: ImageCompressor, medium_png: Path):
        """约 2MB 的 PNG 以质量 80 转 WebP"""
        result = compressor.compress_image(medium_png, quality=80, format="webp")

        assert result.success, result.error
        assert result.output.format == OutputFormat.WEBP
        assert result.output.savings_percent > 0
        assert result.output_path == medium_png.with_name("medium_compressed.webp")
        assert result.output_path.read_bytes()[12:16] == b"VP8 "

        (stat,) = compressor.store.get_recent_stats(1)
        assert stat.id == result.stat_id
        assert stat.input_format == "png"
        assert stat.output_format == "webp"
        assert stat.input_size_range == SizeRange.MEDIUM
        assert stat.lossy_mode is True
        assert stat.compression_time_ms is not None
        assert stat.size_reduction_percent == pytest.approx(result.output.savings_percent)

    def test_high_quality_is_lossless(self, compressor: ImageCompressor, png_file: Path):
        result = compressor.compress_image(png_file, quality=95)

        assert result.success
        assert result.output_path.read_bytes()[12:16] == b"VP8L"
        (stat,) = compressor.store.get_recent_stats(1)
        assert stat.lossy_mode is False

    def test_auto_keeps_input_format(
        self, compressor: ImageCompressor, jpeg_file: Path, output_dir: Path
    ):
        result = compressor.compress_image(jpeg_file, output_dir, format="auto")
        assert result.success
        assert result.output_path == output_dir / "photo.jpg"
        with Image.open(result.output_path) as img:
            assert img.format == "JPEG"

    def test_unknown_format_defaults_to_webp(
        self, compressor: ImageCompressor, png_file: Path
    ):
        result = compressor.compress_image(png_file, format="bmp")
        assert result.success
        assert result.output.format == OutputFormat.WEBP

    def test_missing_file_returns_error(self, compressor: ImageCompressor, tmp_path: Path):
        result = compressor.compress_image(tmp_path / "missing.png")
        assert not result.success
        assert result.error
        assert result.output is None
        assert compressor.store.count_stats() == 0

    def test_invalid_quality_returns_error(
        self, compressor: ImageCompressor, png_file: Path
    ):
        result = compressor.compress_image(png_file, quality=150)
        assert not result.success
        assert "150" in result.error

    def test_unsupported_input(self, compressor: ImageCompressor, tmp_path: Path):
        source = tmp_path / "anim.gif"
        source.write_bytes(b"GIF89a")
        result = compressor.compress_image(source)
        assert not result.success

    def test_without_store(self, png_file: Path):
        compressor = ImageCompressor()
        result = compressor.compress_image(png_file)
        assert result.success
        assert result.stat_id is None
        with pytest.raises(StatsNotAvailableError):
            compressor.count_stats()


class TestProgressEvents:
    """进度事件测试"""

    def test_success_sequence(self, compressor: ImageCompressor, png_file: Path):
        events: list[CompressionProgressEvent] = []
        compressor.compress_image(png_file, image_id="img-1", progress_callback=events.append)

        assert [e.stage for e in events] == [
            CompressionStage.STARTED,
            CompressionStage.PROCESSING,
            CompressionStage.COMPLETED,
        ]
        assert [e.progress for e in events] == [0.0, 25.0, 100.0]
        assert all(e.image_id == "img-1" for e in events)
        assert events[0].image_name == "shapes.png"
        assert events[1].estimated_time_remaining == 300

    def test_error_sequence(self, compressor: ImageCompressor, tmp_path: Path):
        events: list[CompressionProgressEvent] = []
        compressor.compress_image(tmp_path / "missing.png", progress_callback=events.append)
        assert [e.stage for e in events][-1] == CompressionStage.ERROR
        assert CompressionStage.COMPLETED not in [e.stage for e in events]


class TestBatch:
    """批量处理测试"""

    def test_batch_counts_and_events(
        self,
        compressor: ImageCompressor,
        png_file: Path,
        jpeg_file: Path,
        tmp_path: Path,
        output_dir: Path,
    ):
        events: list[BatchProgressEvent] = []
        files = [png_file, tmp_path / "missing.png", jpeg_file]

        result = compressor.compress_batch(
            files, output_dir, quality=80, progress_callback=events.append
        )

        assert result.success
        assert result.total_files == 3
        assert result.successful == 2
        assert result.failed == 1
        assert [(e.current, e.total) for e in events] == [(1, 3), (2, 3), (3, 3)]
        assert [e.file_name for e in events] == ["shapes.png", "missing.png", "photo.jpg"]
        assert (output_dir / "shapes.webp").exists()
        assert (output_dir / "photo.webp").exists()
        assert compressor.store.count_stats() == 2

    def test_same_stem_outputs_do_not_collide(
        self, compressor: ImageCompressor, image_dir: Path, output_dir: Path
    ):
        """a.png 与 a.jpg 都转 WebP 时各自保留输出"""
        png = image_dir / "a.png"
        jpg = image_dir / "a.jpg"
        Image.new("RGB", (64, 64), color="red").save(png, "PNG")
        Image.new("RGB", (64, 64), color="blue").save(jpg, "JPEG")

        result = compressor.compress_batch([png, jpg], output_dir, format="webp")

        assert result.successful == 2
        outputs = [r.output_path for r in result.results]
        assert outputs == [output_dir / "a.webp", output_dir / "a_jpg.webp"]
        with Image.open(outputs[0]) as first, Image.open(outputs[1]) as second:
            assert first.convert("RGB").getpixel((0, 0))[0] > 200
            assert second.convert("RGB").getpixel((0, 0))[2] > 200

    def test_same_stem_without_output_dir(
        self, compressor: ImageCompressor, image_dir: Path
    ):
        png = image_dir / "a.png"
        webp = image_dir / "a.webp"
        Image.new("RGB", (64, 64), color="red").save(png, "PNG")
        Image.new("RGB", (64, 64), color="blue").save(webp, "WEBP")

        result = compressor.compress_batch([png, webp])

        assert [r.output_path for r in result.results] == [
            image_dir / "a_compressed.webp",
            image_dir / "a_compressed_webp.webp",
        ]

    def test_all_failed(self, compressor: ImageCompressor, tmp_path: Path):
        result = compressor.compress_batch([tmp_path / "a.png", tmp_path / "b.png"])
        assert not result.success
        assert result.failed == 2

    def test_directory(
        self,
        compressor: ImageCompressor,
        png_file: Path,
        jpeg_file: Path,
        webp_file: Path,
        image_dir: Path,
    ):
        (image_dir / "notes.txt").write_text("not an image")
        out = image_dir / "out"
        result = compressor.compress_directory(image_dir, out)

        assert result.total_files == 3
        assert result.successful == 3
        assert sorted(p.name for p in out.iterdir()) == [
            "photo.webp",
            "picture.webp",
            "shapes.webp",
        ]

    def test_empty_directory(self, compressor: ImageCompressor, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = compressor.compress_directory(empty)
        assert result.success
        assert result.total_files == 0

    def test_missing_directory(self, compressor: ImageCompressor, tmp_path: Path):
        result = compressor.compress_directory(tmp_path / "nope")
        assert not result.success
        assert "nope" in result.error


class TestStatsAndEstimation:
    """统计与估算接口测试"""

    def test_estimation_improves_with_history(
        self, compressor: ImageCompressor, png_file: Path
    ):
        before = compressor.estimate("png", png_file.stat().st_size, quality=80)
        assert before.sample_count == 0

        compressor.compress_image(png_file, quality=80)
        after = compressor.estimate("png", png_file.stat().st_size, quality=80)
        assert after.sample_count == 1

    def test_stats_summary(self, memory_store: InMemoryStatsStore):
        memory_store.seed_defaults()
        summary = ImageCompressor(memory_store).stats_summary()
        assert summary.total_compressions == 22
        assert summary.sample_count == 7
        assert 0.0 < summary.webp_confidence <= 1.0

    def test_reset_stats(self, compressor: ImageCompressor, png_file: Path):
        compressor.compress_image(png_file)
        compressor.reset_stats()
        assert compressor.count_stats() == 0

    def test_duration_and_progress(self, compressor: ImageCompressor):
        estimation = compressor.estimate_duration("png", 500_000, quality=80)
        assert estimation.estimated_duration_ms == 300

        now = [0.0]
        calculator = compressor.start_progress(estimation, clock=lambda: now[0])
        assert calculator.config.estimated_duration_ms == 300
        now[0] = 10.0
        assert calculator.current_progress() == 95.0
        assert not calculator.should_continue_updates()

    def test_predict(self, compressor: ImageCompressor):
        result = compressor.predict("png", "webp", 2_000_000)
        assert result.percent == pytest.approx(70.0)
