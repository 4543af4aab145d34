#!/usr/bin/env python3
"""图像压缩与估算演示脚本。

展示 plume_compress 库的核心功能，包括：
- 单文件压缩与统计记录
- 基于历史数据的体积估算
- 耗时估算与平滑进度
- 批量目录处理
"""

import tempfile
import time
from pathlib import Path

from PIL import Image

from plume_compress import ImageCompressor, SqlStatsStore
from plume_compress.models.compression_result import (
    BatchProgressEvent,
    CompressionProgressEvent,
)


def create_sample_images(directory: Path) -> list[Path]:
    """生成演示用的素材图片"""
    size = (800, 600)
    red = Image.linear_gradient("L").resize(size)
    green = Image.radial_gradient("L").resize(size)
    blue = Image.effect_noise(size, 30)
    base = Image.merge("RGB", (red, green, blue))

    paths = [directory / "gradient.png", directory / "photo.jpg", directory / "web.webp"]
    base.save(paths[0], "PNG")
    base.save(paths[1], "JPEG", quality=95)
    base.save(paths[2], "WEBP", quality=95)

    print(f"📁 生成了 {len(paths)} 张素材图片:")
    for path in paths:
        print(f"  - {path.name} ({path.stat().st_size / 1024:.1f} KB)")
    return paths


def print_progress(event: CompressionProgressEvent) -> None:
    remaining = (
        f", 预计剩余 {event.estimated_time_remaining}ms"
        if event.estimated_time_remaining
        else ""
    )
    print(f"  [{event.stage.value:>10}] {event.progress:5.1f}%{remaining}")


def demo_single_file(compressor: ImageCompressor, image: Path, output_dir: Path):
    """单文件压缩演示"""
    print("\n=== 单文件压缩演示 ===")

    for quality in (80, 95):
        result = compressor.compress_image(
            image,
            output_dir / f"{image.stem}_q{quality}.webp",
            quality=quality,
            progress_callback=print_progress,
        )
        if result.success:
            print(f"WebP Q{quality}: {result.get_summary()}")


def demo_estimation(compressor: ImageCompressor, image: Path):
    """体积与耗时估算演示"""
    print("\n=== 估算演示 ===")

    original_size = image.stat().st_size
    estimation = compressor.estimate("png", original_size, quality=80)
    print(
        f"PNG→WebP 预计减少 {estimation.percent:.1f}% "
        f"(置信度 {estimation.confidence:.2f}, 样本 {estimation.sample_count})"
    )

    duration = compressor.estimate_duration("png", original_size, quality=80)
    print(f"预计耗时 {duration.estimated_duration_ms}ms")

    calculator = compressor.start_progress(duration)
    while calculator.should_continue_updates():
        print(f"  进度 {calculator.current_progress():5.1f}%")
        time.sleep(calculator.config.update_interval_ms * 4 / 1000)
    print(f"  进度封顶 {calculator.current_progress():.1f}%，等待真正完成")


def demo_batch(compressor: ImageCompressor, input_dir: Path, output_dir: Path):
    """批量处理演示"""
    print("\n=== 批量处理演示 ===")

    def on_file(event: BatchProgressEvent) -> None:
        print(f"  ({event.current}/{event.total}) {event.file_name}")

    files = sorted(input_dir.glob("*.*"))
    result = compressor.compress_batch(
        files, output_dir, quality=75, progress_callback=on_file
    )
    print(result.get_summary())


def main():
    """主函数"""
    print("🖼️  图像压缩与估算演示")
    print("=" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        workdir = Path(tmp)
        input_dir = workdir / "images"
        input_dir.mkdir()
        images = create_sample_images(input_dir)

        store = SqlStatsStore(path=workdir / "stats.db")
        store.seed_defaults()
        compressor = ImageCompressor(store)

        demo_single_file(compressor, images[0], workdir / "single")
        demo_estimation(compressor, images[0])
        demo_batch(compressor, input_dir, workdir / "batch")

        print(f"\n📊 统计记录: {compressor.count_stats()} 条")
        store.close()

    print("\n✅ 所有演示完成！")


if __name__ == "__main__":
    main()
