"""测试配置文件。

提供测试所需的fixtures和配置，测试图片都在 tmp_path 中生成。
"""

from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from plume_compress.compressor import ImageCompressor
from plume_compress.config import reset_config
from plume_compress.store import InMemoryStatsStore, SqlStatsStore


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """每个测试使用独立的全局配置，统计数据库不落到用户目录"""
    monkeypatch.setenv("PLUME_STATS_DB", str(tmp_path / "stats.db"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
    path = tmp_path / "images"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """输出目录fixture"""
    path = tmp_path / "output"
    path.mkdir()
    return path


def _draw_shapes(img: Image.Image) -> Image.Image:
    draw = ImageDraw.Draw(img)
    for i in range(30):
        x, y = (i * 23) % img.width, (i * 17) % img.height
        color = (i * 5 % 256, i * 7 % 256, i * 11 % 256)
        draw.rectangle([x, y, x + 40, y + 30], fill=color)
    return img


@pytest.fixture
def png_file(image_dir: Path) -> Path:
    """小尺寸 RGB PNG"""
    path = image_dir / "shapes.png"
    _draw_shapes(Image.new("RGB", (320, 240), color="white")).save(path, "PNG")
    return path


@pytest.fixture
def transparent_png(image_dir: Path) -> Path:
    """左半透明、右半不透明的 RGBA PNG"""
    path = image_dir / "transparent.png"
    img = Image.new("RGBA", (200, 100), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([100, 0, 199, 99], fill=(30, 120, 200, 255))
    img.save(path, "PNG")
    return path


@pytest.fixture
def jpeg_file(image_dir: Path) -> Path:
    path = image_dir / "photo.jpg"
    _draw_shapes(Image.new("RGB", (320, 240), color="white")).save(
        path, "JPEG", quality=95
    )
    return path


@pytest.fixture
def webp_file(image_dir: Path) -> Path:
    path = image_dir / "picture.webp"
    _draw_shapes(Image.new("RGB", (320, 240), color="white")).save(
        path, "WEBP", quality=90
    )
    return path


@pytest.fixture
def medium_png(image_dir: Path) -> Path:
    """约 2MB 的未压缩 PNG（medium 分档）"""
    path = image_dir / "medium.png"
    size = (1000, 700)
    red = Image.linear_gradient("L").resize(size)
    green = Image.radial_gradient("L").resize(size)
    blue = Image.effect_noise(size, 40)
    Image.merge("RGB", (red, green, blue)).save(path, "PNG", compress_level=0)
    return path


@pytest.fixture
def memory_store() -> InMemoryStatsStore:
    return InMemoryStatsStore()


@pytest.fixture
def sql_store(tmp_path: Path):
    store = SqlStatsStore(path=tmp_path / "db" / "stats.db")
    yield store
    store.close()


@pytest.fixture(params=["memory", "sql"])
def any_store(request: pytest.FixtureRequest, tmp_path: Path):
    """两种存储实现，语义必须一致"""
    if request.param == "memory":
        yield InMemoryStatsStore()
    else:
        store = SqlStatsStore()
        yield store
        store.close()


@pytest.fixture
def compressor(memory_store: InMemoryStatsStore) -> ImageCompressor:
    return ImageCompressor(memory_store)
