"""初始统计样本。

没有任何历史记录时用于冷启动的典型压缩结果。
"""

from typing import Final

from ..core.statistics import create_stat
from ..models.stats import CompressionStat


SEED_QUALITY: Final[int] = 80

# (输入格式, 输出格式, 原始大小, 压缩后大小)
SEED_DATA: Final[tuple[tuple[str, str, int, int], ...]] = (
    # PNG → WebP，约 75%
    ("png", "webp", 1_024_000, 256_000),
    ("png", "webp", 2_048_000, 460_800),
    ("png", "webp", 512_000, 122_880),
    ("png", "webp", 4_096_000, 983_040),
    ("png", "webp", 256_000, 61_440),
    # JPEG → WebP，约 30%
    ("jpeg", "webp", 800_000, 560_000),
    ("jpeg", "webp", 1_500_000, 1_050_000),
    ("jpeg", "webp", 600_000, 420_000),
    ("jpeg", "webp", 2_000_000, 1_400_000),
    ("jpeg", "webp", 300_000, 210_000),
    # PNG 优化，约 15%
    ("png", "png", 1_024_000, 860_000),
    ("png", "png", 2_048_000, 1_740_000),
    ("png", "png", 512_000, 430_000),
    ("png", "png", 4_096_000, 3_480_000),
    # JPEG 重新压缩，约 20%
    ("jpeg", "jpeg", 800_000, 640_000),
    ("jpeg", "jpeg", 1_500_000, 1_200_000),
    ("jpeg", "jpeg", 600_000, 480_000),
    ("jpeg", "jpeg", 2_000_000, 1_600_000),
    # 小图
    ("png", "webp", 50_000, 15_000),
    ("jpeg", "webp", 75_000, 60_000),
    # 大图
    ("png", "webp", 8_192_000, 1_638_400),
    ("jpeg", "webp", 10_240_000, 7_168_000),
)


def seed_stats() -> list[CompressionStat]:
    """把 SEED_DATA 转换为统计记录（不带耗时）"""
    return [
        create_stat(input_format, output_format, original, compressed, SEED_QUALITY)
        for input_format, output_format, original, compressed in SEED_DATA
    ]
