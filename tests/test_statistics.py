"""统计基础函数测试。

测试尺寸分档、置信度计算与启发式估算。
"""

import pytest

from plume_compress.core.statistics import (
    DEFAULT_SAVINGS,
    FALLBACK_SAVINGS,
    TIMING_FALLBACK_CONFIDENCE,
    base_confidence,
    calculate_confidence,
    create_stat,
    create_stat_with_time,
    estimate_compression,
    get_size_range,
    summarize_samples,
    timing_confidence,
)
from plume_compress.models.constants import SizeRange


class TestSizeRange:
    """尺寸分档测试"""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, SizeRange.SMALL),
            (1_000_000, SizeRange.SMALL),
            (1_000_001, SizeRange.MEDIUM),
            (5_000_000, SizeRange.MEDIUM),
            (5_000_001, SizeRange.LARGE),
            (50_000_000, SizeRange.LARGE),
        ],
    )
    def test_boundaries_inclusive(self, size: int, expected: SizeRange):
        assert get_size_range(size) == expected


class TestConfidence:
    """置信度计算测试"""

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, 0.0), (1, 0.3), (5, 0.3), (6, 0.6), (20, 0.6), (21, 0.8), (50, 0.8), (51, 0.9)],
    )
    def test_base_confidence_tiers(self, count: int, expected: float):
        assert base_confidence(count) == expected

    def test_zero_variance_keeps_base(self):
        assert calculate_confidence(30, 0.0) == pytest.approx(0.8)

    def test_variance_reduces_confidence(self):
        assert calculate_confidence(30, 1.0) == pytest.approx(0.4)
        assert calculate_confidence(30, 3.0) < calculate_confidence(30, 1.0)

    def test_always_within_unit_interval(self):
        for count in (0, 3, 10, 40, 1000):
            for variance in (0.0, 0.01, 0.5, 10.0, 1e9, -1.0):
                assert 0.0 <= calculate_confidence(count, variance) <= 1.0

    def test_monotonic_in_sample_count(self):
        values = [calculate_confidence(n, 0.1) for n in (1, 10, 30, 100)]
        assert values == sorted(values)

    @pytest.mark.parametrize("count", [1, 3, 5, 20, 100])
    @pytest.mark.parametrize("variance", [0.0, 0.5, 10.0])
    def test_timing_history_beats_default_table(self, count: int, variance: float):
        """哪怕只有一条实测耗时，也比默认耗时表可信"""
        confidence = timing_confidence(count, variance)
        assert TIMING_FALLBACK_CONFIDENCE < confidence <= 1.0

    def test_timing_confidence_grows_with_samples(self):
        assert timing_confidence(1, 0.0) == pytest.approx(0.65)
        assert timing_confidence(100, 0.0) == pytest.approx(0.95)


class TestHeuristicEstimation:
    """无历史数据时的启发式估算测试"""

    def test_png_to_webp_lossy(self):
        result = estimate_compression("png", "webp", 500_000, 80, True)
        assert result.percent == 85.0
        assert result.confidence == 0.9
        assert result.sample_count == 0
        assert result.ratio == pytest.approx(0.15)

    def test_png_to_webp_lossless(self):
        result = estimate_compression("png", "webp", 500_000, 95, False)
        assert result.percent == 43.0
        assert result.confidence == 0.8

    def test_jpg_alias_and_case(self):
        result = estimate_compression("JPG", "WEBP", 500_000, 80, True)
        assert result.percent == 25.0
        assert result.confidence == 0.7

    def test_lossy_flag_ignored_when_table_does_not_split(self):
        lossy = estimate_compression("jpeg", "jpeg", 100, 70, True)
        lossless = estimate_compression("jpeg", "jpeg", 100, 95, False)
        assert lossy == lossless

    def test_unknown_pair_uses_fallback(self):
        result = estimate_compression("webp", "png", 100, 80, True)
        assert result.percent == FALLBACK_SAVINGS.percent
        assert result.confidence == FALLBACK_SAVINGS.confidence

    def test_deterministic(self):
        results = [estimate_compression("png", "webp", 10, 80, True) for _ in range(5)]
        assert len(results) == 5
        assert len({(r.percent, r.confidence, r.sample_count) for r in results}) == 1
        assert all(r == results[0] for r in results)

    def test_table_is_plain_data(self):
        assert ("png", "webp", True) in DEFAULT_SAVINGS
        assert all(0 < s.confidence <= 1 for s in DEFAULT_SAVINGS.values())


class TestStatConstruction:
    """统计记录构造测试"""

    def test_create_stat(self):
        stat = create_stat("PNG", "webp", 2_000_000, 500_000, 80)
        assert stat.input_format == "png"
        assert stat.input_size_range == SizeRange.MEDIUM
        assert stat.size_reduction_percent == pytest.approx(75.0)
        assert stat.lossy_mode is True
        assert stat.compression_time_ms is None
        assert stat.id is None
        assert stat.timestamp

    def test_lossless_flag(self):
        assert create_stat("png", "webp", 100, 50, 90).lossy_mode is False

    def test_zero_original_size(self):
        assert create_stat("png", "png", 0, 0, 80).size_reduction_percent == 0.0

    def test_with_time(self):
        stat = create_stat_with_time("jpg", "jpeg", 1000, 800, 70, 125)
        assert stat.input_format == "jpeg"
        assert stat.compression_time_ms == 125
        assert stat.size_reduction_percent == pytest.approx(20.0)


class TestSummarizeSamples:
    def test_empty(self):
        assert summarize_samples([]) == (0.0, 0.0, 0)

    def test_population_variance(self):
        summary = summarize_samples([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
        assert summary.mean == pytest.approx(5.0)
        assert summary.variance == pytest.approx(4.0)
        assert summary.count == 8
