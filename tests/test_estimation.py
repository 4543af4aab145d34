"""估算与预测服务测试。"""

import pytest

from plume_compress.config import reset_config
from plume_compress.core.estimation import EstimationService
from plume_compress.core.prediction import (
    CompressionPredictionService,
    adjust_for_size,
    approximate_sample_count,
    prediction_confidence,
)
from plume_compress.core.statistics import create_stat
from plume_compress.exceptions import DatabaseError, StatsNotAvailableError
from plume_compress.models.settings import CompressionSettings
from plume_compress.models.stats import EstimationQuery
from plume_compress.store import InMemoryStatsStore


class FailingStore(InMemoryStatsStore):
    """所有读取都失败的存储"""

    def _select(self, criteria):
        raise DatabaseError("磁盘不可用")

    def _delete_oldest(self, keep):
        raise DatabaseError("磁盘不可用")


class TestEstimationService:
    """体积估算服务测试"""

    def test_without_store_uses_heuristic(self):
        service = EstimationService()
        result = service.estimate_for("png", CompressionSettings(quality=80), 500_000)
        assert result.percent == 85.0
        assert result.confidence == 0.9

    def test_storage_failure_falls_back(self):
        service = EstimationService(FailingStore())
        query = EstimationQuery(
            input_format="png",
            output_format="webp",
            original_size=500_000,
            quality_setting=95,
            lossy_mode=False,
        )
        result = service.estimate(query)
        assert result.percent == 43.0
        assert result.sample_count == 0

    def test_with_history(self, memory_store: InMemoryStatsStore):
        memory_store.save_stat(create_stat("jpeg", "webp", 1000, 500, 80))
        service = EstimationService(memory_store)
        result = service.estimate_for(
            "jpg", CompressionSettings(quality=80, format="webp"), 1000
        )
        assert result.sample_count == 1
        assert result.percent == pytest.approx(50.0)


class TestSizeAdjustment:
    """尺寸修正测试"""

    def test_small_medium_large(self):
        assert adjust_for_size(50.0, 500_000) == pytest.approx(40.0)
        assert adjust_for_size(50.0, 2_000_000) == pytest.approx(50.0)
        assert adjust_for_size(50.0, 6_000_000) == pytest.approx(55.0)

    def test_never_exceeds_hundred(self):
        assert adjust_for_size(95.0, 10_000_000) == 100.0

    def test_approximate_sample_counts(self):
        assert approximate_sample_count("png", "webp") == 50
        assert approximate_sample_count("jpg", "webp") == 50
        assert approximate_sample_count("jpeg", "jpeg") == 30
        assert approximate_sample_count("webp", "png") == 10

    def test_prediction_confidence_capped(self):
        assert prediction_confidence(0.8, 100) == pytest.approx(0.8)
        assert prediction_confidence(0.8, 3) == pytest.approx(0.24)
        assert prediction_confidence(2.0, 100) == 1.0


class TestPredictionService:
    """压缩预测测试"""

    def test_default_table_small_file(self):
        service = CompressionPredictionService()
        result = service.predict_compression("png", "webp", 500_000)
        assert result.percent == pytest.approx(56.0)
        assert result.confidence == pytest.approx(0.24)
        assert result.sample_count == 50

    def test_unknown_pair_fallback(self):
        result = CompressionPredictionService().predict_compression("webp", "jpeg", 2_000_000)
        assert result.percent == pytest.approx(10.0)
        assert result.sample_count == 10

    def test_historical_average(self, memory_store: InMemoryStatsStore):
        for compressed in (300, 500):
            memory_store.save_stat(create_stat("jpeg", "jpeg", 1000, compressed, 80))
        service = CompressionPredictionService(memory_store)

        result = service.predict_compression("jpg", "jpeg", 6_000_000)
        assert result.percent == pytest.approx(60.0 * 1.1)
        assert result.sample_count == 2
        assert result.confidence == pytest.approx(0.8 * 0.3)

    def test_storage_failure_uses_defaults(self):
        service = CompressionPredictionService(FailingStore())
        result = service.predict_compression("jpeg", "webp", 2_000_000)
        assert result.percent == pytest.approx(25.0)

    def test_get_compression_stats(self, memory_store: InMemoryStatsStore):
        service = CompressionPredictionService(memory_store)
        assert service.get_compression_stats("png", "png") == (0.0, 30)
        memory_store.save_stat(create_stat("png", "png", 1000, 900, 80))
        mean, count = service.get_compression_stats("png", "png")
        assert count == 1
        assert mean == pytest.approx(10.0)


class TestRecordResult:
    """结果记录测试"""

    def test_requires_store(self):
        with pytest.raises(StatsNotAvailableError):
            CompressionPredictionService().record_compression_result(
                "png", "webp", 1000, 200, 80
            )

    def test_records_with_time(self, memory_store: InMemoryStatsStore):
        service = CompressionPredictionService(memory_store)
        stat_id = service.record_compression_result("png", "webp", 1000, 200, 80, 42)
        (saved,) = memory_store.get_recent_stats(1)
        assert saved.id == stat_id
        assert saved.compression_time_ms == 42
        assert saved.size_reduction_percent == pytest.approx(80.0)

    def test_prunes_to_max_records(
        self, memory_store: InMemoryStatsStore, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("PLUME_STATS_MAX_RECORDS", "3")
        reset_config()
        service = CompressionPredictionService(memory_store)
        for compressed in range(100, 600, 100):
            service.record_compression_result("png", "webp", 1000, compressed, 80)
        assert memory_store.count_stats() == 3

    def test_prune_failure_does_not_fail_record(self):
        store = FailingStore()
        service = CompressionPredictionService(store)
        service.record_compression_result("png", "webp", 1000, 200, 80)
        assert store.count_stats() == 1
