"""
Unit tests for MetricsCollector.

Tests metrics collection functionality including:
- Thread-safety under concurrent access
- Bounded storage with LRU eviction
- Aggregated summaries and the timing decorator
"""

import threading

import pytest

from mdb_provider.observability.metrics import (
    MetricsCollector,
    get_metrics_collector,
    record_operation,
    timed_operation,
)


class TestMetricsCollectorThreadSafety:
    """Test thread-safety of metrics collection."""

    def test_concurrent_record_operation(self):
        """Test that concurrent record_operation calls are thread-safe."""
        collector = MetricsCollector()
        num_threads = 10
        operations_per_thread = 100
        barrier = threading.Barrier(num_threads)

        def record_operations(thread_id: int):
            barrier.wait()
            for i in range(operations_per_thread):
                collector.record_operation(
                    "provider.find", duration_ms=1.0 + i, success=True, collection=f"c{thread_id}"
                )

        threads = [
            threading.Thread(target=record_operations, args=(i,)) for i in range(num_threads)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert collector.get_operation_count("provider.find") == num_threads * operations_per_thread
        assert collector.get_metrics()["total_operations"] == num_threads


class TestMetricsCollectorBounds:
    """Test bounded storage."""

    def test_lru_eviction(self):
        collector = MetricsCollector(max_metrics=2)
        collector.record_operation("provider.find", 1.0, collection="a")
        collector.record_operation("provider.find", 1.0, collection="b")
        collector.record_operation("provider.find", 1.0, collection="a")
        collector.record_operation("provider.find", 1.0, collection="c")

        keys = list(collector.get_metrics()["metrics"])
        assert "provider.find[collection=b]" not in keys
        assert set(keys) == {"provider.find[collection=a]", "provider.find[collection=c]"}


class TestMetricsContent:
    """Test recorded values."""

    def test_durations_and_errors(self):
        collector = MetricsCollector()
        collector.record_operation("provider.remove", 10.0, True)
        collector.record_operation("provider.remove", 30.0, False)

        metric = collector.get_metrics("provider.remove")["metrics"]["provider.remove"]
        assert metric["count"] == 2
        assert metric["avg_duration_ms"] == 20.0
        assert metric["min_duration_ms"] == 10.0
        assert metric["max_duration_ms"] == 30.0
        assert metric["error_count"] == 1
        assert metric["error_rate_percent"] == 50.0

    def test_summary_drops_tags(self):
        collector = MetricsCollector()
        collector.record_operation("provider.count", 1.0, collection="users")
        collector.record_operation("provider.count", 3.0, collection="orders")

        summary = collector.get_summary()
        assert summary["total_operations"] == 2
        assert summary["summary"]["provider.count"]["count"] == 2

    def test_reset(self):
        collector = MetricsCollector()
        collector.record_operation("provider.count", 1.0)
        collector.reset()
        assert collector.get_metrics()["metrics"] == {}


class TestGlobalCollector:
    def test_singleton(self):
        assert get_metrics_collector() is get_metrics_collector()

    def test_record_operation_uses_global(self):
        record_operation("provider.find", 2.0, collection="users")
        assert get_metrics_collector().get_operation_count("provider.find") == 1


class TestTimedOperation:
    """Test the timed_operation decorator."""

    @pytest.mark.asyncio
    async def test_success(self):
        @timed_operation("test.warmup")
        async def warmup():
            return "ready"

        assert await warmup() == "ready"
        metrics = get_metrics_collector().get_metrics("test.warmup")["metrics"]
        assert metrics["test.warmup"]["error_count"] == 0

    @pytest.mark.asyncio
    async def test_failure_is_recorded_and_raised(self):
        @timed_operation("test.warmup", stage="cold")
        async def warmup():
            raise RuntimeError("cold start")

        with pytest.raises(RuntimeError):
            await warmup()
        metrics = get_metrics_collector().get_metrics("test.warmup")["metrics"]
        assert metrics["test.warmup[stage=cold]"]["error_count"] == 1
