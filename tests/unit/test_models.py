"""Unit tests for the sweep data model."""

import pytest

from src.querybench.models import (
    AggregateStat, BatchResult, PointStatus, QueryLengthPoint, SampleOutcome, SweepResult,
)
from tests.factories import make_failure, make_stat, make_success


class TestQueryLengthPoint:
    """Test QueryLengthPoint construction."""

    def test_rejects_non_positive_length(self):
        with pytest.raises(ValueError):
            QueryLengthPoint(0)

    def test_points_are_hashable_and_comparable(self):
        assert QueryLengthPoint(3, "common") == QueryLengthPoint(3, "common")
        assert len({QueryLengthPoint(3, "a"), QueryLengthPoint(3, "a"), QueryLengthPoint(3, "b")}) == 2


class TestRequestSample:
    """Test RequestSample derived timings."""

    def test_success_latency(self):
        sample = make_success(sent_at=10.0, latency=0.5)
        assert sample.succeeded
        assert sample.latency == pytest.approx(0.5)
        assert sample.time_to_first_byte == pytest.approx(0.25)

    def test_failure_has_no_latency_or_bytes(self):
        sample = make_failure(sent_at=1.0, finished_at=2.0)
        assert not sample.succeeded
        assert sample.outcome == SampleOutcome.TIMEOUT
        assert sample.latency is None
        assert sample.time_to_first_byte is None
        assert sample.bytes_received is None

    def test_samples_are_immutable(self):
        sample = make_success(0.0, 0.1)
        with pytest.raises(AttributeError):
            sample.bytes_received = 5


class TestBatchResult:
    """Test BatchResult window."""

    def test_duration_and_success_count(self):
        batch = BatchResult(
            samples=(make_success(0.0, 0.1), make_failure(0.0, 2.0)),
            started_at=0.0, finished_at=2.0)
        assert batch.duration == pytest.approx(2.0)
        assert batch.success_count == 1
        assert len(batch) == 2


class TestAggregateStat:
    """Test AggregateStat flags and records."""

    def test_no_data_is_flagged(self):
        stat = AggregateStat.no_data(QueryLengthPoint(4, "common"), "unreachable")
        assert stat.status == PointStatus.NO_DATA
        assert stat.degenerate
        assert stat.mean_latency is None
        assert stat.requests_per_sec == 0.0
        assert stat.error == "unreachable"

    def test_degenerate_differs_from_no_data(self):
        degenerate = make_stat(4, status=PointStatus.DEGENERATE)
        no_data = make_stat(4, status=PointStatus.NO_DATA)
        assert degenerate.degenerate and no_data.degenerate
        assert degenerate.status != no_data.status
        assert degenerate.sample_count > 0
        assert no_data.sample_count == 0

    def test_to_record(self):
        record = make_stat(2).to_record()
        assert record["status"] == "measured"
        assert record["degenerate"] is False
        assert record["failure_count"] == 0
        assert record["query_length"] == 2


class TestSweepResult:
    """Test SweepResult ordering and uniqueness."""

    def test_one_stat_per_point(self):
        result = SweepResult()
        result.add(make_stat(5, mean=0.1))
        result.add(make_stat(5, mean=0.2))
        assert len(result) == 1
        assert result.get(QueryLengthPoint(5, "common")).mean_latency == 0.2

    def test_constructor_deduplicates(self):
        result = SweepResult([make_stat(1), make_stat(1, mean=0.3), make_stat(2)])
        assert len(result) == 2

    def test_sorted_by_query_length(self):
        result = SweepResult([make_stat(10), make_stat(1), make_stat(5)])
        assert [s.query_length for s in result.sorted()] == [1, 5, 10]

    def test_partial(self):
        assert not SweepResult([make_stat(1)]).partial
        assert SweepResult([make_stat(1), make_stat(2, status=PointStatus.NO_DATA)]).partial
        assert SweepResult([make_stat(1)], cut_short=True).partial
        # A degenerate point was measured; the sweep is not partial because of it
        assert not SweepResult([make_stat(1, status=PointStatus.DEGENERATE)]).partial
