"""Unit tests for result export."""

import json

import pandas as pd
import pytest

from src.querybench.models import PointStatus, QueryLengthPoint, SweepResult
from src.querybench.result_exporter import RECORD_FIELDS, ResultExporter
from tests.factories import make_failure, make_stat, make_success


@pytest.fixture
def sweep():
    return SweepResult([
        make_stat(5, mean=0.2),
        make_stat(1, mean=0.1),
        make_stat(3, status=PointStatus.DEGENERATE),
        make_stat(8, status=PointStatus.NO_DATA),
    ])


class TestJsonl:
    """Test the one-record-per-line output."""

    def test_one_record_per_point(self, sweep, tmp_path):
        path = tmp_path / "stats.jsonl"
        ResultExporter.save_stats_jsonl(sweep, path)

        records = [json.loads(line) for line in path.read_text().splitlines()]

        assert [r["query_length"] for r in records] == [1, 3, 5, 8]
        assert list(records[0])[:len(RECORD_FIELDS)] == RECORD_FIELDS

    def test_degenerate_and_no_data_records(self, sweep, tmp_path):
        path = tmp_path / "stats.jsonl"
        ResultExporter.save_stats_jsonl(sweep, path)
        records = {r["query_length"]: r for r in map(json.loads, path.read_text().splitlines())}

        assert records[3]["degenerate"] is True
        assert records[3]["mean_latency"] is None
        assert records[3]["status"] == "degenerate"
        assert records[8]["status"] == "no_data"
        assert records[8]["sample_count"] == 0
        assert records[1]["degenerate"] is False
        assert records[1]["mean_latency"] == pytest.approx(0.1)


class TestCsv:
    """Test CSV export and reload."""

    def test_reload_rebuilds_sweep(self, sweep, tmp_path):
        path = tmp_path / "stats.csv"
        ResultExporter.save_stats_csv(sweep, path)

        loaded = ResultExporter.load_stats_csv(path)

        assert len(loaded) == 4
        measured = loaded.get(QueryLengthPoint(5, "common"))
        assert measured.mean_latency == pytest.approx(0.2)
        assert measured.p95_latency == pytest.approx(0.4)
        degenerate = loaded.get(QueryLengthPoint(3, "common"))
        assert degenerate.status == PointStatus.DEGENERATE
        assert degenerate.mean_latency is None
        no_data = loaded.get(QueryLengthPoint(8, "common"))
        assert no_data.status == PointStatus.NO_DATA
        assert no_data.error == "unreachable"
        assert loaded.partial
        assert QueryLengthPoint(8, "common") in loaded.errors

    def test_empty_sweep_writes_header(self, tmp_path):
        path = tmp_path / "empty.csv"
        ResultExporter.save_stats_csv(SweepResult(), path)
        assert list(pd.read_csv(path).columns) == RECORD_FIELDS


class TestSamplesCsv:
    """Test per-request detail export."""

    def test_samples_rows(self, tmp_path):
        path = tmp_path / "samples.csv"
        samples = {
            QueryLengthPoint(2, "common"): [make_success(1.0, 0.05, size=42), make_failure(0.5, 2.0)],
            QueryLengthPoint(1, "common"): [make_success(0.0, 0.01)],
        }

        ResultExporter.save_samples_csv(samples, path)

        df = pd.read_csv(path)
        assert len(df) == 3
        assert list(df["query_length"]) == [1, 2, 2]
        assert list(df["outcome"]) == ["success", "timeout", "success"]
        assert df["latency_ms"].iloc[2] == pytest.approx(50.0)
        assert pd.isna(df["latency_ms"].iloc[1])

    def test_no_samples_writes_nothing(self, tmp_path):
        path = tmp_path / "samples.csv"
        ResultExporter.save_samples_csv({}, path)
        assert not path.exists()
