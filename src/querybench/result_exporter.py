"""Handles exporting sweep results to various formats."""
import json
import logging
from pathlib import Path
from typing import Dict, List, Sequence, Union
import numpy as np
import pandas as pd

from .models import AggregateStat, PointStatus, QueryLengthPoint, RequestSample, SweepResult


# Configure logging
logger = logging.getLogger(__name__)

# Leading columns of every stats record, in this order
RECORD_FIELDS = [
    "query_length", "mean_latency", "p95_latency", "requests_per_sec",
    "bytes_per_sec", "sample_count", "degenerate",
]

_OPTIONAL_FLOATS = ["mean_latency", "p50_latency", "p90_latency", "p95_latency", "stddev_latency"]


class ResultExporter:
    """Handles exporting sweep results to various formats."""

    @staticmethod
    def to_dataframe(sweep: SweepResult) -> pd.DataFrame:
        """One row per point, sorted by query length."""
        records = [stat.to_record() for stat in sweep.sorted()]
        df = pd.DataFrame(records)
        if df.empty:
            return pd.DataFrame(columns=RECORD_FIELDS)
        rest = [c for c in df.columns if c not in RECORD_FIELDS]
        return df[RECORD_FIELDS + rest]

    @staticmethod
    def save_stats_jsonl(sweep: SweepResult, output_path: Union[Path, str]) -> None:
        """
        Save one JSON record per point, one per line.

        Undefined latencies are written as ``null``.

        Args:
            sweep: The sweep to save.
            output_path: Path of the JSONL file.
        """
        with open(output_path, "w", encoding="utf-8") as f:
            for stat in sweep.sorted():
                record = stat.to_record()
                ordered = {k: record.pop(k) for k in RECORD_FIELDS}
                ordered.update(record)
                f.write(json.dumps(ordered) + "\n")
        logger.info(f"JSONL saved: {output_path}")

    @staticmethod
    def save_stats_csv(sweep: SweepResult, output_path: Union[Path, str]) -> None:
        """Save the sweep stats to CSV."""
        ResultExporter.to_dataframe(sweep).to_csv(output_path, index=False)
        logger.info(f"CSV saved: {output_path}")

    @staticmethod
    def load_stats_csv(input_path: Union[Path, str]) -> SweepResult:
        """
        Load sweep stats from CSV without running the sweep again.

        Args:
            input_path: Path to load CSV from.

        Returns:
            SweepResult rebuilt from the rows.
        """
        df = pd.read_csv(input_path)
        sweep = SweepResult()

        for _, row in df.iterrows():
            optional = {
                name: (None if pd.isna(row[name]) else float(row[name]))
                for name in _OPTIONAL_FLOATS if name in row
            }
            error = row.get("error")
            stat = AggregateStat(
                query_length=int(row["query_length"]),
                dictionary=str(row.get("dictionary", "default")),
                requests_per_sec=float(row["requests_per_sec"]),
                bytes_per_sec=float(row["bytes_per_sec"]),
                sample_count=int(row["sample_count"]),
                success_count=int(row.get("success_count", 0)),
                duration=float(row.get("duration", 0.0)),
                status=PointStatus(row.get("status", PointStatus.MEASURED.value)),
                query_chars=int(row.get("query_chars", 0)),
                error=None if error is None or pd.isna(error) else str(error),
                **optional,
            )
            sweep.add(stat)
            if stat.status == PointStatus.NO_DATA:
                sweep.errors[stat.point] = stat.error or "no data"

        logger.info(f"Results loaded from CSV: {input_path}")
        return sweep

    @staticmethod
    def save_samples_csv(samples_by_point: Dict[QueryLengthPoint, Sequence[RequestSample]],
                         output_path: Union[Path, str]) -> None:
        """
        Save per-request detail for every point.

        Args:
            samples_by_point: Samples keyed by sweep point.
            output_path: Path to save detailed results CSV.
        """
        if not samples_by_point:
            logger.warning("No samples available for saving")
            return

        rows: List[dict] = []
        for point, samples in samples_by_point.items():
            for sample in samples:
                rows.append({
                    "query_length": point.query_length,
                    "dictionary": point.dictionary,
                    "outcome": sample.outcome.value,
                    "latency_ms": sample.latency * 1000 if sample.latency is not None else np.nan,
                    "ttfb_ms": (sample.time_to_first_byte * 1000
                                if sample.time_to_first_byte is not None else np.nan),
                    "bytes_received": sample.bytes_received,
                    "status_code": sample.status_code,
                    "sent_at": sample.sent_at,
                    "finished_at": sample.finished_at,
                    "error": sample.error,
                })

        df = pd.DataFrame(rows)
        df = df.sort_values(by=["query_length", "sent_at"])
        df.to_csv(output_path, index=False)
        logger.info(f"Detailed samples saved to CSV: {output_path}")
