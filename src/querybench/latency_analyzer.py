"""Analyzes and computes latency statistics."""
import logging
from typing import Dict, List, Optional, Sequence
import numpy as np

from .constants import SweepConstants
from .models import LatencyResults


# Configure logging
logger = logging.getLogger(__name__)


class LatencyAnalyzer:
    """Analyzes and computes latency statistics."""

    @staticmethod
    def compute_percentiles(latencies: List[float]) -> LatencyResults:
        """
        Compute p50, p90, p95 percentiles.

        Args:
            latencies: List of latency measurements.

        Returns:
            LatencyResults dataclass with percentiles.
        """
        if not latencies:
            return LatencyResults(p50=0.0, p90=0.0, p95=0.0)

        p50, p90, p95 = np.percentile(latencies, SweepConstants.LATENCY_PERCENTILES)
        return LatencyResults(p50=float(p50), p90=float(p90), p95=float(p95))

    @staticmethod
    def summarize(latencies: Sequence[float]) -> Dict[str, Optional[float]]:
        """Mean, population standard deviation and percentiles; all None for no latencies."""
        if len(latencies) == 0:
            return {"mean": None, "stddev": None, "p50": None, "p90": None, "p95": None}

        values = np.asarray(latencies, dtype=float)
        percentiles = LatencyAnalyzer.compute_percentiles(list(values))
        return {
            "mean": float(values.mean()),
            "stddev": float(values.std()),
            "p50": percentiles.p50,
            "p90": percentiles.p90,
            "p95": percentiles.p95,
        }
