"""Reduces request samples into one AggregateStat per sweep point."""
import logging
import warnings
from typing import Iterable, Optional, Sequence

from .exceptions import DegenerateAggregate
from .latency_analyzer import LatencyAnalyzer
from .models import AggregateStat, BatchResult, PointStatus, QueryLengthPoint, RequestSample


# Configure logging
logger = logging.getLogger(__name__)


class SampleAggregator:
    """Reduces request samples into one AggregateStat per sweep point.

    Latency is summarized over successful samples only, as both the mean and
    the 95th percentile (p50, p90 and the standard deviation are kept too).
    Rates are divided by the full wall-clock window of the batch, failed and
    timed-out requests included.
    """

    @staticmethod
    def window(samples: Sequence[RequestSample]) -> float:
        """Seconds from the first request sent to the last request finished."""
        if not samples:
            return 0.0
        return max(s.finished_at for s in samples) - min(s.sent_at for s in samples)

    def aggregate(self, samples: Sequence[RequestSample], point: QueryLengthPoint,
                  duration: Optional[float] = None, query_chars: int = 0) -> AggregateStat:
        """
        Aggregate the samples of one point.

        Args:
            samples: All samples taken at the point, failures included.
            point: The sweep point the samples belong to.
            duration: Wall-clock window in seconds. Defaults to the window spanned by the samples.
            query_chars: Character length of the query that was sent.

        Returns:
            The AggregateStat. A point with no successful samples is flagged
            degenerate with null latencies and zero rates.
        """
        samples = list(samples)
        if duration is None:
            duration = self.window(samples)
        if duration < 0:
            raise ValueError(f"duration must not be negative, got {duration}")

        successful = [s for s in samples if s.succeeded]
        if not successful:
            message = (f"No successful samples for query length {point.query_length} "
                       f"({len(samples)} attempted)")
            logger.warning(message)
            warnings.warn(message, DegenerateAggregate, stacklevel=2)
            return AggregateStat(
                query_length=point.query_length,
                dictionary=point.dictionary,
                requests_per_sec=0.0,
                bytes_per_sec=0.0,
                sample_count=len(samples),
                success_count=0,
                duration=duration,
                status=PointStatus.DEGENERATE,
                query_chars=query_chars,
            )

        summary = LatencyAnalyzer.summarize([s.latency for s in successful])
        total_bytes = sum(s.bytes_received or 0 for s in successful)
        if duration > 0:
            requests_per_sec = len(successful) / duration
            bytes_per_sec = total_bytes / duration
        else:
            requests_per_sec = bytes_per_sec = 0.0

        return AggregateStat(
            query_length=point.query_length,
            dictionary=point.dictionary,
            requests_per_sec=requests_per_sec,
            bytes_per_sec=bytes_per_sec,
            sample_count=len(samples),
            success_count=len(successful),
            duration=duration,
            status=PointStatus.MEASURED,
            query_chars=query_chars,
            mean_latency=summary["mean"],
            p50_latency=summary["p50"],
            p90_latency=summary["p90"],
            p95_latency=summary["p95"],
            stddev_latency=summary["stddev"],
        )

    def aggregate_batches(self, batches: Iterable[BatchResult], point: QueryLengthPoint) -> AggregateStat:
        """Pool repeated batches at one point; the denominator is the sum of their windows."""
        batches = list(batches)
        samples = [s for batch in batches for s in batch.samples]
        duration = sum(batch.duration for batch in batches)
        query_chars = len(batches[0].query) if batches else 0
        return self.aggregate(samples, point, duration=duration, query_chars=query_chars)
