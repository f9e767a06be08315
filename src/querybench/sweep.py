"""Runs a query-length sweep against one target."""
import logging
import threading
import concurrent.futures
from typing import Dict, List, Optional, Tuple

from .concurrency_manager import ConcurrencyManager
from .dictionary_manager import Dictionary, DictionaryManager
from .exceptions import TargetUnreachable
from .models import AggregateStat, BatchResult, QueryLengthPoint, RequestSample, SweepResult
from .request_executor import RequestExecutor
from .request_session_manager import RequestSessionManager
from .sample_aggregator import SampleAggregator
from src.shared.config import Config


# Configure logging
logger = logging.getLogger(__name__)


class QuerySweep:
    """Runs one batch series per query length and aggregates them into a SweepResult."""

    def __init__(self, config: Config, concurrency_manager: Optional[ConcurrencyManager] = None,
                 aggregator: Optional[SampleAggregator] = None):
        self.config = config
        self.concurrency_manager = concurrency_manager or ConcurrencyManager(
            RequestExecutor(timeout=config.request_timeout),
            RequestSessionManager(),
            query_path=config.query_path,
            query_param=config.query_param,
            separator=config.query_separator,
            max_retries=config.max_retries,
        )
        self.aggregator = aggregator or SampleAggregator()
        self.samples: Dict[QueryLengthPoint, List[RequestSample]] = {}
        self._samples_lock = threading.Lock()

    def query_lengths(self, dictionary: Dictionary) -> List[int]:
        """Configured lengths, ascending and de-duplicated, or every prefix length of the dictionary."""
        lengths = self.config.query_lengths or range(1, len(dictionary) + 1)
        return sorted(set(lengths))

    def worker_budget(self, parallel_points: int) -> int:
        """Workers per point so that all points running at once stay within the concurrency level."""
        return max(self.config.concurrency // parallel_points, 1)

    def run(self, dictionary: Dictionary, cancel_event: Optional[threading.Event] = None) -> SweepResult:
        """
        Run the sweep.

        A point whose target is unreachable, or whose query is longer than
        the dictionary, is recorded as ``no_data`` and the sweep moves on.
        With ``sweep_timeout`` set, the cancel event fires after that many
        seconds: in-flight requests are recorded as cancelled and points not
        yet started get ``no_data``.

        Args:
            dictionary: Word source for the queries.
            cancel_event: Set it to stop the sweep early.

        Returns:
            The SweepResult, one stat per query length.
        """
        cancel_event = cancel_event or threading.Event()
        lengths = self.query_lengths(dictionary)
        points = [QueryLengthPoint(length, dictionary.name) for length in lengths]
        parallel = min(self.config.point_parallelism, self.config.concurrency, len(points)) or 1
        workers = self.worker_budget(parallel)
        self.samples = {}

        timer = None
        if self.config.sweep_timeout is not None:
            timer = threading.Timer(self.config.sweep_timeout, cancel_event.set)
            timer.daemon = True
            timer.start()

        logger.info(f"Sweeping {len(points)} query lengths over '{dictionary.name}' "
                    f"({parallel} at a time, {workers} workers each)")
        result = SweepResult()
        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=parallel) as executor:
                futures = {executor.submit(self.run_point, point, dictionary, workers, cancel_event): point
                           for point in points}
                for future in concurrent.futures.as_completed(futures):
                    point = futures[future]
                    stat, error = future.result()
                    result.add(stat)
                    if error is not None:
                        result.errors[point] = error
        finally:
            if timer is not None:
                timer.cancel()

        result.cut_short = cancel_event.is_set()
        if result.partial:
            logger.warning(f"Sweep finished with partial results: "
                           f"{len(result.errors)} of {len(points)} points have no data")
        return result

    def run_point(self, point: QueryLengthPoint, dictionary: Dictionary, workers: int,
                  cancel_event: threading.Event) -> Tuple[AggregateStat, Optional[str]]:
        """Run every batch of one point and aggregate them. Returns the stat and a fatal error, if any."""
        try:
            query = DictionaryManager.build_query(dictionary, point.query_length, self.config.query_separator)
        except ValueError as e:
            logger.error(f"Skipping query length {point.query_length}: {e}")
            return AggregateStat.no_data(point, str(e)), str(e)

        if cancel_event.is_set():
            return AggregateStat.no_data(point, "sweep cancelled before point started", len(query)), "cancelled"

        budget = self.config.batch_duration if self.config.batch_duration is not None else self.config.samples
        batches: List[BatchResult] = []
        for run in range(self.config.runs):
            if cancel_event.is_set():
                break
            logger.info(f"Query length {point.query_length}, run {run + 1}/{self.config.runs}: {query}")
            try:
                batch = self.concurrency_manager.run_batch(
                    self.config.base_url, point.query_length, dictionary, workers, budget, cancel_event)
            except TargetUnreachable as e:
                logger.error(f"Batch for query length {point.query_length} aborted: {e}")
                return AggregateStat.no_data(point, str(e), len(query)), str(e)
            batches.append(batch)

        if not batches:
            return AggregateStat.no_data(point, "sweep cancelled before point started", len(query)), "cancelled"

        with self._samples_lock:
            self.samples[point] = [s for batch in batches for s in batch.samples]
        stat = self.aggregator.aggregate_batches(batches, point)
        if stat.mean_latency is not None:
            logger.info(f"Query length {point.query_length} finished: "
                        f"avg. response time {stat.mean_latency * 1000:.2f}ms, "
                        f"{stat.requests_per_sec:.1f} req/s")
        return stat, None
