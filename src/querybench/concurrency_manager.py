"""Manages concurrent request execution for one batch."""
import logging
import queue
import socket
import threading
import time
import concurrent.futures
from datetime import timedelta
from typing import Dict, List, Optional, Set, Tuple, Union
from urllib.parse import urlsplit
import requests

from .constants import SweepConstants
from .dictionary_manager import Dictionary, DictionaryManager
from .exceptions import TargetUnreachable
from .models import BatchResult, RequestSample, SampleOutcome
from .request_executor import RequestExecutor
from .request_session_manager import RequestSessionManager


# Configure logging
logger = logging.getLogger(__name__)

BatchBudget = Union[int, float, timedelta]


class _BatchState:
    """Samples collected by the workers of one batch, plus the requests still in flight."""

    def __init__(self):
        self._lock = threading.Lock()
        self._samples: List[RequestSample] = []
        self._in_flight: Dict[int, float] = {}
        self._next_token = 0
        self.closed = False

    def begin(self, sent_at: float) -> int:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._in_flight[token] = sent_at
            return token

    def finish(self, token: int, sample: RequestSample) -> None:
        with self._lock:
            if self.closed:
                return
            self._in_flight.pop(token, None)
            self._samples.append(sample)

    def abandon(self, now: float) -> int:
        """Record every in-flight request as cancelled and stop accepting results."""
        with self._lock:
            self.closed = True
            for sent_at in self._in_flight.values():
                self._samples.append(RequestSample.failure(
                    sent_at, now, SampleOutcome.CANCELLED, "Batch cancelled while request was in flight"))
            abandoned = len(self._in_flight)
            self._in_flight.clear()
            return abandoned

    def snapshot(self) -> Tuple[RequestSample, ...]:
        with self._lock:
            return tuple(self._samples)


class ConcurrencyManager:
    """Runs batches of requests through a bounded pool of workers."""

    def __init__(self, request_executor: RequestExecutor,
                 session_manager: Optional[RequestSessionManager] = None,
                 query_path: str = SweepConstants.QUERY_PATH,
                 query_param: str = SweepConstants.QUERY_PARAM,
                 separator: str = SweepConstants.QUERY_SEPARATOR,
                 max_retries: int = SweepConstants.DEFAULT_MAX_RETRIES,
                 poll_interval: float = 0.05,
                 cancel_grace: float = 1.0):
        self.request_executor = request_executor
        self.session_manager = session_manager or RequestSessionManager()
        self.query_path = query_path
        self.query_param = query_param
        self.separator = separator
        self.max_retries = max_retries
        self.poll_interval = poll_interval
        # Seconds to wait for abandoned workers before leaving them to finish on their own
        self.cancel_grace = cancel_grace

    @staticmethod
    def resolve_target(endpoint: str) -> None:
        """
        Check that the endpoint's host resolves.

        Raises:
            TargetUnreachable: If the endpoint has no host or the host does not resolve.
        """
        parts = urlsplit(endpoint)
        if not parts.hostname:
            raise TargetUnreachable(endpoint, "no host in endpoint")
        port = parts.port or (443 if parts.scheme == "https" else 80)
        try:
            socket.getaddrinfo(parts.hostname, port, type=socket.SOCK_STREAM)
        except socket.gaierror as e:
            logger.error(f"Cannot resolve {parts.hostname}: {e}")
            raise TargetUnreachable(endpoint, str(e)) from e

    @staticmethod
    def _parse_budget(duration_or_count: BatchBudget) -> Tuple[Optional[int], Optional[float]]:
        """Split a batch budget into (request count, duration in seconds)."""
        if isinstance(duration_or_count, bool):
            raise TypeError("duration_or_count must be an int count or a float/timedelta duration")
        if isinstance(duration_or_count, int):
            if duration_or_count < 1:
                raise ValueError(f"request count must be at least 1, got {duration_or_count}")
            return duration_or_count, None
        if isinstance(duration_or_count, timedelta):
            duration_or_count = duration_or_count.total_seconds()
        if isinstance(duration_or_count, float):
            if duration_or_count <= 0:
                raise ValueError(f"batch duration must be positive, got {duration_or_count}")
            return None, duration_or_count
        raise TypeError("duration_or_count must be an int count or a float/timedelta duration")

    def run_batch(self, endpoint: str, query_length: int, dictionary: Dictionary, concurrency: int,
                  duration_or_count: BatchBudget,
                  cancel_event: Optional[threading.Event] = None) -> BatchResult:
        """
        Issue one batch of requests for a query length.

        Args:
            endpoint: Base URL of the target server, e.g. ``http://localhost:8080``.
            query_length: Number of dictionary words in the query.
            dictionary: Word source for the query.
            concurrency: Number of concurrent workers.
            duration_or_count: An int request count, or a float/timedelta duration.
            cancel_event: When set, in-flight requests are abandoned and recorded as cancelled.

        Returns:
            BatchResult with one sample per attempted request, in completion order.

        Raises:
            TargetUnreachable: If the target host cannot be resolved.
        """
        if query_length <= 0:
            raise ValueError(f"query_length must be positive, got {query_length}")
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        count, duration = self._parse_budget(duration_or_count)
        query = DictionaryManager.build_query(dictionary, query_length, self.separator)
        url = DictionaryManager.build_url(endpoint, query, self.query_path, self.query_param, self.separator)

        self.resolve_target(endpoint)
        cancel_event = cancel_event or threading.Event()

        slots: Optional[queue.Queue] = None
        stop_at: Optional[float] = None
        if count is not None:
            slots = queue.Queue()
            for i in range(count):
                slots.put(i)
            workers = min(concurrency, count)
        else:
            stop_at = time.perf_counter() + duration
            workers = concurrency

        budget = f"{count} requests" if count is not None else f"{duration}s"
        logger.info(f"Batch: {url} with {workers} workers, {budget}")

        state = _BatchState()
        session = self.session_manager.create_session(pool_size=workers, max_retries=self.max_retries)
        batch_start = time.perf_counter()
        cancelled = False
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="querybench")
        pending = set()
        try:
            futures = [executor.submit(self._worker, session, url, state, cancel_event, slots, stop_at)
                       for _ in range(workers)]
            pending = set(futures)
            while pending:
                done, pending = concurrent.futures.wait(pending, timeout=self.poll_interval)
                for future in done:
                    future.result()
                if pending and cancel_event.is_set():
                    abandoned = state.abandon(time.perf_counter())
                    cancelled = True
                    logger.warning(f"Batch cancelled: {abandoned} in-flight requests abandoned")
                    _, pending = concurrent.futures.wait(pending, timeout=self.cancel_grace)
                    break
        finally:
            executor.shutdown(wait=not cancelled, cancel_futures=True)
            self._close_when_done(session, {f for f in pending if not f.done()})

        samples = state.snapshot()
        if samples:
            started_at = min(s.sent_at for s in samples)
            finished_at = max(s.finished_at for s in samples)
        else:
            started_at = finished_at = batch_start
        if slots is not None and not slots.empty():
            logger.info(f"{slots.qsize()} queued requests were not issued")

        result = BatchResult(samples=samples, started_at=started_at, finished_at=finished_at,
                             cancelled=cancelled or cancel_event.is_set(), query=query)
        logger.info(f"Batch done: {result.success_count}/{len(result)} succeeded in {result.duration:.3f}s")
        return result

    @staticmethod
    def _close_when_done(session: requests.Session, running: Set[concurrent.futures.Future]) -> None:
        """Close the session now, or once the last abandoned worker has returned from its request."""
        if not running:
            session.close()
            return
        logger.debug(f"Closing session after {len(running)} abandoned workers return")
        lock = threading.Lock()

        def on_done(future: concurrent.futures.Future) -> None:
            with lock:
                running.discard(future)
                last = not running
            if last:
                session.close()

        for future in list(running):
            future.add_done_callback(on_done)

    def _worker(self, session: requests.Session, url: str, state: _BatchState, cancel_event: threading.Event,
                slots: Optional[queue.Queue], stop_at: Optional[float]) -> None:
        """Draw request slots until the queue is empty, the duration elapses, or the batch is cancelled."""
        while not cancel_event.is_set() and not state.closed:
            if slots is not None:
                try:
                    slots.get_nowait()
                except queue.Empty:
                    return
            elif time.perf_counter() >= stop_at:
                return

            sent_at = time.perf_counter()
            token = state.begin(sent_at)
            try:
                sample = self.request_executor.send_request(session, url)
            except Exception as e:
                logger.error(f"Error in request: {e}")
                sample = RequestSample.failure(sent_at, time.perf_counter(), SampleOutcome.FAILED, str(e))
            state.finish(token, sample)
