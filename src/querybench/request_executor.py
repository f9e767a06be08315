"""Handles individual request execution and timing."""
import time
import logging
from typing import Optional, Tuple
import requests
from urllib3.exceptions import MaxRetryError, NewConnectionError, TimeoutError as Urllib3TimeoutError

from .constants import SweepConstants
from .exceptions import RequestFailed, RequestTimeout
from .models import RequestSample, SampleOutcome


# Configure logging
logger = logging.getLogger(__name__)


def _is_read_timeout(error: requests.RequestException) -> bool:
    # requests wraps body read timeouts, and timeouts with retries exhausted, in a ConnectionError
    for arg in error.args:
        if isinstance(arg, MaxRetryError):
            arg = arg.reason
        # urllib3 derives NewConnectionError (e.g. connection refused) from its timeout errors
        if isinstance(arg, NewConnectionError):
            return False
        if isinstance(arg, Urllib3TimeoutError):
            return True
    return False


class RequestExecutor:
    """Handles individual request execution and timing."""

    def __init__(self, timeout: float = SweepConstants.DEFAULT_TIMEOUT,
                 chunk_size: int = SweepConstants.CHUNK_SIZE):
        self.timeout = timeout
        self.chunk_size = chunk_size

    def send_request(self, session: requests.Session, url: str, timeout: Optional[float] = None) -> RequestSample:
        """
        Send a single GET request and time it.

        Per-request failures never raise: they come back as a sample whose
        outcome is ``timeout`` or ``failed``.

        Args:
            session: Requests session owned by the current batch.
            url: Full request URL including the query string.
            timeout: Overall time allowed for the request, in seconds.

        Returns:
            The RequestSample for this request.
        """
        timeout = self.timeout if timeout is None else timeout
        start_time = time.perf_counter()
        try:
            first_byte, last_byte, received, status = self._execute(session, url, timeout, start_time)
        except RequestTimeout as e:
            logger.debug(f"Request timed out: {e}")
            return RequestSample.failure(start_time, time.perf_counter(), SampleOutcome.TIMEOUT, str(e))
        except RequestFailed as e:
            logger.debug(f"Request failed: {e}")
            return RequestSample.failure(start_time, time.perf_counter(), SampleOutcome.FAILED, str(e), e.status_code)

        return RequestSample(
            sent_at=start_time,
            finished_at=last_byte,
            outcome=SampleOutcome.SUCCESS,
            first_byte_at=first_byte,
            last_byte_at=last_byte,
            bytes_received=received,
            status_code=status,
        )

    def _execute(self, session: requests.Session, url: str, timeout: float,
                 start_time: float) -> Tuple[float, float, int, int]:
        """Issue the request and drain the body.

        Raises:
            RequestTimeout: If the request exceeds ``timeout`` overall or on any socket operation.
            RequestFailed: On connection errors and HTTP error statuses.
        """
        deadline = start_time + timeout
        try:
            with session.get(url, stream=True, timeout=timeout) as response:
                first_byte = time.perf_counter()
                response.raise_for_status()
                received = 0
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    received += len(chunk)
                    if time.perf_counter() > deadline:
                        raise RequestTimeout(f"Request to {url} exceeded {timeout}s")
                last_byte = time.perf_counter()
                return first_byte, last_byte, received, response.status_code
        except requests.Timeout as e:
            raise RequestTimeout(f"Request to {url} timed out after {timeout}s") from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise RequestFailed(f"Request to {url} returned {status}", status) from e
        except requests.RequestException as e:
            if _is_read_timeout(e):
                raise RequestTimeout(f"Request to {url} timed out after {timeout}s") from e
            raise RequestFailed(f"Request to {url} failed: {e}") from e
