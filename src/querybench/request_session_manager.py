"""Manages HTTP request sessions for one batch."""
import logging
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from .constants import SweepConstants


# Configure logging
logger = logging.getLogger(__name__)


class RequestSessionManager:
    """Manages HTTP request sessions with a pool sized to the batch concurrency."""

    @staticmethod
    def create_session(pool_size: int = 1, max_retries: int = -1) -> requests.Session:
        """Create a requests session whose connection pool holds ``pool_size`` connections.

        Retries are off by default so that a retried request is not
        measured as a single slow one.
        """
        if max_retries == -1:
            max_retries = SweepConstants.DEFAULT_MAX_RETRIES
        session = requests.Session()
        retry = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=max(pool_size, 1), max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        logger.debug(f"Created session with pool size {pool_size}, retries {max_retries}")
        return session
