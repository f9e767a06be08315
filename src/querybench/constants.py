"""Constants for the query-length sweep."""


class SweepConstants:
    """Centralized constants for sweep configuration."""
    DEFAULT_SAMPLES = 10  # requests per batch
    DEFAULT_RUNS = 1
    DEFAULT_CONCURRENCY = 1
    DEFAULT_TIMEOUT = 30.0  # seconds
    DEFAULT_MAX_RETRIES = 0
    QUERY_PATH = "/query"
    QUERY_PARAM = "terms"
    QUERY_SEPARATOR = "+"
    CHUNK_SIZE = 8192
    LATENCY_PERCENTILES = (50, 90, 95)
    STATS_CSV = "sweep_stats.csv"
    STATS_JSONL = "sweep_stats.jsonl"
    SAMPLES_CSV = "sweep_samples.csv"
