"""Data models for the sweep harness."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class QueryLengthPoint:
    """One experimental setting: a query length over a dictionary source."""
    query_length: int
    dictionary: str = "default"

    def __post_init__(self):
        if self.query_length <= 0:
            raise ValueError(f"query_length must be positive, got {self.query_length}")


class SampleOutcome(str, Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RequestSample:
    """One completed (or abandoned) request against the target.

    Timestamps are ``time.perf_counter()`` seconds. ``first_byte_at``,
    ``last_byte_at`` and ``bytes_received`` are only set for successful
    requests; ``finished_at`` is always set.
    """
    sent_at: float
    finished_at: float
    outcome: SampleOutcome = SampleOutcome.SUCCESS
    first_byte_at: Optional[float] = None
    last_byte_at: Optional[float] = None
    bytes_received: Optional[int] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == SampleOutcome.SUCCESS

    @property
    def latency(self) -> Optional[float]:
        if not self.succeeded or self.last_byte_at is None:
            return None
        return self.last_byte_at - self.sent_at

    @property
    def time_to_first_byte(self) -> Optional[float]:
        if not self.succeeded or self.first_byte_at is None:
            return None
        return self.first_byte_at - self.sent_at

    @classmethod
    def failure(cls, sent_at: float, finished_at: float, outcome: SampleOutcome,
                error: str, status_code: Optional[int] = None) -> "RequestSample":
        return cls(sent_at=sent_at, finished_at=finished_at, outcome=outcome,
                   status_code=status_code, error=error)


@dataclass(frozen=True)
class BatchResult:
    """Samples of one batch and the wall-clock window they were taken in."""
    samples: Tuple[RequestSample, ...]
    started_at: float
    finished_at: float
    cancelled: bool = False
    query: str = ""

    @property
    def duration(self) -> float:
        return max(self.finished_at - self.started_at, 0.0)

    @property
    def success_count(self) -> int:
        return sum(1 for s in self.samples if s.succeeded)

    def __len__(self) -> int:
        return len(self.samples)


@dataclass
class LatencyResults:
    """Container for latency percentiles."""
    p50: float
    p90: float
    p95: float


class PointStatus(str, Enum):
    MEASURED = "measured"
    DEGENERATE = "degenerate"  # requests issued, none succeeded
    NO_DATA = "no_data"  # batch aborted before producing samples


@dataclass(frozen=True)
class AggregateStat:
    """Summary of all samples taken at one QueryLengthPoint.

    Latencies are in seconds and are ``None`` when no request succeeded.
    """
    query_length: int
    dictionary: str
    requests_per_sec: float
    bytes_per_sec: float
    sample_count: int
    success_count: int
    duration: float
    status: PointStatus
    query_chars: int = 0
    mean_latency: Optional[float] = None
    p50_latency: Optional[float] = None
    p90_latency: Optional[float] = None
    p95_latency: Optional[float] = None
    stddev_latency: Optional[float] = None
    error: Optional[str] = None

    @property
    def point(self) -> QueryLengthPoint:
        return QueryLengthPoint(self.query_length, self.dictionary)

    @property
    def failure_count(self) -> int:
        return self.sample_count - self.success_count

    @property
    def degenerate(self) -> bool:
        return self.status != PointStatus.MEASURED

    @classmethod
    def no_data(cls, point: QueryLengthPoint, reason: str, query_chars: int = 0) -> "AggregateStat":
        """Stat for a point whose batch was aborted."""
        return cls(
            query_length=point.query_length,
            dictionary=point.dictionary,
            requests_per_sec=0.0,
            bytes_per_sec=0.0,
            sample_count=0,
            success_count=0,
            duration=0.0,
            status=PointStatus.NO_DATA,
            query_chars=query_chars,
            error=reason,
        )

    def to_record(self) -> Dict:
        """Flat, JSON-friendly record of this stat."""
        record = asdict(self)
        record["status"] = self.status.value
        record["failure_count"] = self.failure_count
        record["degenerate"] = self.degenerate
        return record


@dataclass
class SweepResult:
    """Ordered AggregateStats of one sweep, at most one per QueryLengthPoint."""
    stats: List[AggregateStat] = field(default_factory=list)
    errors: Dict[QueryLengthPoint, str] = field(default_factory=dict)
    cut_short: bool = False

    def __post_init__(self):
        initial, self.stats = self.stats, []
        for stat in initial:
            self.add(stat)

    def add(self, stat: AggregateStat) -> None:
        """Add a stat, replacing any earlier stat for the same point."""
        for i, existing in enumerate(self.stats):
            if existing.point == stat.point:
                self.stats[i] = stat
                return
        self.stats.append(stat)

    def extend(self, stats: Iterable[AggregateStat]) -> None:
        for stat in stats:
            self.add(stat)

    def get(self, point: QueryLengthPoint) -> Optional[AggregateStat]:
        for stat in self.stats:
            if stat.point == point:
                return stat
        return None

    def sorted(self) -> List[AggregateStat]:
        """Stats ordered by ascending query length."""
        return sorted(self.stats, key=lambda s: (s.query_length, s.dictionary))

    @property
    def partial(self) -> bool:
        return self.cut_short or any(s.status == PointStatus.NO_DATA for s in self.stats)

    def __len__(self) -> int:
        return len(self.stats)

    def __iter__(self):
        return iter(self.stats)
