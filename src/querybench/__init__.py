"""Query-length sweep harness: request driver, sample aggregator and report renderer."""
from .models import (
    AggregateStat, BatchResult, LatencyResults, PointStatus, QueryLengthPoint,
    RequestSample, SampleOutcome, SweepResult,
)
from .constants import SweepConstants
from .exceptions import (
    DegenerateAggregate, DictionaryLoadError, EmptyInputError, RequestFailed,
    RequestTimeout, SweepExecutionError, TargetUnreachable,
)
from .dictionary_manager import Dictionary, DictionaryManager
from .request_session_manager import RequestSessionManager
from .request_executor import RequestExecutor
from .concurrency_manager import ConcurrencyManager
from .latency_analyzer import LatencyAnalyzer
from .sample_aggregator import SampleAggregator
from .result_exporter import ResultExporter
from .report_renderer import ChartData, ChartKind, ReportRenderer
from .sweep import QuerySweep
from .runner import BenchmarkRunner

__all__ = [
    'AggregateStat',
    'BatchResult',
    'LatencyResults',
    'PointStatus',
    'QueryLengthPoint',
    'RequestSample',
    'SampleOutcome',
    'SweepResult',
    'SweepConstants',
    'DegenerateAggregate',
    'DictionaryLoadError',
    'EmptyInputError',
    'RequestFailed',
    'RequestTimeout',
    'SweepExecutionError',
    'TargetUnreachable',
    'Dictionary',
    'DictionaryManager',
    'RequestSessionManager',
    'RequestExecutor',
    'ConcurrencyManager',
    'LatencyAnalyzer',
    'SampleAggregator',
    'ResultExporter',
    'ChartData',
    'ChartKind',
    'ReportRenderer',
    'QuerySweep',
    'BenchmarkRunner',
]
