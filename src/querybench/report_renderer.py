"""Renders sweep results into charts."""
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

from .exceptions import EmptyInputError
from .models import AggregateStat, PointStatus, SweepResult


# Configure logging
logger = logging.getLogger(__name__)


class ChartKind(str, Enum):
    LATENCY = "latency"
    BYTE_THROUGHPUT = "byte_throughput"
    REQUEST_THROUGHPUT = "request_throughput"
    DICTIONARY_LATENCY = "dictionary_latency"


@dataclass
class ChartData:
    """Structured plot data for one chart.

    ``x`` is ascending. Every series has one value per x; a NaN is a gap.
    ``gaps`` lists the x values whose point was not measured, with why.
    """
    kind: ChartKind
    title: str
    xlabel: str
    ylabel: str
    x: List[int] = field(default_factory=list)
    series: Dict[str, List[float]] = field(default_factory=dict)
    gaps: List[Tuple[int, PointStatus]] = field(default_factory=list)


def _ms(value: Optional[float]) -> float:
    return value * 1000 if value is not None else math.nan


# (title, ylabel, {series label: value getter}, whether a degenerate point is a measured zero)
_CHARTS: Dict[ChartKind, Tuple[str, str, Dict[str, Callable[[AggregateStat], float]], bool]] = {
    ChartKind.LATENCY: (
        "Query Length vs. Response Time", "Response time (ms)",
        {"mean": lambda s: _ms(s.mean_latency), "p95": lambda s: _ms(s.p95_latency)}, False),
    ChartKind.BYTE_THROUGHPUT: (
        "Query Length vs. Byte Throughput", "Throughput (bytes/s)",
        {"bytes/s": lambda s: s.bytes_per_sec}, True),
    ChartKind.REQUEST_THROUGHPUT: (
        "Query Length vs. Request Throughput", "Throughput (requests/s)",
        {"requests/s": lambda s: s.requests_per_sec}, True),
    ChartKind.DICTIONARY_LATENCY: (
        "Query Length vs. Response Time, Dictionary by Word Frequency", "Response time (ms)",
        {"mean": lambda s: _ms(s.mean_latency), "p95": lambda s: _ms(s.p95_latency)}, False),
}

# x-axis choices: AggregateStat attribute -> axis label
X_AXES = {
    "query_length": "Query length (words)",
    "query_chars": "Query length (characters)",
}

_GAP_LABELS = {
    PointStatus.DEGENERATE: "no successful requests",
    PointStatus.NO_DATA: "no data",
}


class ReportRenderer:
    """Renders sweep results into charts."""

    def __init__(self, figsize: Tuple[float, float] = (8, 5), dpi: int = 150, x_axis: str = "query_length"):
        if x_axis not in X_AXES:
            raise ValueError(f"x_axis must be one of {sorted(X_AXES)}, got {x_axis!r}")
        self.figsize = figsize
        self.dpi = dpi
        self.x_axis = x_axis

    def chart_data(self, sweep_result: SweepResult, chart_kind: ChartKind) -> ChartData:
        """
        Build the plot data for a chart.

        On the character axis, points that never had a query (longer than
        the dictionary) have no x value and are left out.

        Raises:
            EmptyInputError: If the sweep has no points to plot.
        """
        if len(sweep_result) == 0:
            raise EmptyInputError(f"Cannot render {chart_kind.value} chart: sweep result is empty")

        title, ylabel, getters, degenerate_is_zero = _CHARTS[chart_kind]
        stats = sweep_result.sorted()
        if chart_kind == ChartKind.DICTIONARY_LATENCY:
            names = sorted({s.dictionary for s in stats})
            title = f"{title} ({', '.join(names)})"

        if self.x_axis == "query_chars":
            skipped = [s.query_length for s in stats if s.query_chars <= 0]
            if skipped:
                logger.warning(f"No query length in characters for points {skipped}; left off the chart")
            stats = sorted((s for s in stats if s.query_chars > 0), key=lambda s: (s.query_chars, s.query_length))
            if not stats:
                raise EmptyInputError(f"Cannot render {chart_kind.value} chart: no point has a character length")

        data = ChartData(kind=chart_kind, title=title, xlabel=X_AXES[self.x_axis], ylabel=ylabel)
        data.series = {label: [] for label in getters}
        for stat in stats:
            x = getattr(stat, self.x_axis)
            data.x.append(x)
            if stat.degenerate:
                data.gaps.append((x, stat.status))
            for label, getter in getters.items():
                if stat.status == PointStatus.NO_DATA:
                    value = math.nan
                elif stat.status == PointStatus.DEGENERATE:
                    value = 0.0 if degenerate_is_zero else math.nan
                else:
                    value = getter(stat)
                data.series[label].append(value)
        return data

    def render(self, sweep_result: SweepResult, chart_kind: ChartKind,
               output_path: Union[Path, str, None] = None) -> ChartData:
        """
        Render one chart.

        Unmeasured points are never interpolated over: the line breaks at
        them and each one is marked with a dotted line and a label.

        Args:
            sweep_result: The sweep to plot.
            chart_kind: Which chart to render.
            output_path: Where to save a PNG; when omitted only the plot data is returned.

        Returns:
            The plot data.

        Raises:
            EmptyInputError: If the sweep has no points.
        """
        chart_kind = ChartKind(chart_kind)
        data = self.chart_data(sweep_result, chart_kind)
        if output_path is not None:
            self._draw(data, output_path)
        return data

    def _draw(self, data: ChartData, output_path: Union[Path, str]) -> None:
        sns.set_theme(style="whitegrid")
        fig, ax = plt.subplots(figsize=self.figsize)
        try:
            markers = ["o", "s", "^", "D"]
            for i, (label, values) in enumerate(data.series.items()):
                ax.plot(data.x, values, label=label, marker=markers[i % len(markers)], linestyle="-")

            for x, status in data.gaps:
                color = "tab:red" if status == PointStatus.NO_DATA else "tab:gray"
                ax.axvline(x, color=color, linestyle=":", alpha=0.8)
                ax.annotate(_GAP_LABELS[status], xy=(x, 0.98), xycoords=ax.get_xaxis_transform(),
                            rotation=90, ha="right", va="top", fontsize=7, color=color)

            ax.set_title(data.title)
            ax.set_xlabel(data.xlabel)
            ax.set_ylabel(data.ylabel)
            if data.x:
                ax.set_xlim(min(data.x), max(data.x) if max(data.x) > min(data.x) else min(data.x) + 1)
            ax.legend()
            fig.tight_layout()
            fig.savefig(output_path, dpi=self.dpi)
        finally:
            plt.close(fig)
        logger.info(f"Graph saved: {output_path}")

    def render_all(self, sweep_result: SweepResult, output_dir: Union[Path, str],
                   dictionary_variant: bool = False) -> Dict[ChartKind, Path]:
        """
        Render the latency, byte throughput and request throughput charts.

        Args:
            sweep_result: The sweep to plot.
            output_dir: Directory to save PNGs in.
            dictionary_variant: Also render the dictionary-frequency latency chart.

        Returns:
            Paths of the charts written, keyed by kind.
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        kinds = [ChartKind.LATENCY, ChartKind.BYTE_THROUGHPUT, ChartKind.REQUEST_THROUGHPUT]
        if dictionary_variant:
            kinds.append(ChartKind.DICTIONARY_LATENCY)

        paths = {}
        for kind in kinds:
            path = output_dir / f"{kind.value}.png"
            try:
                self.render(sweep_result, kind, path)
            except EmptyInputError as e:
                logger.error(f"Skipping chart: {e}")
                continue
            paths[kind] = path
        return paths
