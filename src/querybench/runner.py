"""Benchmark runner to orchestrate a sweep and manage output."""
from pathlib import Path
from typing import Dict, Optional
import logging

from .constants import SweepConstants
from .dictionary_manager import Dictionary, DictionaryManager
from .exceptions import DictionaryLoadError
from .models import PointStatus, SweepResult
from .report_renderer import ChartKind, ReportRenderer
from .result_exporter import ResultExporter
from .sweep import QuerySweep
from src.shared.config import Config


logger = logging.getLogger(__name__)


class BenchmarkRunner:
    """Orchestrates the sweep, the exports and the charts."""

    def __init__(self, config: Config, words: Optional[list] = None, run_tests: bool = True):
        self.config = config
        self.words = words or []
        self.run_tests = run_tests
        self.sweep = QuerySweep(config)
        self.renderer = ReportRenderer(x_axis=config.x_axis)

    def load_dictionary(self) -> Dictionary:
        """Dictionary from the command-line words, else from the configured file."""
        if self.words:
            dictionary = DictionaryManager.from_words(self.words)
        elif self.config.dictionary_path is not None:
            dictionary = DictionaryManager.load(self.config.dictionary_path)
        else:
            raise DictionaryLoadError("No query words given and no dictionary_path configured")
        if self.config.frequency_sorted:
            dictionary = dictionary.sorted_by_frequency()
        return dictionary

    def run(self) -> Optional[SweepResult]:
        """Run the complete benchmarking process."""
        try:
            bench_dir = Path(self.config.output_dir)
            bench_dir.mkdir(parents=True, exist_ok=True)

            stats_csv_path = bench_dir / SweepConstants.STATS_CSV
            stats_jsonl_path = bench_dir / SweepConstants.STATS_JSONL
            samples_csv_path = bench_dir / SweepConstants.SAMPLES_CSV

            if not self.run_tests:
                if not stats_csv_path.exists():
                    logger.warning(f"No existing results to render at {stats_csv_path}")
                    return None
                # Re-render charts from existing data without issuing requests
                logger.info(f"Loading existing results from: {stats_csv_path}")
                result = ResultExporter.load_stats_csv(stats_csv_path)
                self.render(result, bench_dir)
                return result

            dictionary = self.load_dictionary()
            logger.info(f"Running sweep against {self.config.base_url}...")
            result = self.sweep.run(dictionary)

            ResultExporter.save_stats_csv(result, stats_csv_path)
            ResultExporter.save_stats_jsonl(result, stats_jsonl_path)
            ResultExporter.save_samples_csv(self.sweep.samples, samples_csv_path)
            self.render(result, bench_dir)

            self.log_summary(result)
            return result

        except Exception as e:
            logger.error(f"Benchmark failed: {e}", stack_info=True)
            raise

    def render(self, result: SweepResult, bench_dir: Path) -> Dict[ChartKind, Path]:
        return self.renderer.render_all(result, bench_dir, dictionary_variant=self.config.frequency_sorted)

    @staticmethod
    def log_summary(result: SweepResult) -> None:
        for stat in result.sorted():
            if stat.status == PointStatus.NO_DATA:
                logger.info(f"  length {stat.query_length:>4}: no data ({stat.error})")
            elif stat.degenerate:
                logger.info(f"  length {stat.query_length:>4}: 0 of {stat.sample_count} requests succeeded")
            else:
                logger.info(f"  length {stat.query_length:>4}: mean {stat.mean_latency * 1000:.2f}ms, "
                            f"p95 {stat.p95_latency * 1000:.2f}ms, {stat.requests_per_sec:.1f} req/s, "
                            f"{stat.bytes_per_sec:.0f} B/s")
        if result.partial:
            logger.warning("Sweep completed with partial results")
        else:
            logger.info("Benchmark completed successfully!")
