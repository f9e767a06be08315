"""Unit tests for the benchmark runner and command-line entry point."""

from unittest.mock import MagicMock, patch

import pytest

from benchmark import main
from src.querybench.constants import SweepConstants
from src.querybench.exceptions import DictionaryLoadError
from src.querybench.models import PointStatus, SweepResult
from src.querybench.report_renderer import ChartKind
from src.querybench.result_exporter import ResultExporter
from src.querybench.runner import BenchmarkRunner
from src.shared.config import Config
from tests.factories import make_stat


def config_with(tmp_path, **kwargs):
    return Config(output_dir=tmp_path / "bench", **kwargs)


class TestBenchmarkRunner:
    """Test BenchmarkRunner."""

    def test_dictionary_from_words(self, test_config):
        runner = BenchmarkRunner(test_config, words=["a", "b"])
        assert runner.load_dictionary().words == ("a", "b")

    def test_dictionary_from_file(self, tmp_path):
        path = tmp_path / "big.txt"
        path.write_text("rare 1\ncommon 9\n")
        config = config_with(tmp_path, dictionary_path=path, frequency_sorted=True)

        dictionary = BenchmarkRunner(config).load_dictionary()

        assert dictionary.words == ("common", "rare")

    def test_no_dictionary(self, test_config):
        with pytest.raises(DictionaryLoadError):
            BenchmarkRunner(test_config).load_dictionary()

    def test_run_writes_outputs(self, test_config):
        runner = BenchmarkRunner(test_config, words=["a", "b", "c"])
        runner.sweep = MagicMock()
        runner.sweep.run.return_value = SweepResult([make_stat(1), make_stat(2, status=PointStatus.NO_DATA)])
        runner.sweep.samples = {}

        result = runner.run()

        out = test_config.output_dir
        assert len(result) == 2
        assert (out / SweepConstants.STATS_CSV).exists()
        assert (out / SweepConstants.STATS_JSONL).exists()
        assert (out / "latency.png").exists()
        assert (out / "request_throughput.png").exists()
        assert (out / "byte_throughput.png").exists()

    def test_load_only_without_results(self, test_config):
        runner = BenchmarkRunner(test_config, run_tests=False)
        assert runner.run() is None

    def test_load_only_rerenders_existing_results(self, test_config):
        test_config.output_dir.mkdir(parents=True)
        ResultExporter.save_stats_csv(SweepResult([make_stat(1), make_stat(4)]),
                                      test_config.output_dir / SweepConstants.STATS_CSV)
        runner = BenchmarkRunner(test_config, run_tests=False)
        runner.sweep = MagicMock()

        result = runner.run()

        assert len(result) == 2
        runner.sweep.run.assert_not_called()
        assert (test_config.output_dir / "latency.png").exists()

    def test_character_axis_from_config(self, tmp_path):
        config = config_with(tmp_path, x_axis="query_chars")
        config.output_dir.mkdir(parents=True)
        ResultExporter.save_stats_csv(SweepResult([make_stat(2, query_chars=6), make_stat(1, query_chars=3)]),
                                      config.output_dir / SweepConstants.STATS_CSV)
        runner = BenchmarkRunner(config, run_tests=False)

        result = runner.run()

        assert runner.renderer.render(result, ChartKind.LATENCY).x == [3, 6]

    def test_failure_is_logged_and_raised(self, test_config):
        runner = BenchmarkRunner(test_config, words=["a"])
        runner.sweep = MagicMock()
        runner.sweep.run.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            runner.run()


class TestMain:
    """Test the command-line entry point."""

    def test_usage(self, capsys):
        assert main(["benchmark.py"]) == 1
        assert "<server_addr> <port_number>" in capsys.readouterr().out

    def test_invalid_port(self, capsys):
        assert main(["benchmark.py", "localhost", "notaport", "a"]) == 1
        assert "Invalid configuration" in capsys.readouterr().out

    @patch('benchmark.LoggingManager')
    @patch('benchmark.BenchmarkRunner')
    def test_runs_sweep(self, mock_runner_class, mock_logging):
        mock_runner_class.return_value.run.return_value = SweepResult([make_stat(1)])

        assert main(["benchmark.py", "127.0.0.1", "8081", "the", "of"]) == 0

        config = mock_runner_class.call_args[0][0]
        assert config.host == "127.0.0.1"
        assert config.port == 8081
        assert mock_runner_class.call_args[1] == {"words": ["the", "of"], "run_tests": True}
        mock_logging.setup_logging.assert_called_once()

    @patch('benchmark.LoggingManager')
    @patch('benchmark.BenchmarkRunner')
    def test_no_run_flag(self, mock_runner_class, mock_logging):
        mock_runner_class.return_value.run.return_value = None

        assert main(["benchmark.py", "localhost", "80", "--no-run"]) == 1
        assert mock_runner_class.call_args[1] == {"words": [], "run_tests": False}

    @patch('benchmark.LoggingManager')
    @patch('benchmark.BenchmarkRunner')
    def test_no_run_without_target(self, mock_runner_class, mock_logging):
        mock_runner_class.return_value.run.return_value = SweepResult([make_stat(1)])

        assert main(["benchmark.py", "--no-run"]) == 0

        config = mock_runner_class.call_args[0][0]
        assert config.host == "localhost"
        assert mock_runner_class.call_args[1] == {"words": [], "run_tests": False}

    def test_no_run_with_host_only(self, capsys):
        assert main(["benchmark.py", "localhost", "--no-run"]) == 1
        assert "--no-run" in capsys.readouterr().out
