"""Unit tests for configuration settings."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.shared.config import Config
from tests.test_const import TEST_HOST, TEST_HOST_OVERRIDE, TEST_PORT, TEST_PORT_OVERRIDE


class TestSettings:
    """Test Config settings class."""

    def test_default_settings(self):
        """Test default configuration values."""
        settings = Config()
        assert settings.host == TEST_HOST
        assert settings.port == TEST_PORT
        assert settings.query_path == "/query"
        assert settings.samples == 10
        assert settings.concurrency == 1
        assert settings.query_lengths == []
        assert settings.output_dir == Path("bench")
        assert settings.base_url == "http://localhost:8080"
        assert settings.x_axis == "query_length"

    @patch.dict(os.environ, {"QUERYBENCH_HOST": TEST_HOST_OVERRIDE})
    def test_env_override_host(self):
        settings = Config()
        assert settings.host == TEST_HOST_OVERRIDE

    @patch.dict(os.environ, {"QUERYBENCH_PORT": str(TEST_PORT_OVERRIDE)})
    def test_env_override_port(self):
        settings = Config()
        assert settings.port == TEST_PORT_OVERRIDE

    @patch.dict(os.environ, {"QUERYBENCH_QUERY_LENGTHS": "[1, 5, 10, 50]", "QUERYBENCH_CONCURRENCY": "4"})
    def test_env_override_sweep(self):
        settings = Config()
        assert settings.query_lengths == [1, 5, 10, 50]
        assert settings.concurrency == 4

    @patch.dict(os.environ, {"QUERYBENCH_SAMPLES": "3"})
    def test_env_beats_init_kwargs(self):
        settings = Config(samples=20)
        assert settings.samples == 3

    def test_json_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "querybench.json").write_text(json.dumps({"samples": 25, "runs": 2, "port": 9090}))

        settings = Config(port=7070)

        assert settings.samples == 25
        assert settings.runs == 2
        # Init kwargs beat the JSON file
        assert settings.port == 7070

    @pytest.mark.parametrize("field, value", [
        ("samples", 0), ("concurrency", 0), ("runs", 0), ("point_parallelism", 0),
        ("port", 0), ("port", 70000), ("request_timeout", 0), ("sweep_timeout", -1.0),
        ("query_lengths", [1, 0]), ("x_axis", "tokens"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Config(**{field: value})
