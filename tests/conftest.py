"""Shared test configuration and fixtures for all tests."""

import os
from unittest.mock import MagicMock, patch

import pytest

from src.querybench.dictionary_manager import DictionaryManager
from src.shared.config import Config
from tests.test_const import TEST_DICTIONARY_NAME, TEST_WORDS


@pytest.fixture(autouse=True)
def clean_environment():
    """Keep QUERYBENCH_* variables from the shell out of the tests."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("QUERYBENCH_")}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def dictionary():
    """Ten common words."""
    return DictionaryManager.from_words(TEST_WORDS, name=TEST_DICTIONARY_NAME)


@pytest.fixture
def test_config(tmp_path):
    """Config writing into a temporary directory."""
    return Config(host="localhost", port=8080, output_dir=tmp_path / "bench", samples=5)


@pytest.fixture
def mock_session():
    """Mock requests session fixture."""
    return MagicMock()
