import json
from pathlib import Path
from typing import Dict, Any, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.const import CONFIG_FILE_NAME, DEFAULT_LOG_LEVEL, LIBRARY_LOG_LEVELS


class Config(BaseSettings):
    """Global configuration settings for a query-length sweep."""

    host: str = "localhost"
    port: int = 8080
    query_path: str = "/query"
    query_param: str = "terms"
    query_separator: str = "+"
    dictionary_path: Optional[Path] = None
    # Empty means every prefix length of the dictionary
    query_lengths: List[int] = []
    samples: int = 10
    runs: int = 1
    concurrency: int = 1
    point_parallelism: int = 1
    request_timeout: float = 30.0
    # When set, each batch runs for this many seconds instead of `samples` requests
    batch_duration: Optional[float] = None
    sweep_timeout: Optional[float] = None
    max_retries: int = 0
    output_dir: Path = Path("bench")
    frequency_sorted: bool = False
    # Chart x-axis: "query_length" (words) or "query_chars" (characters of the query string)
    x_axis: str = "query_length"
    log_level: str = DEFAULT_LOG_LEVEL
    library_log_levels: Dict[str, str] = dict(LIBRARY_LOG_LEVELS)

    model_config = SettingsConfigDict(
        env_prefix='QUERYBENCH_',
    )

    @field_validator("samples", "runs", "concurrency", "point_parallelism")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("port")
    @classmethod
    def _valid_port(cls, value: int) -> int:
        # TCP port numbers are 16 bits
        if not 0 < value < 65536:
            raise ValueError("port must be between 1 and 65535")
        return value

    @field_validator("query_lengths")
    @classmethod
    def _positive_lengths(cls, value: List[int]) -> List[int]:
        if any(length <= 0 for length in value):
            raise ValueError("query lengths must be positive")
        return value

    @field_validator("x_axis")
    @classmethod
    def _known_x_axis(cls, value: str) -> str:
        if value not in ("query_length", "query_chars"):
            raise ValueError("x_axis must be 'query_length' or 'query_chars'")
        return value

    @field_validator("request_timeout", "batch_duration", "sweep_timeout")
    @classmethod
    def _positive_seconds(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("must be positive")
        return value

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def load_config_from_json(cls) -> Dict[str, Any]:
        """Load configuration from the JSON config file, if present."""
        config_path = Path(CONFIG_FILE_NAME)
        if config_path.exists():
            with open(config_path, 'r') as f:
                return json.load(f)
        return {}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """
        Customise the sources for settings.

        Order of precedence (highest to lowest):
        1. Environment variables
        2. Init settings (kwargs passed to constructor)
        3. JSON config file
        4. Default values
        """
        def json_source():
            return cls.load_config_from_json()

        return (
            env_settings,
            init_settings,
            json_source,
        )
