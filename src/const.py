"""Constants for the query-length sweep harness."""

CONFIG_FILE_NAME = "querybench.json"

# Logging configuration
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Library log levels
LIBRARY_LOG_LEVELS = {
    "urllib3": "WARNING",
    "matplotlib": "WARNING",
    "PIL": "WARNING",
}

USAGE = ("{prog} <server_addr> <port_number> [<query_word1> <query_word2> ...]\n"
         "{prog} [<server_addr> <port_number>] --no-run")
