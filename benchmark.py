# Entry point for a query-length sweep:
#   python benchmark.py <server_addr> <port_number> [<query_word1> <query_word2> ...]
#   python benchmark.py [<server_addr> <port_number>] --no-run
# Without query words the configured dictionary_path is used.

import sys
from pydantic import ValidationError
from src.const import USAGE
from src.querybench import BenchmarkRunner
from src.shared.config import Config
from src.shared.logging import LoggingManager


def main(argv=None) -> int:
    argv = list(sys.argv if argv is None else argv)
    prog, args = argv[0], argv[1:]

    # --no-run re-renders charts from existing results without issuing requests
    run_tests = True
    for flag in ('--no-run', '--load-only'):
        if flag in args:
            args.remove(flag)
            run_tests = False

    # Re-rendering needs no target, so --no-run works without one
    if len(args) < 2 and (run_tests or args):
        print(USAGE.format(prog=prog))
        return 1

    target = {"host": args[0], "port": args[1]} if args else {}
    try:
        config = Config(**target)
    except ValidationError as e:
        print(f"Invalid configuration: {e}")
        return 1

    LoggingManager.setup_logging(config.log_level, config.library_log_levels)
    runner = BenchmarkRunner(config, words=args[2:], run_tests=run_tests)
    result = runner.run()
    return 0 if result is not None else 1


if __name__ == "__main__":
    sys.exit(main())
