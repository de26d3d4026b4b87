"""CLI entry point."""

import os
import shlex
import sys

from common.logging_config import setup_logging
from cli.parser import ParseError, parse_command
from cli.repl import dispatch_command, repl_loop


def run_once(args: list[str]) -> int:
    """Run a single command given on the command line; returns the exit status."""
    try:
        cmd_obj = parse_command(shlex.join(args))
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    result = dispatch_command(cmd_obj)
    print(result)
    return 1 if "failed:" in result or result.startswith("Error:") else 0


def main() -> None:
    """Entry point for CLI: REPL without arguments, one-shot command otherwise."""
    debug = '--debug' in sys.argv
    if debug:
        sys.argv.remove('--debug')
    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')

    logger = setup_logging('cli', log_level=log_level)
    setup_logging('transfer', log_level=log_level)
    if debug:
        logger.info("Debug logging enabled")

    logger.info("CLI starting...")
    try:
        if len(sys.argv) > 1:
            sys.exit(run_once(sys.argv[1:]))
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
