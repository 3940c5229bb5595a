"""CLI entry point."""

import os
import sys

from common.logging_config import setup_logging
from cli.constants import CONFIG_PATH
from cli.repl import repl_loop
from filestore import FileStoreConfig


def main() -> None:
    """Entry point for CLI."""
    debug = '--debug' in sys.argv
    if debug:
        sys.argv.remove('--debug')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)
    for component in ('filestore', 'common'):
        setup_logging(component, log_level=log_level)

    if debug:
        logger.info("Debug logging enabled")

    logger.info("CLI starting...")
    try:
        repl_loop(FileStoreConfig(CONFIG_PATH))
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
