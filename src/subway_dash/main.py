"""
Main entry point for SUBWAY DASH.

Loads settings, configures logging and runs the terminal game until the
player quits or the process is signalled.
"""

import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import Optional

from subway_dash.config.settings import get_settings
from subway_dash.terminal.runner import TerminalRunner

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure logging.

    The game owns the terminal while running, so full logs only go to a
    file. Without one, warnings and errors still reach stderr.
    """
    level = logging.DEBUG if debug else logging.INFO
    if log_file is not None:
        logging.basicConfig(
            filename=str(log_file),
            level=level,
            format=LOG_FORMAT,
            datefmt="%H:%M:%S",
        )
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format=LOG_FORMAT,
            datefmt="%H:%M:%S",
        )


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug, settings.log_file)

    logger = logging.getLogger(__name__)
    logger.info("SUBWAY DASH starting...")

    runner = TerminalRunner(
        settings=settings.terminal,
        rng=random.Random(settings.seed),
    )

    try:
        asyncio.run(runner.run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("SUBWAY DASH stopped")


if __name__ == "__main__":
    main()
