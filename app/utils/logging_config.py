"""Console logging for the pdf-questions CLI."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# HTTP and imaging libraries stay at WARNING even in verbose runs
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "openai", "PIL")


def setup_logging(verbose: bool = False) -> None:
    """Send pipeline logs to stderr, at DEBUG when *verbose* else INFO.

    stdout is left to the CLI's question / JSON output.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
