"""
Logging setup for git-helper.

Log records go to stderr so they never mix with the commit messages and
command lines the CLI prints on stdout.
"""

from __future__ import annotations

import logging
import sys

# Loggers of the HTTP stack under the openai SDK; they log every request.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def level_for(verbosity: int) -> int:
    """Map the count of -v flags to a logging level."""

    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbosity: int) -> None:
    level = level_for(verbosity)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
