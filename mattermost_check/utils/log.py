#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
import sys
from typing import TextIO

# The status line of the check is the only thing written to stdout. Everything
# logged ends up on stderr, which the monitoring core keeps out of the output.
#
# Levels used here:
#
#   WARNING  30   <= default
#   INFO     20
#   VERBOSE  15
#   DEBUG    10
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("mattermost_check")


def get_formatter(format_str: str = "%(levelname)s: %(name)s: %(message)s") -> logging.Formatter:
    """Returns a new message formater instance that uses the standard
    log format by default. You can also set another format if you like."""
    return logging.Formatter(format_str)


def clear_console_logging() -> None:
    logger.handlers[:] = []
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.WARNING)

    # undo what the highest verbosity did to urllib3
    urllib3_logger = logging.getLogger("urllib3")
    urllib3_logger.handlers[:] = [logging.NullHandler()]
    urllib3_logger.setLevel(logging.NOTSET)


# Set default logging handler to avoid "No handler found" warnings.
clear_console_logging()


def setup_logging_handler(stream: TextIO, formatter: logging.Formatter | None = None) -> None:
    """Write all log messages to the given stream, replacing the handlers
    that were configured before."""
    if formatter is None:
        formatter = get_formatter()

    handler = logging.StreamHandler(stream=stream)
    handler.setFormatter(formatter)

    del logger.handlers[:]  # Remove all previously existing handlers
    logger.addHandler(handler)


def verbosity_to_log_level(verbosity: int) -> int:
    """Values for "verbosity":

      0: enables WARNING and above
      1: enables INFO and above
      2: enables VERBOSE and above
      3: enables DEBUG and above (ALL messages)

    >>> verbosity_to_log_level(0) == logging.WARNING
    True
    >>> verbosity_to_log_level(2) == VERBOSE
    True
    >>> verbosity_to_log_level(7) == logging.DEBUG
    True
    """
    if verbosity < 0:
        raise ValueError(f"Invalid verbosity: {verbosity}")
    return {0: logging.WARNING, 1: logging.INFO, 2: VERBOSE}.get(verbosity, logging.DEBUG)


def setup_console_logging(verbosity: int, stream: TextIO | None = None) -> None:
    """Log to stderr (or the given stream) with a level derived from the
    number of -v flags. At the highest verbosity the messages of urllib3
    come through as well."""
    setup_logging_handler(sys.stderr if stream is None else stream)
    logger.setLevel(verbosity_to_log_level(verbosity))

    if verbosity >= 3:
        urllib3_logger = logging.getLogger("urllib3")
        urllib3_logger.handlers[:] = logger.handlers
        urllib3_logger.setLevel(logging.DEBUG)
