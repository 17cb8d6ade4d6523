"""Logging utilities for sigscan commands.

Reports are written to stdout, so all log output goes to stderr (and an
optional file) to keep reports machine-readable.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "sigscan"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the sigscan hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def console_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI verbosity flags to a stderr log level."""
    if verbose and quiet:
        raise ValueError("verbose and quiet logging are mutually exclusive")
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the sigscan logger with stderr output and an optional file sink.

    ``verbose`` adds debug detail to stderr, such as every signature as it is
    registered or inlined; ``quiet`` limits stderr to warnings. A log file
    always receives debug detail whatever the console level.
    """
    level = console_level(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[sigscan] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "console_level", "get_logger"]
