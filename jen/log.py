"""Logging helpers for jen.

Library modules only ever call get_logger(); configure_logging() is for
entry points such as the CLI.
"""

import logging
from pathlib import Path
from typing import Optional

_LOGGER_NAME = "jen"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the jen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(verbose: bool = False,
                      log_file: Optional[Path] = None) -> logging.Logger:
    """Install console (and optional file) handlers on the jen logger.

    Existing handlers are removed first so repeated calls from the CLI
    do not duplicate output.

    Args:
        verbose: Log DEBUG messages instead of INFO
        log_file: Also write records to this file

    Returns:
        The configured top-level jen logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[jen] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
