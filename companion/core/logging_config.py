"""Logging setup for the CLI"""

import logging
import sys

from companion.models.config import MonitoringConfig, expand_path

LOGGER_NAME = "companion"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    monitoring: MonitoringConfig | None = None, verbose: bool = False
) -> logging.Logger:
    """
    Configure the package logger.

    Console output goes to stderr so it does not interleave with rich panels
    on stdout. A debug log file, when configured, receives everything.

    Args:
        monitoring: Logging section of the configuration
        verbose: Force DEBUG on the console

    Returns:
        The configured package logger
    """
    monitoring = monitoring or MonitoringConfig()
    console_level = logging.DEBUG if verbose else getattr(logging, monitoring.log_level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = expand_path(monitoring.debug_log_file)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.debug(f"Logging to file: {log_file}")

    return logger
