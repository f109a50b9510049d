"""Logging configuration for harbormaster."""

import logging
import sys
from pathlib import Path

# AWS and Kubernetes clients log every request at DEBUG
NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "kubernetes")


def _level(name: str) -> int:
    return getattr(logging, name.upper())


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    verbose: bool = False,
    console_level: str = "WARNING",
) -> None:
    """Configure logging for the application.

    The CLI keeps stderr at WARNING so its tables stay readable; the API
    handlers log to stderr at the configured level since that is their only
    sink.

    Args:
        level: Root logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL),
            normally ``HarbormasterConfig.log_level``
        log_file: Optional path to log file
        verbose: If True, log everything at DEBUG, on the console too
        console_level: Minimum level written to stderr
    """
    if verbose:
        level = console_level = "DEBUG"

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(_level(level))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_level(console_level))
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(_level(level))
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            logging.warning(f"Failed to create log file handler: {e}")

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
