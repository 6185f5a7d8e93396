"""
DevPod GCloud Provider - Logging Setup

This module sets up logging for provider commands.

Everything is written to stderr: the host reads command results
(status, remote command output) from stdout.

Logging Strategy:
- INFO (default): High-level progress for end users
- DEBUG (--verbosity=debug): Detailed technical info for developers
- WARNING: Recoverable issues
- ERROR: Problems that stop operations
"""

import logging
import sys
import time
from pathlib import Path

LOGGER_NAME = 'devpod_gcloud'


class CleanFormatter(logging.Formatter):
    """
    Custom formatter for clean user-facing logs.

    - INFO: Just the message (clean)
    - WARNING/ERROR/CRITICAL: Show level with emphasis
    """

    def format(self, record):
        """Format log record based on level."""

        # INFO: Clean message only
        if record.levelno == logging.INFO:
            return record.getMessage()

        elif record.levelno == logging.WARNING:
            return f"[!]  WARNING: {record.getMessage()}"

        elif record.levelno == logging.ERROR:
            return f"[X] ERROR: {record.getMessage()}"

        elif record.levelno == logging.CRITICAL:
            return f"[!!] CRITICAL: {record.getMessage()}"

        else:
            return f"[DEBUG] {record.getMessage()}"


def setup_logging(level='INFO', log_file=None, debug=False, stream=None):
    """
    Setup logging for the provider.

    Configures logging to:
    1. Output to console (stderr by default)
    2. Optionally write to log file
    3. Use a detailed format in debug mode

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, only logs to console.
        debug: If True, use DEBUG level and detailed format
        stream: Console stream (default: sys.stderr)

    Returns:
        logging.Logger: Configured logger instance

    Example:
        logger = setup_logging('INFO')
        logger.info("Creating instance...")
    """

    if debug:
        level = 'DEBUG'

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.propagate = False

    # Remove existing handlers (in case setup_logging called multiple times)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(numeric_level)

    if debug:
        # Format: [2025-11-02 10:30:45] DEBUG [execute:45]: API call: instances.stop(...)
        console_format = logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(funcName)s:%(lineno)d]: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        console_format = CleanFormatter('%(message)s')

    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)

        # File format includes more details
        file_format = logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(name)s.%(funcName)s:%(lineno)d] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

        logger.debug(f"Logging to file: {log_file}")

    return logger


# Debug logging helpers

def log_api_call(logger, method_name: str, **params):
    """
    Log an API call (DEBUG level).

    Example:
        log_api_call(logger, 'instances.stop', project='p', zone='z', instance='vm')
        # Output: API call: instances.stop(project=p, zone=z, instance=vm)
    """
    if logger is None:
        return
    param_str = ', '.join(f'{k}={v}' for k, v in params.items())
    logger.debug(f"API call: {method_name}({param_str})")


def log_operation_start(logger, operation_name: str):
    """
    Log the start of an operation (DEBUG level).

    Returns:
        float: Start time (for use with log_operation_end)
    """
    if logger is not None:
        logger.debug(f"Starting operation: {operation_name}")
    return time.time()


def log_operation_end(logger, operation_name: str, start_time: float):
    """
    Log the end of an operation with timing (DEBUG level).

    Example:
        start_time = log_operation_start(logger, 'Stop VM')
        # ... do operation ...
        log_operation_end(logger, 'Stop VM', start_time)
        # Output: Operation completed: Stop VM (took 10.5s)
    """
    if logger is None:
        return
    duration = time.time() - start_time
    logger.debug(f"Operation completed: {operation_name} (took {duration:.2f}s)")
