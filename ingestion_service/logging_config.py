"""
logging_config.py — Logging Setup for the Ingestion Service

Configures the root logger once at API startup. Ingestion outcomes, validation
errors and hidden storage failures all end up here, which is the only place an
operator can see why a request was answered with a generic 500.

Environment:
    • INGESTION_LOG_FILE — log file path; empty string logs to stdout only
    • INGESTION_LOG_LEVEL — root level name (default INFO)

Every line carries the process ID, so output from several uvicorn workers can be
told apart. The HTTP client libraries used by the Firestore client are limited
to warnings to keep request logs readable.
"""

import logging
import os
import sys

LOG_FILE = os.environ.get("INGESTION_LOG_FILE", "ingestion_service.log")
LOG_LEVEL = os.environ.get("INGESTION_LOG_LEVEL", "INFO")

LOG_FORMAT = '%(asctime)s - %(levelname)s - [PID:%(process)d] - %(message)s'


def setup_logging(log_file=LOG_FILE, level=LOG_LEVEL):
    """
    Installs the stdout handler and, if configured, the file handler on the root logger.

    Calling it again has no effect, since logging.basicConfig only configures an
    unconfigured root logger.

    Args:
        log_file (str): Path of the log file. An empty value disables file output.
        level (str | int): Root log level.
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)

    # Request-Logs von httpx nur bei Problemen
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name):
    """Returns the logger for a module, e.g. get_logger(__name__)."""
    return logging.getLogger(name)
