# shared service logger, imported as `from agent_pipelines.common.logging.logger import logger`

import logging
import os
import sys

LOGGER_NAME = "agent_pipelines"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(module)s:%(lineno)d | %(message)s"

def _build_logger() -> logging.Logger:
    """
    Configure the service logger once per process.
    Level is read from LOG_LEVEL (defaults to INFO).
    """
    service_logger = logging.getLogger(LOGGER_NAME)
    # guard against duplicate handlers on module reload (e.g. uvicorn --reload)
    if not service_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        service_logger.addHandler(handler)
    service_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    service_logger.propagate = False
    return service_logger

logger = _build_logger()
