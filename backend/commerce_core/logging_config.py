"""
Logging configuration shared by the services.

Sets the root level from LOG_LEVEL and keeps third-party SDK loggers quiet.
"""
import os
import logging


LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

# Noisy client libraries
QUIET_LOGGERS = (
    "azure",
    "azure.core.pipeline.policies.http_logging_policy",
    "httpx",
    "httpcore",
)


def configure_logging(level: str = None):
    """Configure root logging for a service process."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(log_level)

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    return log_level
