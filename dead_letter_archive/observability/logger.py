"""
Structured JSON logging for the dead letter archive

Every component logs through loggers configured here so that archive
invocations emit one JSON object per line, which CloudWatch Logs Insights
and similar tools can query by field (execution_arn, archive_key, ...).
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER_NAME = "dead-letter-archive"

LOG_FORMAT = "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter for archive log lines

    Adds timestamp, level, logger and call site. Inside Lambda the function
    name and version are added so lines from several deployments can be told
    apart in one log group.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lambda_fields = {
            field: value
            for field, value in (
                ("function_name", os.getenv("AWS_LAMBDA_FUNCTION_NAME")),
                ("function_version", os.getenv("AWS_LAMBDA_FUNCTION_VERSION")),
            )
            if value
        }

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record.update(self.lambda_fields)


def setup_logger(name: str = DEFAULT_LOGGER_NAME, level: str | None = None) -> logging.Logger:
    """
    Setup and configure a JSON logger writing to stdout

    Args:
        name: Logger name
        level: Log level name, defaults to the LOG_LEVEL environment variable

    Returns:
        Configured logger instance
    """
    log_level_str = level or os.getenv("LOG_LEVEL", "INFO")
    log_level = LOG_LEVELS.get(log_level_str.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Warm Lambda containers reuse the module; never stack handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(CustomJsonFormatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance, configuring it on first use

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        return setup_logger(name)

    return logger


class log_operation:
    """
    Context manager logging the start and outcome of an archive operation

    The outcome line carries ``duration_seconds`` and ``status`` (success or
    error); failures add the exception type and message. Exceptions are
    never suppressed.

    Usage:
        with log_operation("Archiving dead letter batch", logger=logger, batch_size=10):
            ...
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = {"operation": operation_name, **extra_fields}
        self.started: float | None = None

    def __enter__(self):
        self.started = time.perf_counter()
        self.logger.info(f"Starting: {self.operation_name}", extra=self.extra_fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        outcome = {
            **self.extra_fields,
            "duration_seconds": round(time.perf_counter() - self.started, 3),
        }
        if exc_type is None:
            self.logger.info(
                f"Completed: {self.operation_name}", extra={**outcome, "status": "success"}
            )
            return False

        outcome.update(
            status="error", error_type=exc_type.__name__, error_message=str(exc_val)
        )
        self.logger.error(f"Failed: {self.operation_name}", extra=outcome, exc_info=True)
        return False
