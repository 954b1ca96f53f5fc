"""
Structured logging for the wine quality loader

Every module logs through a child of the "winequality" logger. That logger
owns the only handler and writes one JSON object per line (python-json-logger),
or plain text when LOG_FORMAT=text.
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER_NAME = "winequality"

JSON_FIELDS = "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s"
TEXT_FIELDS = "%(asctime)s %(levelname)-7s %(name)s [%(module)s:%(funcName)s] %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter adding the fields log shippers expect on every line
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = log_record.get("timestamp") or self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        # One process per load run; all asyncio tasks share it
        log_record["process_id"] = record.process


def _make_formatter(format_type: str) -> logging.Formatter:
    if format_type == "text":
        return logging.Formatter(fmt=TEXT_FIELDS, datefmt="%Y-%m-%d %H:%M:%S")
    return CustomJsonFormatter(fmt=JSON_FIELDS, datefmt="%Y-%m-%dT%H:%M:%S%z")


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Configure a logger with a single stdout handler

    Calling it again replaces the handler, so the CLIs can switch format after
    modules have already created their loggers.

    Args:
        name: Logger name
        level: Level name; defaults to LOG_LEVEL, then INFO (unknown names fall back to INFO)
        format_type: "json" or "text"; defaults to LOG_FORMAT, then json

    Returns:
        The configured logger
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(_make_formatter(format_type or os.getenv("LOG_FORMAT") or "json"))

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(handler)
    # Records stop here; the root logger belongs to whoever embeds us
    logger.propagate = False

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger, configuring the "winequality" logger on first use

    Args:
        name: Usually __name__ of the calling module

    Returns:
        Logger instance
    """
    if not logging.getLogger(DEFAULT_LOGGER_NAME).handlers:
        setup_logger(DEFAULT_LOGGER_NAME)

    return logging.getLogger(name)


class log_operation:
    """
    Context manager logging the start, end and duration of an operation

    Usage:
        with log_operation("Processing red wine file", logger=logger, wine_type="red"):
            ...

    Exceptions are logged with their type and message, then re-raised.
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.start_time: float | None = None

    @property
    def elapsed(self) -> float:
        """Seconds since the operation started"""
        if self.start_time is None:
            return 0.0
        return time.monotonic() - self.start_time

    def _fields(self, **fields) -> dict:
        return {"operation": self.operation_name, **fields, **self.extra_fields}

    def __enter__(self):
        self.start_time = time.monotonic()
        self.logger.info(f"Starting: {self.operation_name}", extra=self._fields())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = round(self.elapsed, 3)

        if exc_type is None:
            self.logger.info(
                f"Completed: {self.operation_name}",
                extra=self._fields(duration_seconds=duration, status="success"),
            )
        else:
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra=self._fields(
                    duration_seconds=duration,
                    status="error",
                    error_type=exc_type.__name__,
                    error_message=str(exc_val),
                ),
                exc_info=(exc_type, exc_val, exc_tb),
            )
        return False
