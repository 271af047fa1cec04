"""Logging configuration for MCP Bitbucket."""

import logging
import os
import sys
import threading
import time
import types
import uuid
from collections.abc import Mapping
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, cast

from .utils.env import is_env_truthy

# Default logger configuration
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [%(context)s] %(message)s"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_DIRECTORY = "logs"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5


class ContextualLogger(logging.Logger):
    """Logger that maintains context between related operations."""

    def __init__(self, name: str, level: int = 0) -> None:
        """Initialize the contextual logger."""
        super().__init__(name, level)
        self._context_data = threading.local()

    def _get_context_str(self) -> str:
        context_data = getattr(self._context_data, "data", {})
        if not context_data:
            return "no-context"

        # operation=X,trace_id=Y,...
        return ",".join(f"{k}={v}" for k, v in context_data.items())

    def _log(
        self,
        level: int,
        msg: object,
        args: tuple[object, ...] | Mapping[str, object],
        exc_info: Any = None,
        extra: Mapping[str, object] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
    ) -> None:
        """Overrides _log method to include context."""
        extra = dict(extra or {})
        extra.setdefault("context", self._get_context_str())
        super()._log(level, msg, args, exc_info, extra, stack_info, stacklevel + 1)

    def set_context(self, **kwargs: Any) -> None:
        """
        Sets context values for the logger.

        Args:
            **kwargs: Key-value pairs to add to the context
        """
        if not hasattr(self._context_data, "data"):
            self._context_data.data = {}
        self._context_data.data.update(kwargs)

    def clear_context(self) -> None:
        """Removes all context data from the logger."""
        if hasattr(self._context_data, "data"):
            self._context_data.data = {}


class _ContextDefaultFilter(logging.Filter):
    """Supplies `context` for records emitted by plain stdlib loggers."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = "no-context"
        return True


class LoggingContextManager:
    """Context manager for logging with tracking."""

    def __init__(
        self, logger: ContextualLogger, operation: str, **context: Any
    ) -> None:
        """
        Initializes the logging context manager.

        Args:
            logger: Contextual logger
            operation: Name of the operation being executed
            **context: Additional context data
        """
        self.logger = logger
        self.operation = operation
        self.context = context.copy()
        self.start_time = time.time()
        self.trace_id = context.get("trace_id", str(uuid.uuid4())[:8])

    def __enter__(self) -> "LoggingContextManager":
        self.old_context = getattr(self.logger._context_data, "data", {}).copy()

        self.context["operation"] = self.operation
        self.context["trace_id"] = self.trace_id
        self.logger.set_context(**self.context)

        self.logger.debug(f"Operation started: {self.operation}")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        duration = time.time() - self.start_time

        if exc_type:
            self.logger.error(
                f"Operation failed: {self.operation} after {duration:.3f}s - {exc_val}"
            )
        else:
            self.logger.debug(
                f"Operation completed: {self.operation} in {duration:.3f}s"
            )

        self.logger._context_data.data = self.old_context


def resolve_log_level(verbose: int = 0) -> str:
    """Pick the log level from -v flags, DEBUG and LOG_LEVEL.

    Args:
        verbose: Number of -v flags given on the command line

    Returns:
        Level name such as "INFO"
    """
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    if is_env_truthy("DEBUG"):
        return "DEBUG"
    return os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def setup_logger(
    name: str = "mcp-bitbucket",
    level: str | None = None,
    log_to_file: bool = False,
    log_dir: str | None = None,
    log_format: str | None = None,
) -> ContextualLogger:
    """
    Configures and returns a contextual logger.

    Console output goes to stderr; stdout carries the stdio MCP stream.
    Calling this again replaces the handlers installed by a previous call.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, etc.)
        log_to_file: If True, also logs to a rotating file
        log_dir: Directory to store log files
        log_format: Log format

    Returns:
        Configured contextual logger
    """
    logging.setLoggerClass(ContextualLogger)
    logger = logging.getLogger(name)

    log_level = (level or os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    logger.setLevel(getattr(logging, log_level, logging.WARNING))

    formatter = logging.Formatter(log_format or os.getenv("LOG_FORMAT", DEFAULT_FORMAT))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_ContextDefaultFilter())
    logger.addHandler(console_handler)

    if log_to_file:
        log_directory = Path(log_dir or os.getenv("LOG_DIR", DEFAULT_LOG_DIRECTORY))
        log_directory.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_directory / f"{name}.log",
            maxBytes=MAX_LOG_SIZE,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(_ContextDefaultFilter())
        logger.addHandler(file_handler)

    # Prevents propagation to the root logger
    logger.propagate = False

    return cast(ContextualLogger, logger)


def log_operation(
    logger: ContextualLogger, operation: str, **context: Any
) -> LoggingContextManager:
    """
    Creates a context manager for operation logging.

    Args:
        logger: Contextual logger
        operation: Name of the operation
        **context: Additional context data

    Returns:
        Context manager configured for operation logging
    """
    return LoggingContextManager(logger, operation, **context)
