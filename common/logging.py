"""Structured logging utilities.

This module provides the logging layer used across the project. It supports:

- Structured logging with keyword fields
- Context propagation through ``contextvars``
- Sensitive data masking (credentials never reach a handler unmasked)
- Pluggable handlers and formatters, with stdlib ``logging`` as the default sink

Example:
    >>> from common.logging import get_logger, LogContext
    >>> logger = get_logger(__name__)
    >>> with LogContext(operation="create_tenant"):
    ...     logger.info("Tenant created", tenant_id="tenant-1", plan="basic")
"""

from __future__ import annotations

import json
import logging
import re
import sys
import threading
from abc import abstractmethod
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Protocol,
    Self,
    runtime_checkable,
)


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping


# =============================================================================
# Constants and Configuration
# =============================================================================


class LogLevel(Enum):
    """Log severity levels with numeric values matching stdlib logging."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    def to_stdlib(self) -> int:
        """Convert to stdlib logging level."""
        return self.value

    @classmethod
    def from_stdlib(cls, level: int) -> LogLevel:
        """Create from stdlib logging level."""
        for log_level in cls:
            if log_level.value == level:
                return log_level
        return cls.INFO

    @classmethod
    def from_string(cls, level: str) -> LogLevel:
        """Create from string representation."""
        try:
            return cls[level.upper()]
        except KeyError:
            return cls.INFO


DEFAULT_SENSITIVE_PATTERNS: tuple[tuple[str, str], ...] = (
    (r"(password=)[^&\s;]+", r"\1***MASKED***"),
    (r"(secret=)[^&\s;]+", r"\1***MASKED***"),
    (r"(token=)[^&\s;]+", r"\1***MASKED***"),
    (r"(://[^:]+:)[^@]+(@)", r"\1***MASKED***\2"),
    (r"(pbkdf2_sha256\$)\S+", r"\1***MASKED***"),
)

DEFAULT_SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "password_hash",
    "secret",
    "token",
    "api_key",
    "credential",
    "credentials",
    "private_key",
    "connection_string",
})


# =============================================================================
# Context Management
# =============================================================================


@dataclass(frozen=True, slots=True)
class LogContextData:
    """Immutable container for log context data.

    Attributes:
        operation: Current operation name.
        tenant_id: Tenant the operation acts on.
        correlation_id: Request/transaction correlation ID.
        extra: Additional context fields.
    """

    operation: str | None = None
    tenant_id: str | None = None
    correlation_id: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def merge(self, other: LogContextData) -> LogContextData:
        """Create a new context with ``other`` taking precedence."""
        return LogContextData(
            operation=other.operation or self.operation,
            tenant_id=other.tenant_id or self.tenant_id,
            correlation_id=other.correlation_id or self.correlation_id,
            extra={**self.extra, **other.extra},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        if self.operation:
            result["operation"] = self.operation
        if self.tenant_id:
            result["tenant_id"] = self.tenant_id
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        result.update(self.extra)
        return result


_log_context: ContextVar[LogContextData] = ContextVar(
    "log_context", default=LogContextData()
)


class LogContext:
    """Context manager for log context propagation.

    Nested contexts merge with the enclosing one.

    Example:
        >>> with LogContext(operation="delete_tenant", tenant_id="tenant-1"):
        ...     logger.info("Running cleanup")  # includes operation and tenant_id
    """

    def __init__(
        self,
        *,
        operation: str | None = None,
        tenant_id: str | None = None,
        correlation_id: str | None = None,
        **extra: Any,
    ) -> None:
        self._new_context = LogContextData(
            operation=operation,
            tenant_id=tenant_id,
            correlation_id=correlation_id,
            extra=extra,
        )
        self._token: Any = None

    def __enter__(self) -> Self:
        current = _log_context.get()
        self._token = _log_context.set(current.merge(self._new_context))
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)


def get_current_context() -> LogContextData:
    """Get the current log context."""
    return _log_context.get()


# =============================================================================
# Log Record
# =============================================================================


@dataclass(slots=True)
class LogRecord:
    """Structured log record.

    Attributes:
        level: Log severity level.
        message: Log message.
        logger_name: Name of the logger.
        timestamp: When the log was created.
        context: Associated context data.
        extra: Additional structured fields.
        exc_info: Exception information if any.
    """

    level: LogLevel
    message: str
    logger_name: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    context: LogContextData = field(default_factory=LogContextData)
    extra: dict[str, Any] = field(default_factory=dict)
    exc_info: BaseException | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "level": self.level.name,
            "message": self.message,
            "logger": self.logger_name,
            "timestamp": self.timestamp.isoformat(),
            **self.context.to_dict(),
            **self.extra,
        }
        if self.exc_info:
            result["exception"] = str(self.exc_info)
            result["exception_type"] = type(self.exc_info).__name__
        return result


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class LogHandler(Protocol):
    """Protocol for log handlers."""

    @abstractmethod
    def handle(self, record: LogRecord) -> None:
        """Handle a log record."""
        ...

    @abstractmethod
    def flush(self) -> None:
        """Flush any buffered output."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the handler and release resources."""
        ...


@runtime_checkable
class LogFormatter(Protocol):
    """Protocol for log formatters."""

    @abstractmethod
    def format(self, record: LogRecord) -> str:
        """Format a log record."""
        ...


# =============================================================================
# Sensitive Data Masking
# =============================================================================


class SensitiveDataMasker:
    """Masks sensitive data in log messages and structured data.

    Example:
        >>> masker = SensitiveDataMasker()
        >>> masker.mask_string("password=secret123")
        'password=***MASKED***'
        >>> masker.mask_dict({"password_hash": "abc", "name": "test"})
        {'password_hash': '***MASKED***', 'name': 'test'}
    """

    MASK_VALUE: ClassVar[str] = "***MASKED***"

    def __init__(
        self,
        patterns: tuple[tuple[str, str], ...] | None = None,
        sensitive_keys: frozenset[str] | None = None,
        enabled: bool = True,
    ) -> None:
        self.enabled = enabled
        self._sensitive_keys = sensitive_keys or DEFAULT_SENSITIVE_KEYS
        self._compiled_patterns = tuple(
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in (patterns or DEFAULT_SENSITIVE_PATTERNS)
        )

    def mask_string(self, value: str) -> str:
        """Mask sensitive data in a string."""
        if not self.enabled or not value:
            return value

        result = value
        for pattern, replacement in self._compiled_patterns:
            result = pattern.sub(replacement, result)
        return result

    def mask_value(self, value: Any) -> Any:
        """Mask a single value based on type."""
        if not self.enabled:
            return value

        if isinstance(value, str):
            return self.mask_string(value)
        elif isinstance(value, dict):
            return self.mask_dict(value)
        elif isinstance(value, (list, tuple)):
            return type(value)(self.mask_value(v) for v in value)
        return value

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask sensitive data in a dictionary, recursing into nested dicts."""
        if not self.enabled:
            return data

        result: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in self._sensitive_keys:
                result[key] = self.MASK_VALUE
            else:
                result[key] = self.mask_value(value)
        return result

    def add_sensitive_key(self, key: str) -> None:
        """Add a key to be masked in dictionaries."""
        self._sensitive_keys = self._sensitive_keys | {key.lower()}


_default_masker = SensitiveDataMasker()


def get_masker() -> SensitiveDataMasker:
    """Get the default sensitive data masker."""
    return _default_masker


# =============================================================================
# Formatters
# =============================================================================


class TextFormatter:
    """Plain text log formatter.

    Example output:
        2026-01-15T10:30:45.123456+00:00 [INFO] packages.tenancy.registry: Tenant created | tenant_id=...
    """

    def __init__(self, include_context: bool = True, include_extra: bool = True) -> None:
        self.include_context = include_context
        self.include_extra = include_extra

    def format(self, record: LogRecord) -> str:
        parts = [
            record.timestamp.isoformat(),
            f"[{record.level.name}]",
            f"{record.logger_name}:",
            record.message,
        ]

        if self.include_context:
            context_dict = record.context.to_dict()
            if context_dict:
                parts.append("| " + " ".join(f"{k}={v}" for k, v in context_dict.items()))

        if self.include_extra and record.extra:
            parts.append("| " + " ".join(f"{k}={v}" for k, v in record.extra.items()))

        if record.exc_info:
            parts.append(f"| exception={record.exc_info!r}")

        return " ".join(parts)


class JSONFormatter:
    """JSON log formatter for structured logging systems."""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        indent: int | None = None,
    ) -> None:
        self._masker = masker or _default_masker
        self._indent = indent

    def format(self, record: LogRecord) -> str:
        masked_data = self._masker.mask_dict(record.to_dict())
        return json.dumps(masked_data, indent=self._indent, default=str)


# =============================================================================
# Handlers
# =============================================================================


class StdlibHandler:
    """Handler that forwards records to the standard ``logging`` module.

    Structured fields are attached to the stdlib record as ``extra`` under
    the ``structured`` attribute so stdlib formatters and pytest's caplog
    can inspect them.
    """

    def __init__(self, formatter: LogFormatter | None = None) -> None:
        self._formatter = formatter

    def handle(self, record: LogRecord) -> None:
        stdlib_logger = logging.getLogger(record.logger_name)
        level = record.level.to_stdlib()
        if not stdlib_logger.isEnabledFor(level):
            return
        message = self._formatter.format(record) if self._formatter else record.message
        exc_info = None
        if record.exc_info is not None:
            exc_info = (type(record.exc_info), record.exc_info, record.exc_info.__traceback__)
        stdlib_logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={"structured": {**record.context.to_dict(), **record.extra}},
        )

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class StreamHandler:
    """Handler that writes formatted records to a stream (stderr by default)."""

    def __init__(
        self,
        stream: Any = None,
        formatter: LogFormatter | None = None,
        level: LogLevel = LogLevel.DEBUG,
    ) -> None:
        self._stream = stream or sys.stderr
        self._formatter = formatter or TextFormatter()
        self._level = level
        self._closed = False
        self._lock = threading.Lock()

    def handle(self, record: LogRecord) -> None:
        if self._closed or record.level.value < self._level.value:
            return
        message = self._formatter.format(record)
        with self._lock:
            self._stream.write(message + "\n")

    def flush(self) -> None:
        if not self._closed and hasattr(self._stream, "flush"):
            self._stream.flush()

    def close(self) -> None:
        self.flush()
        self._closed = True


class BufferingHandler:
    """Handler that keeps records in memory until flushed.

    Useful for batching logs to external services and for assertions in tests.
    """

    def __init__(
        self,
        capacity: int = 100,
        flush_callback: Callable[[list[LogRecord]], None] | None = None,
    ) -> None:
        self._capacity = capacity
        self._flush_callback = flush_callback
        self._buffer: list[LogRecord] = []
        self._closed = False

    @property
    def records(self) -> list[LogRecord]:
        """Records currently held in the buffer."""
        return list(self._buffer)

    def handle(self, record: LogRecord) -> None:
        if self._closed:
            return

        self._buffer.append(record)
        if len(self._buffer) >= self._capacity:
            self.flush()

    def flush(self) -> None:
        if self._buffer and self._flush_callback:
            self._flush_callback(list(self._buffer))
        self._buffer.clear()

    def close(self) -> None:
        self.flush()
        self._closed = True


# =============================================================================
# Logger
# =============================================================================


class StructuredLogger:
    """Logger with keyword fields, context propagation and masking.

    Example:
        >>> logger = StructuredLogger("packages.tenancy.registry")
        >>> logger.info("Quota reserved", tenant_id="tenant-1", resource="users")
    """

    def __init__(
        self,
        name: str,
        level: LogLevel = LogLevel.DEBUG,
        handlers: list[LogHandler] | None = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        self.name = name
        self.level = level
        self._handlers: list[LogHandler] = handlers or []
        self._masker = masker or _default_masker
        self._disabled = False

    @property
    def handlers(self) -> list[LogHandler]:
        return list(self._handlers)

    def add_handler(self, handler: LogHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def remove_handler(self, handler: LogHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def is_enabled_for(self, level: LogLevel) -> bool:
        return not self._disabled and level.value >= self.level.value

    def _log(
        self,
        level: LogLevel,
        message: str,
        exc_info: BaseException | None = None,
        **kwargs: Any,
    ) -> None:
        if not self.is_enabled_for(level):
            return

        record = LogRecord(
            level=level,
            message=self._masker.mask_string(message),
            logger_name=self.name,
            context=get_current_context(),
            extra=self._masker.mask_dict(kwargs),
            exc_info=exc_info,
        )
        for handler in self._handlers:
            handler.handle(record)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: BaseException | None = None, **kwargs: Any) -> None:
        self._log(LogLevel.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at ERROR level, capturing the exception being handled."""
        self._log(LogLevel.ERROR, message, exc_info=sys.exc_info()[1], **kwargs)

    def log(self, level: LogLevel, message: str, **kwargs: Any) -> None:
        self._log(level, message, **kwargs)


# =============================================================================
# Logger Registry
# =============================================================================


class LoggerRegistry:
    """Registry handing out one logger per name.

    New loggers receive the registry's default handlers. Until
    ``configure`` is called the default is a single StdlibHandler.
    """

    def __init__(self) -> None:
        self._loggers: dict[str, StructuredLogger] = {}
        self._root_handlers: list[LogHandler] = [StdlibHandler()]
        self._root_level: LogLevel = LogLevel.DEBUG
        self._lock = threading.Lock()

    def get_logger(self, name: str, level: LogLevel | None = None) -> StructuredLogger:
        with self._lock:
            logger = self._loggers.get(name)
            if logger is None:
                logger = StructuredLogger(
                    name=name,
                    level=level or self._root_level,
                    handlers=list(self._root_handlers),
                )
                self._loggers[name] = logger
            return logger

    def configure(
        self,
        level: LogLevel = LogLevel.INFO,
        handlers: list[LogHandler] | None = None,
        format: str = "text",
    ) -> None:
        """Configure defaults and apply them to existing loggers.

        Args:
            level: Default log level.
            handlers: Default handlers. When omitted a stderr StreamHandler
                with the requested format is used.
            format: Format type ('text' or 'json').
        """
        if handlers is None:
            formatter: LogFormatter = JSONFormatter() if format == "json" else TextFormatter()
            handlers = [StreamHandler(formatter=formatter, level=level)]

        with self._lock:
            self._root_level = level
            self._root_handlers = list(handlers)
            for logger in self._loggers.values():
                logger.level = level
                logger._handlers = list(handlers)

    def disable(self) -> None:
        for logger in self._loggers.values():
            logger._disabled = True

    def enable(self) -> None:
        for logger in self._loggers.values():
            logger._disabled = False


_registry = LoggerRegistry()


def get_logger(name: str, level: LogLevel | None = None) -> StructuredLogger:
    """Get a logger by name.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Registry configured", backend="memory")
    """
    return _registry.get_logger(name, level)


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    handlers: list[LogHandler] | None = None,
    format: str = "text",
) -> None:
    """Configure global logging settings.

    Example:
        >>> configure_logging(level="DEBUG", format="json")
    """
    if isinstance(level, str):
        level = LogLevel.from_string(level)
    _registry.configure(level=level, handlers=handlers, format=format)
