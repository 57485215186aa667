"""Shared infrastructure for the tenant registry.

This module provides the base exception hierarchy and structured logging
used by every package.

Logging:
    >>> from common import get_logger, LogContext
    >>> logger = get_logger(__name__)
    >>> with LogContext(operation="create_tenant"):
    ...     logger.info("Tenant created", plan="basic")

Exceptions:
    >>> from common import CoreError
    >>> try:
    ...     registry.require_tenant("missing")
    ... except CoreError as e:
    ...     logger.error(e.message, **e.details)
"""

from common.exceptions import (
    ConfigurationError,
    CoreError,
    InvalidConfigValueError,
    wrap_exception,
)
from common.logging import (
    BufferingHandler,
    JSONFormatter,
    LogContext,
    LogLevel,
    SensitiveDataMasker,
    StdlibHandler,
    StreamHandler,
    StructuredLogger,
    TextFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    # Exceptions
    "CoreError",
    "ConfigurationError",
    "InvalidConfigValueError",
    "wrap_exception",
    # Logging
    "LogLevel",
    "LogContext",
    "StructuredLogger",
    "SensitiveDataMasker",
    "TextFormatter",
    "JSONFormatter",
    "StdlibHandler",
    "StreamHandler",
    "BufferingHandler",
    "get_logger",
    "configure_logging",
]
