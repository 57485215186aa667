"""Base exception hierarchy shared by all packages.

Every error raised by this project inherits from CoreError so callers can
catch the whole family at a single point.

Exception Hierarchy:
    CoreError (base)
    └── ConfigurationError
        └── InvalidConfigValueError

Package-specific errors (for example ``packages.tenancy.exceptions``)
subclass CoreError directly.

Example:
    >>> try:
    ...     config = RegistryConfig.from_env()
    ... except InvalidConfigValueError as e:
    ...     logger.error(f"Bad setting {e.config_key}: {e.value}")
"""

from __future__ import annotations

from typing import Any


class CoreError(Exception):
    """Base exception for all errors raised by this project.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
        cause: Optional original exception that caused this error.

    Example:
        >>> try:
        ...     raise CoreError("Something went wrong", details={"key": "value"})
        ... except CoreError as e:
        ...     print(f"Error: {e.message}, Details: {e.details}")
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"cause={self.cause!r})"
        )

    def with_context(self, **kwargs: Any) -> CoreError:
        """Create a new generic error with additional context details.

        The original exception is left untouched.

        Args:
            **kwargs: Additional context to add to details.

        Returns:
            New CoreError carrying the merged details and the same cause.

        Example:
            >>> e = CoreError("Error", details={"key": "value"})
            >>> e.with_context(tenant_id="tenant-1").details
            {'key': 'value', 'tenant_id': 'tenant-1'}
        """
        merged_details = {**self.details, **kwargs}
        return CoreError(self.message, details=merged_details, cause=self.cause)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CoreError):
    """Exception for configuration-related errors.

    Attributes:
        config_key: Optional key that caused the configuration error.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details=details, cause=cause)
        self.config_key = config_key


class InvalidConfigValueError(ConfigurationError):
    """Exception for invalid configuration values.

    Raised when a configuration value is of the wrong type or outside
    acceptable bounds.

    Attributes:
        config_key: The configuration key with invalid value.
        value: The invalid value that was provided.
        expected: Description of what was expected.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str,
        value: Any = None,
        expected: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = details or {}
        details["value"] = value
        if expected:
            details["expected"] = expected
        super().__init__(message, config_key=config_key, details=details, cause=cause)
        self.value = value
        self.expected = expected


# =============================================================================
# Utility Functions
# =============================================================================


def wrap_exception(
    exception: Exception,
    wrapper_class: type[CoreError] = CoreError,
    message: str | None = None,
    **kwargs: Any,
) -> CoreError:
    """Wrap an arbitrary exception in the project hierarchy.

    Args:
        exception: The original exception to wrap.
        wrapper_class: The exception class to wrap with.
        message: Optional custom message. Defaults to original exception message.
        **kwargs: Additional arguments to pass to the wrapper class.

    Returns:
        A new exception instance wrapping the original.

    Example:
        >>> try:
        ...     int("abc")
        ... except ValueError as e:
        ...     raise wrap_exception(e, InvalidConfigValueError, config_key="port")
    """
    msg = message if message is not None else str(exception)
    return wrapper_class(msg, cause=exception, **kwargs)
