"""Error hierarchy for split-provider.

Exception Hierarchy:
    SplitError (base)
    ├── TransportError  - network failures and non-2xx responses
    │   └── NotFoundError - remote 404
    ├── DecodeError     - malformed JSON or unexpected body shape
    ├── ConfigError     - missing credentials, bad provider config
    └── SchemaError     - invalid declarative configuration or state writes
"""

from __future__ import annotations

from typing import Any


class SplitError(Exception):
    """Base exception for all split-provider errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class TransportError(SplitError):
    """HTTP-level failure talking to the Split admin API.

    Raised for connection failures, timeouts and any non-2xx response.

    Attributes:
        status_code: HTTP status code, ``None`` when no response was received.
        method: HTTP method of the failed request.
        path: Request path of the failed request.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str | None = None,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.method = method
        self.path = path

    @classmethod
    def from_exception(
        cls, exc: Exception, *, method: str | None = None, path: str | None = None
    ) -> TransportError:
        """Wrap an httpx exception, keeping the original as ``__cause__``."""
        target = f"{method} {path}" if method and path else "request"
        error = cls(
            f"{target} failed: {exc}",
            method=method,
            path=path,
            details={"original_exception": type(exc).__name__},
        )
        error.__cause__ = exc
        return error


class NotFoundError(TransportError):
    """The remote service answered 404."""


class DecodeError(SplitError):
    """Response body could not be decoded into the expected model."""


class ConfigError(SplitError):
    """Error loading or validating provider configuration.

    Attributes:
        config_key: The configuration key that caused the error.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.config_key = config_key


class SchemaError(SplitError):
    """Declarative configuration or state write does not match the schema.

    Attributes:
        attribute: Name of the offending attribute, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        attribute: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.attribute = attribute
