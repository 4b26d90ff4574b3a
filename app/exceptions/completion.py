# ruff: noqa: D107
"""Completion service exceptions."""

from typing import Any

from .base import BaseAppException


class CompletionError(BaseAppException):
    """Base exception for completion service errors."""

    def __init__(
        self,
        message: str = "Completion service error occurred",
        error_code: str = "COMPLETION_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=500, error_code=error_code, details=details)


class CompletionTimeoutError(CompletionError):
    """Exception raised when the completion request times out."""

    def __init__(
        self,
        message: str = "Completion request timed out",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "COMPLETION_TIMEOUT", details)


class CompletionConfigurationError(CompletionError):
    """Exception raised when the completion service is not properly configured."""

    def __init__(
        self,
        message: str = "Completion service is not properly configured",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "COMPLETION_CONFIGURATION_ERROR", details)
