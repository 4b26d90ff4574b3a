# ruff: noqa: D107
"""Conversation store exceptions."""

from typing import Any

from .base import BaseAppException


class StoreError(BaseAppException):
    """Base exception for conversation store failures."""

    def __init__(
        self,
        message: str = "Conversation store error occurred",
        error_code: str = "STORE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=500, error_code=error_code, details=details)


class StoreReadError(StoreError):
    """Exception raised when conversations or messages cannot be read."""

    def __init__(
        self,
        message: str = "Failed to read from the conversation store",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "STORE_READ_ERROR", details)


class StoreWriteError(StoreError):
    """Exception raised when a conversation or message cannot be written."""

    def __init__(
        self,
        message: str = "Failed to write to the conversation store",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "STORE_WRITE_ERROR", details)
