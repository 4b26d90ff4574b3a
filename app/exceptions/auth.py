# ruff: noqa: D107
"""Membership authentication exceptions."""

from typing import Any

from .base import BaseAppException


class UnauthorizedError(BaseAppException):
    """Exception raised when a member token is missing, invalid or not entitled."""

    def __init__(
        self,
        message: str = "Unauthorized",
        error_code: str = "UNAUTHORIZED",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=401, error_code=error_code, details=details)


class MembershipServiceError(Exception):
    """Raised by the membership gateway when Memberstack answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Memberstack responded {status_code}: {body}")
