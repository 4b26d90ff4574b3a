"""Memberstack member payloads and verification outcomes."""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from .base import BaseSchema


class PlanConnection(BaseSchema):
    """A link between a member and a subscription plan."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    plan_id: str = Field(default="", validation_alias=AliasChoices("planId", "plan_id", "plan"))
    status: str = Field(default="")

    @field_validator("plan_id", "status", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v


class Member(BaseSchema):
    """Member identity resolved from a token; never persisted."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    plan_connections: list[PlanConnection] | None = Field(
        default=None,
        validation_alias=AliasChoices("planConnections", "plan_connections"),
    )

    def has_plan(self, plan_ids: set[str]) -> bool:
        """Whether any plan connection grants one of ``plan_ids``.

        An empty status counts as active: Memberstack omits the status on
        some free and manually assigned connections.
        """
        for connection in self.plan_connections or []:
            if connection.plan_id in plan_ids and connection.status.upper() in ("ACTIVE", ""):
                return True
        return False


class VerificationFailure(str, Enum):
    """Reason classes for a rejected member token."""

    MISSING_TOKEN = "MISSING_TOKEN"
    SERVER_MISCONFIGURED = "SERVER_MISCONFIGURED"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    NO_MEMBER_DATA = "NO_MEMBER_DATA"
    NOT_ENTITLED = "NOT_ENTITLED"
    VERIFICATION_ERROR = "VERIFICATION_ERROR"


class VerificationResult(BaseSchema):
    """Outcome of verifying a member token."""

    entitled: bool
    member: Member | None = None
    failure: VerificationFailure | None = None
    reason: str | None = None

    @classmethod
    def granted(cls, member: Member) -> VerificationResult:
        return cls(entitled=True, member=member)

    @classmethod
    def denied(cls, failure: VerificationFailure, reason: str) -> VerificationResult:
        return cls(entitled=False, failure=failure, reason=reason)


VerificationResult.model_rebuild()

__all__ = [
    "PlanConnection",
    "Member",
    "VerificationFailure",
    "VerificationResult",
]
