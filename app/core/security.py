"""Memberstack token verification and PRO-plan entitlement."""

import logging
from typing import Any, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from app.core.config import Settings
from app.exceptions.auth import MembershipServiceError
from app.schemas.member import Member, VerificationFailure, VerificationResult

logger = logging.getLogger(__name__)


class MembershipGateway(Protocol):
    """Read access to the membership provider's admin API."""

    async def verify_token(self, token: str) -> Any: ...

    async def get_member(self, member_id: str) -> Any: ...


class MemberstackClient:
    """
    Thin client for the Memberstack admin REST API.

    Every call authenticates with the admin secret key in the ``x-api-key``
    header and raises :class:`MembershipServiceError` for non-2xx answers.

    :ivar api_url: The base URL of the Memberstack admin API.
    :type api_url: str
    :ivar secret_key: The admin secret key.
    :type secret_key: str | None
    """

    def __init__(self, config: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.api_url = config.memberstack_base_url
        self.secret_key = config.memberstack_secret_key
        self.timeout = config.memberstack_timeout
        self._transport = transport

    async def verify_token(self, token: str) -> Any:
        """Resolve a member token to its member payload."""
        return await self._get("/members/verify-token", params={"token": token})

    async def get_member(self, member_id: str) -> Any:
        """Fetch a member, including its plan connections."""
        return await self._get(f"/members/{quote(member_id, safe='')}")

    async def _get(self, path: str, params: dict | None = None) -> Any:
        headers = {"x-api-key": self.secret_key or "", "Accept": "application/json"}
        async with httpx.AsyncClient(
            base_url=self.api_url, timeout=self.timeout, transport=self._transport
        ) as client:
            response = await client.get(path, params=params, headers=headers)

        if not response.is_success:
            raise MembershipServiceError(response.status_code, response.text)
        return response.json()


def _unwrap(body: Any, envelopes: tuple[str, ...]) -> dict | None:
    """Return the first non-empty envelope of ``body``, or ``body`` itself."""
    if not isinstance(body, dict):
        return None
    for key in envelopes:
        inner = body.get(key)
        if isinstance(inner, dict) and inner:
            return inner
    return body


def _has_plan_connections(payload: dict) -> bool:
    return payload.get("planConnections") is not None or payload.get("plan_connections") is not None


class MemberVerifier:
    """
    Verifies a caller-supplied member token and checks PRO-plan entitlement.

    Never raises for an upstream problem: every rejection is reported as a
    denied :class:`VerificationResult` with a failure kind and reason text.
    """

    def __init__(self, config: Settings, gateway: MembershipGateway):
        self.config = config
        self.gateway = gateway
        self.plan_ids = {config.pro_plan_id, config.pro_plan_alias}

    async def verify(self, token: str | None) -> VerificationResult:
        """
        Verify ``token`` against Memberstack.

        :param token: Value of the ``x-memberstack-token`` header.
        :return: A granted result carrying the member, or a denied result.
        """
        if not token:
            return self._deny(VerificationFailure.MISSING_TOKEN, "Missing token")

        if not self.config.memberstack_secret_key:
            return self._deny(
                VerificationFailure.SERVER_MISCONFIGURED,
                "Server is missing MEMBERSTACK_SECRET_KEY",
            )

        try:
            payload = _unwrap(await self.gateway.verify_token(token), ("data", "payload"))
        except MembershipServiceError as e:
            return self._deny(
                VerificationFailure.VERIFICATION_FAILED, f"Memberstack verify failed: {e.body}"
            )
        except (httpx.HTTPError, ValueError) as e:
            return self._deny(VerificationFailure.VERIFICATION_ERROR, f"Verification error: {e}")

        if not payload or not payload.get("id"):
            return self._deny(
                VerificationFailure.NO_MEMBER_DATA,
                "Token could not be verified (no member data)",
            )

        member_id = str(payload["id"])
        member_data = payload
        if not _has_plan_connections(payload):
            try:
                member_data = _unwrap(await self.gateway.get_member(member_id), ("data",)) or {}
            except MembershipServiceError as e:
                return self._deny(
                    VerificationFailure.VERIFICATION_FAILED,
                    f"Memberstack member lookup failed: {e.body}",
                )
            except (httpx.HTTPError, ValueError) as e:
                return self._deny(
                    VerificationFailure.VERIFICATION_ERROR, f"Verification error: {e}"
                )

        try:
            member = Member.model_validate({**member_data, "id": member_id})
        except ValidationError as e:
            return self._deny(VerificationFailure.VERIFICATION_ERROR, f"Verification error: {e}")

        if not member.has_plan(self.plan_ids):
            return self._deny(VerificationFailure.NOT_ENTITLED, "Member lacks the PRO plan")

        logger.debug(f"Member {member.id} verified with PRO plan")
        return VerificationResult.granted(member)

    @staticmethod
    def _deny(failure: VerificationFailure, reason: str) -> VerificationResult:
        logger.warning(f"Member verification denied ({failure.value}): {reason}")
        return VerificationResult.denied(failure, reason)
