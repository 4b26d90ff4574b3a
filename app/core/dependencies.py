# app/core/dependencies.py
import logging

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, settings
from app.core.security import MembershipGateway, MemberstackClient, MemberVerifier
from app.database import get_db
from app.domains.chat.completion import GeminiCompletionClient
from app.domains.chat.interfaces import CompletionClient, ConversationStore
from app.domains.chat.repository import SQLAlchemyConversationStore
from app.domains.chat.service import ChatService
from app.exceptions.auth import UnauthorizedError
from app.schemas.member import Member

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    return settings


def get_membership_gateway(config: Settings = Depends(get_settings)) -> MembershipGateway:
    return MemberstackClient(config)


def get_member_verifier(
    config: Settings = Depends(get_settings),
    gateway: MembershipGateway = Depends(get_membership_gateway),
) -> MemberVerifier:
    return MemberVerifier(config, gateway)


async def require_member(
    token: str | None = Header(None, alias="x-memberstack-token"),
    verifier: MemberVerifier = Depends(get_member_verifier),
) -> Member:
    """Verify the member token and require the PRO plan.

    Returns:
        Member: The entitled member

    Raises:
        UnauthorizedError: If the token is missing, invalid or not entitled
    """
    result = await verifier.verify(token)
    if not result.entitled:
        raise UnauthorizedError(result.reason, error_code=result.failure.value)
    return result.member


def get_conversation_store(db: AsyncSession = Depends(get_db)) -> ConversationStore:
    return SQLAlchemyConversationStore(db)


def get_completion_client(config: Settings = Depends(get_settings)) -> CompletionClient:
    return GeminiCompletionClient(config)


def get_chat_service(
    store: ConversationStore = Depends(get_conversation_store),
    completion: CompletionClient = Depends(get_completion_client),
) -> ChatService:
    return ChatService(store, completion)
