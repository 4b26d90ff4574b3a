"""Chat API controller with FastAPI endpoints."""

import json
import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import ValidationError

from app.core.dependencies import get_chat_service, require_member
from app.domains.chat.service import ChatService
from app.exceptions.base import BadRequestError, BaseAppException, InternalServerError
from app.schemas.base import ErrorResponse
from app.schemas.chat import ChatReplyResponse, ChatRequest, ConversationHistoryResponse
from app.schemas.member import Member

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.options("/")
async def chat_preflight():
    """CORS preflight; the headers are added by the CORS middleware."""
    return Response(status_code=200, media_type="application/json")


@router.get("/", response_model=ConversationHistoryResponse, responses=ERROR_RESPONSES)
async def get_conversation(
    member: Member = Depends(require_member),
    user_id: str | None = Query(None, alias="userId", description="Memberstack member id"),
    service: ChatService = Depends(get_chat_service),
):
    """Get the latest conversation of a user, creating it when missing.

    Args:
        member: Verified PRO member
        user_id: Owner of the conversation
        service: Chat service

    Returns:
        Conversation id and its full history
    """
    try:
        return await service.get_conversation(user_id)

    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error loading conversation for member {member.id}: {str(e)}")
        raise InternalServerError(str(e)) from e


async def parse_chat_request(request: Request) -> ChatRequest | None:
    """Parse the POST body; only called once the member has been verified."""
    body = await request.body()
    if not body.strip():
        return None

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise BadRequestError(f"Invalid JSON body: {str(e)}") from None

    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as e:
        errors = [
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in e.errors()
        ]
        raise BadRequestError("Invalid request", details={"errors": errors}) from None


@router.post(
    "/",
    response_model=ChatReplyResponse,
    responses=ERROR_RESPONSES,
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": ChatRequest.model_json_schema(by_alias=True)}}
        }
    },
)
async def send_chat_message(
    request: Request,
    member: Member = Depends(require_member),
    service: ChatService = Depends(get_chat_service),
):
    """Send a message to the legal assistant.

    The body is read here rather than declared as a parameter, so a request
    without a valid member token is rejected before its body is looked at.

    Args:
        request: Incoming request carrying userId, message and conversationId
        member: Verified PRO member
        service: Chat service

    Returns:
        Conversation id, assistant reply and full history
    """
    try:
        chat_request = await parse_chat_request(request)
        return await service.send_message(chat_request)

    except BaseAppException as e:
        if e.status_code >= 500:
            logger.error(f"Chat failed for member {member.id} ({e.error_code}): {e.message}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error in chat for member {member.id}: {str(e)}")
        raise InternalServerError(str(e)) from e
