"""Message procedures: ``message.list`` and ``message.sendMessage``."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import (
    get_current_user,
    get_db,
    get_reply_generator,
    get_title_generator,
)
from app.domains.message.service import MessageService
from app.schemas.message import MessageResponse, SendMessageRequest, SendMessageResponse
from app.services.generation import ReplyGenerator, TitleGenerator
from models.user import User


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/trpc",
    tags=["message"],
)


def get_message_service(
    db: AsyncSession = Depends(get_db),
    reply_generator: ReplyGenerator = Depends(get_reply_generator),
    title_generator: TitleGenerator = Depends(get_title_generator),
) -> MessageService:
    return MessageService(db, reply_generator, title_generator)


@router.get("/message.list", response_model=List[MessageResponse])
async def list_messages(
    session_id: int = Query(..., alias="sessionId", description="Session ID"),
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
):
    """List a session's messages oldest first; empty if the session is not the caller's."""
    return await service.list_messages(session_id=session_id, user_id=current_user.id)


@router.post("/message.sendMessage", response_model=SendMessageResponse)
async def send_message(
    message_data: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
):
    """Send a message to the career guide and return both stored messages.

    Args:
        message_data: Target session and message content
        current_user: Current authenticated user
        service: Message service bound to the request's database session

    Returns:
        The stored user message and assistant reply
    """
    result = await service.send_message(
        session_id=message_data.session_id,
        user_id=current_user.id,
        content=message_data.content,
    )
    logger.info("Message exchange stored in session %s", message_data.session_id)
    return result
