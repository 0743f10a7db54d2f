"""Session procedures: ``session.list``, ``session.create``, ``session.updateTitle``,
``session.delete`` and ``session.summarizeTitle``."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db, get_title_generator
from app.domains.session.service import SessionService
from app.schemas.base import OkResponse
from app.schemas.session import (
    SessionCreate,
    SessionDelete,
    SessionResponse,
    SessionUpdateTitle,
    SummarizeTitleRequest,
    SummarizeTitleResponse,
)
from app.services.generation import TitleGenerator
from models.user import User


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/trpc",
    tags=["session"],
)


@router.get("/session.list", response_model=List[SessionResponse])
async def list_sessions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's sessions, most recently active first."""
    service = SessionService(db)
    return await service.list_sessions(user_id=current_user.id)


@router.post("/session.create", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_data: Optional[SessionCreate] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a session, titled "New Chat" unless a title is given."""
    title = session_data.title if session_data else None
    service = SessionService(db)
    return await service.create_session(user_id=current_user.id, title=title)


@router.post("/session.updateTitle", response_model=SessionResponse)
async def update_session_title(
    update_data: SessionUpdateTitle,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Rename one of the caller's sessions."""
    service = SessionService(db)
    return await service.update_title(
        session_id=update_data.id, user_id=current_user.id, title=update_data.title
    )


@router.post("/session.delete", response_model=OkResponse)
async def delete_session(
    delete_data: SessionDelete,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete one of the caller's sessions. Idempotent: unknown ids still succeed."""
    service = SessionService(db)
    await service.delete_session(session_id=delete_data.id, user_id=current_user.id)
    return OkResponse(ok=True)


@router.post("/session.summarizeTitle", response_model=SummarizeTitleResponse)
async def summarize_session_title(
    summarize_data: SummarizeTitleRequest,
    _current_user: User = Depends(get_current_user),
    title_generator: TitleGenerator = Depends(get_title_generator),
):
    """Suggest a short title for the given messages."""
    result = await title_generator.generate(summarize_data.messages)
    return SummarizeTitleResponse(title=result.text)
