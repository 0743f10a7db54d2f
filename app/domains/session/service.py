"""Chat session service layer.

Every query filters by the owner's user id, so a foreign session is
indistinguishable from a missing one.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, delete, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.exceptions.chat import SessionNotFoundError
from models.chat_session import DEFAULT_SESSION_TITLE, ChatSession
from models.message import Message


logger = logging.getLogger(__name__)


class SessionService:
    """Service class for chat session business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_sessions(self, user_id: int) -> List[ChatSession]:
        """All sessions owned by the user, most recently active first."""
        stmt = (
            select(ChatSession)
            .where(ChatSession.user_id == user_id)
            .order_by(desc(ChatSession.updated_at), desc(ChatSession.id))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_session(self, user_id: int, title: Optional[str] = None) -> ChatSession:
        """Create a session titled ``title`` or the default title."""
        session = ChatSession(user_id=user_id, title=title or DEFAULT_SESSION_TITLE)

        try:
            self.db.add(session)
            await self.db.commit()
            await self.db.refresh(session)
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info("Created session %s for user %s", session.id, user_id)
        return session

    async def get_owned_session(self, session_id: int, user_id: int) -> Optional[ChatSession]:
        """Get a session by ID, ensuring it belongs to the user."""
        stmt = select(ChatSession).where(
            and_(ChatSession.id == session_id, ChatSession.user_id == user_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def update_title(self, session_id: int, user_id: int, title: str) -> ChatSession:
        """Rename a session owned by the user.

        Raises:
            SessionNotFoundError: If the session is missing or owned by someone else.
        """
        session = await self.get_owned_session(session_id, user_id)
        if not session:
            raise SessionNotFoundError(session_id)

        session.title = title
        try:
            await self.db.commit()
            await self.db.refresh(session)
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return session

    async def delete_session(self, session_id: int, user_id: int) -> bool:
        """Delete a session and its messages if the user owns it.

        Missing or foreign ids are a no-op. Returns True when a row was deleted.
        """
        owned = select(ChatSession.id).where(
            and_(ChatSession.id == session_id, ChatSession.user_id == user_id)
        )

        try:
            await self.db.execute(delete(Message).where(Message.session_id.in_(owned)))
            result = await self.db.execute(
                delete(ChatSession).where(
                    and_(ChatSession.id == session_id, ChatSession.user_id == user_id)
                )
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted session %s for user %s", session_id, user_id)
        return deleted
