"""Message service layer with AI reply generation."""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.domains.session.service import SessionService
from app.exceptions.chat import MessagePersistenceError, SessionNotFoundError
from app.schemas.message import ChatTurn, MessageResponse, SendMessageResponse
from app.services.generation import ReplyGenerator, TitleGenerator
from models.base import utcnow
from models.chat_session import DEFAULT_SESSION_TITLE, ChatSession
from models.message import Message, MessageRole


logger = logging.getLogger(__name__)

TRUNCATED_TITLE_LENGTH = 50


def truncate_title(content: str) -> str:
    """Title derived from the first user message when no generated title is available."""
    text = " ".join(content.split())
    title = text[:TRUNCATED_TITLE_LENGTH]
    if len(text) > TRUNCATED_TITLE_LENGTH:
        title += "..."
    return title


class MessageService:
    """Lists messages and runs the send-message workflow."""

    def __init__(
        self,
        db: AsyncSession,
        reply_generator: ReplyGenerator,
        title_generator: TitleGenerator,
    ):
        """Initialize message service.

        Args:
            db: Async database session for data operations.
            reply_generator: Produces the assistant reply for a history.
            title_generator: Produces a session title once the first reply is stored.
        """
        self.db = db
        self.reply_generator = reply_generator
        self.title_generator = title_generator
        self.sessions = SessionService(db)

    async def list_messages(self, session_id: int, user_id: int) -> List[Message]:
        """Messages of an owned session, oldest first. Empty for missing or foreign sessions."""
        session = await self.sessions.get_owned_session(session_id, user_id)
        if not session:
            return []
        return await self._get_messages(session_id)

    async def send_message(self, session_id: int, user_id: int, content: str) -> SendMessageResponse:
        """Store a user message, generate and store the assistant reply.

        The user message is committed before the reply is generated, so it
        survives a failing or slow completion API. Reply generation never
        raises; on failure the stored assistant message holds the fallback text.

        Args:
            session_id: Target session
            user_id: Caller, must own the session
            content: Non-empty user message

        Returns:
            SendMessageResponse with both stored messages

        Raises:
            SessionNotFoundError: If the session is missing or foreign; nothing is stored.
            MessagePersistenceError: If the reply could not be stored after the user message was.
        """
        session = await self.sessions.get_owned_session(session_id, user_id)
        if not session:
            raise SessionNotFoundError(session_id)
        # Titled once, by the first reply that gets stored
        title_pending = self._has_default_title(session) and not await self._has_assistant_reply(session_id)

        user_message = Message(session_id=session_id, role=MessageRole.USER, content=content)
        try:
            self.db.add(user_message)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        user_message_id = user_message.id

        history = await self._get_history(session_id)
        reply = await self.reply_generator.generate(history)
        if reply.degraded:
            logger.warning("Session %s received fallback reply: %s", session_id, reply.reason)

        assistant_message = Message(session_id=session_id, role=MessageRole.ASSISTANT, content=reply.text)
        try:
            self.db.add(assistant_message)
            session.updated_at = utcnow()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to store reply for session %s after user message %s: %s",
                session_id,
                user_message_id,
                str(e),
            )
            raise MessagePersistenceError(
                details={"session_id": session_id, "user_message_id": user_message_id}
            ) from e

        response = SendMessageResponse(
            user=MessageResponse.model_validate(user_message),
            assistant=MessageResponse.model_validate(assistant_message),
        )

        if title_pending:
            await self._derive_title(session_id, user_id, history, reply.text)

        return response

    # Private helper methods

    async def _get_messages(self, session_id: int) -> List[Message]:
        stmt = (
            select(Message)
            .where(Message.session_id == session_id)
            .order_by(Message.created_at, Message.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _get_history(self, session_id: int) -> List[ChatTurn]:
        messages = await self._get_messages(session_id)
        return [ChatTurn(role=msg.role, content=msg.content) for msg in messages]

    async def _has_assistant_reply(self, session_id: int) -> bool:
        stmt = select(Message.id).where(
            Message.session_id == session_id, Message.role == MessageRole.ASSISTANT
        )
        return await self.db.scalar(stmt.limit(1)) is not None

    @staticmethod
    def _has_default_title(session: ChatSession) -> bool:
        return session.title is None or session.title == DEFAULT_SESSION_TITLE

    async def _derive_title(
        self, session_id: int, user_id: int, history: List[ChatTurn], reply_text: str
    ) -> None:
        """Title the session from the user turns sent so far and the first stored reply.

        Uses the title generator and falls back to a truncation of the first
        user message when generation is degraded. Storage failures are logged;
        the exchange itself is already committed.
        """
        result = await self.title_generator.generate(
            [*history, ChatTurn(role=MessageRole.ASSISTANT, content=reply_text)]
        )
        title = truncate_title(history[0].content) if result.degraded else result.text

        try:
            await self.sessions.update_title(session_id, user_id, title)
        except SessionNotFoundError:
            # Deleted by a concurrent request after the reply was stored
            logger.warning("Session %s disappeared before its title was stored", session_id)
        except SQLAlchemyError as e:
            logger.error("Failed to store derived title for session %s: %s", session_id, str(e))
