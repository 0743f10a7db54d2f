"""Unit tests for Message Service."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.message.service import MessageService, truncate_title
from app.exceptions.ai import AIServiceUnavailableError
from app.exceptions.chat import MessagePersistenceError, SessionNotFoundError
from app.services.generation import REPLY_FALLBACK, ReplyGenerator
from models import ChatSession, Message, MessageRole
from tests.doubles import StubGeminiClient
from tests.factories import ChatSessionFactory, MessageFactory, persist


async def count_messages(db: AsyncSession, session_id: int) -> int:
    return await db.scalar(
        select(func.count()).select_from(Message).where(Message.session_id == session_id)
    )


def test_truncate_title():
    assert truncate_title("Short question") == "Short question"
    assert truncate_title("  spaced   out\ntext ") == "spaced out text"
    long = "x" * 80
    assert truncate_title(long) == "x" * 50 + "..."
    assert truncate_title("y" * 50) == "y" * 50


@pytest.mark.asyncio
class TestMessageService:
    """Test cases for MessageService."""

    @pytest.fixture
    def message_service(self, test_db, reply_generator, title_generator):
        return MessageService(test_db, reply_generator, title_generator)

    async def test_list_messages_empty(self, message_service, test_user, test_session):
        assert await message_service.list_messages(test_session.id, test_user.id) == []

    async def test_list_messages_foreign_or_missing_is_empty(
        self, test_db, message_service, test_user, foreign_session
    ):
        await persist(test_db, MessageFactory.build(session_id=foreign_session.id, content="secret"))

        assert await message_service.list_messages(foreign_session.id, test_user.id) == []
        assert await message_service.list_messages(987654, test_user.id) == []

    async def test_send_message_stores_both_messages(
        self, test_db, message_service, reply_client, test_user, test_session
    ):
        result = await message_service.send_message(test_session.id, test_user.id, "How do I write a CV?")

        assert result.user.role == MessageRole.USER
        assert result.user.content == "How do I write a CV?"
        assert result.assistant.role == MessageRole.ASSISTANT
        assert result.assistant.content == "Tailor your resume to each role."
        assert result.user.session_id == result.assistant.session_id == test_session.id
        assert result.user.created_at <= result.assistant.created_at
        assert await count_messages(test_db, test_session.id) == 2

        # The reply is generated from the stored history ending with the new user message
        contents = reply_client.calls[0]["contents"]
        assert contents[-1] == {"role": "user", "parts": [{"text": "How do I write a CV?"}]}

    async def test_send_message_bumps_session_activity(
        self, test_db, message_service, test_user, test_session
    ):
        before = test_session.updated_at

        await message_service.send_message(test_session.id, test_user.id, "hello")

        refreshed = await test_db.get(ChatSession, test_session.id)
        await test_db.refresh(refreshed)
        assert refreshed.updated_at > before

    async def test_history_alternates_after_several_sends(
        self, message_service, test_user, test_session
    ):
        for i in range(3):
            await message_service.send_message(test_session.id, test_user.id, f"question {i}")

        messages = await message_service.list_messages(test_session.id, test_user.id)

        assert len(messages) == 6
        assert [m.role for m in messages] == [MessageRole.USER, MessageRole.ASSISTANT] * 3
        assert [m.content for m in messages[::2]] == ["question 0", "question 1", "question 2"]
        assert [m.id for m in messages] == sorted(m.id for m in messages)

    async def test_send_message_foreign_session(
        self, test_db, message_service, reply_client, test_user, foreign_session
    ):
        with pytest.raises(SessionNotFoundError):
            await message_service.send_message(foreign_session.id, test_user.id, "let me in")

        assert await count_messages(test_db, foreign_session.id) == 0
        assert reply_client.calls == []

    async def test_send_message_missing_session(self, message_service, test_user):
        with pytest.raises(SessionNotFoundError) as exc_info:
            await message_service.send_message(31337, test_user.id, "anyone there?")
        assert exc_info.value.details == {"session_id": 31337}

    async def test_send_message_without_api_key(
        self, test_db, unconfigured_reply_generator, unconfigured_title_generator, test_user, test_session
    ):
        service = MessageService(test_db, unconfigured_reply_generator, unconfigured_title_generator)

        result = await service.send_message(test_session.id, test_user.id, "Should I switch careers?")

        assert result.assistant.content == REPLY_FALLBACK
        assert await count_messages(test_db, test_session.id) == 2

    async def test_send_message_completion_failure(self, test_db, title_generator, test_user, test_session):
        failing = ReplyGenerator(
            StubGeminiClient(error=AIServiceUnavailableError()),
            ["gemini-2.0-flash"],
            temperature=0.7,
            max_output_tokens=512,
        )
        service = MessageService(test_db, failing, title_generator)

        result = await service.send_message(test_session.id, test_user.id, "Hello?")

        assert result.assistant.content == REPLY_FALLBACK
        assert await count_messages(test_db, test_session.id) == 2

    async def test_reply_storage_failure_keeps_user_message(
        self, test_db, message_service, test_user, test_session
    ):
        # The rollback expires loaded instances, so keep plain ids
        session_id, user_id = test_session.id, test_user.id
        original_commit = test_db.commit
        commits = []

        async def commit_failing_on_reply():
            commits.append(True)
            if len(commits) == 2:
                raise OperationalError("INSERT INTO messages", {}, Exception("disk full"))
            await original_commit()

        with patch.object(test_db, "commit", side_effect=commit_failing_on_reply):
            with pytest.raises(MessagePersistenceError) as exc_info:
                await message_service.send_message(session_id, user_id, "keep me")

        assert exc_info.value.status_code == 500
        assert exc_info.value.details["session_id"] == session_id
        messages = (
            await test_db.execute(select(Message).where(Message.session_id == session_id))
        ).scalars().all()
        assert [(m.role, m.content) for m in messages] == [(MessageRole.USER, "keep me")]


@pytest.mark.asyncio
class TestTitleDerivation:
    """Title policy applied once the first reply is stored."""

    async def test_first_exchange_sets_generated_title(
        self, test_db, reply_generator, title_generator, title_client, test_user, test_session
    ):
        service = MessageService(test_db, reply_generator, title_generator)

        await service.send_message(test_session.id, test_user.id, "Help me with my resume")

        session = await test_db.get(ChatSession, test_session.id)
        await test_db.refresh(session)
        assert session.title == "Resume Advice"
        # The title generator sees the user message and the reply
        texts = [c["parts"][0]["text"] for c in title_client.calls[0]["contents"][1:]]
        assert texts == ["Help me with my resume", "Tailor your resume to each role."]

    async def test_degraded_title_uses_truncated_message(
        self, test_db, reply_generator, unconfigured_title_generator, test_user, test_session
    ):
        service = MessageService(test_db, reply_generator, unconfigured_title_generator)
        content = "I have three job offers and cannot decide which one to accept this week"

        await service.send_message(test_session.id, test_user.id, content)

        session = await test_db.get(ChatSession, test_session.id)
        await test_db.refresh(session)
        assert session.title == content[:50] + "..."

    async def test_title_only_derived_once(
        self, test_db, reply_generator, title_generator, title_client, test_user, test_session
    ):
        service = MessageService(test_db, reply_generator, title_generator)

        await service.send_message(test_session.id, test_user.id, "first")
        await service.send_message(test_session.id, test_user.id, "second")

        assert len(title_client.calls) == 1

    async def test_custom_title_is_kept(
        self, test_db, reply_generator, title_generator, title_client, test_user
    ):
        session = await persist(test_db, ChatSessionFactory.build(user_id=test_user.id, title="My Plan"))
        service = MessageService(test_db, reply_generator, title_generator)

        await service.send_message(session.id, test_user.id, "hello")

        await test_db.refresh(session)
        assert session.title == "My Plan"
        assert title_client.calls == []

    async def test_title_derived_after_failed_first_reply_store(
        self, test_db, reply_generator, title_generator, title_client, test_user, test_session
    ):
        service = MessageService(test_db, reply_generator, title_generator)
        session_id, user_id = test_session.id, test_user.id
        original_commit = test_db.commit
        commits = []

        async def commit_failing_on_reply():
            commits.append(True)
            if len(commits) == 2:
                raise OperationalError("INSERT INTO messages", {}, Exception("disk full"))
            await original_commit()

        with patch.object(test_db, "commit", side_effect=commit_failing_on_reply):
            with pytest.raises(MessagePersistenceError):
                await service.send_message(session_id, user_id, "Help me with my resume")
        assert title_client.calls == []

        await service.send_message(session_id, user_id, "Are you still there?")

        title = await test_db.scalar(select(ChatSession.title).where(ChatSession.id == session_id))
        assert title == "Resume Advice"
        # Both unanswered user messages reach the title generator
        texts = [c["parts"][0]["text"] for c in title_client.calls[0]["contents"][1:]]
        assert texts == [
            "Help me with my resume",
            "Are you still there?",
            "Tailor your resume to each role.",
        ]

    async def test_session_deleted_before_title_is_stored(
        self, test_db, reply_generator, title_generator, test_user, test_session
    ):
        service = MessageService(test_db, reply_generator, title_generator)
        session_id = test_session.id

        with patch.object(
            service.sessions, "update_title", AsyncMock(side_effect=SessionNotFoundError(session_id))
        ) as update_title:
            result = await service.send_message(session_id, test_user.id, "Help me with my resume")

        update_title.assert_awaited_once_with(session_id, test_user.id, "Resume Advice")
        assert result.assistant.content == "Tailor your resume to each role."
        assert await count_messages(test_db, session_id) == 2
