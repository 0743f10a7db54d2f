"""Best-effort reply and title generation on top of Gemini.

Both generators try an ordered list of candidate models and return a
``GenerationResult``. A result is either generated text or the generator's
fixed fallback value tagged as degraded; external failures never propagate.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from app.core.config import settings
from app.exceptions.ai import AIServiceError
from app.schemas.message import ChatTurn
from app.services.gemini_client import GeminiClient
from models.message import MessageRole


logger = logging.getLogger(__name__)

REPLY_FALLBACK = "Hello, I am your career guide."
TITLE_FALLBACK = "New Conversation"

CAREER_GUIDE_PROMPT = (
    "You are a career guide assistant. Always reply in well-formatted Markdown. "
    "Use headings (##), bullet points, and **bold** keywords where useful. "
    "Keep responses structured, concise and clear, preferably in bullet points."
)

TITLE_PROMPT = """You are a session title generator.
Rules:
- Generate a very short title (max 4 words).
- Summarize the overall topic of the conversation.
- Do NOT use greetings like "Hello" or "Hi".
- Use concise, professional wording.
- Reply with the title only."""

TITLE_MAX_CHARS = 60


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a generation attempt.

    ``degraded`` is True when ``text`` is the fallback value; ``reason`` then
    describes why every candidate model failed.
    """

    text: str
    degraded: bool = False
    reason: str | None = None
    model: str | None = None

    @classmethod
    def ok(cls, text: str, model: str) -> "GenerationResult":
        return cls(text=text, model=model)

    @classmethod
    def fallback(cls, text: str, reason: str) -> "GenerationResult":
        return cls(text=text, degraded=True, reason=reason)


def to_gemini_contents(turns: Sequence[ChatTurn]) -> list[dict]:
    """Translate role-tagged turns into Gemini ``contents``.

    Gemini only knows "user" and "model", so system turns are sent as user turns.
    """
    return [
        {
            "role": "model" if turn.role == MessageRole.ASSISTANT else "user",
            "parts": [{"text": turn.content}],
        }
        for turn in turns
    ]


class CompletionGenerator:
    """Sequential-fallback generator over an ordered list of candidate models."""

    system_prompt: str = ""
    fallback_text: str = ""
    name: str = "completion"

    def __init__(
        self,
        client: GeminiClient,
        models: Sequence[str],
        temperature: float,
        max_output_tokens: int,
    ):
        self.client = client
        self.models = list(models)
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    async def generate(self, turns: Sequence[ChatTurn]) -> GenerationResult:
        if not self.client.is_configured:
            logger.warning("%s generation skipped: API key not configured", self.name)
            return GenerationResult.fallback(self.fallback_text, "API key not configured")

        if not self.models:
            logger.warning("%s generation skipped: no candidate models", self.name)
            return GenerationResult.fallback(self.fallback_text, "No candidate models configured")

        system_turn = ChatTurn(role=MessageRole.SYSTEM, content=self.system_prompt)
        contents = to_gemini_contents([system_turn, *turns])

        failures = []
        for model in self.models:
            try:
                raw = await self.client.generate_content(
                    model,
                    contents,
                    temperature=self.temperature,
                    max_output_tokens=self.max_output_tokens,
                )
            except AIServiceError as e:
                logger.warning("%s generation with %s failed: %s", self.name, model, e.message)
                failures.append(f"{model}: {e.error_code}")
                continue
            except Exception as e:
                logger.exception("%s generation with %s raised unexpectedly", self.name, model)
                failures.append(f"{model}: {type(e).__name__}")
                continue

            text = self.postprocess(raw)
            if text:
                return GenerationResult.ok(text, model)
            failures.append(f"{model}: empty response")

        reason = "; ".join(failures)
        logger.error("%s generation fell back to default: %s", self.name, reason)
        return GenerationResult.fallback(self.fallback_text, reason)

    def postprocess(self, text: str) -> str:
        return text.strip()


class ReplyGenerator(CompletionGenerator):
    """Career-counselor replies to the full conversation history."""

    system_prompt = CAREER_GUIDE_PROMPT
    fallback_text = REPLY_FALLBACK
    name = "reply"


class TitleGenerator(CompletionGenerator):
    """Short session titles summarizing the early conversation."""

    system_prompt = TITLE_PROMPT
    fallback_text = TITLE_FALLBACK
    name = "title"

    def postprocess(self, text: str) -> str:
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if not lines:
            return ""
        title = re.sub(r"^(title\s*:\s*)", "", lines[0], flags=re.IGNORECASE)
        title = title.strip("#*_`\"' ").rstrip(".")
        return title[:TITLE_MAX_CHARS].strip()


def build_generators(http_client=None) -> tuple[ReplyGenerator, TitleGenerator]:
    """Construct both generators from settings, sharing one HTTP client."""
    reply_client = GeminiClient(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_api_base_url,
        timeout=settings.ai_request_timeout,
        http_client=http_client,
    )
    title_client = GeminiClient(
        api_key=settings.effective_title_api_key,
        base_url=settings.gemini_api_base_url,
        timeout=settings.ai_request_timeout,
        http_client=http_client,
    )
    reply_generator = ReplyGenerator(
        reply_client,
        settings.gemini_reply_models_list,
        temperature=settings.gemini_temperature,
        max_output_tokens=settings.gemini_max_tokens,
    )
    title_generator = TitleGenerator(
        title_client,
        settings.gemini_title_models_list,
        temperature=settings.gemini_temperature,
        max_output_tokens=settings.title_max_tokens,
    )
    return reply_generator, title_generator
