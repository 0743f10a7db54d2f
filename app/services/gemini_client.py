"""Thin async client for the Gemini ``generateContent`` REST endpoint."""

import logging
import re
from typing import Any

import httpx

from app.exceptions.ai import (
    AIConfigurationError,
    AIContentFilterError,
    AIParsingError,
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    AIServiceUnavailableError,
    AITimeoutError,
)


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def extract_text(data: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` or None for any other shape."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


class GeminiClient:
    """Issues one POST per call and maps every failure onto ``AIServiceError``.

    The underlying ``httpx.AsyncClient`` is shared and owned by the application
    lifespan; ``aclose`` only closes it when this client created it.

    The request body carries only ``contents`` and ``generationConfig``. There is
    no ``systemInstruction`` field: the generators send the persona or title
    prompt as a leading "user" turn in ``contents``, so the model treats it as
    conversation text rather than as a system instruction.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate_content(
        self,
        model: str,
        contents: list[dict[str, Any]],
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """Generate text for ``contents`` with ``model``.

        Raises:
            AIConfigurationError: No API key configured.
            AITimeoutError: The request exceeded ``timeout``.
            AIServiceUnavailableError: Network failure or 5xx response.
            AIRateLimitError / AIQuotaExceededError: HTTP 429.
            AIContentFilterError: The prompt was blocked.
            AIParsingError: The body is not JSON or carries no text.
            AIServiceError: Any other non-success response.
        """
        if not self.api_key:
            raise AIConfigurationError("Gemini API key not configured")

        url = f"{self.base_url}/models/{model}:generateContent"
        payload = {
            "contents": contents,
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }

        try:
            response = await self._client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", "X-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise AITimeoutError(f"Gemini request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise AIServiceUnavailableError(f"Gemini request failed: {str(e)}") from e

        if not response.is_success:
            raise self._error_for_response(response)

        try:
            data = response.json()
        except ValueError as e:
            raise AIParsingError("Gemini response is not valid JSON") from e

        text = extract_text(data)
        if text is None:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason") if isinstance(data, dict) else None
            if block_reason:
                raise AIContentFilterError(
                    "Content was blocked by AI safety filters", details={"block_reason": block_reason}
                )
            raise AIParsingError("Gemini response contained no text", details={"model": model})

        return text

    def _error_for_response(self, response: httpx.Response) -> AIServiceError:
        body = response.text[:500]
        details = {"status_code": response.status_code, "body": body}
        logger.error("Gemini API error %s: %s", response.status_code, body)

        if response.status_code == 429:
            if "quota" in body.lower():
                return AIQuotaExceededError("Gemini API quota exceeded", details=details)
            return AIRateLimitError(
                "Gemini API rate limit exceeded",
                retry_after=self._extract_retry_delay(response),
                details=details,
            )
        if response.status_code >= 500:
            return AIServiceUnavailableError(f"Gemini API unavailable ({response.status_code})", details=details)
        return AIServiceError(f"Gemini API returned {response.status_code}", details=details)

    @staticmethod
    def _extract_retry_delay(response: httpx.Response) -> int | None:
        header = response.headers.get("retry-after")
        if header and header.isdigit():
            return int(header)
        # Pattern: "Please retry in 32.984803332s"
        match = re.search(r"retry in (\d+(?:\.\d+)?)s", response.text)
        if match:
            return int(float(match.group(1))) + 1
        return None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
