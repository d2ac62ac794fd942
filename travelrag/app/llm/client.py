"""Completion client with OpenAI integration.

Security: Reads API key from settings only, never hardcoded.
Provides a deterministic stub when no key is present for testing.
"""

import json
import logging
from typing import Any, Protocol

from openai import AsyncOpenAI

from travelrag.app.config import Settings, get_settings
from travelrag.app.errors import CompletionError

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Protocol for completion client implementations."""

    async def complete(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        """Turn a prompt into free text.

        Raises:
            CompletionError: On transport failure or empty output
        """
        ...

    async def complete_structured(
        self, prompt: str, *, temperature: float = 0.1, max_tokens: int = 500
    ) -> dict[str, Any]:
        """Turn a prompt into a JSON object.

        Raises:
            CompletionError: On transport failure or non-JSON output
        """
        ...


def parse_json_object(content: str) -> dict[str, Any]:
    """Parse a JSON object from model output, tolerating markdown fences."""
    text = content.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CompletionError(f"Model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CompletionError(f"Expected JSON object, got {type(data).__name__}")
    return data


class DeterministicStubClient:
    """Deterministic stub client for testing (no API key required)."""

    async def complete(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        return "These venues have proven successful for similar travelers."

    async def complete_structured(
        self, prompt: str, *, temperature: float = 0.1, max_tokens: int = 500
    ) -> dict[str, Any]:
        return {}


class OpenAICompletionClient:
    """OpenAI-backed completion client."""

    def __init__(self, api_key: str, model: str = "gpt-4"):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Chat model name
        """
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def complete(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            raise CompletionError(f"OpenAI completion failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise CompletionError("OpenAI returned empty response")
        return content

    async def complete_structured(
        self, prompt: str, *, temperature: float = 0.1, max_tokens: int = 500
    ) -> dict[str, Any]:
        content = await self.complete(prompt, temperature=temperature, max_tokens=max_tokens)
        return parse_json_object(content)


def get_completion_client(settings: Settings | None = None) -> CompletionClient:
    """Factory function to get appropriate completion client based on config.

    Returns:
        OpenAICompletionClient if API key is configured, DeterministicStubClient otherwise
    """
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI client for completions")
        return OpenAICompletionClient(api_key=api_key.get_secret_value(), model=settings.openai_model)

    logger.warning("No OpenAI API key configured, using deterministic stub client")
    return DeterministicStubClient()
