"""Tests for completion/embedding clients and prompt builders.

All tests are deterministic and do not make real network calls.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from travelrag.app.config import Settings
from travelrag.app.errors import CompletionError, EmbeddingError
from travelrag.app.llm.client import (
    DeterministicStubClient,
    OpenAICompletionClient,
    get_completion_client,
    parse_json_object,
)
from travelrag.app.llm.embeddings import (
    HashingEmbeddingClient,
    OpenAIEmbeddingClient,
    get_embedding_client,
)
from travelrag.app.llm.prompts import build_intent_prompt, build_venue_status_prompt
from travelrag.app.models.venue import Venue


def mock_chat_response(content: str | None) -> MagicMock:
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = content
    return mock_response


@pytest.mark.asyncio
async def test_openai_client_calls_api_with_parameters() -> None:
    """Test that the client forwards temperature and max tokens (mocked)."""
    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(
        return_value=mock_chat_response("These fit your budget.")
    )
    client = OpenAICompletionClient(api_key="test_key", model="gpt-4")
    client.client = mock_openai_client

    text = await client.complete("prompt", temperature=0.1, max_tokens=200)

    assert text == "These fit your budget."
    kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4"
    assert kwargs["temperature"] == 0.1
    assert kwargs["max_tokens"] == 200
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]


@pytest.mark.asyncio
async def test_openai_client_wraps_transport_errors() -> None:
    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(side_effect=Exception("API error"))
    client = OpenAICompletionClient(api_key="test_key")
    client.client = mock_openai_client

    with pytest.raises(CompletionError):
        await client.complete("prompt", temperature=0.1, max_tokens=10)


@pytest.mark.asyncio
async def test_openai_client_rejects_empty_output() -> None:
    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(
        return_value=mock_chat_response("   ")
    )
    client = OpenAICompletionClient(api_key="test_key")
    client.client = mock_openai_client

    with pytest.raises(CompletionError):
        await client.complete("prompt", temperature=0.1, max_tokens=10)


@pytest.mark.asyncio
async def test_complete_structured_parses_fenced_json() -> None:
    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(
        return_value=mock_chat_response('```json\n{"destination": "Berlin"}\n```')
    )
    client = OpenAICompletionClient(api_key="test_key")
    client.client = mock_openai_client

    assert await client.complete_structured("prompt") == {"destination": "Berlin"}


@pytest.mark.parametrize("content", ["not json", "[1, 2]"])
def test_parse_json_object_rejects_non_objects(content: str) -> None:
    with pytest.raises(CompletionError):
        parse_json_object(content)


@pytest.mark.asyncio
async def test_deterministic_stub_is_stable() -> None:
    client = DeterministicStubClient()
    first = await client.complete("a", temperature=0.1, max_tokens=10)
    second = await client.complete("b", temperature=0.9, max_tokens=99)
    assert first == second
    assert await client.complete_structured("a") == {}


def test_factories_use_offline_clients_without_key() -> None:
    settings = Settings(_env_file=None, openai_api_key=None)
    assert isinstance(get_completion_client(settings), DeterministicStubClient)
    assert isinstance(get_embedding_client(settings), HashingEmbeddingClient)


def test_factories_use_openai_with_key() -> None:
    settings = Settings(_env_file=None, openai_api_key=SecretStr("sk-test"), embedding_dimensions=512)
    assert isinstance(get_completion_client(settings), OpenAICompletionClient)
    embedder = get_embedding_client(settings)
    assert isinstance(embedder, OpenAIEmbeddingClient)
    assert embedder.dimension == 512


@pytest.mark.asyncio
async def test_openai_embedder_checks_dimension() -> None:
    mock_response = MagicMock()
    mock_response.data = [MagicMock(embedding=[0.1, 0.2])]
    mock_openai_client = AsyncMock()
    mock_openai_client.embeddings.create = AsyncMock(return_value=mock_response)
    embedder = OpenAIEmbeddingClient(api_key="test_key", model="text-embedding-3-large", dimension=3)
    embedder.client = mock_openai_client

    with pytest.raises(EmbeddingError):
        await embedder.embed("berlin")
    assert mock_openai_client.embeddings.create.call_args.kwargs["dimensions"] == 3


def test_intent_prompt_carries_colloquial_rules() -> None:
    prompt = build_intent_prompt("broke students berlin clubs")
    assert 'Message: "broke students berlin clubs"' in prompt
    assert '"broke", "budget", "cheap" = low' in prompt
    assert '"family", "kids", "children" = family' in prompt


def test_venue_status_prompt() -> None:
    prompt = build_venue_status_prompt(Venue(name="Tresor", type="club"), date(2025, 6, 10))
    assert "Current date: 2025-06-10" in prompt
    assert "Venue: Tresor" in prompt
    assert "Address: Unknown" in prompt
