"""Shared fixtures for LLM library tests."""

from unittest.mock import MagicMock, AsyncMock

import pytest


def make_response(status: int, payload: dict) -> MagicMock:
    """Mock aiohttp response usable as `async with session.post(...) as resp`."""
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=payload)

    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=resp)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


@pytest.fixture
def response_factory():
    """Factory for mock aiohttp responses."""
    return make_response


@pytest.fixture
def embedding_payload():
    """A successful embeddings API body."""
    return {
        "object": "list",
        "data": [{"object": "embedding", "index": 0, "embedding": [0.1, 0.2, 0.3]}],
        "model": "text-embedding-3-small",
    }


@pytest.fixture
def mock_http_session():
    """Create a mock aiohttp ClientSession."""
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    return session


@pytest.fixture
def mock_anthropic_client():
    """Create a mock Anthropic client."""
    client = MagicMock()
    response = MagicMock()
    response.content = [MagicMock(text="Claude response")]
    client.messages.create = MagicMock(return_value=response)
    return client


@pytest.fixture
def mock_llm_client():
    """LLMClient stand-in with an async create_embedding."""
    client = MagicMock()
    client.create_embedding = AsyncMock()
    client.close = AsyncMock()
    client.has_embedding_credentials = True
    client.embedding_model = "text-embedding-3-small"
    return client
