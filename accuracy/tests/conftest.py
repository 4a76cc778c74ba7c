"""Shared fixtures for accuracy tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from shared.deduplication import ExistingNote
from llm.src.models import EmbeddingResponse

from accuracy.src.fixtures import CONTENT_BLOCKS


@pytest.fixture(autouse=True)
def no_embedding_credential(monkeypatch):
    """Keep every run on the local approximation."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture
def note_pool():
    return [
        ExistingNote(
            id="n1",
            title="The Power of Compound Learning",
            content=CONTENT_BLOCKS["compound_learning"].original,
            tags=["learning", "habits"],
        ),
        ExistingNote(
            id="n2",
            title="Writing in Flow",
            content=CONTENT_BLOCKS["writing_flow"].original,
            tags=["writing"],
        ),
        ExistingNote(
            id="n3",
            title="Refactoring Safely",
            content=CONTENT_BLOCKS["refactoring"].original,
            tags=["software-development"],
        ),
    ]


@pytest.fixture
def mock_vectors_client():
    """LLMClient stand-in that returns the same vector for every text."""
    client = MagicMock()
    client.create_embedding = AsyncMock(
        return_value=EmbeddingResponse(success=True, vector=[0.6, 0.8])
    )
    client.close = AsyncMock()
    return client


@pytest.fixture
def failing_llm_client():
    """LLMClient stand-in whose embedding calls always fail."""
    client = MagicMock()
    client.create_embedding = AsyncMock(
        return_value=EmbeddingResponse(success=False, error="timeout", message="timed out")
    )
    client.close = AsyncMock()
    return client
