"""Tests for LLM client."""

import asyncio
import os
import pytest
from unittest.mock import MagicMock, AsyncMock, patch

import aiohttp

from llm.src.client import (
    DEFAULT_EMBEDDING_MODEL,
    EMBEDDINGS_URL,
    LLMClient,
    LLMRequestError,
)


class TestLLMClientInit:
    """Tests for LLMClient initialization."""

    def test_anthropic_key_from_arg(self):
        client = LLMClient(anthropic_api_key="test-key")
        assert client._anthropic_key == "test-key"
        assert client.has_claude_credentials

    def test_anthropic_key_from_env(self):
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "env-key"}):
            client = LLMClient()
            assert client._anthropic_key == "env-key"

    def test_openai_key_from_env(self):
        with patch.dict(os.environ, {"OPENAI_API_KEY": "oa-env-key"}):
            client = LLMClient()
            assert client.has_embedding_credentials

    def test_no_credentials(self):
        with patch.dict(os.environ, {}, clear=True):
            client = LLMClient()
            assert not client.has_claude_credentials
            assert not client.has_embedding_credentials

    def test_defaults(self):
        client = LLMClient()
        assert client.embedding_model == DEFAULT_EMBEDDING_MODEL
        assert client.embeddings_url == EMBEDDINGS_URL
        assert client.embedding_timeout_seconds == 30

    def test_lazy_clients(self):
        client = LLMClient()
        assert client._http_session is None
        assert client._anthropic_client is None


class TestLLMClientHttpSession:
    """Tests for HTTP session management."""

    @pytest.mark.asyncio
    async def test_get_http_session_reuses_session(self):
        client = LLMClient()

        with patch("aiohttp.ClientSession") as mock_session_cls:
            mock_session = MagicMock()
            mock_session.closed = False
            mock_session.close = AsyncMock()
            mock_session_cls.return_value = mock_session

            session1 = await client._get_http_session()
            session2 = await client._get_http_session()

            assert mock_session_cls.call_count == 1
            assert session1 is session2

            await client.close()

    @pytest.mark.asyncio
    async def test_close_closes_session(self, mock_http_session):
        client = LLMClient()
        client._http_session = mock_http_session

        await client.close()

        mock_http_session.close.assert_called_once()
        assert client._http_session is None


class TestSendClaude:
    """Tests for Claude requests."""

    @pytest.mark.asyncio
    async def test_no_key_returns_auth_required(self):
        with patch.dict(os.environ, {}, clear=True):
            client = LLMClient()
            response = await client.send_claude("Hello")

        assert not response.success
        assert response.error == "auth_required"

    @pytest.mark.asyncio
    async def test_success(self, mock_anthropic_client):
        client = LLMClient(anthropic_api_key="test-key")
        client._anthropic_client = mock_anthropic_client

        response = await client.send_claude("Hello", max_tokens=100)

        assert response.success
        assert response.text == "Claude response"
        assert response.backend == "claude"
        kwargs = mock_anthropic_client.messages.create.call_args.kwargs
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"] == [{"role": "user", "content": "Hello"}]

    @pytest.mark.asyncio
    async def test_rate_limit_error(self, mock_anthropic_client):
        client = LLMClient(anthropic_api_key="test-key")
        mock_anthropic_client.messages.create.side_effect = Exception("429 rate limit exceeded")
        client._anthropic_client = mock_anthropic_client

        response = await client.send_claude("Hello")

        assert not response.success
        assert response.error == "rate_limited"
        assert response.retry_after_seconds == 60

    @pytest.mark.asyncio
    async def test_other_error(self, mock_anthropic_client):
        client = LLMClient(anthropic_api_key="test-key")
        mock_anthropic_client.messages.create.side_effect = Exception("boom")
        client._anthropic_client = mock_anthropic_client

        response = await client.send_claude("Hello")

        assert response.error == "api_error"
        assert response.message == "boom"

    @pytest.mark.asyncio
    async def test_callback_returns_text(self, mock_anthropic_client):
        client = LLMClient(anthropic_api_key="test-key")
        client._anthropic_client = mock_anthropic_client

        callback = client.claude_callback()
        assert await callback("Hello") == "Claude response"

    @pytest.mark.asyncio
    async def test_callback_raises_on_failure(self):
        with patch.dict(os.environ, {}, clear=True):
            client = LLMClient()
            callback = client.claude_callback()

            with pytest.raises(LLMRequestError, match="auth_required"):
                await callback("Hello")


class TestCreateEmbedding:
    """Tests for embedding requests."""

    @pytest.mark.asyncio
    async def test_no_key_returns_auth_required(self):
        with patch.dict(os.environ, {}, clear=True):
            client = LLMClient()
            response = await client.create_embedding("text")

        assert not response.success
        assert response.error == "auth_required"

    @pytest.mark.asyncio
    async def test_success(self, response_factory, mock_http_session, embedding_payload):
        client = LLMClient(openai_api_key="oa-key")
        mock_http_session.post = MagicMock(return_value=response_factory(200, embedding_payload))
        client._http_session = mock_http_session

        response = await client.create_embedding("some note")

        assert response.success
        assert response.vector == [0.1, 0.2, 0.3]
        assert response.dimensions == 3

        args, kwargs = mock_http_session.post.call_args
        assert args[0] == EMBEDDINGS_URL
        assert kwargs["headers"]["Authorization"] == "Bearer oa-key"
        assert kwargs["json"] == {"model": DEFAULT_EMBEDDING_MODEL, "input": "some note"}

    @pytest.mark.asyncio
    async def test_api_error_message(self, response_factory, mock_http_session):
        client = LLMClient(openai_api_key="oa-key")
        mock_http_session.post = MagicMock(return_value=response_factory(
            401, {"error": {"message": "Incorrect API key"}}
        ))
        client._http_session = mock_http_session

        response = await client.create_embedding("text")

        assert not response.success
        assert response.error == "api_error"
        assert response.message == "Incorrect API key"

    @pytest.mark.asyncio
    async def test_api_error_with_string_error(self, response_factory, mock_http_session):
        client = LLMClient(openai_api_key="oa-key")
        mock_http_session.post = MagicMock(return_value=response_factory(500, {"error": "overloaded"}))
        client._http_session = mock_http_session

        response = await client.create_embedding("text")

        assert response.error == "api_error"
        assert "overloaded" in response.message

    @pytest.mark.asyncio
    async def test_malformed_body(self, response_factory, mock_http_session):
        client = LLMClient(openai_api_key="oa-key")
        mock_http_session.post = MagicMock(return_value=response_factory(200, {"data": []}))
        client._http_session = mock_http_session

        response = await client.create_embedding("text")

        assert not response.success
        assert response.error == "invalid_response"

    @pytest.mark.asyncio
    async def test_timeout(self, mock_http_session):
        client = LLMClient(openai_api_key="oa-key", embedding_timeout_seconds=5)
        mock_http_session.post = MagicMock(side_effect=asyncio.TimeoutError())
        client._http_session = mock_http_session

        response = await client.create_embedding("text")

        assert response.error == "timeout"
        assert "5" in response.message

    @pytest.mark.asyncio
    async def test_connection_error(self, mock_http_session):
        client = LLMClient(openai_api_key="oa-key")
        mock_http_session.post = MagicMock(side_effect=aiohttp.ClientError("refused"))
        client._http_session = mock_http_session

        response = await client.create_embedding("text")

        assert response.error == "connection_error"
