"""
LLM Client - direct API access for the accuracy harness.

Two capabilities:
- Claude (Anthropic SDK) for live note extraction
- OpenAI-compatible embeddings endpoint for semantic matching
"""

import asyncio
import os
import time
from typing import Awaitable, Callable, Optional

import aiohttp

from shared.logging import get_logger

from .models import Backend, EmbeddingResponse, LLMResponse

log = get_logger("llm", "client")

# Type alias for prompt -> text callbacks
LLMCallback = Callable[[str], Awaitable[str]]

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
EMBEDDING_DIMENSIONS = 1536
EMBEDDINGS_URL = "https://api.openai.com/v1/embeddings"


class LLMRequestError(Exception):
    """Raised when a text-generation request fails."""
    pass


class LLMClient:
    """
    Client for the hosted model APIs used by the harness.

    Usage:
        client = LLMClient()

        response = await client.send_claude("Extract notes from ...")
        embedding = await client.create_embedding("Some note text")

        await client.close()
    """

    def __init__(
        self,
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        *,
        claude_model: str = DEFAULT_CLAUDE_MODEL,
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
        embeddings_url: str = EMBEDDINGS_URL,
        embedding_timeout_seconds: float = 30,
        max_tokens: int = 4096,
    ):
        """
        Initialize the client.

        Args:
            anthropic_api_key: API key for Claude (or uses ANTHROPIC_API_KEY env var)
            openai_api_key: API key for embeddings (or uses OPENAI_API_KEY env var)
            claude_model: Default Claude model
            embedding_model: Embedding model name
            embeddings_url: Embeddings endpoint
            embedding_timeout_seconds: Per-request embedding timeout
            max_tokens: Default max tokens for Claude responses
        """
        self._http_session: Optional[aiohttp.ClientSession] = None

        # API keys (from args or environment)
        self._anthropic_key = anthropic_api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._openai_key = openai_api_key or os.environ.get("OPENAI_API_KEY")

        self.claude_model = claude_model
        self.embedding_model = embedding_model
        self.embeddings_url = embeddings_url
        self.embedding_timeout_seconds = embedding_timeout_seconds
        self.max_tokens = max_tokens

        # Lazy-loaded API clients
        self._anthropic_client = None

    @property
    def has_claude_credentials(self) -> bool:
        return bool(self._anthropic_key)

    @property
    def has_embedding_credentials(self) -> bool:
        return bool(self._openai_key)

    async def _get_http_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session for API calls."""
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession()
        return self._http_session

    def _get_anthropic_client(self):
        """Get or create Anthropic client."""
        if self._anthropic_client is None and self._anthropic_key:
            import anthropic
            self._anthropic_client = anthropic.Anthropic(api_key=self._anthropic_key)
        return self._anthropic_client

    async def close(self):
        """Close HTTP session."""
        if self._http_session and not self._http_session.closed:
            await self._http_session.close()
            self._http_session = None

    # --- Claude ---

    async def send_claude(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Send a prompt to Claude."""
        model = model or self.claude_model
        client = self._get_anthropic_client()
        if not client:
            return LLMResponse(
                success=False,
                error="auth_required",
                message="ANTHROPIC_API_KEY not configured",
                backend=Backend.CLAUDE.value,
            )

        start_time = time.time()

        try:
            # Run sync API call in thread pool
            response = await asyncio.to_thread(
                client.messages.create,
                model=model,
                max_tokens=max_tokens or self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )

            return LLMResponse(
                success=True,
                text=response.content[0].text,
                backend=Backend.CLAUDE.value,
                model=model,
                response_time_seconds=time.time() - start_time,
            )

        except Exception as e:
            error_str = str(e)
            log.warning("llm.claude.request_failed", model=model, error=error_str)
            if "rate" in error_str.lower() or "429" in error_str:
                return LLMResponse(
                    success=False,
                    error="rate_limited",
                    message=error_str,
                    backend=Backend.CLAUDE.value,
                    retry_after_seconds=60,
                )
            return LLMResponse(
                success=False,
                error="api_error",
                message=error_str,
                backend=Backend.CLAUDE.value,
            )

    def claude_callback(self, model: Optional[str] = None) -> LLMCallback:
        """
        Wrap send_claude as a prompt -> text callback.

        The callback raises LLMRequestError when the request fails.
        """
        async def callback(prompt: str) -> str:
            response = await self.send_claude(prompt, model=model)
            if not response.success:
                raise LLMRequestError(f"{response.error}: {response.message}")
            return response.text or ""

        return callback

    # --- Embeddings ---

    async def create_embedding(
        self,
        text: str,
        model: Optional[str] = None,
    ) -> EmbeddingResponse:
        """
        Get an embedding vector for text.

        Network failures and timeouts are returned as unsuccessful responses,
        never raised.
        """
        model = model or self.embedding_model
        if not self._openai_key:
            return EmbeddingResponse(
                success=False,
                error="auth_required",
                message="OPENAI_API_KEY not configured",
                model=model,
            )

        start_time = time.time()

        try:
            session = await self._get_http_session()
            async with session.post(
                self.embeddings_url,
                headers={
                    "Authorization": f"Bearer {self._openai_key}",
                    "Content-Type": "application/json",
                },
                json={"model": model, "input": text},
                timeout=aiohttp.ClientTimeout(total=self.embedding_timeout_seconds),
            ) as resp:
                data = await resp.json()

                if resp.status != 200:
                    error = data.get("error")
                    return EmbeddingResponse(
                        success=False,
                        error="api_error",
                        message=error.get("message", str(data)) if isinstance(error, dict) else str(data),
                        model=model,
                    )

                return EmbeddingResponse.from_api_response(
                    data, elapsed=time.time() - start_time
                )

        except asyncio.TimeoutError:
            return EmbeddingResponse(
                success=False,
                error="timeout",
                message=f"Request timed out after {self.embedding_timeout_seconds} seconds",
                model=model,
            )
        except aiohttp.ClientError as e:
            return EmbeddingResponse(
                success=False,
                error="connection_error",
                message=str(e),
                model=model,
            )
