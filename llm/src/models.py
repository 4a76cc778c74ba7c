"""Data models for the LLM library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Backend(str, Enum):
    """Available API backends."""
    CLAUDE = "claude"
    OPENAI = "openai"


@dataclass
class LLMResponse:
    """Response from a text-generation request."""
    success: bool
    text: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None

    # Metadata
    backend: Optional[str] = None
    model: Optional[str] = None
    response_time_seconds: float = 0.0

    # Rate limiting
    retry_after_seconds: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "text": self.text,
            "error": self.error,
            "message": self.message,
            "backend": self.backend,
            "model": self.model,
            "response_time_seconds": self.response_time_seconds,
            "retry_after_seconds": self.retry_after_seconds,
        }


@dataclass
class EmbeddingResponse:
    """Response from an embedding request."""
    success: bool
    vector: list[float] = field(default_factory=list)
    model: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None
    response_time_seconds: float = 0.0

    @property
    def dimensions(self) -> int:
        return len(self.vector)

    @classmethod
    def from_api_response(cls, data: dict, elapsed: float = 0.0) -> "EmbeddingResponse":
        """Create from an OpenAI-compatible embeddings payload."""
        items = data.get("data") or []
        if not items or "embedding" not in items[0]:
            return cls(
                success=False,
                error="invalid_response",
                message="Embedding payload contained no vectors",
                model=data.get("model"),
            )
        return cls(
            success=True,
            vector=[float(x) for x in items[0]["embedding"]],
            model=data.get("model"),
            response_time_seconds=elapsed,
        )
