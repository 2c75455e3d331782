# protocols for completion clients

from typing import Literal, Protocol, runtime_checkable
from pydantic import BaseModel, Field
from enum import Enum

class ChatMessage(BaseModel):
    """A single message of the outbound conversation."""
    role: Literal["system", "user", "assistant"]
    content: str

class CompletionOptions(BaseModel):
    """Sampling options forwarded to the provider."""
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=2000, gt=0)

# Ensures that all completion clients implement this protocol
# NOTE: every agent step funnels through this single operation
class CompletionProtocol(Protocol):
    async def acomplete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> str: ...

class CompletionProvider(str, Enum):
    """Enumeration of supported completion providers."""
    XAI = "xai"
    GOOGLE_GENAI = "google_genai"

@runtime_checkable
class ProvidesProviderInfo(Protocol):
    """Optional protocol for exposing provider/model metadata for reporting."""
    provider: CompletionProvider
    model: str

@runtime_checkable
class SupportsAclose(Protocol):
    """Optional protocol for clients holding a connection pool that must be released on shutdown."""
    async def aclose(self) -> None: ...
