# async completion client for xAI (Grok), which exposes an OpenAI-compatible API schema

from openai import AsyncOpenAI # xAI uses OpenAI's API schema
import openai
# use tenacity to retry transient failures with exponential backoff
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from agent_pipelines.common.errors import ServiceError
from .protocols import ChatMessage, CompletionOptions, CompletionProtocol, ProvidesProviderInfo
from .protocols import CompletionProvider

from agent_pipelines.common.logging.logger import logger

EMPTY_RESPONSE_TEXT = "No response from completion service"

# failures worth retrying; auth/validation errors (4xx) fail fast
RETRYABLE_ERRORS = (
    openai.APIConnectionError, # includes APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
)

class AsyncXAICompletionClient(CompletionProtocol, ProvidesProviderInfo):
    def __init__(
        self,
        model_name: str = "grok-code-fast-1",
        *,
        api_key: str | None = None,
        base_url: str = "https://api.x.ai/v1",
        timeout: float = 120.0,
        retry_attempts: int = 3,
        retry_backoff: float = 1.0,
        retry_max_wait: float = 8.0,
    ):
        # Create shared client in __init__ for FastAPI (ASGI)
        # FastAPI runs in a single event loop, so sharing the client is safe and enables connection pooling
        # NOTE: SDK-level retries are disabled so tenacity owns the retry policy
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
        self.model_name = model_name
        # Provider metadata for reporting
        self.provider = CompletionProvider.XAI
        self.model = model_name
        self.retryer = AsyncRetrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_exponential(multiplier=retry_backoff, max=retry_max_wait),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )

    async def aclose(self) -> None:
        # closes the underlying httpx connection pool
        await self.client.close()

    async def acomplete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> str:
        """
        Send a chat completion and return the assistant text.
        Transient failures are retried with exponential backoff; anything left is raised as ServiceError.
        """
        attempt_count = 0
        try:
            async for attempt in self.retryer:
                attempt_count += 1
                with attempt: # let tenacity see context of each attempt instead of swallowing until the last
                    resp = await self.client.chat.completions.create(
                        model=self.model_name,
                        messages=[m.model_dump() for m in messages], # type: ignore[misc]
                        temperature=options.temperature,
                        max_tokens=options.max_output_tokens,
                        stream=False,
                    )
                    choices = resp.choices or []
                    content = choices[0].message.content if choices else None
                    return content or EMPTY_RESPONSE_TEXT
        except openai.OpenAIError as e:
            logger.warning(f"xAI completion failed after {attempt_count} attempt(s): {e}")
            raise ServiceError(f"Failed to communicate with completion service: {e}", provider=self.provider.value) from e

        # NOTE: only reachable if the retryer is misconfigured and yields no attempts
        raise ServiceError(
            f"acomplete() reached unexpected fallthrough after {attempt_count} attempts",
            provider=self.provider.value,
        )
