# The core async set up for Google's GenAI completion client
# NOTE: alternative provider to xAI, selected via COMPLETION_PROVIDER

from google import genai # officially recommended import path
from google.genai import types
from google.genai import errors as genai_errors
# use tenacity to retry transient failures with exponential backoff
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from agent_pipelines.common.errors import ServiceError
from .protocols import ChatMessage, CompletionOptions, CompletionProtocol, ProvidesProviderInfo
from .protocols import CompletionProvider
from .xai_client import EMPTY_RESPONSE_TEXT

from agent_pipelines.common.logging.logger import logger

# NOTE: this uses the public Gemini API with an API key, not Vertex AI.
class AsyncGenAICompletionClient(CompletionProtocol, ProvidesProviderInfo):
    def __init__(
        self,
        model_name: str = "gemini-2.5-flash-lite",
        *,
        api_key: str | None = None,
        retry_attempts: int = 3,
        retry_backoff: float = 1.0,
        retry_max_wait: float = 8.0,
    ):
        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name
        # Provider metadata for reporting
        self.provider = CompletionProvider.GOOGLE_GENAI
        self.model = model_name
        self.retryer = AsyncRetrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_exponential(multiplier=retry_backoff, max=retry_max_wait),
            retry=retry_if_exception_type(genai_errors.ServerError), # only 5xx are retried
            reraise=True,
        )

    @staticmethod
    def _to_contents(messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
        """Split system messages into a system instruction; map assistant turns to the 'model' role."""
        system_parts = [m.content for m in messages if m.role == "system"]
        contents = [
            types.Content(
                role="model" if m.role == "assistant" else "user",
                parts=[types.Part(text=m.content)],
            )
            for m in messages if m.role != "system"
        ]
        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    async def acomplete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> str:
        system_instruction, contents = self._to_contents(messages)
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=options.temperature,
            max_output_tokens=options.max_output_tokens,
        )

        attempt_count = 0
        try:
            async for attempt in self.retryer:
                attempt_count += 1
                with attempt:
                    resp = await self.client.aio.models.generate_content(
                        model=self.model_name,
                        contents=contents, # type: ignore
                        config=config,
                    )
                    return resp.text or EMPTY_RESPONSE_TEXT
        except genai_errors.APIError as e:
            logger.warning(f"GenAI completion failed after {attempt_count} attempt(s): {e}")
            raise ServiceError(f"Failed to communicate with completion service: {e}", provider=self.provider.value) from e

        raise ServiceError(
            f"acomplete() reached unexpected fallthrough after {attempt_count} attempts",
            provider=self.provider.value,
        )
