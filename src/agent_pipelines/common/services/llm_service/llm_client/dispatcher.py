# dispatcher for completion clients, wraps whichever provider was configured at startup

import asyncio
from typing import AsyncIterator
from .protocols import ChatMessage, CompletionOptions, CompletionProtocol, CompletionProvider, SupportsAclose

class CompletionClient:
    def __init__(self, provider: CompletionProvider, client: CompletionProtocol):
        self.provider = provider
        self.client = client

    async def acomplete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> str:
        return await self.client.acomplete(messages=messages, options=options)

    async def aclose(self) -> None:
        """Release the wrapped client's connections, if it holds any."""
        if isinstance(self.client, SupportsAclose):
            await self.client.aclose()

    async def astream_chunks(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
        chunk_delay: float = 0.05,
    ) -> AsyncIterator[str]:
        """
        Streaming variant for progressive display.
        The provider call itself is not streamed: the complete response is awaited first,
        then yielded paragraph by paragraph.
        """
        full_response = await self.acomplete(messages=messages, options=options)
        for chunk in full_response.split("\n\n"):
            yield chunk + "\n\n"
            if chunk_delay > 0:
                await asyncio.sleep(chunk_delay)
