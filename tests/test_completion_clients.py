from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from google.genai import errors as genai_errors

from agent_pipelines.common.errors import ServiceError
from agent_pipelines.common.services.llm_service.llm_client import (
    ChatMessage,
    CompletionClient,
    CompletionOptions,
    CompletionProvider,
)
from agent_pipelines.common.services.llm_service.llm_client.google_genai_client import AsyncGenAICompletionClient
from agent_pipelines.common.services.llm_service.llm_client.xai_client import AsyncXAICompletionClient, EMPTY_RESPONSE_TEXT

MESSAGES = [
    ChatMessage(role="system", content="You are a specialized tester agent."),
    ChatMessage(role="user", content="say hi"),
]
OPTIONS = CompletionOptions(temperature=0.2, max_output_tokens=50)
XAI_REQUEST = httpx.Request("POST", "https://api.x.ai/v1/chat/completions")

def _chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

def _xai_client(create: AsyncMock, attempts: int = 3) -> AsyncXAICompletionClient:
    client = AsyncXAICompletionClient(api_key="test-key", retry_attempts=attempts, retry_backoff=0)
    client.client = MagicMock()
    client.client.chat.completions.create = create
    return client

@pytest.mark.asyncio
async def test_xai_returns_content_and_passes_options():
    create = AsyncMock(return_value=_chat_response("hi"))
    client = _xai_client(create)

    assert await client.acomplete(MESSAGES, OPTIONS) == "hi"
    kwargs = create.await_args.kwargs
    assert kwargs["temperature"] == 0.2
    assert kwargs["max_tokens"] == 50
    assert kwargs["messages"][0] == {"role": "system", "content": "You are a specialized tester agent."}

@pytest.mark.asyncio
async def test_xai_empty_content_yields_placeholder():
    client = _xai_client(AsyncMock(return_value=_chat_response(None)))
    assert await client.acomplete(MESSAGES, OPTIONS) == EMPTY_RESPONSE_TEXT

@pytest.mark.asyncio
async def test_xai_retries_transient_errors_then_succeeds():
    create = AsyncMock(side_effect=[openai.APIConnectionError(request=XAI_REQUEST), _chat_response("recovered")])
    client = _xai_client(create)

    assert await client.acomplete(MESSAGES, OPTIONS) == "recovered"
    assert create.await_count == 2

@pytest.mark.asyncio
async def test_xai_exhausted_retries_raise_service_error():
    create = AsyncMock(side_effect=openai.APIConnectionError(request=XAI_REQUEST))
    client = _xai_client(create, attempts=3)

    with pytest.raises(ServiceError) as exc_info:
        await client.acomplete(MESSAGES, OPTIONS)
    assert create.await_count == 3
    assert exc_info.value.provider == "xai"

@pytest.mark.asyncio
async def test_xai_auth_error_is_not_retried():
    error = openai.AuthenticationError(
        message="invalid api key",
        response=httpx.Response(401, request=XAI_REQUEST),
        body=None,
    )
    create = AsyncMock(side_effect=error)
    client = _xai_client(create)

    with pytest.raises(ServiceError):
        await client.acomplete(MESSAGES, OPTIONS)
    assert create.await_count == 1

def test_genai_maps_system_and_assistant_messages():
    messages = MESSAGES + [ChatMessage(role="assistant", content="hi"), ChatMessage(role="user", content="again")]
    system_instruction, contents = AsyncGenAICompletionClient._to_contents(messages)

    assert system_instruction == "You are a specialized tester agent."
    assert [c.role for c in contents] == ["user", "model", "user"]

@pytest.mark.asyncio
async def test_genai_retries_server_errors_then_raises():
    client = AsyncGenAICompletionClient(api_key="test-key", retry_attempts=2, retry_backoff=0)
    client.client = MagicMock()
    server_error = genai_errors.ServerError(503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}})
    client.client.aio.models.generate_content = AsyncMock(side_effect=server_error)

    with pytest.raises(ServiceError) as exc_info:
        await client.acomplete(MESSAGES, OPTIONS)
    assert client.client.aio.models.generate_content.await_count == 2
    assert exc_info.value.provider == "google_genai"

@pytest.mark.asyncio
async def test_dispatcher_streams_paragraph_chunks(make_client):
    stub = make_client({"tester": "first part\n\nsecond part"})
    client = CompletionClient(provider=CompletionProvider.XAI, client=stub)

    chunks = [chunk async for chunk in client.astream_chunks(MESSAGES, OPTIONS, chunk_delay=0)]

    assert chunks == ["first part\n\n", "second part\n\n"]
    assert "".join(chunks).strip() == await client.acomplete(MESSAGES, OPTIONS)

@pytest.mark.asyncio
async def test_xai_aclose_releases_connection_pool():
    client = _xai_client(AsyncMock())
    client.client.close = AsyncMock()

    await CompletionClient(provider=CompletionProvider.XAI, client=client).aclose()

    client.client.close.assert_awaited_once()

@pytest.mark.asyncio
async def test_dispatcher_aclose_skips_clients_without_pool(make_client):
    # stub has no aclose, closing must be a no-op
    await CompletionClient(provider=CompletionProvider.XAI, client=make_client()).aclose()
