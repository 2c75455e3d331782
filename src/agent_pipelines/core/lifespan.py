from contextlib import asynccontextmanager, AsyncExitStack
from fastapi import FastAPI
from agent_pipelines.config.app_config import get_service_settings, ServiceSettings
from agent_pipelines.common.errors import ConfigurationError
from agent_pipelines.common.logging.logger import logger
from agent_pipelines.common.services.llm_service.llm_client import CompletionClient, CompletionProvider
from agent_pipelines.common.services.llm_service.llm_client.xai_client import AsyncXAICompletionClient
from agent_pipelines.common.services.llm_service.llm_client.google_genai_client import AsyncGenAICompletionClient
from agent_pipelines.memory.memory_store import MemoryStore
from agent_pipelines.agent_service.orchestrator.main_orchestrator import MultiAgentOrchestrator

def build_completion_client(settings: ServiceSettings) -> CompletionClient:
    """
    Builds the completion client for the configured provider, wrapped in the dispatcher.
    Raises ConfigurationError for an unknown provider or a missing API key.
    """
    try:
        provider = CompletionProvider(settings.COMPLETION_PROVIDER)
    except ValueError as e:
        raise ConfigurationError(f"Unknown completion provider: {settings.COMPLETION_PROVIDER}") from e

    retry_kwargs = dict(
        retry_attempts=settings.COMPLETION_RETRY_ATTEMPTS,
        retry_backoff=settings.COMPLETION_RETRY_BACKOFF_SECONDS,
        retry_max_wait=settings.COMPLETION_RETRY_MAX_WAIT_SECONDS,
    )

    if provider is CompletionProvider.XAI:
        if not settings.XAI_API_KEY:
            raise ConfigurationError("XAI_API_KEY is required when COMPLETION_PROVIDER=xai")
        client = AsyncXAICompletionClient(
            settings.XAI_MODEL_NAME,
            api_key=settings.XAI_API_KEY,
            base_url=settings.XAI_BASE_URL,
            timeout=settings.XAI_TIMEOUT_SECONDS,
            **retry_kwargs,
        )
    else:
        if not settings.GOOGLE_GENAI_API_KEY:
            raise ConfigurationError("GOOGLE_GENAI_API_KEY is required when COMPLETION_PROVIDER=google_genai")
        client = AsyncGenAICompletionClient(
            settings.GOOGLE_GENAI_MODEL_NAME,
            api_key=settings.GOOGLE_GENAI_API_KEY,
            **retry_kwargs,
        )

    return CompletionClient(provider=provider, client=client)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages the service's startup and shutdown events.
    Uses the AsyncExitStack to clean up resources.
    Register resources to the app state to be used as dependencies.

    NOTE:
    - Use stack.enter_async_context when the resource has __aenter__ and __aexit__ support
    - Use stack.push_async_context to register the clean up method only
    """
    logger.info("Starting Agent Pipelines service!")

    # initialize resources during start up
    logger.info("Initializing service resources...")
    settings = get_service_settings()

    async with AsyncExitStack() as stack:

        # completion client, its connection pool is released on shutdown
        completion_client = build_completion_client(settings)
        stack.push_async_callback(completion_client.aclose)
        app.state.completion_client = completion_client
        logger.info(f"Completion client ({completion_client.provider.value}) initialized.")

        # process-wide memory store, shared by every run
        memory_store = MemoryStore()
        app.state.memory_store = memory_store
        logger.info("Memory store initialized.")

        # orchestrator facade, stateless across runs
        app.state.orchestrator = MultiAgentOrchestrator(
            completion_client=completion_client,
            memory_store=memory_store,
            step_delay=settings.PIPELINE_STEP_DELAY_SECONDS,
            intelligent_max_steps=settings.INTELLIGENT_MAX_STEPS,
        )
        logger.info(f"Orchestrator initialized with {len(app.state.orchestrator.list_pipelines())} pipelines.")

        try:
            # lets FastAPI process requests during yield
            yield
        finally:
            logger.info("Shutting down service resources...")
            logger.info(f"Memory store held {len(memory_store)} runs at shutdown.")

        # The AsyncExitStack will automatically call the __aexit__ or registered cleanup
        # methods for all resources entered or pushed to it, in reverse order.
        logger.info("All global resources have been gracefully closed.")
