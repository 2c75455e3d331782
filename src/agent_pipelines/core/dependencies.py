from fastapi import Request
from agent_pipelines.common.services.llm_service.llm_client import CompletionClient
from agent_pipelines.memory.memory_store import MemoryStore
from agent_pipelines.agent_service.orchestrator.main_orchestrator import MultiAgentOrchestrator

# This is the location to conveniently return any app lifetime dependencies to be used in routes
def get_orchestrator(request: Request) -> MultiAgentOrchestrator:
    """
    FastAPI dependency to get the shared orchestrator from the application state.
    """
    return request.app.state.orchestrator

def get_completion_client(request: Request) -> CompletionClient:
    """
    FastAPI dependency to get the shared completion client (used directly for streaming).
    """
    return request.app.state.completion_client

def get_memory_store(request: Request) -> MemoryStore:
    return request.app.state.memory_store
