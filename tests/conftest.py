# shared fixtures: a routing stub in place of the completion service, plus wired-up components
import json
import pytest

from agent_pipelines.common.services.llm_service.llm_client.protocols import ChatMessage, CompletionOptions
from agent_pipelines.agent_service.common.types.agent_roles import AgentRole
from agent_pipelines.agent_service.common.system_prompts.agent_prompts import AgentPrompts
from agent_pipelines.agent_service.common.system_prompts.workflow_prompts import WorkflowPrompts
from agent_pipelines.memory.memory_store import MemoryStore

MEMORY_RESPONSE = json.dumps({
    "key_insights": ["User wants a startup crash fixed"],
    "technical_decisions": ["Guard the config loader"],
    "context_information": ["Service boots from main.py"],
    "learnings": ["Validate env before use"],
    "relevance_assessment": 8,
})

class StubCompletionClient:
    """
    Stands in for the completion service. Every call is recorded and answered by call kind.

    Kinds: "memory", "pruning", "planner", "workflow-analysis", or the step role inferred from the
    system prompt. Roles sharing a prompt (judge / quality-judge / quality-check) all report "judge".

    A response may be a str, an Exception instance (raised), a callable(messages) -> str,
    or a list consumed one item per call (falls back to `default` when exhausted).
    """
    def __init__(self, responses=None, default="stub response"):
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[tuple[str, list[ChatMessage], CompletionOptions]] = []

    @staticmethod
    def classify(messages: list[ChatMessage]) -> str:
        system = messages[0].content if messages and messages[0].role == "system" else ""
        if "memory analysis agent" in system:
            return "memory"
        if "Memory Pruning Agent" in system:
            return "pruning"
        if system == WorkflowPrompts.workflow_director_system_prompt:
            return "planner"
        if system == WorkflowPrompts.workflow_analysis_system_prompt:
            return "workflow-analysis"
        for role in AgentRole:
            if system == AgentPrompts.system_prompt_for(role.value):
                return role.value
        if system.startswith("You are a specialized ") and system.endswith(" agent."):
            return system[len("You are a specialized "):-len(" agent.")]
        return "unknown"

    async def acomplete(self, messages: list[ChatMessage], options: CompletionOptions) -> str:
        kind = self.classify(messages)
        self.calls.append((kind, messages, options))

        response = self.responses.get(kind, self.default)
        if isinstance(response, list):
            response = response.pop(0) if response else self.default
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(messages)
        return response

    def kinds(self) -> list[str]:
        return [kind for kind, _, _ in self.calls]

    def calls_of(self, kind: str) -> list[tuple[str, list[ChatMessage], CompletionOptions]]:
        return [call for call in self.calls if call[0] == kind]

@pytest.fixture
def make_client():
    """Factory fixture: make_client({"supervisor": ServiceError("down")}, default="ok")"""
    def _make(responses=None, default="stub response"):
        return StubCompletionClient(responses=responses, default=default)
    return _make

@pytest.fixture
def memory_response() -> str:
    return MEMORY_RESPONSE

@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()

