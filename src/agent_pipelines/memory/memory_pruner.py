# evaluates recorded memories against a new task and partitions them into retained/discarded

import json
from typing import Optional
from pydantic import BaseModel, Field, ValidationError

from agent_pipelines.common.errors import PruningParseError, ServiceError, StructuredPayloadError
from agent_pipelines.common.services.llm_service.llm_client.protocols import ChatMessage, CompletionProtocol
from agent_pipelines.common.utils.structured_payload import extract_structured_payload
from agent_pipelines.agent_service.common.types.completion_profiles import PRUNING_OPTIONS
from agent_pipelines.agent_service.common.system_prompts.memory_prompts import MemoryPrompts
from agent_pipelines.memory.memory_store import MemoryStore
from agent_pipelines.memory.types import AgentMemory, PruningResult

from agent_pipelines.common.logging.logger import logger

MAX_MEMORIES_IN_PROMPT = 10 # bounds the payload size sent to the pruning agent
FALLBACK_RETAINED_COUNT = 5
FALLBACK_CONTEXT_SUMMARY = "Automatic pruning performed due to parsing error"
FALLBACK_RECOMMENDATIONS = ["Implement better JSON parsing for memory analysis"]
DEFAULT_CONTEXT_SUMMARY = "Memory analysis completed"

class PruningLLMResponse(BaseModel):
    """
    LLM response schema for memory pruning.
    NOTE: core_interpretation_memory is requested for the agent's own bookkeeping and not surfaced.
    """
    relevant_memories: list[AgentMemory] = Field(default_factory=list)
    pruned_memories: list[AgentMemory] = Field(default_factory=list)
    context_summary: Optional[str] = None
    cleanup_recommendations: list[str] = Field(default_factory=list)

class MemoryPruner():
    """
    Memory pruning meta-agent wrapper.
    - prune() never raises: malformed or failed responses degrade to a deterministic fallback
    - analyze_for_pipeline() pulls prior memories for a pipeline out of the shared store
    """
    def __init__(self, completion_client: CompletionProtocol, memory_store: MemoryStore):
        self.completion_client = completion_client
        self.memory_store = memory_store

    @staticmethod
    def flatten(grouped_memories: dict[str, list[AgentMemory]]) -> list[AgentMemory]:
        """Order-preserving flatten of agent -> memories."""
        return [memory for memories in grouped_memories.values() for memory in memories]

    @staticmethod
    def fallback_result(flattened: list[AgentMemory]) -> PruningResult:
        return PruningResult(
            relevant_memories=flattened[:FALLBACK_RETAINED_COUNT],
            pruned_memories=flattened[FALLBACK_RETAINED_COUNT:],
            context_summary=FALLBACK_CONTEXT_SUMMARY,
            cleanup_recommendations=list(FALLBACK_RECOMMENDATIONS),
        )

    @staticmethod
    def _serialize_for_prompt(grouped_memories: dict[str, list[AgentMemory]]) -> str:
        entries = [
            {"agent": agent_name, **memory.model_dump(mode="json")}
            for agent_name, memories in grouped_memories.items()
            for memory in memories
        ]
        return json.dumps(entries[:MAX_MEMORIES_IN_PROMPT], indent=2)

    @staticmethod
    def _parse_response(response: str) -> PruningResult:
        try:
            payload = extract_structured_payload(response)
            parsed = PruningLLMResponse.model_validate(payload)
        except (StructuredPayloadError, ValidationError) as e:
            raise PruningParseError(f"pruning response could not be parsed: {e}") from e

        return PruningResult(
            relevant_memories=parsed.relevant_memories,
            pruned_memories=parsed.pruned_memories,
            context_summary=parsed.context_summary or DEFAULT_CONTEXT_SUMMARY,
            cleanup_recommendations=parsed.cleanup_recommendations,
        )

    async def prune(
        self,
        original_user_prompt: str,
        grouped_memories: dict[str, list[AgentMemory]],
        current_prompt: str,
    ) -> PruningResult:
        """
        Ask the pruning agent to retain the interpreter memory plus anything relevant to current_prompt.
        Falls back to keeping the first 5 flattened memories if the call or the parse fails.
        """
        flattened = self.flatten(grouped_memories)
        messages = [
            ChatMessage(role="system", content=MemoryPrompts.memory_pruning_system_prompt),
            ChatMessage(
                role="user",
                content=MemoryPrompts.get_memory_pruning_user_prompt(
                    original_user_prompt=original_user_prompt,
                    current_prompt=current_prompt,
                    serialized_memories=self._serialize_for_prompt(grouped_memories),
                ),
            ),
        ]

        try:
            response = await self.completion_client.acomplete(messages=messages, options=PRUNING_OPTIONS)
            result = self._parse_response(response)
        except (ServiceError, PruningParseError) as e:
            logger.warning(f"Memory pruning degraded to fallback ({len(flattened)} memories): {e}")
            return self.fallback_result(flattened)

        logger.info(
            f"Memory pruning: {len(result.relevant_memories)} retained, "
            f"{len(result.pruned_memories)} pruned"
        )
        return result

    async def analyze_for_pipeline(self, pipeline_id: str, user_prompt: str) -> Optional[PruningResult]:
        """Regroup stored memories of a pipeline by agent role and prune them for user_prompt; None if none exist."""
        memories = self.memory_store.memories_for_pipeline(pipeline_id)
        if not memories:
            return None

        grouped_memories: dict[str, list[AgentMemory]] = {}
        for memory in memories:
            grouped_memories.setdefault(memory.agent_role, []).append(memory)

        return await self.prune(user_prompt, grouped_memories, user_prompt)
