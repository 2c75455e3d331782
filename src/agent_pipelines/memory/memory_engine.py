# generates, scores, and flags a memory record for each completed agent step

import json
from datetime import datetime
from typing import Any
from pydantic import ValidationError

from agent_pipelines.common.errors import MemoryGenerationError, ServiceError, StructuredPayloadError
from agent_pipelines.common.services.llm_service.llm_client.protocols import ChatMessage, CompletionProtocol
from agent_pipelines.common.utils.structured_payload import extract_structured_payload
from agent_pipelines.agent_service.common.types.agent_roles import AgentRole, memory_type_for_role
from agent_pipelines.agent_service.common.types.completion_profiles import MEMORY_OPTIONS
from agent_pipelines.agent_service.common.types.context import AgentContext
from agent_pipelines.agent_service.common.system_prompts.memory_prompts import MemoryPrompts
from agent_pipelines.memory.types import AgentMemory, MemoryContent

from agent_pipelines.common.logging.logger import logger

MAX_RELEVANCE_SCORE = 10
MAX_SERIALIZED_OUTPUT_CHARS = 2000
PROBLEM_RESOLUTION_MARKERS = ("error", "bug", "fix")

class MemoryEngine():
    """
    Asks a role-specific memory meta-agent to reflect on a step's output, then scores and flags the result.
    - relevance is coarse keyword overlap with the user prompt, not semantic similarity
    - retention flags are rule-based
    Any failure surfaces as MemoryGenerationError; callers treat it as non-fatal.
    """
    def __init__(self, completion_client: CompletionProtocol):
        self.completion_client = completion_client

    async def generate(
        self,
        agent_role: str,
        step_output: Any,
        user_prompt: str,
        context: AgentContext,
    ) -> AgentMemory:
        memory_type = memory_type_for_role(agent_role)
        serialized_output = json.dumps(step_output, default=str)[:MAX_SERIALIZED_OUTPUT_CHARS]

        messages = [
            ChatMessage(role="system", content=MemoryPrompts.get_memory_analysis_system_prompt(agent_role)),
            ChatMessage(
                role="user",
                content=MemoryPrompts.get_memory_analysis_user_prompt(
                    agent_role=agent_role,
                    user_prompt=user_prompt,
                    serialized_output=serialized_output,
                    result_count=len(context.results),
                ),
            ),
        ]

        try:
            response = await self.completion_client.acomplete(messages=messages, options=MEMORY_OPTIONS)
        except ServiceError as e:
            raise MemoryGenerationError(f"memory completion failed for {agent_role}: {e}") from e

        try:
            payload = extract_structured_payload(response)
            memory_content = MemoryContent.model_validate(payload)
        except (StructuredPayloadError, ValidationError) as e:
            logger.warning(f"Unparseable memory payload for {agent_role}: {e}\nRaw LLM output: {response[:500]}")
            raise MemoryGenerationError(f"memory payload for {agent_role} could not be parsed: {e}") from e

        content = memory_content.model_dump()
        return AgentMemory(
            agent_role=agent_role,
            memory_type=memory_type,
            content=content,
            timestamp=datetime.now(),
            relevance_score=self.calculate_relevance(content, user_prompt),
            retention_flags=self.determine_retention_flags(agent_role, content),
        )

    @staticmethod
    def calculate_relevance(content: Any, user_prompt: str) -> int:
        """Count prompt words longer than 3 chars that appear in the serialized content; capped at 10."""
        prompt_words = user_prompt.lower().split()
        memory_text = json.dumps(content, default=str).lower()

        score = 0
        for word in prompt_words:
            if len(word) > 3 and word in memory_text:
                score += 1
        return min(score, MAX_RELEVANCE_SCORE)

    @staticmethod
    def determine_retention_flags(agent_role: str, content: Any) -> frozenset[str]:
        flags: set[str] = set()

        # core interpretation always retained
        if agent_role == AgentRole.INTERPRETER:
            flags.update({"core-interpretation", "permanent-retention"})

        # technical decisions and patterns
        if agent_role in (AgentRole.CODER, AgentRole.ANALYSIS):
            flags.update({"implementation-patterns", "technical-decisions"})

        # quality insights retained for improvement
        if "judge" in agent_role:
            flags.update({"quality-insights", "error-prevention"})

        # NOTE: case-sensitive on purpose, matches the serialized payload as-is
        serialized = json.dumps(content, default=str)
        if any(marker in serialized for marker in PROBLEM_RESOLUTION_MARKERS):
            flags.add("problem-resolution")

        return frozenset(flags)
