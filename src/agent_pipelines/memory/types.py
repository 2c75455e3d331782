# memory DTOs
import json
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from agent_pipelines.agent_service.common.types.agent_roles import DEFAULT_MEMORY_TYPE

class MemoryContent(BaseModel):
    """
    Structured payload the memory meta-agent returns for a completed step.
    """
    key_insights: list[str] = Field(default_factory=list, description="Insights gained about the user's requirements.")
    technical_decisions: list[str] = Field(default_factory=list, description="Technical decisions made and why.")
    context_information: list[str] = Field(default_factory=list, description="Context relevant for related future tasks.")
    learnings: list[str] = Field(default_factory=list, description="Patterns or lessons for similar work.")
    relevance_assessment: Optional[float] = Field(default=None, description="Agent's own 1-10 estimate; informational only.")

    @field_validator("key_insights", "technical_decisions", "context_information", "learnings", mode="before")
    @classmethod
    def _wrap_single_entry(cls, value: Any) -> Any:
        # models often return a bare string where a one-item list is expected
        if isinstance(value, str):
            return [value]
        if value is None:
            return []
        return value

class AgentMemory(BaseModel):
    """
    Distilled record of what one step learned.
    Never mutated after creation; pruning only classifies it for a later task.
    """
    model_config = ConfigDict(frozen=True)

    agent_role: str
    memory_type: str = DEFAULT_MEMORY_TYPE
    content: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.now)
    relevance_score: int = Field(default=0, ge=0, le=10)
    retention_flags: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("retention_flags", mode="before")
    @classmethod
    def _coerce_flags(cls, value: Any) -> Any:
        # JSON round-trips sets as lists
        if value is None:
            return frozenset()
        return value

    def serialized_content(self) -> str:
        return json.dumps(self.content, default=str)

class PruningResult(BaseModel):
    """
    Partition of existing memories for a new task. Derived value, never persisted.
    """
    relevant_memories: list[AgentMemory] = Field(default_factory=list)
    pruned_memories: list[AgentMemory] = Field(default_factory=list)
    context_summary: str
    cleanup_recommendations: list[str] = Field(default_factory=list)
