# agent roles and the fixed role-keyed lookup tables
from enum import Enum
from typing import Optional

class AgentRole(str, Enum):
    """
    Named behavioral profiles applied to a single completion call.
    NOTE: planner output may name roles outside this enum; lookups fall back to defaults.
    """
    INTERPRETER = "interpreter"
    ANALYSIS = "analysis"
    RETRIEVAL = "retrieval"
    JUDGE = "judge"
    CODER = "coder"
    QUALITY_JUDGE = "quality-judge"
    QUALITY_CHECK = "quality-check"
    SUPERVISOR = "supervisor"
    ANALYZER = "analyzer"
    WORKFLOW_DIRECTOR = "workflow-director"

    @classmethod
    def parse(cls, role: str) -> Optional["AgentRole"]:
        """Return the matching role, or None for roles outside the table."""
        try:
            return cls(role.strip().lower())
        except ValueError:
            return None

DEFAULT_MEMORY_TYPE = "general-experience"

# which memory category each role produces
ROLE_MEMORY_TYPES: dict[AgentRole, str] = {
    AgentRole.INTERPRETER: "requirements-analysis",
    AgentRole.ANALYSIS: "codebase-analysis",
    AgentRole.RETRIEVAL: "code-snippets",
    AgentRole.JUDGE: "quality-assessment",
    AgentRole.CODER: "implementation-patterns",
    AgentRole.QUALITY_JUDGE: "testing-insights",
    AgentRole.SUPERVISOR: "pipeline-optimization",
}

def memory_type_for_role(role: str) -> str:
    agent_role = AgentRole.parse(role)
    if agent_role is None:
        return DEFAULT_MEMORY_TYPE
    return ROLE_MEMORY_TYPES.get(agent_role, DEFAULT_MEMORY_TYPE)
