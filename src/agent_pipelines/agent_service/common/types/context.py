# per-run state threaded through a pipeline or orchestration run
from typing import Optional
from pydantic import BaseModel, Field

from agent_pipelines.memory.types import AgentMemory, PruningResult

class AgentContext(BaseModel):
    """
    Mutable accumulator owned by exactly one run.
    - results: output key -> raw response text of the step that produced it
    - errors: append-only within a run
    - step_count never exceeds max_steps
    """
    user_prompt: str
    results: dict[str, str] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    step_count: int = 0
    max_steps: int

    def has_step_budget(self, reserved: int = 0) -> bool:
        """True if another step fits in the budget while keeping `reserved` slots free."""
        return self.step_count < self.max_steps - reserved

class RunResult(BaseModel):
    """
    Outcome of one pipeline or orchestration run.
    success and final_result are always populated; callers inspect errors/execution_log for why.
    """
    success: bool
    final_result: str
    context: AgentContext
    execution_log: list[str] = Field(default_factory=list)
    agent_memories: Optional[dict[str, list[AgentMemory]]] = None # agent name -> memories
    memory_analysis: Optional[PruningResult] = None # set when prior memories were analysed before the run

FINAL_RESULT_KEYS = ("final_summary", "generated_code")

def select_final_result(context: AgentContext, placeholder: str) -> str:
    """Supervisor output first, then generated code, then the placeholder."""
    for key in FINAL_RESULT_KEYS:
        value = context.results.get(key)
        if value:
            return value
    return placeholder
