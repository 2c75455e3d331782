# static pipeline definitions and the dynamic workflow plan produced by the workflow director
from typing import Callable, Optional
from pydantic import BaseModel, ConfigDict, Field, AliasChoices

from agent_pipelines.agent_service.common.types.context import AgentContext

# builds the user message for a step from previously completed results
InputBuilder = Callable[[AgentContext], str]

class PipelineStep(BaseModel):
    """
    One element of a static pipeline. Immutable once registered.
    """
    model_config = ConfigDict(frozen=True)

    role: str
    system_prompt: str
    input_builder: InputBuilder
    output_key: Optional[str] = None

class Pipeline(BaseModel):
    """
    A statically ordered list of steps executed top-to-bottom.
    Registered once; looked up by id; only executed while enabled.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    steps: tuple[PipelineStep, ...]
    enabled: bool = True

    @property
    def step_roles(self) -> list[str]:
        return [step.role for step in self.steps]

class PlannedStep(BaseModel):
    """
    A single step proposed by the workflow director at runtime.
    Accepts the planner's JSON keys (agent, feedback_output) as well as the field names.
    """
    model_config = ConfigDict(populate_by_name=True)

    agent_role: str = Field(validation_alias=AliasChoices("agent_role", "agent"))
    instructions: str
    required: bool = True
    iterative_feedback: bool = Field(default=False, validation_alias=AliasChoices("iterative_feedback", "iterativeFeedback"))
    feedback_output_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("feedback_output_key", "feedback_output", "feedbackOutput"),
    )

class WorkflowPlan(BaseModel):
    """Ordered plan of agents to execute after interpretation."""
    steps: list[PlannedStep]
    is_fallback: bool = False # True when the planner response could not be parsed
