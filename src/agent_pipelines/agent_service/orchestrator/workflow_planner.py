# workflow director: turns the interpreter's output into an ordered plan of agents

from pydantic import ValidationError

from agent_pipelines.common.errors import ServiceError, StructuredPayloadError
from agent_pipelines.common.services.llm_service.llm_client.protocols import ChatMessage, CompletionProtocol
from agent_pipelines.common.utils.structured_payload import extract_structured_payload
from agent_pipelines.agent_service.common.types.agent_roles import AgentRole
from agent_pipelines.agent_service.common.types.completion_profiles import PLANNING_OPTIONS
from agent_pipelines.agent_service.common.types.pipeline import PlannedStep, WorkflowPlan
from agent_pipelines.agent_service.common.system_prompts.workflow_prompts import WorkflowPrompts

from agent_pipelines.common.logging.logger import logger

class WorkflowPlanner():
    """
    Wraps the workflow-director meta-agent.
    An unusable response (or a failed call) yields the fixed analysis -> coder -> judge plan.
    """
    def __init__(self, completion_client: CompletionProtocol):
        self.completion_client = completion_client

    @staticmethod
    def fallback_plan(interpretation: str) -> WorkflowPlan:
        return WorkflowPlan(
            steps=[
                PlannedStep(agent_role=AgentRole.ANALYSIS.value, instructions=f"Analyze codebase for: {interpretation}", required=True),
                PlannedStep(agent_role=AgentRole.CODER.value, instructions=f"Generate code based on analysis: {interpretation}", required=True),
                PlannedStep(agent_role=AgentRole.JUDGE.value, instructions="Review the generated code for quality and correctness", required=False),
            ],
            is_fallback=True,
        )

    @staticmethod
    def parse_plan(response: str) -> WorkflowPlan:
        """Raises StructuredPayloadError or ValidationError when the response is not a usable plan."""
        payload = extract_structured_payload(response)
        # tolerate a bare list of steps
        if isinstance(payload, list):
            payload = {"steps": payload}
        return WorkflowPlan.model_validate(payload)

    async def plan(self, interpretation: str, user_prompt: str) -> WorkflowPlan:
        messages = [
            ChatMessage(role="system", content=WorkflowPrompts.workflow_director_system_prompt),
            ChatMessage(role="user", content=WorkflowPrompts.get_planning_user_prompt(user_prompt, interpretation)),
        ]

        try:
            response = await self.completion_client.acomplete(messages=messages, options=PLANNING_OPTIONS)
        except ServiceError as e:
            logger.warning(f"Workflow director call failed, using fallback plan: {e}")
            return self.fallback_plan(interpretation)

        try:
            return self.parse_plan(response)
        except (StructuredPayloadError, ValidationError) as e:
            logger.warning(f"Workflow plan could not be parsed, using fallback plan: {e}\nRaw LLM output: {response[:500]}")
            return self.fallback_plan(interpretation)
