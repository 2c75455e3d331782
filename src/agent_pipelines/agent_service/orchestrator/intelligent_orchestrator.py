# dynamic orchestration: interpret -> plan -> execute plan -> supervise

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from agent_pipelines.common.errors import MemoryGenerationError, ServiceError
from agent_pipelines.common.services.llm_service.llm_client.protocols import ChatMessage, CompletionProtocol
from agent_pipelines.agent_service.common.types.agent_roles import AgentRole
from agent_pipelines.agent_service.common.types.completion_profiles import STEP_OPTIONS, WORKFLOW_ANALYSIS_OPTIONS
from agent_pipelines.agent_service.common.types.context import AgentContext, RunResult, select_final_result
from agent_pipelines.agent_service.common.types.pipeline import PlannedStep, WorkflowPlan
from agent_pipelines.agent_service.common.system_prompts.agent_prompts import AgentPrompts
from agent_pipelines.agent_service.common.system_prompts.workflow_prompts import WorkflowPrompts
from agent_pipelines.agent_service.orchestrator.workflow_planner import WorkflowPlanner
from agent_pipelines.memory.memory_engine import MemoryEngine
from agent_pipelines.memory.memory_store import MemoryStore
from agent_pipelines.memory.types import AgentMemory

from agent_pipelines.common.logging.logger import logger

INTELLIGENT_PIPELINE_ID = "intelligent-orchestration"
WORKFLOW_PLACEHOLDER_RESULT = "Workflow completed"
INTERPRETATION_FAILED_RESULT = "Interpretation failed - cannot determine next steps"
INTERPRETATION_KEY = "interpretation"
FINAL_SUMMARY_KEY = "final_summary"
FEEDBACK_MARKERS = ("error", "issues", "fix needed")
RESULT_PREVIEW_CHARS = 100
SUPERVISOR_RESERVED_STEPS = 1

class FeedbackRetryState(str, Enum):
    PENDING = "pending"
    RETRIED = "retried"
    DONE = "done"

class FeedbackRetry():
    """
    One-shot retry guard for iterative feedback: Pending -> Retried -> Done.
    A step can be re-invoked at most MAX_RETRIES times, never looped.
    """
    MAX_RETRIES = 1

    def __init__(self):
        self.state = FeedbackRetryState.PENDING
        self.retries = 0

    def can_retry(self) -> bool:
        return self.state is FeedbackRetryState.PENDING and self.retries < self.MAX_RETRIES

    def mark_retried(self) -> None:
        self.retries += 1
        self.state = FeedbackRetryState.RETRIED

    def finish(self) -> None:
        self.state = FeedbackRetryState.DONE

def detect_feedback(output: Optional[str]) -> bool:
    """True if the stored output superficially signals unresolved issues."""
    if not output:
        return False
    lowered = output.lower()
    return any(marker in lowered for marker in FEEDBACK_MARKERS)

class OrchestrationRun(BaseModel):
    """Per-run bookkeeping, discarded once the RunResult is built."""
    context: AgentContext
    execution_log: list[str] = Field(default_factory=list)
    agent_memories: dict[str, list[AgentMemory]] = Field(default_factory=dict)
    completed_steps: int = 0
    failed_steps: int = 0

class IntelligentOrchestrator():
    """
    Runs a dynamic workflow in four forward-only phases:
    1) interpretation: fixed interpreter step; failure ends the run
    2) planning: workflow director proposes PlannedSteps (fallback plan on bad output)
    3) execution: planned steps in order; a failed required step skips the rest
    4) supervision: always runs; its outcome alone decides `success`
    """
    def __init__(
        self,
        completion_client: CompletionProtocol,
        memory_engine: MemoryEngine,
        memory_store: MemoryStore,
        planner: Optional[WorkflowPlanner] = None,
        max_steps: int = 10,
    ):
        self.completion_client = completion_client
        self.memory_engine = memory_engine
        self.memory_store = memory_store
        self.planner = planner or WorkflowPlanner(completion_client)
        self.max_steps = max_steps

    async def execute_single_agent(
        self,
        agent_role: str,
        instructions: str,
        run: OrchestrationRun,
        output_key: Optional[str] = None,
    ) -> bool:
        """
        Generic single-agent primitive: role prompt + instructions -> completion -> results[output_key].
        Returns whether the completion succeeded; memory generation is attempted but never fails the step.
        """
        context = run.context
        output_key = output_key or f"{agent_role}_result"
        run.execution_log.append(f"Executing {agent_role} agent...")

        messages = [
            ChatMessage(role="system", content=AgentPrompts.system_prompt_for(agent_role)),
            ChatMessage(role="user", content=instructions),
        ]
        try:
            response = await self.completion_client.acomplete(messages=messages, options=STEP_OPTIONS)
        except ServiceError as e:
            error_msg = f"{agent_role} failed: {e.message}"
            context.errors.append(error_msg)
            run.execution_log.append(f"ERROR: {error_msg}")
            run.failed_steps += 1
            logger.warning(f"[intelligent] {error_msg}")
            return False

        context.results[output_key] = response
        context.step_count += 1
        run.completed_steps += 1

        try:
            memory = await self.memory_engine.generate(
                agent_role,
                {"instructions": instructions, "response": response},
                context.user_prompt,
                context,
            )
            run.agent_memories.setdefault(f"{agent_role}-agent", []).append(memory)
        except MemoryGenerationError as e:
            logger.warning(f"Memory generation failed for {agent_role}: {e}")
            run.execution_log.append(f"Memory generation failed for {agent_role}: {e}")

        run.execution_log.append(f"{agent_role} completed successfully")
        return True

    async def _execute_planned_step(self, step: PlannedStep, run: OrchestrationRun) -> bool:
        """Run one planned step plus, if its feedback output signals issues, a single retry."""
        success = await self.execute_single_agent(step.agent_role, step.instructions, run)
        # a failed required step ends the plan, no feedback iteration
        if not success and step.required:
            return False

        retry = FeedbackRetry()
        if step.iterative_feedback and step.feedback_output_key:
            feedback = run.context.results.get(step.feedback_output_key)
            if detect_feedback(feedback) and retry.can_retry():
                if run.context.has_step_budget(reserved=SUPERVISOR_RESERVED_STEPS):
                    run.execution_log.append(f"Quality issues detected - sending feedback to {step.agent_role} for iteration")
                    retry.mark_retried()
                    await self.execute_single_agent(
                        step.agent_role,
                        WorkflowPrompts.get_feedback_iteration_prompt(step.instructions, feedback or ""),
                        run,
                    )
                else:
                    run.execution_log.append(f"Step budget exhausted - skipping feedback iteration for {step.agent_role}")
        retry.finish()
        return success

    async def _execute_plan(self, plan: WorkflowPlan, run: OrchestrationRun) -> None:
        for index, step in enumerate(plan.steps):
            if not run.context.has_step_budget(reserved=SUPERVISOR_RESERVED_STEPS):
                skipped = ", ".join(s.agent_role for s in plan.steps[index:])
                run.execution_log.append(f"Step budget exhausted - skipping remaining steps: {skipped}")
                logger.warning(f"[intelligent] step budget of {run.context.max_steps} exhausted, skipped: {skipped}")
                break

            success = await self._execute_planned_step(step, run)
            if not success and step.required:
                run.execution_log.append(f"Required step '{step.agent_role}' failed - stopping workflow")
                break

    def _supervision_prompt(self, run: OrchestrationRun) -> str:
        context = run.context
        previews = [f"{key}: {value[:RESULT_PREVIEW_CHARS]}..." for key, value in context.results.items()]
        return WorkflowPrompts.get_supervision_prompt(
            user_prompt=context.user_prompt,
            interpretation=context.results.get(INTERPRETATION_KEY, ""),
            completed_steps=run.completed_steps,
            failed_steps=run.failed_steps,
            result_previews=previews,
        )

    async def execute(self, user_prompt: str) -> RunResult:
        logger.info("Starting intelligent agent orchestration...")
        run = OrchestrationRun(context=AgentContext(user_prompt=user_prompt, max_steps=self.max_steps))

        # 1) interpretation, terminal on failure
        interpreted = await self.execute_single_agent(
            AgentRole.INTERPRETER.value,
            WorkflowPrompts.get_interpretation_prompt(user_prompt),
            run,
            output_key=INTERPRETATION_KEY,
        )
        if not interpreted:
            run.execution_log.append("Pipeline failed at interpretation stage")
            return RunResult(
                success=False,
                final_result=INTERPRETATION_FAILED_RESULT,
                context=run.context,
                execution_log=run.execution_log,
            )

        # 2) planning
        interpretation = run.context.results.get(INTERPRETATION_KEY, "")
        plan = await self.planner.plan(interpretation, user_prompt)
        plan_summary = plan.model_dump_json(indent=2)
        run.execution_log.append(f"Workflow determined{' (fallback)' if plan.is_fallback else ''}: {plan_summary}")

        # 3) execution
        await self._execute_plan(plan, run)

        # 4) supervision, always runs and decides success
        supervised = await self.execute_single_agent(
            AgentRole.SUPERVISOR.value,
            self._supervision_prompt(run),
            run,
            output_key=FINAL_SUMMARY_KEY,
        )

        stored_key = self.memory_store.store_run(INTELLIGENT_PIPELINE_ID, run.agent_memories)
        logger.info(
            f"Intelligent orchestration finished: supervisor_success={supervised}, "
            f"completed={run.completed_steps}, failed={run.failed_steps}, memories stored under {stored_key}"
        )
        return RunResult(
            success=supervised,
            final_result=select_final_result(run.context, WORKFLOW_PLACEHOLDER_RESULT),
            context=run.context,
            execution_log=run.execution_log,
            agent_memories=run.agent_memories,
        )

    @staticmethod
    def workflow_analysis_messages(prompt: str) -> list[ChatMessage]:
        return [
            ChatMessage(role="system", content=WorkflowPrompts.workflow_analysis_system_prompt),
            ChatMessage(role="user", content=WorkflowPrompts.get_workflow_analysis_user_prompt(prompt)),
        ]

    async def analyze_workflow_choice(self, prompt: str) -> str:
        """Dry run: describe which agents would handle the request and why, without executing any."""
        return await self.completion_client.acomplete(
            messages=self.workflow_analysis_messages(prompt),
            options=WORKFLOW_ANALYSIS_OPTIONS,
        )
