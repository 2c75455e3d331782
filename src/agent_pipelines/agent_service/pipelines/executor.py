# sequential executor for static pipelines

import asyncio
from typing import Optional

from agent_pipelines.common.errors import MemoryGenerationError, ServiceError
from agent_pipelines.common.services.llm_service.llm_client.protocols import ChatMessage, CompletionProtocol
from agent_pipelines.agent_service.common.types.agent_roles import AgentRole
from agent_pipelines.agent_service.common.types.completion_profiles import STEP_OPTIONS
from agent_pipelines.agent_service.common.types.context import AgentContext, RunResult, select_final_result
from agent_pipelines.agent_service.common.types.pipeline import Pipeline, PipelineStep
from agent_pipelines.agent_service.pipelines.registry import PipelineRegistry
from agent_pipelines.memory.memory_engine import MemoryEngine
from agent_pipelines.memory.memory_store import MemoryStore
from agent_pipelines.memory.types import AgentMemory

from agent_pipelines.common.logging.logger import logger

PIPELINE_PLACEHOLDER_RESULT = "Pipeline completed"

class PipelineExecutor():
    """
    Runs a registered pipeline top-to-bottom against a fresh AgentContext.
    - a failed step is recorded and the run moves on, except a failed supervisor step which ends the run
    - the memory-enabled variant distills a memory per successful keyed step and stores them per run
    """
    def __init__(
        self,
        completion_client: CompletionProtocol,
        registry: PipelineRegistry,
        memory_engine: MemoryEngine,
        memory_store: MemoryStore,
        step_delay: float = 0.5,
    ):
        self.completion_client = completion_client
        self.registry = registry
        self.memory_engine = memory_engine
        self.memory_store = memory_store
        self.step_delay = step_delay

    async def execute(self, pipeline_id: str, user_prompt: str) -> RunResult:
        return await self._run(pipeline_id, user_prompt, with_memory=False)

    async def execute_with_memory(self, pipeline_id: str, user_prompt: str) -> RunResult:
        return await self._run(pipeline_id, user_prompt, with_memory=True)

    async def _complete_step(self, step: PipelineStep, context: AgentContext) -> str:
        messages = [
            ChatMessage(role="system", content=step.system_prompt),
            ChatMessage(role="user", content=step.input_builder(context)),
        ]
        return await self.completion_client.acomplete(messages=messages, options=STEP_OPTIONS)

    async def _remember(
        self,
        step: PipelineStep,
        response: str,
        context: AgentContext,
        agent_memories: dict[str, list[AgentMemory]],
        execution_log: list[str],
    ) -> None:
        """Best-effort memory generation; failures are logged, never raised."""
        try:
            memory = await self.memory_engine.generate(step.role, response, context.user_prompt, context)
        except MemoryGenerationError as e:
            logger.warning(f"Memory generation failed for {step.role}: {e}")
            execution_log.append(f"Memory generation failed for {step.role}: {e}")
            return

        agent_memories.setdefault(f"{step.role}-agent", []).append(memory)
        execution_log.append(f"Memory generated for {step.role}")

    async def _run(self, pipeline_id: str, user_prompt: str, with_memory: bool) -> RunResult:
        # precondition: raises NotFoundError before any state is created
        pipeline: Pipeline = self.registry.get(pipeline_id)

        context = AgentContext(user_prompt=user_prompt, max_steps=len(pipeline.steps))
        execution_log: list[str] = []
        agent_memories: dict[str, list[AgentMemory]] = {}
        total = len(pipeline.steps)
        logger.info(f"Running pipeline {pipeline_id} ({total} steps, memory={'on' if with_memory else 'off'})")

        for index, step in enumerate(pipeline.steps, start=1):
            context.step_count = index
            execution_log.append(f"Executing step {index}/{total}: {step.role}")

            try:
                response = await self._complete_step(step, context)
            except ServiceError as e:
                error_msg = f"Step {step.role} failed: {e.message}"
                context.errors.append(error_msg)
                execution_log.append(f"ERROR: {error_msg}")
                logger.warning(f"[{pipeline_id}] {error_msg}")

                # the supervisor closes the pipeline, nothing is scheduled after it
                if step.role == AgentRole.SUPERVISOR:
                    break
                continue

            if step.output_key:
                context.results[step.output_key] = response
                if with_memory:
                    await self._remember(step, response, context, agent_memories, execution_log)

            execution_log.append(f"Step {step.role} completed successfully")

            # pacing only, carries no correctness meaning
            if self.step_delay > 0 and index < total:
                await asyncio.sleep(self.step_delay)

        stored_key: Optional[str] = None
        if with_memory:
            stored_key = self.memory_store.store_run(pipeline_id, agent_memories)

        success = not context.errors
        logger.info(
            f"Pipeline {pipeline_id} finished: success={success}, errors={len(context.errors)}"
            + (f", memories stored under {stored_key}" if stored_key else "")
        )
        return RunResult(
            success=success,
            final_result=select_final_result(context, PIPELINE_PLACEHOLDER_RESULT),
            context=context,
            execution_log=execution_log,
            agent_memories=agent_memories if with_memory else None,
        )
