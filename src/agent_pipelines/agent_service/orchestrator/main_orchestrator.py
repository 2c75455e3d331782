# main orchestrator, a.k.a. the entrypoint for all pipeline and orchestration logic
# bridges between the static pipeline executor, the intelligent orchestrator and the memory layer

from typing import Optional

# executors
from agent_pipelines.agent_service.pipelines.executor import PipelineExecutor
from agent_pipelines.agent_service.pipelines.registry import (
    PipelineRegistry,
    CODE_DEVELOPMENT_PIPELINE_ID,
    ANALYSIS_ONLY_PIPELINE_ID,
)
from agent_pipelines.agent_service.orchestrator.intelligent_orchestrator import IntelligentOrchestrator
from agent_pipelines.agent_service.orchestrator.workflow_planner import WorkflowPlanner
# memory
from agent_pipelines.memory.memory_engine import MemoryEngine
from agent_pipelines.memory.memory_pruner import MemoryPruner
from agent_pipelines.memory.memory_store import MemoryStore
# types
from agent_pipelines.agent_service.common.types.context import RunResult
from agent_pipelines.agent_service.common.types.pipeline import Pipeline
from agent_pipelines.memory.types import PruningResult
from agent_pipelines.common.services.llm_service.llm_client.protocols import CompletionProtocol
# logging
from agent_pipelines.common.logging.logger import logger

class MultiAgentOrchestrator():
    """
    Facade over every execution mode.
    - Constructed once per process (see core.lifespan); holds no per-run state.
    - The memory store is injected so every run of the process shares it.
    """
    def __init__(
        self,
        completion_client: CompletionProtocol,
        memory_store: MemoryStore,
        registry: Optional[PipelineRegistry] = None,
        step_delay: float = 0.5,
        intelligent_max_steps: int = 10,
    ):
        self.completion_client = completion_client
        self.memory_store = memory_store
        self.registry = registry or PipelineRegistry()
        self.memory_engine = MemoryEngine(completion_client)
        self.memory_pruner = MemoryPruner(completion_client, memory_store)
        self.pipeline_executor = PipelineExecutor(
            completion_client=completion_client,
            registry=self.registry,
            memory_engine=self.memory_engine,
            memory_store=memory_store,
            step_delay=step_delay,
        )
        self.intelligent_orchestrator = IntelligentOrchestrator(
            completion_client=completion_client,
            memory_engine=self.memory_engine,
            memory_store=memory_store,
            planner=WorkflowPlanner(completion_client),
            max_steps=intelligent_max_steps,
        )

    def list_pipelines(self) -> list[Pipeline]:
        return self.registry.list_enabled()

    async def execute(self, pipeline_id: str, user_prompt: str) -> RunResult:
        return await self.pipeline_executor.execute(pipeline_id, user_prompt)

    async def execute_with_memory(self, pipeline_id: str, user_prompt: str) -> RunResult:
        return await self.pipeline_executor.execute_with_memory(pipeline_id, user_prompt)

    async def execute_intelligent(self, user_prompt: str) -> RunResult:
        return await self.intelligent_orchestrator.execute(user_prompt)

    async def analyze_memories(self, pipeline_id: str, user_prompt: str) -> Optional[PruningResult]:
        return await self.memory_pruner.analyze_for_pipeline(pipeline_id, user_prompt)

    async def analyze_workflow_choice(self, prompt: str) -> str:
        return await self.intelligent_orchestrator.analyze_workflow_choice(prompt)

    # conveniences for the built-in pipelines
    async def run_code_development_pipeline(self, user_prompt: str) -> RunResult:
        return await self.execute(CODE_DEVELOPMENT_PIPELINE_ID, user_prompt)

    async def run_analysis_pipeline(self, user_prompt: str) -> RunResult:
        return await self.execute(ANALYSIS_ONLY_PIPELINE_ID, user_prompt)

    async def run_code_development_pipeline_with_memory(self, user_prompt: str) -> RunResult:
        """
        Analyze memories from earlier code-development runs against the new prompt, then run with memory.
        The analysis is informational: it is logged and attached to the result, never fed into the steps.
        """
        memory_analysis = await self.analyze_memories(CODE_DEVELOPMENT_PIPELINE_ID, user_prompt)
        if memory_analysis is not None:
            logger.info(f"Memory analysis: {memory_analysis.context_summary}")
            logger.info(f"Relevant memories: {len(memory_analysis.relevant_memories)}")
            logger.info(f"Pruned memories: {len(memory_analysis.pruned_memories)}")
        else:
            logger.info("No prior code-development memories to analyze.")

        result = await self.execute_with_memory(CODE_DEVELOPMENT_PIPELINE_ID, user_prompt)
        result.memory_analysis = memory_analysis
        return result
