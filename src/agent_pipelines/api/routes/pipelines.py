# static pipeline routes: listing, runs, memory-enabled runs and memory analysis

from typing import Optional
from fastapi import APIRouter, Depends
from agent_pipelines.common.logging.logger import logger
from agent_pipelines.core.dependencies import get_orchestrator
from agent_pipelines.agent_service.orchestrator.main_orchestrator import MultiAgentOrchestrator
from agent_pipelines.agent_service.common.types.context import RunResult
from agent_pipelines.memory.types import PruningResult
from agent_pipelines.api.request_models.pipelines import PipelineRunRequest
from agent_pipelines.api.response_models.pipelines import PipelineListResponse, PipelineSummary

router = APIRouter(prefix="/pipelines", tags=["Pipelines"])

@router.get("", response_model=PipelineListResponse)
def list_pipelines(
    orchestrator: MultiAgentOrchestrator = Depends(get_orchestrator),
):
    pipelines = orchestrator.list_pipelines()
    return PipelineListResponse(pipelines=[PipelineSummary.from_pipeline(p) for p in pipelines])

# NOTE: declared before the parameterized routes so the literal id path wins
@router.post("/code-development/run-with-memory-analysis", response_model=RunResult)
async def run_code_development_with_memory_analysis(
    request: PipelineRunRequest,
    orchestrator: MultiAgentOrchestrator = Depends(get_orchestrator),
):
    logger.info("Running code-development pipeline with prior memory analysis")
    return await orchestrator.run_code_development_pipeline_with_memory(request.prompt)

@router.post("/{pipeline_id}/run", response_model=RunResult)
async def run_pipeline(
    pipeline_id: str,
    request: PipelineRunRequest,
    orchestrator: MultiAgentOrchestrator = Depends(get_orchestrator),
):
    # NotFoundError is mapped to 404 by the app-level exception handler
    result = await orchestrator.execute(pipeline_id, request.prompt)
    logger.info(f"Pipeline {pipeline_id} run finished: success={result.success}")
    return result

@router.post("/{pipeline_id}/run-with-memory", response_model=RunResult)
async def run_pipeline_with_memory(
    pipeline_id: str,
    request: PipelineRunRequest,
    orchestrator: MultiAgentOrchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.execute_with_memory(pipeline_id, request.prompt)
    logger.info(f"Pipeline {pipeline_id} run with memory finished: success={result.success}")
    return result

@router.post("/{pipeline_id}/memory-analysis", response_model=Optional[PruningResult])
async def analyze_pipeline_memories(
    pipeline_id: str,
    request: PipelineRunRequest,
    orchestrator: MultiAgentOrchestrator = Depends(get_orchestrator),
):
    """Returns null when the pipeline has no stored memories yet."""
    return await orchestrator.analyze_memories(pipeline_id, request.prompt)
