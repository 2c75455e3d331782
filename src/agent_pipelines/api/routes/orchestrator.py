# intelligent orchestration routes: dynamic runs and dry-run workflow analysis

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from agent_pipelines.common.logging.logger import logger
from agent_pipelines.core.dependencies import get_orchestrator, get_completion_client
from agent_pipelines.agent_service.orchestrator.main_orchestrator import MultiAgentOrchestrator
from agent_pipelines.agent_service.orchestrator.intelligent_orchestrator import IntelligentOrchestrator
from agent_pipelines.agent_service.common.types.completion_profiles import WORKFLOW_ANALYSIS_OPTIONS
from agent_pipelines.agent_service.common.types.context import RunResult
from agent_pipelines.common.services.llm_service.llm_client import CompletionClient
from agent_pipelines.api.request_models.pipelines import PipelineRunRequest, WorkflowAnalysisRequest
from agent_pipelines.api.response_models.pipelines import WorkflowAnalysisResponse

router = APIRouter(prefix="/orchestrator", tags=["Intelligent Orchestrator"])

@router.post("/run", response_model=RunResult)
async def run_intelligent_orchestration(
    request: PipelineRunRequest,
    orchestrator: MultiAgentOrchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.execute_intelligent(request.prompt)
    logger.info(f"Intelligent orchestration finished: success={result.success}")
    return result

@router.post("/workflow-analysis", response_model=WorkflowAnalysisResponse)
async def analyze_workflow(
    request: WorkflowAnalysisRequest,
    orchestrator: MultiAgentOrchestrator = Depends(get_orchestrator),
):
    analysis = await orchestrator.analyze_workflow_choice(request.prompt)
    return WorkflowAnalysisResponse(analysis=analysis)

@router.post("/workflow-analysis/stream")
async def stream_workflow_analysis(
    request: WorkflowAnalysisRequest,
    completion_client: CompletionClient = Depends(get_completion_client),
):
    """Same dry run as /workflow-analysis, delivered paragraph by paragraph as plain text."""
    chunks = completion_client.astream_chunks(
        messages=IntelligentOrchestrator.workflow_analysis_messages(request.prompt),
        options=WORKFLOW_ANALYSIS_OPTIONS,
    )
    return StreamingResponse(chunks, media_type="text/plain")
