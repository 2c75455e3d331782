# request bodies for pipeline and orchestration routes

from pydantic import BaseModel, Field

class PipelineRunRequest(BaseModel):
    """
    Request body for running a static pipeline or an intelligent orchestration.
    """
    prompt: str = Field(min_length=1)

class WorkflowAnalysisRequest(BaseModel):
    """
    Request body for a dry-run workflow analysis; no agents are executed.
    """
    prompt: str = Field(min_length=1)
