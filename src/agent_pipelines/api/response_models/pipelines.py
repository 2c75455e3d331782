# response models for pipeline and orchestration routes

from pydantic import BaseModel

from agent_pipelines.agent_service.common.types.pipeline import Pipeline

class PipelineSummary(BaseModel):
    """
    Public view of a registered pipeline; step input builders are not serializable.
    """
    id: str
    name: str
    description: str
    steps: list[str]

    @classmethod
    def from_pipeline(cls, pipeline: Pipeline) -> "PipelineSummary":
        return cls(
            id=pipeline.id,
            name=pipeline.name,
            description=pipeline.description,
            steps=list(pipeline.step_roles),
        )

class PipelineListResponse(BaseModel):
    pipelines: list[PipelineSummary]

class WorkflowAnalysisResponse(BaseModel):
    analysis: str
