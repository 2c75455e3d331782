# registry of static pipelines, with the built-in code-development and analysis-only pipelines

from agent_pipelines.common.errors import NotFoundError
from agent_pipelines.agent_service.common.types.agent_roles import AgentRole
from agent_pipelines.agent_service.common.types.context import AgentContext
from agent_pipelines.agent_service.common.types.pipeline import Pipeline, PipelineStep
from agent_pipelines.agent_service.common.system_prompts.agent_prompts import AgentPrompts

CODE_DEVELOPMENT_PIPELINE_ID = "code-development"
ANALYSIS_ONLY_PIPELINE_ID = "analysis-only"

def _step(role: AgentRole, input_builder, output_key: str) -> PipelineStep:
    return PipelineStep(
        role=role.value,
        system_prompt=AgentPrompts.system_prompt_for(role.value),
        input_builder=input_builder,
        output_key=output_key,
    )

def _coder_input(ctx: AgentContext) -> str:
    return f"""Generate production code for "{ctx.user_prompt}" using this context:
- Interpretation: {ctx.results.get('interpretation')}
- Analysis: {ctx.results.get('analysis')}
- Code segments: {ctx.results.get('code_segments')}
- Judge feedback: {ctx.results.get('judgment')}

Write complete, functional code following best practices."""

def _supervisor_input(ctx: AgentContext) -> str:
    errors = ", ".join(ctx.errors) if ctx.errors else "None"
    return f"""Pipeline Summary:
- Steps completed: {ctx.step_count}/{ctx.max_steps}
- Errors encountered: {errors}
- Final result ready: {'generated_code' in ctx.results}

Provide overall pipeline success assessment and final deliverable."""

def build_code_development_pipeline() -> Pipeline:
    """interpreter -> analysis -> retrieval -> judge -> coder -> quality-check -> supervisor"""
    steps = (
        _step(
            AgentRole.INTERPRETER,
            lambda ctx: f'Analyze this user request and provide a clear interpretation: "{ctx.user_prompt}"',
            "interpretation",
        ),
        _step(
            AgentRole.ANALYSIS,
            lambda ctx: (
                f'Using this interpretation "{ctx.results.get("interpretation")}", analyze the codebase and identify '
                "relevant files and components. Focus on what needs to be modified or created."
            ),
            "analysis",
        ),
        _step(
            AgentRole.RETRIEVAL,
            lambda ctx: (
                f'Based on this analysis "{ctx.results.get("analysis")}", extract the exact relevant code segments '
                "from the identified files. Preserve all type signatures, imports, and comments verbatim."
            ),
            "code_segments",
        ),
        _step(
            AgentRole.JUDGE,
            lambda ctx: (
                f'Evaluate if these code segments "{ctx.results.get("code_segments")}" are appropriate for the task '
                f'"{ctx.user_prompt}". Provide specific feedback on relevance and completeness.'
            ),
            "judgment",
        ),
        _step(AgentRole.CODER, _coder_input, "generated_code"),
        _step(
            AgentRole.QUALITY_CHECK,
            lambda ctx: (
                f'Review this generated code "{ctx.results.get("generated_code")}" for the task "{ctx.user_prompt}". '
                "Check syntax, logic, integration, and provide detailed feedback on any issues."
            ),
            "quality_assessment",
        ),
        _step(AgentRole.SUPERVISOR, _supervisor_input, "final_summary"),
    )
    return Pipeline(
        id=CODE_DEVELOPMENT_PIPELINE_ID,
        name="Code Development Pipeline",
        description="Full software development pipeline with specialized agents",
        steps=steps,
        enabled=True,
    )

def build_analysis_only_pipeline() -> Pipeline:
    return Pipeline(
        id=ANALYSIS_ONLY_PIPELINE_ID,
        name="Analysis Pipeline",
        description="Analysis and recommendation pipeline without code generation",
        steps=(
            _step(
                AgentRole.ANALYZER,
                lambda ctx: (
                    f'Perform comprehensive analysis on: "{ctx.user_prompt}". '
                    "Provide detailed technical insights, recommendations, and best practices."
                ),
                "analysis",
            ),
        ),
        enabled=True,
    )

class PipelineRegistry():
    """
    Holds pipelines by id. Built-ins are registered at construction and read-only thereafter.
    """
    def __init__(self, include_builtin: bool = True):
        self._pipelines: dict[str, Pipeline] = {}
        if include_builtin:
            self.register(build_code_development_pipeline())
            self.register(build_analysis_only_pipeline())

    def register(self, pipeline: Pipeline) -> None:
        if pipeline.id in self._pipelines:
            raise ValueError(f"Pipeline {pipeline.id} is already registered")
        self._pipelines[pipeline.id] = pipeline

    def get(self, pipeline_id: str) -> Pipeline:
        """Return an enabled pipeline, or raise NotFoundError."""
        pipeline = self._pipelines.get(pipeline_id)
        if pipeline is None or not pipeline.enabled:
            raise NotFoundError(pipeline_id)
        return pipeline

    def list_enabled(self) -> list[Pipeline]:
        return [pipeline for pipeline in self._pipelines.values() if pipeline.enabled]
