# sampling profiles per kind of call
from agent_pipelines.common.services.llm_service.llm_client.protocols import CompletionOptions

# pipeline and planned steps
STEP_OPTIONS = CompletionOptions(temperature=0.2, max_output_tokens=2000)
# meta-agents run near-deterministic
MEMORY_OPTIONS = CompletionOptions(temperature=0.1, max_output_tokens=1000)
PRUNING_OPTIONS = CompletionOptions(temperature=0.1, max_output_tokens=1500)
PLANNING_OPTIONS = CompletionOptions(temperature=0.1, max_output_tokens=1500)
WORKFLOW_ANALYSIS_OPTIONS = CompletionOptions(temperature=0.1, max_output_tokens=800)
