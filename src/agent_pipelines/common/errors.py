# error taxonomy shared across the orchestration layer

from typing import Optional

class AgentPipelinesError(Exception):
    """Base class for all service errors."""

class NotFoundError(AgentPipelinesError, LookupError):
    """
    Raised when a pipeline id is unknown or the pipeline is disabled.
    Precondition failure: surfaced to the caller immediately, never retried.
    """
    def __init__(self, pipeline_id: str):
        self.pipeline_id = pipeline_id
        super().__init__(f"Pipeline {pipeline_id} not found or disabled")

class ServiceError(AgentPipelinesError):
    """
    Raised by completion clients when a call fails (network, timeout, non-2xx) after retries.
    Recorded into the run's errors/execution log, not propagated out of a run.
    """
    def __init__(self, message: str, provider: Optional[str] = None):
        self.message = message
        self.provider = provider
        super().__init__(message)

class StructuredPayloadError(AgentPipelinesError, ValueError):
    """Raised when no JSON payload can be extracted from an LLM response."""

class MemoryGenerationError(AgentPipelinesError):
    """Raised when a memory record cannot be generated. Always non-fatal to the enclosing step."""

class PruningParseError(AgentPipelinesError):
    """Raised internally by the pruner when the response is malformed; drives the fallback result."""

class ConfigurationError(AgentPipelinesError):
    """Raised at startup when the selected completion provider cannot be configured."""
