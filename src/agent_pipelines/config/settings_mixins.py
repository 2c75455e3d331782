# mixin settings for external services like the completion providers and pipeline pacing
from typing import Optional
from pydantic import BaseModel, Field

class XAISettingsMixin(BaseModel):
    """
    Model for xAI (Grok) completion client settings.
    NOTE: the endpoint is OpenAI-compatible, so the base url can point at any compatible gateway.
    """
    XAI_API_KEY: Optional[str] = None
    XAI_BASE_URL: str = Field(default="https://api.x.ai/v1", description="OpenAI-compatible chat completions base url.")
    XAI_MODEL_NAME: str = Field(default="grok-code-fast-1", description="Model used for every pipeline step.")
    XAI_TIMEOUT_SECONDS: float = Field(default=120.0, description="Per-request timeout; complex code generation can be slow.")

class GoogleGenAISettingsMixin(BaseModel):
    """
    Model for Google GenAI LLM Client settings.
    """
    GOOGLE_GENAI_API_KEY: Optional[str] = None
    GOOGLE_GENAI_MODEL_NAME: str = "gemini-2.5-flash-lite"

class CompletionRetrySettingsMixin(BaseModel):
    """
    Model for provider selection and retry/backoff policy of the completion service.
    """
    COMPLETION_PROVIDER: str = Field(default="xai", description="One of: xai, google_genai.")
    COMPLETION_RETRY_ATTEMPTS: int = Field(default=3, description="Total attempts per completion call, including the first.")
    COMPLETION_RETRY_BACKOFF_SECONDS: float = Field(default=1.0, description="Multiplier for exponential backoff between attempts.")
    COMPLETION_RETRY_MAX_WAIT_SECONDS: float = Field(default=8.0, description="Upper bound on a single backoff wait.")

class PipelineSettingsMixin(BaseModel):
    """
    Model for pipeline execution knobs.
    """
    PIPELINE_STEP_DELAY_SECONDS: float = Field(default=0.5, description="Pause between static pipeline steps to pace visible progress.")
    INTELLIGENT_MAX_STEPS: int = Field(default=10, ge=2, description="Step budget for a single intelligent orchestration run.")
