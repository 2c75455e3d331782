from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Any
from agent_pipelines.common.logging.logger import logger
from agent_pipelines.common.errors import NotFoundError, ServiceError
from agent_pipelines.config.app_config import get_service_settings
from agent_pipelines.core.lifespan import lifespan
from agent_pipelines.core.dependencies import get_orchestrator, get_memory_store
from agent_pipelines.agent_service.orchestrator.main_orchestrator import MultiAgentOrchestrator
from agent_pipelines.memory.memory_store import MemoryStore
from agent_pipelines.api.routes.pipelines import router as pipelines_router
from agent_pipelines.api.routes.orchestrator import router as orchestrator_router

# disable FastAPI docs for production/deployment
is_local = get_service_settings().INCLUDE_DOCS
logger.info(f"is_local (include FastAPI docs?): {is_local}")

docs_config: dict[str, Any] = {
    "docs_url": "/docs" if is_local else None,
    "redoc_url": "/redoc" if is_local else None,
    "openapi_url": "/openapi.json" if is_local else None,
}

# main app, asgi entrypoint
app = FastAPI(
    title="Agent Pipelines Service",
    description="Multi-agent orchestration over a completion service, with static pipelines, dynamic workflows and agent memory",
    version="0.1.0",
    lifespan=lifespan,
    **docs_config,
)

# add CORS middleware
# TODO: restrict allow_origins once the frontend origin is fixed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info(f"Rejected request for pipeline {exc.pipeline_id}: {exc}")
    return JSONResponse(status_code=404, content={"detail": str(exc)})

# only reachable outside a run: step failures are recorded into the RunResult instead
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.error(f"Completion service error ({exc.provider}): {exc.message}")
    return JSONResponse(status_code=502, content={"detail": exc.message, "provider": exc.provider})

# health endpoint
@app.get("/health")
async def health(
    orchestrator: MultiAgentOrchestrator = Depends(get_orchestrator),
    memory_store: MemoryStore = Depends(get_memory_store),
):
    return {
        "status": "ok",
        "pipelines": [pipeline.id for pipeline in orchestrator.list_pipelines()],
        "stored_runs": len(memory_store),
    }

app.include_router(pipelines_router)
app.include_router(orchestrator_router)
