"""
Stagebot Team Learning - FastAPI Application

This module provides the API layer for the team learning platform, including:
- Feedback submission on AI review suggestions
- Learned patterns per file extension (few-shot guidance)
- Global learning statistics
- Effective rule configuration resolution (embedded -> central -> repo)
- PR-level check evaluation
- Hosted, versioned central standards document
- Health and Prometheus metrics endpoints
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from supabase import Client, create_client

from models.feedback import FeedbackRequest, FeedbackSubmitted, GlobalStats, PatternsResponse
from models.platform import PrCheckResult, PrChecksRequest
from models.rules import ConfigResolveRequest, ResolvedConfig
from models.standards import StandardsDocument, StandardsHistoryEntry, StandardsUpdateRequest
from repositories.feedback import FeedbackRepository, StoreError
from repositories.standards import StandardsRepository
from services.feedback import FeedbackService
from services.pr_checks import PrCheckEvaluator
from services.standards import StandardsService
from services.standards_registry import StandardsRegistry, StandardsRequestError, StandardsVersionNotFound
from services.validation import FeedbackValidationError, feedback_body_errors, request_error_messages
from utils.config import Config
from utils.degradation import check_store_health, get_health_status
from utils.logger import setup_logging
from utils.metrics import feedback_validation_failures_total

API_VERSION = "1.0.0"


# =============================================================================
# Application Lifecycle Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Configures logging on startup. The feedback store client is created
    lazily on first request so a store outage does not block startup.
    """
    setup_logging()
    logger.info("Starting Stagebot Team Learning API")

    yield

    logger.info("Shutting down Stagebot Team Learning API")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Stagebot Team Learning",
    description="Learns from feedback on AI code review suggestions and resolves rule configuration",
    version=API_VERSION,
    lifespan=lifespan,
)

api_v1_prefix = "/v1"


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(FeedbackValidationError)
async def validation_error_handler(request: Request, exc: FeedbackValidationError):
    """Structural validation problems are caller-fixable: 400 with every message."""
    return JSONResponse(status_code=400, content={"errors": exc.errors})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Mistyped fields and query parameters get the same 400 shape as
    structural validation problems.

    For feedback submissions the well-typed remainder of the body is also
    validated, so every problem is reported at once.
    """
    type_errors = exc.errors()
    errors = request_error_messages(type_errors)

    if request.url.path == f"{api_v1_prefix}/feedback" and isinstance(exc.body, dict):
        invalid_fields = {str(e["loc"][1]) for e in type_errors if len(e["loc"]) > 1}
        errors += feedback_body_errors(exc.body, invalid_fields)
        feedback_validation_failures_total.inc()

    logger.bind(status="rejected").debug(f"Request validation failed for {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"errors": errors})


@app.exception_handler(StandardsRequestError)
async def standards_request_error_handler(request: Request, exc: StandardsRequestError):
    return JSONResponse(status_code=400, content={"errors": exc.errors})


@app.exception_handler(StandardsVersionNotFound)
async def standards_not_found_handler(request: Request, exc: StandardsVersionNotFound):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    """Store failures are already logged by the repository; return a generic error."""
    return JSONResponse(
        status_code=500,
        content={"error": f"Failed to {exc.operation.replace('_', ' ')}"},
    )


# =============================================================================
# Dependencies
# =============================================================================

@lru_cache
def get_config() -> Config:
    """
    Dependency injection for Config.

    Returns:
        Config: Application configuration, loaded once
    """
    return Config()


@lru_cache
def get_base_config() -> Config:
    """
    Configuration without the feedback store settings.

    Config resolution and the API key check never touch the store, so
    they keep working when SUPABASE_URL/SUPABASE_KEY are unset.
    """
    return Config(require_store=False)


@lru_cache
def _create_supabase(url: str, key: str) -> Client:
    return create_client(url, key)


def get_supabase(config: Config = Depends(get_config)) -> Client:
    """Supabase client built from configuration."""
    return _create_supabase(config.SUPABASE_URL, config.SUPABASE_KEY)


def get_feedback_service(
    config: Config = Depends(get_config),
    supabase: Client = Depends(get_supabase),
) -> FeedbackService:
    """Feedback service wired to the configured feedback table."""
    return FeedbackService(FeedbackRepository(supabase, table=config.FEEDBACK_TABLE), config)


def get_standards_service(config: Config = Depends(get_base_config)) -> StandardsService:
    """Standards service using the configured central standards location."""
    return StandardsService(
        central_location=config.CENTRAL_STANDARDS_PATH,
        request_headers=config.central_request_headers,
    )


def get_standards_registry(
    config: Config = Depends(get_config),
    supabase: Client = Depends(get_supabase),
) -> StandardsRegistry:
    """Registry over the hosted standards table."""
    return StandardsRegistry(
        StandardsRepository(supabase, table=config.STANDARDS_TABLE, standard_id=config.STANDARDS_ID)
    )


async def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-Api-Key"),
    config: Config = Depends(get_base_config),
) -> None:
    """
    Check the shared API key, when one is configured.

    Raises:
        HTTPException: If the key is missing or wrong
    """
    if not config.API_KEY:
        return

    if x_api_key != config.API_KEY:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


# =============================================================================
# API Endpoints (v1)
# =============================================================================

@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Stagebot Team Learning",
        "version": API_VERSION,
        "status": "operational",
        "docs": "/docs",
        "metrics": "/metrics",
    }


@app.get("/health")
def health_check(
    config: Config = Depends(get_config),
    supabase: Client = Depends(get_supabase),
):
    """Health check: verifies the feedback store is reachable."""
    healthy = check_store_health(supabase, table=config.FEEDBACK_TABLE)
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "version": API_VERSION,
        "services": get_health_status().as_dict(),
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)


@app.post(
    f"{api_v1_prefix}/feedback",
    status_code=201,
    response_model=FeedbackSubmitted,
    dependencies=[Depends(verify_api_key)],
)
def submit_feedback(
    feedback: FeedbackRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Submit feedback for a code review suggestion.

    Returns:
        201 with the generated id, or 400 with every validation error
    """
    return service.submit(feedback)


@app.get(
    f"{api_v1_prefix}/patterns",
    response_model=PatternsResponse,
    dependencies=[Depends(verify_api_key)],
)
def get_patterns(
    ext: Optional[str] = Query(None, description="File extension, e.g. '.cs'"),
    min_occurrences: Optional[int] = Query(None, alias="minOccurrences"),
    max_results: Optional[int] = Query(None, alias="maxResults"),
    min_accuracy: float = Query(0.0, alias="minAccuracy"),
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Get learned patterns for a file extension.

    Query Parameters:
        ext (required): File extension
        minOccurrences: Minimum occurrences to include (default 2)
        maxResults: Maximum patterns to return (default 15)
        minAccuracy: Minimum accuracy percentage (default 0)
    """
    return service.get_patterns(
        ext,
        min_occurrences=min_occurrences,
        max_results=max_results,
        min_accuracy=min_accuracy,
    )


@app.get(
    f"{api_v1_prefix}/stats",
    response_model=GlobalStats,
    dependencies=[Depends(verify_api_key)],
)
def get_stats(service: FeedbackService = Depends(get_feedback_service)):
    """Get overall team learning statistics."""
    return service.get_stats()


@app.post(
    f"{api_v1_prefix}/config/resolve",
    response_model=ResolvedConfig,
    dependencies=[Depends(verify_api_key)],
)
def resolve_config(
    body: ConfigResolveRequest,
    standards: StandardsService = Depends(get_standards_service),
):
    """
    Resolve the effective rule configuration.

    Unparseable documents are treated as absent layers; the response lists
    the layers that actually contributed.
    """
    return standards.resolve_documents(central_yaml=body.central_yaml, repo_yaml=body.repo_yaml)


@app.post(
    f"{api_v1_prefix}/pr-checks",
    response_model=list[PrCheckResult],
    dependencies=[Depends(verify_api_key)],
)
def evaluate_pr_checks(
    body: PrChecksRequest,
    standards: StandardsService = Depends(get_standards_service),
):
    """Evaluate the PR-level checks of the effective configuration."""
    resolved = standards.resolve_documents(central_yaml=body.central_yaml, repo_yaml=body.repo_yaml)
    return PrCheckEvaluator().evaluate(resolved.config, body.pr)


@app.get(
    f"{api_v1_prefix}/standards",
    response_model=StandardsDocument,
    dependencies=[Depends(verify_api_key)],
)
def get_standards(registry: StandardsRegistry = Depends(get_standards_registry)):
    """
    Current central standards.

    The body carries yaml_content, so this URL can itself be configured as
    another instance's central standards location.
    """
    return registry.current()


@app.put(
    f"{api_v1_prefix}/standards",
    response_model=StandardsDocument,
    dependencies=[Depends(verify_api_key)],
)
def update_standards(
    body: StandardsUpdateRequest,
    registry: StandardsRegistry = Depends(get_standards_registry),
):
    """
    Publish a new standards version; the previous one is archived.

    Returns:
        200 with the new version, or 400 if the YAML is missing or invalid
    """
    return registry.publish(body)


@app.get(
    f"{api_v1_prefix}/standards/version/{{version}}",
    response_model=StandardsDocument,
    dependencies=[Depends(verify_api_key)],
)
def get_standards_version(
    version: str,
    registry: StandardsRegistry = Depends(get_standards_registry),
):
    """Fetch one version: "current", "latest", a number, or "v<number>"."""
    return registry.get_version(version)


@app.get(
    f"{api_v1_prefix}/standards/history",
    response_model=list[StandardsHistoryEntry],
    dependencies=[Depends(verify_api_key)],
)
def get_standards_history(registry: StandardsRegistry = Depends(get_standards_registry)):
    """Version history, newest first."""
    return registry.history()


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=3008,
        access_log=True,
        workers=1,
    )
