import traceback
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from services.extractor.pipeline import ArticlePipeline
from shared.app_logging.logger import log_error_with_context, setup_logging
from shared.config.settings import get_settings
from shared.database.session import init_db
from shared.schemas.messages import ExtractRequest
from shared.utils.health import create_extractor_health_checker

# Setup logging
logger = setup_logging("extractor")

# Create health checker
health_checker = create_extractor_health_checker()

STACK_LIMIT = 2000


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Extractor service...")
    init_db()
    logger.info("Database initialized successfully.")
    yield
    logger.info("Shutting down Extractor service...")


app = FastAPI(
    title="ReadZero Extractor",
    description="Extracts, cleans and analyzes saved articles.",
    lifespan=lifespan,
)


@lru_cache()
def get_pipeline() -> ArticlePipeline:
    return ArticlePipeline(get_settings())


@app.get("/health")
def health():
    """Comprehensive health check endpoint."""
    return health_checker.run_all_checks()


@app.get("/health/live")
def liveness_check():
    """Liveness check endpoint."""
    return {"status": "alive", "service": "extractor"}


@app.get("/health/ready")
def readiness_check():
    """Readiness check endpoint."""
    return health_checker.readiness()


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    data = generate_latest()
    logger.debug("Metrics endpoint called.")
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.post("/extract")
async def extract(payload: Dict[str, Any] = Body(...), pipeline: ArticlePipeline = Depends(get_pipeline)):
    """Process one article. The result is observed through storage, not returned."""
    article_id = payload.get("article_id") if isinstance(payload, dict) else None
    request = None
    try:
        request = ExtractRequest.model_validate(payload)
        await pipeline.process(request)
        return {"success": True, "article_id": str(request.article_id)}
    except Exception as e:
        log_error_with_context(logger, e, {"article_id": article_id, "stage": "extract"})
        if request is not None:
            pipeline.mark_failed(request, e)
        return JSONResponse(
            status_code=500,
            content={
                "error": str(e) or "Unknown error",
                "stack": traceback.format_exc()[-STACK_LIMIT:],
                "article_id": article_id,
            },
        )
