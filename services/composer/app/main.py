from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from services.composer.app.digest_utils import DigestComposer, get_db
from services.composer.app.schema import DigestRunOut
from shared.app_logging.logger import setup_logging
from shared.config.settings import get_settings
from shared.database.session import init_db
from shared.schemas.messages import DigestRequest
from shared.utils.health import create_composer_health_checker

# Setup logging
logger = setup_logging("composer")

# Create health checker
health_checker = create_composer_health_checker()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Composer ready")
    yield
    logger.info("Composer shut down cleanly")


app = FastAPI(title="ReadZero Composer", lifespan=lifespan)


@lru_cache()
def get_composer() -> DigestComposer:
    return DigestComposer(get_settings())


@app.get("/health")
def health():
    """Comprehensive health check endpoint."""
    return health_checker.run_all_checks()


@app.get("/health/live")
def liveness_check():
    """Liveness check endpoint."""
    return {"status": "alive", "service": "composer"}


@app.get("/health/ready")
def readiness_check():
    """Readiness check endpoint."""
    return health_checker.readiness()


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.post("/digest", response_model=DigestRunOut)
async def digest(
    request: Optional[DigestRequest] = None,
    db=Depends(get_db),
    composer: DigestComposer = Depends(get_composer),
):
    """Generate digests for one user or every user."""
    request = request or DigestRequest()
    try:
        logger.info(f"Starting digest run: {request.model_dump(exclude_none=True)}")
        results = await composer.run_digests(db, request)
        return DigestRunOut(success=True, results=results)
    except Exception as e:
        logger.exception("Unexpected error in /digest: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e)})
