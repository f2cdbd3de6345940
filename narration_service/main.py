import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from narration_common import (
    HealthState,
    configure_logging,
    ensure_trace_id,
    get_trace_id,
    reset_trace_id,
    set_trace_id,
)
from narration_service.api.router import api_router
from narration_service.core.config import settings
from narration_service.domain.narration import CatalogError
from narration_service.services import poi_catalog

logger = configure_logging("narration-service", settings.LOG_LEVEL)
health_state = HealthState("narration-service")


@asynccontextmanager
async def lifespan(app: FastAPI):
    boot_token = set_trace_id("bootstrap")
    health_state.mark_not_ready("initialising")
    logger.info("Starting %s", settings.PROJECT_NAME)
    logger.info("Environment: %s", settings.ENVIRONMENT)
    logger.info(
        "Proximity radius %.1fm, re-trigger cooldown %.0fs",
        settings.PROXIMITY_RADIUS_M,
        settings.RETRIGGER_COOLDOWN_SECONDS,
    )

    try:
        count = poi_catalog.load(settings.CATALOG_PATH)
    except CatalogError as exc:
        health_state.mark_not_ready(str(exc))
        logger.error("Catalog unavailable: %s", exc)
    else:
        logger.info("✓ Loaded %s POIs", count)
        health_state.mark_ready()

    try:
        yield
    finally:
        health_state.mark_not_ready("shutting down")
        logger.info("Shutting down %s", settings.PROJECT_NAME)
        reset_trace_id(boot_token)


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Proximity-triggered multilingual narration for Vinh Khanh food street",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def trace_middleware(request: Request, call_next):
    trace_id = ensure_trace_id(headers=request.headers.items())
    token = set_trace_id(trace_id)
    try:
        response = await call_next(request)
    finally:
        reset_trace_id(token)
    response.headers.setdefault("X-Trace-Id", trace_id)
    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    logger.info(
        "%s %s - status=%s duration=%.3fs",
        request.method,
        request.url.path,
        response.status_code,
        duration,
    )

    return response


Instrumentator().instrument(app).expose(app, endpoint="/metrics")

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/healthz")
async def health_check() -> JSONResponse:
    return JSONResponse(
        health_state.liveness_payload(),
        headers={"X-Trace-Id": get_trace_id()},
    )


@app.get("/readyz")
async def readiness_check() -> JSONResponse:
    ready = health_state.ready and poi_catalog.is_loaded
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE
    payload = {
        "service": health_state.service,
        "ready": ready,
        "pois": len(poi_catalog),
    }
    if not ready and health_state.message:
        payload["message"] = health_state.message
    return JSONResponse(payload, status_code=status_code, headers={"X-Trace-Id": get_trace_id()})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "narration_service.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
    )
