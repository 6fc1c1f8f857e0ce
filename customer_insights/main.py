# customer_insights/main.py
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from customer_insights.api.customers import router as customers_router
from customer_insights.core.logging_config import logger, setup_logging
from customer_insights.core.settings import settings
from customer_insights.errors import DatasetLoadError, DatasetUnavailable, InvalidArgument
from customer_insights.observability.metrics import latency_hist
from customer_insights.observability.metrics import router as metrics_router

# ----------------------------------------------------
# App init
# ----------------------------------------------------
app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)

setup_logging()
logger.info("startup", service="customer-insights-api", dataset=str(settings.DATASET_PATH))


# ----------------------------------------------------
# Health
# ----------------------------------------------------
@app.get("/health", include_in_schema=True)
def health() -> dict:
    return {"status": "ok"}


# ----------------------------------------------------
# Logging middleware
# ----------------------------------------------------
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start = time.time()

    request_id = request.headers.get("X-Request-ID", "unknown")
    client_ip = request.client.host if request.client else "unknown"

    bound_logger = logger.bind(
        request_id=request_id,
        ip=client_ip,
        endpoint=str(request.url.path),
        method=request.method,
    )

    bound_logger.info("request_started")
    response = await call_next(request)
    elapsed = time.time() - start
    latency_ms = round(elapsed * 1000, 2)

    route = request.scope.get("route")
    latency_hist.labels(route=getattr(route, "path", "unmatched")).observe(elapsed)

    bound_logger.bind(status_code=response.status_code, latency_ms=latency_ms).info(
        "request_finished"
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------------------------------------
# Error mapping
# ----------------------------------------------------
@app.exception_handler(InvalidArgument)
def invalid_argument_handler(request: Request, exc: InvalidArgument):
    logger.info("invalid_argument", endpoint=str(request.url.path), detail=str(exc))
    return JSONResponse({"detail": str(exc)}, status_code=400)


@app.exception_handler(DatasetUnavailable)
@app.exception_handler(DatasetLoadError)
def dataset_error_handler(request: Request, exc: Exception):
    logger.error("dataset_unavailable", endpoint=str(request.url.path), detail=str(exc))
    return JSONResponse({"detail": str(exc)}, status_code=503)


# ----------------------------------------------------
# Routers
# ----------------------------------------------------
app.include_router(customers_router)
app.include_router(metrics_router)  # /metrics
