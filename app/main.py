import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.v1.router import api_v1_router
from app.core.config import settings, validate_settings_for_production
from app.core.exceptions import AppError
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMiddleware, metrics_response
from app.core.middleware import RequestLoggingMiddleware
from app.core.rate_limit import limiter
from app.core.sentry import init_sentry
from app.web.router import web_router

# Configure logging before anything else
setup_logging()
init_sentry()

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"
INVALID_BODY = "Invalid request body"


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_settings_for_production()
    logger.info(
        "Starting GEO Audit (metrics provider: %s, email: %s)",
        "on" if settings.dataforseo_configured else "off",
        "on" if settings.resend_api_key else "off",
    )
    yield
    logger.info("GEO Audit shut down")


app = FastAPI(
    title="GEO Audit",
    description="Generative Engine Optimization readiness scoring for web pages",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)


@app.exception_handler(AppError)
async def _app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": INVALID_BODY})


# Log unhandled exceptions with their traceback; the client only sees a generic message
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})


# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(PrometheusMiddleware)

# CORS: allowed_origins is comma-separated
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials="*" not in _origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_v1_router)

# Web UI routes
app.include_router(web_router)


@app.get("/api/v1/health")
async def health():
    return {
        "status": "ok",
        "metrics_provider_configured": settings.dataforseo_configured,
        "email_configured": bool(settings.resend_api_key),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_response()
