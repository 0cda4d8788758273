# arcflow/main.py

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arcflow.api.dependencies import close_clients
from arcflow.api.middleware import AuditTriggerMiddleware, CorrelationIdMiddleware
from arcflow.api.routers import chat, health
from arcflow.application.exceptions import AllProvidersExhaustedError, ApplicationError
from arcflow.config.logging import configure_logging
from arcflow.config.settings import get_settings
from arcflow.domain.exceptions import DomainError

logger = logging.getLogger(__name__)

# Missing credentials fail here, at startup, not on the first request.
settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_clients()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CORS -> CorrelationId -> AuditTrigger.
app.add_middleware(AuditTriggerMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request, exc: RequestValidationError):
    return JSONResponse(status_code=422, content={"error": "Invalid request body", "detail": exc.errors()})


@app.exception_handler(AllProvidersExhaustedError)
async def providers_exhausted_error_handler(request, exc: AllProvidersExhaustedError):
    return JSONResponse(status_code=503, content={"error": exc.message})


@app.exception_handler(asyncio.TimeoutError)
async def turn_timeout_error_handler(request, exc: asyncio.TimeoutError):
    logger.error("turn_timeout", extra={"path": request.url.path})
    return JSONResponse(status_code=504, content={"error": "Conversation turn timed out"})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


# Routers: /health, /api/chat
app.include_router(health.router)
app.include_router(chat.router, prefix="/api")
