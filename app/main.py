import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging

from app.api.v1.router import router as api_v1_router
from app.core.exceptions import (
    InterestTriggerNotFoundError,
    InvalidDefinitionError,
    InvalidReorderError,
    InvalidSubstatusError,
    LeadNotFoundError,
    TransitionRuleNotFoundError,
    TransitionRunCooldownError,
)
from app.core.config import settings as app_settings
from app.core.rate_limit import limiter
from app.services.auto_transitions import start_auto_transition_loop
from app.core.database import AsyncSessionLocal

# Configure logging
logging.basicConfig(level=app_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application-level background tasks."""
    if not app_settings.AUTO_TRANSITIONS_ENABLED:
        logger.info("Automatic temperature transitions disabled")
        yield
        return

    transitions_task = asyncio.create_task(
        start_auto_transition_loop(AsyncSessionLocal)
    )
    logger.info("Background auto-transition task scheduled")
    yield
    # Shutdown: cancel the background task
    transitions_task.cancel()
    try:
        await transitions_task
    except asyncio.CancelledError:
        logger.info("Background auto-transition task stopped")


app = FastAPI(
    title="Dental CRM Lead Automation",
    description="Interest triggers and temperature transition rules for clinic leads",
    version="0.1.0",
    lifespan=lifespan,
)

# Attach rate limiter state so slowapi middleware can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware – restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


@app.exception_handler(LeadNotFoundError)
async def lead_not_found_handler(request: Request, exc: LeadNotFoundError):
    logger.warning("Lead not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "lead_not_found"},
    )


@app.exception_handler(InterestTriggerNotFoundError)
async def trigger_not_found_handler(
    request: Request, exc: InterestTriggerNotFoundError
):
    logger.warning("Interest trigger not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "interest_trigger_not_found"},
    )


@app.exception_handler(TransitionRuleNotFoundError)
async def rule_not_found_handler(request: Request, exc: TransitionRuleNotFoundError):
    logger.warning("Transition rule not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "transition_rule_not_found"},
    )


@app.exception_handler(InvalidReorderError)
async def invalid_reorder_handler(request: Request, exc: InvalidReorderError):
    logger.warning("Invalid reorder: %s", exc.detail)
    return JSONResponse(
        status_code=400,
        content={"detail": exc.detail, "type": "invalid_reorder"},
    )


@app.exception_handler(InvalidDefinitionError)
async def invalid_definition_handler(request: Request, exc: InvalidDefinitionError):
    logger.warning("Invalid definition: %s", exc.detail)
    return JSONResponse(
        status_code=422,
        content={"detail": exc.detail, "type": "invalid_definition"},
    )


@app.exception_handler(InvalidSubstatusError)
async def invalid_substatus_handler(request: Request, exc: InvalidSubstatusError):
    logger.warning("Invalid substatus: %s", exc.detail)
    return JSONResponse(
        status_code=409,
        content={"detail": exc.detail, "type": "invalid_substatus"},
    )


@app.exception_handler(TransitionRunCooldownError)
async def transition_cooldown_handler(
    request: Request, exc: TransitionRunCooldownError
):
    logger.info("Manual transition run throttled: %s", exc.detail)
    return JSONResponse(
        status_code=429,
        content={"detail": exc.detail, "type": "transition_run_cooldown"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": jsonable_encoder(exc.errors()),
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected internal error occurred. Please try again later.",
            "type": "internal_server_error",
        },
    )
