from contextlib import asynccontextmanager
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from launchpad import __version__
from launchpad.api.dependencies import get_claim_engine
from launchpad.api.routers.analytics import router as analytics_router
from launchpad.api.routers.fees import router as fees_router
from launchpad.api.routers.launch import router as launch_router
from launchpad.api.routers.tokens import router as tokens_router
from launchpad.config import settings
from launchpad.services.autoclaim import AutoClaimScheduler
from launchpad.services.error_handler import ErrorHandler
from launchpad.utils.exceptions import (
    AllocationError,
    DeploymentFault,
    DeploymentRejected,
    IdentityError,
    LaunchpadError,
    RateLimitError,
    TokenNotFoundError,
    ValidationError,
)
from launchpad.utils.logging import setup_logging
from launchpad.utils.timeutils import isoformat_utc

setup_logging()
logger = structlog.get_logger()
error_handler = ErrorHandler()

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.AUTO_CLAIM_ENABLED:
        scheduler = AutoClaimScheduler(get_claim_engine())
        scheduler.start()
    app.state.auto_claim = scheduler
    logger.info("Launchpad API started", version=__version__, auto_claim=scheduler is not None)
    yield
    if scheduler is not None:
        await scheduler.stop()


app = FastAPI(
    title="Launchpad",
    description="Agent token launchpad API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(launch_router, tags=["Launch"])
app.include_router(tokens_router, tags=["Tokens"])
app.include_router(fees_router, tags=["Fees"])
app.include_router(analytics_router, tags=["Analytics"])


def _error_response(request: Request, status_code: int, detail: str, **extra) -> JSONResponse:
    content = {
        "detail": detail,
        "status": status_code,
        "request_id": getattr(request.state, "request_id", None),
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    return _error_response(request, 400, exc.message, errors=exc.errors, warnings=exc.warnings)


@app.exception_handler(AllocationError)
async def allocation_exception_handler(request: Request, exc: AllocationError):
    return _error_response(request, 400, exc.message)


@app.exception_handler(RateLimitError)
async def rate_limit_exception_handler(request: Request, exc: RateLimitError):
    return _error_response(
        request,
        429,
        exc.message,
        next_allowed_at=isoformat_utc(exc.next_allowed_at),
        remaining_ms=exc.remaining_ms,
        cooldown=exc.cooldown,
    )


@app.exception_handler(IdentityError)
async def identity_exception_handler(request: Request, exc: IdentityError):
    return _error_response(request, 403, exc.message)


@app.exception_handler(TokenNotFoundError)
async def not_found_exception_handler(request: Request, exc: TokenNotFoundError):
    return _error_response(request, 404, "Token not found")


@app.exception_handler(DeploymentRejected)
async def deployment_rejected_handler(request: Request, exc: DeploymentRejected):
    return _error_response(request, 400, exc.message, error_code=exc.error_code)


@app.exception_handler(DeploymentFault)
async def deployment_fault_handler(request: Request, exc: DeploymentFault):
    return _error_response(request, 502, exc.message, error_code=exc.error_code, retryable=exc.retryable)


@app.exception_handler(LaunchpadError)
async def launchpad_exception_handler(request: Request, exc: LaunchpadError):
    return _error_response(request, 400, error_handler.sanitize(exc.message), error_code=exc.error_code)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        request_id=getattr(request.state, "request_id", None),
        error=str(exc),
    )
    return _error_response(request, 500, "Internal server error")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
    request.state.request_id = request_id

    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers[REQUEST_ID_HEADER] = request_id

    logger.info(
        "Request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        request_id=request_id,
        process_time=round(process_time, 3),
    )
    return response


@app.get("/")
async def root():
    return {"message": "Agent token launchpad API", "version": __version__}


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "launchpad",
        "version": settings.SERVICE_VERSION,
        "chain_id": settings.CHAIN_ID,
        "platform_fee_bps": settings.PLATFORM_FEE_BPS,
    }
