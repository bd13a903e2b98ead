from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded
import asyncio
import logging
import time
import uuid

from .config import settings
from .database import create_tables, SessionLocal
from .services.exceptions import BookingEngineError, UnavailableError
from .services.hold_manager import HoldManager
from .utils.logging_config import setup_logging, get_logger, set_request_context, clear_request_context
from .utils.rate_limiter import limiter

from .routers import units, pricing, availability, holds, bookings, payments, contacts, admin, health

setup_logging(settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)
request_logger = get_logger("palmaire.requests")


async def run_hold_sweeper(interval: int):
    """Persist EXPIRED on overdue holds every `interval` seconds"""
    logger.info("Hold sweeper started (interval: %ss)", interval)
    while True:
        db = SessionLocal()
        try:
            HoldManager(db).expire_stale_holds()
        except Exception:
            logger.exception("Hold sweep failed")
        finally:
            db.close()
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting palmaire-backend (environment: %s)", settings.environment)
    logger.info("CORS origins: %s", settings.cors_origins)

    create_tables()
    logger.info("Database ready")

    sweeper_task = None
    if settings.hold_sweep_interval > 0:
        sweeper_task = asyncio.create_task(run_hold_sweeper(settings.hold_sweep_interval))

    yield

    logger.info("Shutting down palmaire-backend")
    if sweeper_task:
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            pass


app = FastAPI(
    title="Palm Aire Court Booking API",
    description="Pricing, availability, holds and bookings for Palm Aire Court",
    version="1.0.0",
    lifespan=lifespan
)

# Rate limiter state
app.state.limiter = limiter


# ================================
# CORS MIDDLEWARE - MUST BE FIRST!
# ================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        request.state.request_id = request_id
        set_request_context(request_id)
        start = time.time()
        try:
            response = await call_next(request)
            request_logger.api_request(
                request.method,
                request.url.path,
                response.status_code,
                round((time.time() - start) * 1000, 2),
            )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_request_context()


app.add_middleware(RequestIdMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


# ================================
# EXCEPTION HANDLERS
# ================================

@app.exception_handler(UnavailableError)
async def unavailable_handler(request: Request, exc: UnavailableError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "conflicts": exc.conflicts}
    )


@app.exception_handler(BookingEngineError)
async def booking_engine_error_handler(request: Request, exc: BookingEngineError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests, please try again later"}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Include routers
app.include_router(health.router)
app.include_router(units.router)
app.include_router(pricing.router)
app.include_router(availability.router)
app.include_router(holds.router)
app.include_router(bookings.router)
app.include_router(payments.router)
app.include_router(contacts.router)
app.include_router(admin.router)


@app.get("/")
async def root():
    return {
        "message": "Palm Aire Court Booking API",
        "version": "1.0.0",
        "docs": "/docs",
        "status": "running"
    }
