# app/main.py
"""
FastAPI application entry point.
Includes CORS, request timing, the API error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import vin, meetings, safe_zones, reviews, listings, favorites, messaging, fraud, health
from app.database import create_tables
from app.config import settings
from app.utils.errors import ApiError, RateLimitError
from app.utils.logger import get_logger, redact
import time

logger = get_logger(__name__)

app = FastAPI(
    title="SafeTrade Marketplace API",
    description="VIN verification, stolen-vehicle checks and safe-zone meetings for motorcycle trades.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGIN_LIST,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.info(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Error Handlers ───────────────────────────────────────────────────────────
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    headers = {"Retry-After": str(exc.retry_after)} if isinstance(exc, RateLimitError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Validation failed on {request.method} {request.url.path}: {redact(exc.errors())}")
    details = [
        {"field": ".".join(str(p) for p in err["loc"] if p != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "VALIDATION_ERROR", "message": "Invalid request data", "details": details}),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "INTERNAL_ERROR", "message": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
# meetings before safe_zones: /safe-zones/meetings/... must not match /safe-zones/{zone_id}
app.include_router(vin.router,        prefix="/api", tags=["VIN Verification"])
app.include_router(meetings.router,   prefix="/api", tags=["Meetings"])
app.include_router(safe_zones.router, prefix="/api", tags=["Safe Zones"])
app.include_router(reviews.router,    prefix="/api", tags=["Reviews"])
app.include_router(listings.router,   prefix="/api", tags=["Listings"])
app.include_router(favorites.router,  prefix="/api", tags=["Favorites"])
app.include_router(messaging.router,  prefix="/api", tags=["Messaging"])
app.include_router(fraud.router,      prefix="/api", tags=["Fraud Detection"])
app.include_router(health.router,     prefix="/api", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("SafeTrade API starting up...")
    create_tables()
    logger.info("Database tables ready")
    if not settings.NICB_API_KEY:
        if settings.IS_PRODUCTION:
            logger.error("NICB_API_KEY missing: stolen vehicle checks will report an error")
        else:
            logger.warning("NICB_API_KEY missing: using simulated stolen vehicle list")
    logger.info(f"Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("SafeTrade API shutting down...")
