# ========================================
# jobboard/main.py
# ========================================

import logging
import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobboard.config import settings
from jobboard.database import close_mongo_connection, connect_to_mongo
from jobboard.dependencies import shutdown_notifier
from jobboard.utils.errors import ApiError, ConflictError, ValidationError
from jobboard.utils.logging_config import setup_logging
from jobboard.utils.rate_limit import api_rate_limit, limiter, rate_limit_handler

from jobboard.routes.user import router as user_router
from jobboard.routes.password_reset import router as password_reset_router
from jobboard.routes.job import router as job_router
from jobboard.routes.application import router as application_router

setup_logging(settings.log_dir, settings.log_level)
logger = logging.getLogger("jobboard")


# ===========================
# DATABASE EVENTS
# ===========================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to MongoDB on startup, release resources on shutdown."""
    await connect_to_mongo()
    yield
    shutdown_notifier()
    await close_mongo_connection()


# ===========================
# CREATE FASTAPI APP
# ===========================

app = FastAPI(
    title="JobBoard API",
    description="Job board backend: accounts, job postings and the application workflow",
    version="1.0.0",
    lifespan=lifespan,
    dependencies=[Depends(api_rate_limit)],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    if not settings.is_development:
        return await call_next(request)
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed)
    return response


# ===========================
# ERROR HANDLERS
# ===========================

def error_body(status: str, message: str, exc: Exception) -> dict:
    body = {"status": status, "message": message}
    if settings.is_development:
        body["error"] = f"{type(exc).__name__}: {exc}"
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    """Operational errors: the message is safe to show as-is."""
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.status, exc.message, exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path"))
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    error = ValidationError(f"Validation Error: {', '.join(messages)}")
    return await api_error_handler(request, error)


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    key_value = (exc.details or {}).get("keyValue") or {}
    field = next(iter(key_value), "Record")
    return await api_error_handler(request, ConflictError(f"{field} already exists"))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = f"Not found - {request.url.path}" if exc.status_code == 404 else str(exc.detail)
    status = "fail" if exc.status_code < 500 else "error"
    return JSONResponse(status_code=exc.status_code, content=error_body(status, message, exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Programming or other unknown error: don't leak details in production."""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    if settings.is_development:
        content = error_body("error", str(exc), exc)
    else:
        content = {"status": "error", "message": "Something went wrong!"}
    return JSONResponse(status_code=500, content=content)


# ===========================
# REGISTER ROUTERS
# ===========================

app.include_router(user_router)
app.include_router(password_reset_router)
app.include_router(job_router)
app.include_router(application_router)


# ===========================
# ROOT ENDPOINTS
# ===========================

@app.get("/")
async def root():
    return {
        "success": True,
        "message": "Welcome to JobBoard API",
        "version": "1.0.0",
        "documentation": "/docs",
    }


@app.get("/api/health")
async def health_check():
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
    }
