from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus_erp.api.routes import admin, auth, faculty, health, stats, student, timetable
from campus_erp.core.config import get_settings
from campus_erp.core.exceptions import AppError
from campus_erp.core.middleware import (
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from campus_erp.db.bootstrap import ensure_runtime_schema

settings = get_settings()
logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logging.getLogger("campus_erp").setLevel(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema()
    yield


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


def _describe_validation_error(error: dict) -> str:
    message = str(error.get("msg", "Invalid request"))
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    return f"{'.'.join(location)}: {message}" if location else message


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unexpected_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(admin.router, prefix=f"{settings.api_prefix}/admin", tags=["admin"])
app.include_router(timetable.router, prefix=f"{settings.api_prefix}/timetable", tags=["timetable"])
app.include_router(faculty.router, prefix=f"{settings.api_prefix}/faculty", tags=["faculty"])
app.include_router(student.router, prefix=f"{settings.api_prefix}/student", tags=["student"])
app.include_router(stats.router, prefix=f"{settings.api_prefix}/stats", tags=["stats"])
