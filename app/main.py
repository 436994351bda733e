import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from app.api.routes import appointments, service_requests
from app.api.schemas.appointment import ConflictDetail
from app.core.config import settings, _ENV_FILE
from app.core.db import init_db
from app.services.errors import (
    AlreadyAssignedError,
    AppointmentConflictError,
    DataUnavailableError,
    DispatchError,
    ForbiddenActionError,
    InvalidTransitionError,
    NotFoundError,
)

if settings.env != "production":
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info("Resolver provider profile: %s", settings.resolver_provider_profile)
    if settings.auto_create_tables:
        logger.warning("AUTO_CREATE_TABLES is set: creating tables without Alembic")
        await init_db()
    yield


app = FastAPI(
    title="Nautical Dispatch API",
    description="Provider resolution for service requests and appointment scheduling",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(service_requests.router, prefix="/api/v1")
app.include_router(appointments.router, prefix="/api/v1")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


_ERROR_STATUS: list[tuple[type[DispatchError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenActionError, status.HTTP_403_FORBIDDEN),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (AlreadyAssignedError, status.HTTP_409_CONFLICT),
    (DataUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


@app.exception_handler(DispatchError)
async def dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    headers = _cors_headers(request.headers.get("origin"))
    if isinstance(exc, AppointmentConflictError):
        detail = ConflictDetail(message=str(exc), conflicting_appointment_id=exc.existing_id)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": detail.model_dump()},
            headers=headers,
        )
    code = next((c for cls, c in _ERROR_STATUS if isinstance(exc, cls)), status.HTTP_400_BAD_REQUEST)
    if code == status.HTTP_503_SERVICE_UNAVAILABLE:
        logger.error("Directory store unavailable on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=code, content={"detail": str(exc)}, headers=headers)


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Database unreachable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Directory store unavailable"},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return actual error in JSON; include CORS so 500 responses are not blocked by browser."""
    origin = request.headers.get("origin")
    headers = _cors_headers(origin)
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )
    logger.exception("Unhandled exception: %s", exc)
    detail = f"{type(exc).__name__}: {str(exc)}"
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
        headers=headers,
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
