# app/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from app.api.dependencies import close_resources, get_metrics
from app.api.middleware import CorrelationIdMiddleware, RequestAuditMiddleware
from app.api.routers import health, users
from app.application.exceptions import (
    ApplicationError,
    DependencyUnavailableError,
    ResourceBusyError,
    UsernameTakenError,
    UserNotFoundError,
)
from app.config.logging import configure_logging
from app.config.settings import get_settings
from app.domain.exceptions import DomainError, DomainValidationError

# Seconds a client should wait before retrying a busy resource.
RETRY_AFTER_SECONDS = 1

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_resources()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestAudit.
app.add_middleware(RequestAuditMiddleware, metrics=get_metrics())
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(UsernameTakenError)
async def username_taken_error_handler(request, exc: UsernameTakenError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(UserNotFoundError)
async def user_not_found_error_handler(request, exc: UserNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ResourceBusyError)
async def resource_busy_error_handler(request, exc: ResourceBusyError):
    return JSONResponse(
        status_code=429,
        content={"detail": exc.message},
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


@app.exception_handler(DependencyUnavailableError)
async def dependency_unavailable_error_handler(request, exc: DependencyUnavailableError):
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /metrics, /users
app.include_router(health.router)
app.include_router(users.router, prefix="/users")
