"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from kasa_gateway.api.dependencies import get_request_id
from kasa_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from kasa_gateway.api.v1 import hakedis, leave, settlements, vehicles
from kasa_gateway.domain.exceptions import (
    ConflictError,
    DomainException,
    ForbiddenError,
    InvalidStateTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from kasa_gateway.infrastructure.observability.logging import setup_logging
from kasa_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)

ERROR_STATUS = {
    ValidationError: 400,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    InvalidStateTransitionError: 409,
    PersistenceError: 500,
}


def _status_for(exc: DomainException) -> int:
    for exc_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    request_id = get_request_id(request)
    status_code = _status_for(exc)

    if status_code >= 500:
        logging.error(f"Persistence failure: {exc}", exc_info=exc, extra={"request_id": request_id})
        return JSONResponse(status_code=status_code, content={"detail": "Internal server error"})

    logging.warning(
        f"{type(exc).__name__}: {exc}",
        extra={"request_id": request_id, "path": request.url.path, "status": status_code},
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.error(f"Unexpected error: {exc}", exc_info=exc, extra={"request_id": get_request_id(request)})
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Kasa Gateway",
        description="Desk and dealer settlements, progress payments and leave accounting",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    prefix = settings.api_prefix
    app.include_router(settlements.desk_router, prefix=f"{prefix}/desk", tags=["desk"])
    app.include_router(settlements.dealer_router, prefix=f"{prefix}/bayi-dolum", tags=["bayi-dolum"])
    app.include_router(hakedis.router, prefix=f"{prefix}/hakedis", tags=["hakedis"])
    app.include_router(vehicles.router, prefix=f"{prefix}/vehicles", tags=["vehicles"])
    app.include_router(leave.router, prefix=f"{prefix}/leave", tags=["leave"])

    return app


app = create_app()
