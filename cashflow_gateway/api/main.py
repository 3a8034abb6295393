"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from cashflow_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cashflow_gateway.api.v1 import entities, progression, projection
from cashflow_gateway.infrastructure.database.models import Base
from cashflow_gateway.infrastructure.database.session import engine
from cashflow_gateway.infrastructure.observability.logging import setup_logging
from cashflow_gateway.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Cashflow Gateway",
        description="Personal finance entities and cashflow projection service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    if settings.create_tables:
        Base.metadata.create_all(bind=engine)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(entities.router, prefix="/v1", tags=["entities"])
    app.include_router(projection.router, prefix="/v1", tags=["projection"])
    app.include_router(progression.router, prefix="/v1", tags=["month-progression"])

    return app


app = create_app()
