"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from club_ar.api.middleware import RequestIDMiddleware, MetricsMiddleware
from club_ar.api.v1 import aging, settlement
from club_ar.infrastructure.observability.logging import setup_logging
from club_ar.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Club AR Settlement Engine",
        description="Invoice aging, suspension status and payment allocation previews",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # last added = first executed, so request IDs exist before metrics run
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(settlement.router, prefix="/v1", tags=["settlement"])
    app.include_router(aging.router, prefix="/v1", tags=["aging"])

    return app


app = create_app()
