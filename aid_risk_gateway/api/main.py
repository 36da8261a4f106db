"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from aid_risk_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from aid_risk_gateway.api.v1 import evaluate, history, report, review
from aid_risk_gateway.infrastructure.observability.logging import setup_logging
from aid_risk_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Aid Risk Gateway",
        description="Category-aware spending risk scoring for aid disbursement",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(evaluate.router, prefix="/v1", tags=["evaluation"])
    app.include_router(review.router, prefix="/v1", tags=["review"])
    app.include_router(history.router, prefix="/v1", tags=["history"])
    app.include_router(report.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
