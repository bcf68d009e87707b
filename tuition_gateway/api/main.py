"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from tuition_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from tuition_gateway.api.v1 import grades, late_fees, students
from tuition_gateway.infrastructure.observability.logging import setup_logging
from tuition_gateway.config import load_fee_policy, settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Tuition Gateway",
        description="Late fees, account status and payment reminders for school billing",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Loaded once; handlers read it through get_fee_policy
    app.state.fee_policy = load_fee_policy(settings)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(late_fees.router, prefix="/v1", tags=["late-fees"])
    app.include_router(students.router, prefix="/v1", tags=["students"])
    app.include_router(grades.router, prefix="/v1", tags=["grades"])

    return app


app = create_app()
