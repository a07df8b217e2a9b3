"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from quantara_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from quantara_gateway.api.v1 import capital, compliance, contracts, events, income, insurance, risk
from quantara_gateway.config import settings
from quantara_gateway.domain.events import EventBus
from quantara_gateway.infrastructure.database.seed import init_db, seed_demo_pools
from quantara_gateway.infrastructure.database.session import SessionLocal, engine
from quantara_gateway.infrastructure.observability.logging import log_event, setup_logging
from quantara_gateway.infrastructure.observability.metrics import record_event, record_handler_failure

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed demo pools against the configured database"""
    init_db(engine)
    if settings.seed_demo_pools:
        db = SessionLocal()
        try:
            seed_demo_pools(db)
        finally:
            db.close()
    yield


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 400 with one entry per failing field"""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path")),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid input", "details": details})


def build_event_bus() -> EventBus:
    """Event bus with the metrics and logging subscribers attached"""
    bus = EventBus(max_log_size=settings.event_log_limit * 10, on_handler_error=record_handler_failure)
    bus.subscribe_all(record_event)
    bus.subscribe_all(log_event)
    return bus


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Quantara Gateway",
        description="Income-backed credit risk scoring and contract lifecycle service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.event_bus = build_event_bus()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(risk.router, prefix="/v1", tags=["risk"])
    app.include_router(income.router, prefix="/v1", tags=["income"])
    app.include_router(contracts.router, prefix="/v1", tags=["contracts"])
    app.include_router(capital.router, prefix="/v1", tags=["capital"])
    app.include_router(insurance.router, prefix="/v1", tags=["insurance"])
    app.include_router(compliance.router, prefix="/v1", tags=["compliance"])
    app.include_router(events.router, prefix="/v1", tags=["events"])

    return app


app = create_app()
