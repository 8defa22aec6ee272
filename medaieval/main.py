from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medaieval.api.router import router
from medaieval.observability import configure_logging, init_otel
from medaieval.settings import settings
from medaieval.wiring import get_gateway, get_repo

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed reference data and report the provider order on startup."""
    repo = app.dependency_overrides.get(get_repo, get_repo)()
    await repo.seed()
    gateway = app.dependency_overrides.get(get_gateway, get_gateway)()
    logger.info(f"{settings.app_name} starting (providers: {', '.join(gateway.provider_order()) or 'none'})")
    yield
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    init_otel(
        app=app,
        enabled=settings.observability_enabled,
        service_name=settings.otel_service_name,
        otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        console_exporter=settings.otel_exporter_console,
        sample_rate=settings.otel_sample_rate,
        environment=settings.env,
    )

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.env}

    return app


app = create_app()
