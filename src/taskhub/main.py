"""Entry point for the TaskHub FastAPI application."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .deps import SettingsDependency
from .errors import register_exception_handlers
from .schemas.system import RootResponse


def _normalise_prefix(raw_prefix: str) -> str:
    prefix = raw_prefix.strip()
    if prefix and not prefix.startswith("/"):
        prefix = f"/{prefix}"
    prefix = prefix.rstrip("/")
    return "" if prefix == "/" else prefix


def create_app(settings: Settings | None = None) -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    settings = settings or get_settings()
    configure_logging(settings)

    router_prefix = _normalise_prefix(settings.api_prefix)
    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Project and task management backend with role-based access.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=f"{router_prefix}/openapi.json",
    )
    application.state.settings = settings

    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    application.include_router(api_router, prefix=router_prefix)
    application.include_router(health_router)

    @application.get(
        f"{router_prefix}/metadata",
        response_model=RootResponse,
        tags=["system"],
        summary="Service metadata",
    )
    async def read_api_metadata(current: SettingsDependency) -> RootResponse:
        return RootResponse(
            name=current.project_name,
            environment=current.environment,
            version=current.version,
            api_prefix=current.api_prefix,
        )

    register_exception_handlers(application)
    return application


app = create_app()


def run() -> None:
    """Console entry point serving the application with uvicorn."""

    settings = get_settings()
    uvicorn.run(
        "taskhub.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )


if __name__ == "__main__":
    run()
