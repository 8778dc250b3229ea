import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import SERVICE_NAME, get_cors_allowed_origins, get_service_version
from core.api import register_exception_handlers
from core.http.session import cleanup_session
from routing.health import router as health_router
from routing.registry import ProviderRegistry, build_registry
from routing.routes import router as routing_router

# Basic logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    origins = get_cors_allowed_origins()
    if origins:
        logger.info("CORS configured with specific origins: %s", origins)
        return origins
    # Development fallback - allow localhost and common dev ports
    origins = [
        "http://localhost:3000",
        "http://localhost:8080",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8080",
    ]
    logger.warning(
        "CORS_ALLOWED_ORIGINS not set. Using development defaults: %s",
        origins,
    )
    return origins


def create_app(registry: ProviderRegistry | None = None) -> FastAPI:
    """Build the application.

    A prebuilt registry (e.g. one holding fake adapters) skips the
    configuration-driven registry built at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "registry", None) is None:
            app.state.registry = build_registry()
        logger.info("%s %s startup complete", SERVICE_NAME, get_service_version())
        try:
            yield
        finally:
            await cleanup_session()
            logger.info("Application shutdown completed successfully")

    app = FastAPI(
        title="SpinRoute Routing",
        version=get_service_version(),
        lifespan=lifespan,
    )
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, logger)
    app.include_router(health_router)
    app.include_router(routing_router)
    return app


app = create_app()
