from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Optional, Union
import logging

from . import config
from .api.events import router as events_router
from .api.health import router as health_router
from .api.ingest import router as ingest_router
from .api.prometheus import router as prometheus_router
from .api.response_builders import build_pulse_error_response
from .api.stats import router as stats_router
from .errors import PulseError
from .logging_config import setup_logging
from .middleware import TracingMiddleware
from .services.broadcast import BroadcastHub
from .services.ingestion import IngestionGateway
from .services.registry import TenantRegistry
from .shops import ShopDirectory

logger = logging.getLogger("pulse")

@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("Pulse API starting up", extra={
        "version": config.API_VERSION,
        "config_dir": str(getattr(application.state.shops, "config_dir", "-")),
        "component": "api",
    })
    try:
        yield
    finally:
        # Close every live stream so no handler writes after shutdown
        registry: TenantRegistry = application.state.registry
        hub: BroadcastHub = application.state.hub
        closed = 0
        for token in registry.tokens():
            store = registry.get_or_create(token)
            for channel in store.subscribers():
                if hub.unsubscribe(store, channel, reason="shutdown"):
                    closed += 1
        logger.info("Pulse API shutting down", extra={
            "tenants": len(registry),
            "subscribers_closed": closed,
            "component": "api",
        })

def create_app(
    config_dir: Union[str, Path, None] = None,
    registry: Optional[TenantRegistry] = None,
    shops: Optional[Callable] = None,
    clock: Optional[Callable] = None,
    sse_keepalive: Optional[float] = None,
) -> FastAPI:
    """
    Build the application with its own tenant registry.

    Everything request handlers share lives on ``app.state`` so tests can run
    several isolated apps in one process.
    """
    application = FastAPI(title="Pulse API", version=config.API_VERSION, lifespan=lifespan)

    application.state.registry = registry if registry is not None else TenantRegistry()
    application.state.hub = BroadcastHub()
    application.state.shops = shops if shops is not None else ShopDirectory(config_dir)
    gateway_kwargs = {"clock": clock} if clock else {}
    application.state.gateway = IngestionGateway(application.state.registry, application.state.hub,
                                                 **gateway_kwargs)
    application.state.sse_keepalive = sse_keepalive or config.SSE_KEEPALIVE_SECONDS

    @application.exception_handler(PulseError)
    async def pulse_error_handler(request: Request, exc: PulseError):
        return build_pulse_error_response(exc)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(TracingMiddleware)

    application.include_router(health_router)
    application.include_router(stats_router)
    application.include_router(events_router)
    application.include_router(ingest_router)
    application.include_router(prometheus_router)
    return application

setup_logging()
app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting Pulse API on port {config.APP_PORT}")
    uvicorn.run(
        "pulse.main:app",
        host="0.0.0.0",
        port=config.APP_PORT,
        reload=False,
        access_log=True
    )
