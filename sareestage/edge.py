from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI

from sareestage.config import Settings, logger

from .routers import relay_router
from .routers.handlers import register_exception_handlers


def create_edge_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the stateless edge relay in front of the generation backend."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.backend_url:
            # Not fatal: every relayed request answers 500 until it is configured
            logger.error("BACKEND_URL is not set; relay requests will fail")
        async with httpx.AsyncClient(
            timeout=settings.relay_timeout, transport=transport
        ) as http_client:
            app.state.http_client = http_client
            yield

    app = FastAPI(
        title="SareeStage Edge Relay",
        description="Forwards try-on requests to the SareeStage backend",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(relay_router)
    register_exception_handlers(app)

    return app


app = create_edge_app()

logger.info("SareeStage edge relay initialized successfully")


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
