from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sareestage.config import Settings, logger
from sareestage.core.cors import ALLOW_HEADERS, ALLOW_METHODS
from sareestage.core.errors import UpstreamMisconfigured
from sareestage.core.gemini import GeminiClient

from .routers import generate_router
from .routers.handlers import register_exception_handlers


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the generation backend; a missing provider key aborts startup."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.gemini_key:
            logger.critical("GEMINI_KEY environment variable not set.")
            raise UpstreamMisconfigured("GEMINI_KEY environment variable not set.")

        async with httpx.AsyncClient(
            timeout=settings.gemini_timeout, transport=transport
        ) as http_client:
            app.state.gemini = GeminiClient(
                api_key=settings.gemini_key,
                http_client=http_client,
                model=settings.gemini_model,
                api_base=settings.gemini_api_base,
            )
            logger.info(f"Gemini client ready for model {settings.gemini_model}")
            yield
            app.state.gemini = None

    # Initialize FastAPI application
    app = FastAPI(
        title="SareeStage API",
        description="AI-powered virtual saree try-on service",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.gemini = None

    app.include_router(generate_router)
    register_exception_handlers(app)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=ALLOW_METHODS.split(","),
        allow_headers=ALLOW_HEADERS.split(","),
    )

    return app


app = create_app()

logger.info("SareeStage API initialized successfully")


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
