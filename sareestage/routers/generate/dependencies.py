"""FastAPI dependencies shared across generation endpoints."""

from fastapi import Request

from sareestage.core.errors import UpstreamMisconfigured
from sareestage.core.gemini import GeminiClient


async def get_gemini_client(request: Request) -> GeminiClient:
    """Return the Gemini client created during application startup."""
    client = getattr(request.app.state, "gemini", None)
    if client is None:
        raise UpstreamMisconfigured("Server configuration error: GEMINI_KEY not set")
    return client
