"""FastAPI dependencies for the edge relay."""

import httpx
from fastapi import Request

from sareestage.config import Settings


async def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client
