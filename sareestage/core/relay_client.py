"""
Async client for the edge relay, used by the try-on workflow and image editor.

Non-2xx answers are turned back into the error taxonomy so callers can tell a
safety block from rate limiting or a plain failure.
"""

from typing import Optional, Protocol

import httpx

from sareestage.config import RELAY_TIMEOUT, logger
from sareestage.core.errors import (
    GenerationError,
    RateLimited,
    SafetyBlocked,
    SareeStageError,
    TransportError,
    UpstreamMisconfigured,
)
from sareestage.models import EditRequest, GenerateRequest


class TryOnGenerator(Protocol):
    async def generate(self, request: GenerateRequest) -> str: ...

    async def edit(self, request: EditRequest) -> str: ...


class RelayClient:
    def __init__(
        self,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = RELAY_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def generate(self, request: GenerateRequest) -> str:
        return await self._post(
            "/api/generate", request.model_dump(by_alias=True, exclude_none=True)
        )

    async def edit(self, request: EditRequest) -> str:
        return await self._post("/api/edit", request.model_dump(by_alias=True))

    async def _post(self, path: str, body: dict) -> str:
        url = f"{self.base_url}{path}"
        try:
            response = await self.http_client.post(url, json=body)
        except httpx.HTTPError as exc:
            logger.error(f"Network error calling relay {url}: {exc}")
            raise TransportError(f"Network error: {exc}") from exc

        if response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            image_data = body.get("imageData") if isinstance(body, dict) else None
            if not image_data:
                logger.error("Relay response did not contain image data")
                raise GenerationError("Model did not return an image.")
            return image_data

        raise _error_from_response(response)


def _error_from_response(response: httpx.Response) -> SareeStageError:
    message: Optional[str] = None
    try:
        body = response.json()
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
    except ValueError:
        message = None

    status = response.status_code
    logger.warning(
        "Relay returned an error",
        extra={"status_code": status, "relay_message": message},
    )

    if status == 429:
        return RateLimited(message)
    if status == 422:
        return SafetyBlocked(message)
    if status == 500 and message and "not set" in message:
        return UpstreamMisconfigured(message)
    return GenerationError(message, status_code=status)


__all__ = ["RelayClient", "TryOnGenerator"]
