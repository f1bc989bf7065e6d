"""FastAPI router for the edge relay that forwards to the generation backend."""

import httpx
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from sareestage.config import Settings, logger
from sareestage.core.cors import apply_cors_headers
from sareestage.core.errors import TransportError

from .dependencies import get_http_client, get_settings

router = APIRouter(tags=["Edge Relay"])

NON_POST_METHODS = ["GET", "PUT", "PATCH", "DELETE", "HEAD"]


def _with_cors(response: Response, request: Request, settings: Settings) -> Response:
    apply_cors_headers(
        response.headers,
        request.headers.get("origin"),
        settings.allowed_origins,
        settings.relay_allow_credentials,
    )
    return response


@router.options("/{path:path}")
async def preflight(
    path: str,
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Response:
    """Answer CORS preflight for any path."""
    return _with_cors(Response(status_code=204), request, settings)


@router.get("/api/health")
async def health_check(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Response:
    """Simple health check endpoint."""
    return _with_cors(
        JSONResponse(
            {
                "status": "healthy",
                "service": "sareestage-edge",
                "backend_configured": bool(settings.backend_url),
            }
        ),
        request,
        settings,
    )


async def _relay(
    target: str,
    request: Request,
    settings: Settings,
    http_client: httpx.AsyncClient,
) -> Response:
    if request.method != "POST":
        response = JSONResponse({"message": "Method Not Allowed"}, status_code=405)
        response.headers["Allow"] = "POST, OPTIONS"
        return _with_cors(response, request, settings)

    backend = settings.backend_url
    if not backend:
        logger.error("BACKEND_URL is not set; refusing to relay")
        return _with_cors(
            JSONResponse({"message": "BACKEND_URL not set"}, status_code=500),
            request,
            settings,
        )

    body = await request.body()
    url = f"{backend.rstrip('/')}/api/{target}"
    logger.info("Relaying request", extra={"target": target, "bytes": len(body)})

    try:
        upstream = await http_client.post(
            url,
            content=body or b"{}",
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as exc:
        logger.error(f"Relay to {url} failed: {exc}")
        return _with_cors(
            JSONResponse({"message": TransportError().message}, status_code=502),
            request,
            settings,
        )

    logger.info(
        "Relay completed",
        extra={"target": target, "status_code": upstream.status_code},
    )
    response = Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )
    return _with_cors(response, request, settings)


@router.api_route("/api/generate", methods=["POST", *NON_POST_METHODS])
async def relay_generate(
    request: Request,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Response:
    """Forward a try-on generation request to the backend."""
    return await _relay("generate", request, settings, http_client)


@router.api_route("/api/edit", methods=["POST", *NON_POST_METHODS])
async def relay_edit(
    request: Request,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Response:
    """Forward an image edit request to the backend."""
    return await _relay("edit", request, settings, http_client)
