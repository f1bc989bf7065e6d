"""Exception handlers that re-express every failure as a ``{message}`` body."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sareestage.config import logger
from sareestage.core.errors import SareeStageError

VALIDATION_MESSAGES = {
    "/api/generate": "Missing modelImage or spec in request body.",
    "/api/edit": "Missing image or prompt in request body.",
}


async def saree_stage_error_handler(request: Request, exc: SareeStageError) -> JSONResponse:
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        {"message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info(
        "Rejected malformed request body",
        extra={"path": request.url.path, "errors": len(exc.errors())},
    )
    message = VALIDATION_MESSAGES.get(request.url.path, "Invalid request body.")
    return JSONResponse({"message": message}, status_code=400)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SareeStageError, saree_stage_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


__all__ = ["register_exception_handlers"]
