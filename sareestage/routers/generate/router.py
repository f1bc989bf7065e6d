"""FastAPI router for the saree generation backend."""

from fastapi import APIRouter, Depends, HTTPException

from sareestage.config import logger
from sareestage.core.errors import SareeStageError
from sareestage.core.gemini import GeminiClient
from sareestage.models import EditRequest, GenerateRequest, ImageResponse, MessageResponse

from .dependencies import get_gemini_client

router = APIRouter(prefix="/api", tags=["Saree Try-On"])

ERROR_RESPONSES = {
    400: {"model": MessageResponse},
    422: {"model": MessageResponse},
    429: {"model": MessageResponse},
    500: {"model": MessageResponse},
    502: {"model": MessageResponse},
}


@router.post("/generate", response_model=ImageResponse, responses=ERROR_RESPONSES)
async def generate_saree(
    payload: GenerateRequest,
    gemini: GeminiClient = Depends(get_gemini_client),
) -> ImageResponse:
    """Generate the main saree try-on image."""
    logger.info(
        "Saree generation request received",
        extra={
            "tweaked": bool(payload.tweak_prompt),
            "has_body_image": payload.spec.body.image is not None,
            "has_pallu_image": payload.spec.pallu.image is not None,
            "blouse_type": payload.spec.blouse.type,
        },
    )

    try:
        image_data = await gemini.generate_saree_image(payload)
    except SareeStageError as exc:
        logger.warning(f"Generation failed: {exc.message}")
        raise
    except Exception:
        logger.error("Unexpected error in generation request", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred during generation.",
        )

    logger.info("Saree generation completed")
    return ImageResponse(image_data=image_data)


@router.post("/edit", response_model=ImageResponse, responses=ERROR_RESPONSES)
async def edit_image(
    payload: EditRequest,
    gemini: GeminiClient = Depends(get_gemini_client),
) -> ImageResponse:
    """Edit an image with a text prompt."""
    logger.info("Image edit request received")

    try:
        image_data = await gemini.edit_image(payload)
    except SareeStageError as exc:
        logger.warning(f"Edit failed: {exc.message}")
        raise
    except Exception:
        logger.error("Unexpected error in edit request", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred during editing.",
        )

    return ImageResponse(image_data=image_data)


@router.get("/health")
async def health_check() -> dict:
    """Simple health check endpoint."""

    return {
        "status": "healthy",
        "service": "sareestage-backend",
        "version": "1.0.0",
    }
