import json
from typing import Any, Dict

import httpx

# Import from centralized config
from sareestage.config import GEMINI_API_BASE, GEMINI_MODEL, logger
from sareestage.core.errors import (
    GenerationError,
    RateLimited,
    SafetyBlocked,
    SareeStageError,
    TransportError,
    UpstreamError,
)
from sareestage.core.request_builder import (
    GenerationPayload,
    build_edit_payload,
    build_generation_payload,
)
from sareestage.models import EditRequest, GenerateRequest

SAFETY_FINISH_REASONS = {
    "SAFETY",
    "IMAGE_SAFETY",
    "PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
}

BAD_REQUEST_MESSAGE = (
    "There was a problem with the request, possibly due to an issue with an "
    "uploaded image. Please try again with a different image."
)


class GeminiClient:
    """Thin async wrapper over the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        model: str = GEMINI_MODEL,
        api_base: str = GEMINI_API_BASE,
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.model = model
        self.api_base = api_base.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    async def generate_saree_image(self, request: GenerateRequest) -> str:
        """
        Generate a saree try-on image.

        Args:
            request: Model photo, saree specification and optional tweak text

        Returns:
            Base64-encoded image data

        Raises:
            SafetyBlocked, RateLimited, GenerationError, UpstreamError, TransportError
        """
        payload = build_generation_payload(
            request.model_image, request.spec, request.tweak_prompt or ""
        )

        logger.info("=" * 80)
        logger.info("VIRTUAL TRY-ON PROMPT:")
        logger.info(payload.text)
        logger.info("=" * 80)

        return await self._generate(payload, label="generation")

    async def edit_image(self, request: EditRequest) -> str:
        """Apply a free-text edit instruction to a single image."""
        payload = build_edit_payload(request.image, request.prompt)
        logger.info(f"Image edit requested: {request.prompt[:200]}")
        return await self._generate(payload, label="edit")

    async def _generate(self, payload: GenerationPayload, label: str) -> str:
        logger.info(
            f"Calling Gemini {label}",
            extra={"model": self.model, "image_parts": payload.image_count},
        )
        try:
            response = await self.http_client.post(
                self.endpoint,
                json=payload.to_request(),
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
            )
            response.raise_for_status()
            api_result = response.json()
        except httpx.HTTPStatusError as exc:
            raise _map_status_error(exc) from exc
        except httpx.RequestError as exc:
            logger.error(f"Network error calling Gemini API: {exc}")
            raise TransportError() from exc
        except json.JSONDecodeError as exc:
            logger.error(f"Gemini API returned a non-JSON body: {exc}")
            raise UpstreamError() from exc

        return extract_image_data(api_result)


def _map_status_error(exc: httpx.HTTPStatusError) -> SareeStageError:
    status = exc.response.status_code
    logger.error(f"Gemini API HTTP error: {status} - {exc.response.text[:500]}")

    if status == 429:
        return RateLimited()
    if status == 400:
        return GenerationError(BAD_REQUEST_MESSAGE, status_code=400)
    if "SAFETY" in exc.response.text:
        return SafetyBlocked()
    return UpstreamError()


def extract_image_data(api_result: Dict[str, Any]) -> str:
    """
    Pull the first inline image out of a ``generateContent`` response.

    Raises:
        SafetyBlocked: The prompt or candidate was stopped by safety filters
        GenerationError: No image was returned for another reason
    """
    block_reason = (api_result.get("promptFeedback") or {}).get("blockReason")
    if block_reason:
        logger.warning(f"Gemini blocked the prompt: {block_reason}")
        raise SafetyBlocked()

    candidates = api_result.get("candidates") or []
    if not candidates:
        logger.error("Gemini API returned no candidates")
        raise GenerationError()

    candidate = candidates[0]
    # Check both camelCase and snake_case formats
    for part in (candidate.get("content") or {}).get("parts") or []:
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            return inline["data"]

    finish_reason = candidate.get("finishReason")
    if finish_reason in SAFETY_FINISH_REASONS:
        logger.warning(f"Gemini stopped for safety reasons: {finish_reason}")
        raise SafetyBlocked()

    logger.error(
        f"Gemini API did not return an image. Full response: "
        f"{json.dumps(api_result, indent=2)[:1000]}"
    )
    raise GenerationError()


__all__ = ["GeminiClient", "extract_image_data", "SAFETY_FINISH_REASONS"]
