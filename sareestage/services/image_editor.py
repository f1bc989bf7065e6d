"""Free-form image editing with a text instruction. Edits never spend credits."""

from typing import Optional

from sareestage.config import DEFAULT_MAX_UPLOAD_BYTES, logger
from sareestage.core.errors import SareeStageError, ValidationError, WorkflowBusyError
from sareestage.core.relay_client import TryOnGenerator
from sareestage.core.upload_validator import UploadedImage, validate_upload
from sareestage.models import EditRequest

MISSING_EDIT_INPUT_MESSAGE = "Please upload an image and provide an edit instruction."
UNEXPECTED_EDIT_MESSAGE = "An unknown error occurred during editing."


class ImageEditor:
    def __init__(
        self,
        generator: TryOnGenerator,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.generator = generator
        self.max_upload_bytes = max_upload_bytes
        self.image: Optional[UploadedImage] = None
        self.result_image: Optional[str] = None
        self.error: Optional[str] = None
        self.is_busy = False

    def attach_image(
        self, data: bytes, mime_type: Optional[str], filename: Optional[str] = None
    ) -> Optional[UploadedImage]:
        if self.is_busy:
            raise WorkflowBusyError("An edit is already in progress")
        try:
            image = validate_upload(data, mime_type, filename, self.max_upload_bytes)
        except ValidationError as exc:
            self.error = exc.message
            return None

        self.image = image
        # A new source image invalidates the previous result
        self.result_image = None
        self.error = None
        return image

    async def apply(self, prompt: str) -> Optional[str]:
        """Send the edit; returns the edited image or ``None`` with ``error`` set."""
        if self.is_busy:
            raise WorkflowBusyError("An edit is already in progress")
        if self.image is None or not prompt.strip():
            self.error = MISSING_EDIT_INPUT_MESSAGE
            return None

        self.is_busy = True
        self.error = None
        self.result_image = None
        try:
            self.result_image = await self.generator.edit(
                EditRequest(image=self.image.to_base64_file(), prompt=prompt.strip())
            )
        except SareeStageError as exc:
            self.error = exc.message
        except Exception as exc:
            logger.error("Unexpected edit failure", exc_info=exc)
            self.error = UNEXPECTED_EDIT_MESSAGE
        finally:
            self.is_busy = False

        return self.result_image


__all__ = ["ImageEditor"]
