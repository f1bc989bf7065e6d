"""Validation of user-supplied images before they join a try-on specification."""

import base64
from dataclasses import dataclass
from typing import Optional

from sareestage.config import DEFAULT_MAX_UPLOAD_BYTES, logger
from sareestage.core.errors import FileTooLarge, InvalidFileType
from sareestage.models import Base64File

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/png"})


@dataclass(frozen=True)
class UploadedImage:
    data: bytes
    mime_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def preview(self) -> str:
        """Data URI used to show the upload back to the user."""
        return f"data:{self.mime_type};base64,{self.to_base64_file().data}"

    def to_base64_file(self) -> Base64File:
        return Base64File(
            mime_type=self.mime_type,
            data=base64.b64encode(self.data).decode("utf-8"),
        )


def validate_upload(
    data: bytes,
    mime_type: Optional[str],
    filename: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> UploadedImage:
    """
    Check an upload's declared type and size.

    Raises:
        InvalidFileType: The MIME type is not JPEG or PNG
        FileTooLarge: The payload exceeds ``max_bytes``
    """
    if (mime_type or "").lower() not in ALLOWED_MIME_TYPES:
        logger.info(
            "Rejected upload with unsupported type",
            extra={"mime_type": mime_type, "upload_filename": filename},
        )
        raise InvalidFileType()

    if len(data) > max_bytes:
        logger.info(
            "Rejected oversized upload",
            extra={"size": len(data), "max_bytes": max_bytes, "upload_filename": filename},
        )
        raise FileTooLarge(
            f"File is too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
        )

    return UploadedImage(data=data, mime_type=mime_type.lower(), filename=filename)


__all__ = ["ALLOWED_MIME_TYPES", "UploadedImage", "validate_upload"]
