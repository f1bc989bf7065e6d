import base64

import pytest

from sareestage.core.errors import FileTooLarge, InvalidFileType
from sareestage.core.upload_validator import validate_upload

MIB = 1024 * 1024


def test_exactly_ten_mib_is_accepted():
    image = validate_upload(b"\x00" * (10 * MIB), "image/png")

    assert image.size == 10 * MIB
    assert image.mime_type == "image/png"


def test_one_byte_over_ten_mib_is_too_large():
    with pytest.raises(FileTooLarge) as exc_info:
        validate_upload(b"\x00" * (10 * MIB + 1), "image/jpeg")

    assert exc_info.value.message == "File is too large. Maximum size is 10MB."


@pytest.mark.parametrize("mime_type", ["image/gif", "image/webp", "application/pdf", "", None])
def test_unsupported_types_are_rejected(mime_type):
    with pytest.raises(InvalidFileType) as exc_info:
        validate_upload(b"GIF89a", mime_type)

    assert exc_info.value.message == "Invalid file type. Please use JPEG or PNG."


def test_type_is_checked_before_size():
    with pytest.raises(InvalidFileType):
        validate_upload(b"\x00" * (10 * MIB + 1), "image/gif")


def test_mime_type_is_normalized():
    image = validate_upload(b"\xff\xd8", "IMAGE/JPEG", "photo.jpg")

    assert image.mime_type == "image/jpeg"
    assert image.filename == "photo.jpg"


def test_custom_limit():
    with pytest.raises(FileTooLarge):
        validate_upload(b"\x00" * 11, "image/png", max_bytes=10)


def test_preview_and_wire_form():
    image = validate_upload(b"abc", "image/png")
    wire = image.to_base64_file()

    assert wire.mime_type == "image/png"
    assert base64.b64decode(wire.data) == b"abc"
    assert image.preview == f"data:image/png;base64,{wire.data}"
