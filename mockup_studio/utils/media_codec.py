"""Conversions between raw bytes, base64 payloads, and data URLs.

The browser sends files as ``data:<mime>;base64,<payload>`` strings and the
Gemini SDK wants raw bytes; everything in between travels as base64 text.
"""

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from ..errors import InvalidImageError


INVALID_IMAGE_MESSAGE = "Please select a valid image file (PNG, JPG, etc.)."

# Pillow formats that are plain JPEG on the wire (MPO: multi-picture phone photos)
JPEG_VARIANTS = {"JPEG", "MPO"}


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


def decode_base64(payload: str) -> bytes:
    """Decode a base64 payload, raising InvalidImageError on garbage."""
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError("File data is not valid base64.") from e


def to_data_url(payload: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{payload}"


def parse_data_url(data: str) -> tuple[str | None, bytes]:
    """Split a data URL into (mime type, raw bytes).
    
    Bare base64 (no ``data:`` prefix) is accepted and yields a None mime type.
    """
    if data.startswith("data:"):
        # Remove data URL prefix (e.g., "data:image/png;base64,")
        try:
            header, encoded = data.split(",", 1)
        except ValueError as e:
            raise InvalidImageError("Malformed data URL.") from e
        mime_type = header[len("data:"):].split(";", 1)[0] or None
        return mime_type, decode_base64(encoded)
    return None, decode_base64(data)


def is_image_mime(mime_type: str | None) -> bool:
    return bool(mime_type) and mime_type.lower().startswith("image/")


def sniff_image_mime(data: bytes) -> str | None:
    """Identify an image from its header, returning its MIME type or None.
    
    Only the header is read; pixel data is never decoded.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format in JPEG_VARIANTS:
                return "image/jpeg"
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None
