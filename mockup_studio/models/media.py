"""Media artifacts passed between panels, stages, and the gateway."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from ..errors import InvalidImageError
from ..utils.media_codec import (
    INVALID_IMAGE_MESSAGE,
    decode_base64,
    encode_base64,
    is_image_mime,
    parse_data_url,
    sniff_image_mime,
    to_data_url,
)


class ImageArtifact(BaseModel):
    """An image as a base64 payload plus its MIME type.
    
    Immutable: a role's image is replaced, never edited in place.
    """
    model_config = ConfigDict(frozen=True)
    
    data: str = Field(description="Base64-encoded image bytes, no data URL prefix")
    mime_type: str = "image/jpeg"
    
    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str = "image/jpeg") -> "ImageArtifact":
        return cls(data=encode_base64(raw), mime_type=mime_type)
    
    @classmethod
    def from_generated(cls, raw: bytes) -> "ImageArtifact":
        """Wrap bytes returned by the gateway, labelled by their actual format."""
        return cls.from_bytes(raw, sniff_image_mime(raw) or "image/jpeg")
    
    @classmethod
    def from_data_url(cls, data_url: str) -> "ImageArtifact":
        mime_type, raw = parse_data_url(data_url)
        return cls.from_bytes(raw, mime_type or "image/jpeg")
    
    def to_bytes(self) -> bytes:
        return decode_base64(self.data)
    
    @property
    def data_url(self) -> str:
        return to_data_url(self.data, self.mime_type)


class UploadedFile(BaseModel):
    """A user-selected local file, as received from the browser."""
    
    filename: str = "upload"
    mime_type: str | None = None
    content: bytes
    
    @classmethod
    def from_data_url(cls, data_url: str, filename: str = "upload") -> "UploadedFile":
        mime_type, raw = parse_data_url(data_url)
        return cls(filename=filename, mime_type=mime_type, content=raw)
    
    def to_image(self) -> ImageArtifact:
        """Validate locally and convert to an ImageArtifact.
        
        Raises:
            InvalidImageError: declared type is not an image, or the bytes
                are not a recognisable image format
        """
        if self.mime_type is not None and not is_image_mime(self.mime_type):
            raise InvalidImageError(INVALID_IMAGE_MESSAGE)
        detected = sniff_image_mime(self.content)
        if detected is None:
            raise InvalidImageError(INVALID_IMAGE_MESSAGE)
        return ImageArtifact.from_bytes(self.content, detected)


class VideoMedia(BaseModel):
    """A fetched, locally playable video."""
    
    uri: str
    content: bytes
    mime_type: str = "video/mp4"


def file_extension(mime_type: str) -> str:
    """".jpeg" for image/jpeg, ".mp4" for video/mp4 and so on."""
    return "." + mime_type.split("/", 1)[-1].split("+", 1)[0]


@dataclass
class MediaDownload:
    """Bytes ready to hand to the browser as a file download."""
    filename: str
    mime_type: str
    content: bytes
