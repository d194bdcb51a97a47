# Test fixtures and configuration
import io
import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from PIL import Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mockup_studio.models import ImageArtifact, UploadedFile  # noqa: E402


def _image_bytes(fmt: str, color: str = "white") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """Small valid PNG image bytes."""
    return _image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    """Small valid JPEG image bytes."""
    return _image_bytes("JPEG", "red")


@pytest.fixture
def mpo_bytes():
    """Multi-picture JPEG, the format many phone cameras write."""
    buffer = io.BytesIO()
    first = Image.new("RGB", (4, 4), "blue")
    first.save(buffer, format="MPO", save_all=True, append_images=[Image.new("RGB", (4, 4), "green")])
    return buffer.getvalue()


@pytest.fixture
def png_upload(png_bytes):
    return UploadedFile(filename="garment.png", mime_type="image/png", content=png_bytes)


@pytest.fixture
def text_upload():
    """A non-image file a user might drop by mistake."""
    return UploadedFile(filename="notes.txt", mime_type="text/plain", content=b"hello")


@pytest.fixture
def model_image(jpeg_bytes):
    return ImageArtifact.from_bytes(jpeg_bytes, "image/jpeg")


@pytest.fixture
def garment_image(png_bytes):
    return ImageArtifact.from_bytes(png_bytes, "image/png")


@pytest.fixture
def gateway(jpeg_bytes):
    """Gateway double whose calls all succeed with a JPEG payload."""
    fake = MagicMock()
    fake.generate_image = AsyncMock(return_value=jpeg_bytes)
    fake.edit_image = AsyncMock(return_value=jpeg_bytes)
    fake.classify_image = AsyncMock(return_value=False)
    fake.animate = AsyncMock()
    fake.check_connection = AsyncMock(return_value=True)
    return fake


@pytest.fixture
def credentials():
    """Credential provider with a key already selected."""
    provider = MagicMock()
    provider.has_selected_key = AsyncMock(return_value=True)
    provider.select_key = AsyncMock()
    provider.current_key = MagicMock(return_value="test-key")
    return provider
