"""Garment panel: accepts a garment photo and checks it really is clothing."""

import logging
from typing import Callable

from ..agents.prompt_builder import GARMENT_QUESTION
from ..errors import MockupStudioError
from ..models.media import ImageArtifact, UploadedFile
from ..services.gemini_client import AnswerMatch


logger = logging.getLogger(__name__)

NOT_A_GARMENT_MESSAGE = "This image does not appear to be a garment. Please upload another."

GarmentImageCallback = Callable[[ImageArtifact | None], None]


class GarmentPanel:
    """Produces a validated Garment Image.

    Only one garment is current at a time. A new upload withdraws whatever was
    forwarded before, and a garment is forwarded only after the classifier
    says it is clothing.
    """

    def __init__(self, gateway, on_garment_image: GarmentImageCallback):
        self.gateway = gateway
        self.on_garment_image = on_garment_image

        self.filename: str | None = None
        self.preview: ImageArtifact | None = None
        self.image: ImageArtifact | None = None
        self.is_valid: bool | None = None  # None until the classifier answers
        self.is_loading = False
        self.error: str | None = None

    async def upload(self, file: UploadedFile) -> None:
        if self.is_loading:
            logger.debug("Garment upload ignored, validation already pending")
            return

        try:
            candidate = file.to_image()
        except MockupStudioError as e:
            # Local rejection: nothing sent, current garment untouched
            self.error = str(e)
            return

        self.filename = file.filename
        self.preview = candidate
        self.is_valid = None
        self.error = None
        if self.image is not None:
            self.image = None
            self.on_garment_image(None)

        self.is_loading = True
        try:
            valid = await self.gateway.classify_image(
                candidate,
                GARMENT_QUESTION,
                match=AnswerMatch.CONTAINS,
                failure_message="Failed to validate the garment image.",
            )
            self.is_valid = valid
            if valid:
                self.image = candidate
                logger.info("Garment %s validated", file.filename)
                self.on_garment_image(candidate)
            else:
                logger.info("Garment %s rejected: not clothing", file.filename)
                self.error = NOT_A_GARMENT_MESSAGE
        except MockupStudioError as e:
            self.error = str(e)
            self.is_valid = False
        finally:
            self.is_loading = False
