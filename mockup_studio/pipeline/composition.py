"""Composition stage: puts the garment onto the model."""

import logging

from ..agents.prompt_builder import MOCKUP_PROMPT
from ..errors import MockupStudioError
from ..models.media import ImageArtifact


logger = logging.getLogger(__name__)


class CompositionStage:
    """Composes one Mockup Image from a Model Image and a Garment Image.

    Each ``compose()`` call is a fresh gateway request; nothing is cached
    between stage entries, even for an unchanged pair.
    """

    def __init__(self, gateway, model_image: ImageArtifact, garment_image: ImageArtifact):
        self.gateway = gateway
        self.model_image = model_image
        self.garment_image = garment_image

        self.mockup: ImageArtifact | None = None
        self.is_loading = False
        self.error: str | None = None

    async def compose(self) -> ImageArtifact | None:
        """Run the composition once. Failures are recorded, never retried."""
        if self.is_loading:
            logger.debug("Compose ignored, request already pending")
            return None

        self.is_loading = True
        self.error = None
        try:
            raw = await self.gateway.edit_image(
                [self.model_image, self.garment_image],
                MOCKUP_PROMPT,
                failure_message="Failed to create the mockup.",
            )
            self.mockup = ImageArtifact.from_generated(raw)
            logger.info("Mockup composed")
        except MockupStudioError as e:
            self.error = str(e)
        finally:
            self.is_loading = False
        return self.mockup
