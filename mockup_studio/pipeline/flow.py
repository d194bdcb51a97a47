"""Top-level flow: build inputs, then review and restage the mockup."""

import logging

from ..config import StudioConfig
from ..errors import FlowTransitionError
from ..models.media import ImageArtifact
from ..models.session import FlowScreen
from ..panels.garment_panel import GarmentPanel
from ..panels.model_panel import ModelPanel
from ..services.credentials import CredentialProvider
from .composition import CompositionStage
from .restaging import RestagingGallery


logger = logging.getLogger(__name__)

MISSING_INPUTS_MESSAGE = "Please generate a model and upload a valid garment to continue."


class FlowController:
    """Two-screen state machine gating navigation between building and reviewing.

    Flow:
    1. BUILDING: the model and garment panels report their images here
    2. proceed() once both exist -> REVIEWING, composing the mockup on entry
    3. go_back() -> BUILDING with everything derived discarded

    Nothing survives a trip back. Panels are rebuilt, and results that
    arrive late from the discarded panels are ignored.
    """

    def __init__(self, gateway, credentials: CredentialProvider, config: StudioConfig | None = None):
        self.gateway = gateway
        self.credentials = credentials
        self.config = config or StudioConfig()

        self.screen = FlowScreen.BUILDING
        self.model_image: ImageArtifact | None = None
        self.garment_image: ImageArtifact | None = None
        self.composition: CompositionStage | None = None
        self.gallery: RestagingGallery | None = None

        self._epoch = 0
        self._build_panels()

    def _build_panels(self) -> None:
        epoch = self._epoch

        def on_model_image(image: ImageArtifact | None) -> None:
            if epoch != self._epoch:
                logger.debug("Ignoring model image from a discarded panel")
                return
            self.model_image = image

        def on_garment_image(image: ImageArtifact | None) -> None:
            if epoch != self._epoch:
                logger.debug("Ignoring garment image from a discarded panel")
                return
            self.garment_image = image

        self.model_panel = ModelPanel(
            self.gateway,
            on_model_image,
            default_model=self.config.generation.default_model,
            aspect_ratio=self.config.generation.aspect_ratio,
        )
        self.garment_panel = GarmentPanel(self.gateway, on_garment_image)

    @property
    def can_proceed(self) -> bool:
        return (
            self.screen is FlowScreen.BUILDING
            and self.model_image is not None
            and self.garment_image is not None
        )

    async def proceed(self) -> None:
        """Move to the reviewing screen and compose the mockup.

        Raises:
            FlowTransitionError: already reviewing, or an input is missing
        """
        if self.screen is FlowScreen.REVIEWING:
            raise FlowTransitionError("Already reviewing a mockup.")
        if not self.can_proceed:
            raise FlowTransitionError(MISSING_INPUTS_MESSAGE)

        stage = CompositionStage(self.gateway, self.model_image, self.garment_image)
        gallery = RestagingGallery(self.gateway, self.credentials)
        self.composition = stage
        self.gallery = gallery
        self.screen = FlowScreen.REVIEWING
        logger.info("Flow -> reviewing")

        mockup = await stage.compose()
        gallery.set_mockup(mockup)

    def go_back(self) -> None:
        """Return to the building screen, discarding every image and result."""
        self._epoch += 1
        self.screen = FlowScreen.BUILDING
        self.model_image = None
        self.garment_image = None
        self.composition = None
        self.gallery = None
        self._build_panels()
        logger.info("Flow -> building (session state discarded)")
