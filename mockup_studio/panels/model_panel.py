"""Model configuration panel: generate a model from characteristics or upload one."""

import logging
import random
from enum import Enum
from typing import Callable, Union

from pydantic import BaseModel, Field

from ..agents.prompt_builder import (
    PUBLIC_FIGURE_QUESTION,
    build_model_prompt,
    build_pose_change_prompt,
)
from ..config import ImageModel
from ..errors import MockupStudioError
from ..models.characteristics import POSE_OPTIONS, ModelCharacteristics, Option
from ..models.media import ImageArtifact, UploadedFile
from ..services.gemini_client import AnswerMatch


logger = logging.getLogger(__name__)

PUBLIC_FIGURE_REJECTION = (
    "Uploading images of public figures is not permitted. Please choose another image."
)

# Called with the new model image, or None when the current one is withdrawn
ModelImageCallback = Callable[[ImageArtifact | None], None]


class PanelMode(str, Enum):
    GENERATE = "generate"
    UPLOAD = "upload"


class GenerateMode(BaseModel):
    """State while the model is described by characteristics or a custom prompt."""

    kind: PanelMode = PanelMode.GENERATE
    characteristics: ModelCharacteristics = Field(default_factory=ModelCharacteristics)
    use_custom_prompt: bool = False
    custom_prompt: str = ""
    generation_model: ImageModel = ImageModel.QUALITY
    image: ImageArtifact | None = None
    is_loading: bool = False
    error: str | None = None

    @property
    def prompt(self) -> str:
        if self.use_custom_prompt:
            return self.custom_prompt
        return build_model_prompt(self.characteristics)


class UploadMode(BaseModel):
    """State while the model comes from a user-supplied photo."""

    kind: PanelMode = PanelMode.UPLOAD
    preview: ImageArtifact | None = None
    image: ImageArtifact | None = None
    is_uploading: bool = False
    error: str | None = None


ModeState = Union[GenerateMode, UploadMode]


class ModelPanel:
    """Produces the Model Image in one of two mutually exclusive modes.

    Every accepted image (generated, re-posed or uploaded) is reported through
    ``on_model_image`` straight away, since the flow controller needs to know
    when both required images exist.
    """

    def __init__(
        self,
        gateway,
        on_model_image: ModelImageCallback,
        default_model: ImageModel = ImageModel.QUALITY,
        aspect_ratio: str = "3:4",
        pose_options: list[Option] | None = None,
        rng: random.Random | None = None,
    ):
        self.gateway = gateway
        self.on_model_image = on_model_image
        self.aspect_ratio = aspect_ratio
        self.pose_options = pose_options if pose_options is not None else POSE_OPTIONS
        self.rng = rng or random.Random()

        self.generate_state = GenerateMode(generation_model=default_model)
        self.generate_state.custom_prompt = self.generate_state.prompt
        self.upload_state = UploadMode()
        self.mode: PanelMode = PanelMode.GENERATE

    @property
    def state(self) -> ModeState:
        """The active mode's state."""
        if self.mode is PanelMode.GENERATE:
            return self.generate_state
        return self.upload_state

    @property
    def image(self) -> ImageArtifact | None:
        """The image downstream consumers see: the active mode's result."""
        return self.state.image

    @property
    def is_busy(self) -> bool:
        return self.generate_state.is_loading or self.upload_state.is_uploading

    @property
    def prompt(self) -> str:
        return self.generate_state.prompt

    # ── Mode ───────────────────────────────────────────────────

    def switch_mode(self, mode: PanelMode) -> None:
        """Activate a mode. Each mode keeps its own working image."""
        mode = PanelMode(mode)
        if mode is self.mode:
            return
        self.mode = mode
        logger.info("Model panel switched to %s mode", mode.value)
        self.on_model_image(self.state.image)

    # ── Generate mode ──────────────────────────────────────────

    def set_characteristic(self, name: str, value: str) -> None:
        """Change one characteristic.

        Raises:
            InvalidCharacteristicError: unknown attribute or value
        """
        state = self.generate_state
        state.characteristics = state.characteristics.with_value(name, value)
        if not state.use_custom_prompt:
            state.custom_prompt = build_model_prompt(state.characteristics)

    def set_custom_prompt_enabled(self, enabled: bool) -> None:
        state = self.generate_state
        state.use_custom_prompt = enabled
        if not enabled:
            state.custom_prompt = build_model_prompt(state.characteristics)

    def set_custom_prompt(self, text: str) -> None:
        self.generate_state.custom_prompt = text

    def set_generation_model(self, model: ImageModel) -> None:
        self.generate_state.generation_model = ImageModel(model)

    async def generate(self) -> None:
        """Generate a model image from the current prompt."""
        state = self.generate_state
        if state.is_loading:
            logger.debug("Generate ignored, request already pending")
            return

        state.is_loading = True
        state.error = None
        try:
            raw = await self.gateway.generate_image(
                state.prompt, state.generation_model, self.aspect_ratio
            )
            state.image = ImageArtifact.from_generated(raw)
            logger.info("Model image generated")
            self._report(PanelMode.GENERATE, state.image)
        except MockupStudioError as e:
            state.error = str(e)
        finally:
            state.is_loading = False

    def pick_new_pose(self) -> Option:
        """Pick a pose uniformly at random, never the current one.

        Raises:
            MockupStudioError: no alternative pose exists
        """
        current = self.generate_state.characteristics.pose
        others = [pose for pose in self.pose_options if pose.value != current]
        if not others:
            raise MockupStudioError("No other poses available.")
        return self.rng.choice(others)

    async def change_pose(self) -> None:
        """Re-pose the generated model, keeping its identity."""
        state = self.generate_state
        if state.is_loading:
            logger.debug("Pose change ignored, request already pending")
            return
        if state.image is None:
            state.error = "No model generated yet to change pose."
            return
        try:
            new_pose = self.pick_new_pose()
        except MockupStudioError as e:
            state.error = str(e)
            return

        state.is_loading = True
        state.error = None
        try:
            raw = await self.gateway.edit_image(
                [state.image],
                build_pose_change_prompt(new_pose.value),
                failure_message="Failed to change the model's pose.",
            )
            state.image = ImageArtifact.from_generated(raw)
            state.characteristics = state.characteristics.with_value("pose", new_pose.value)
            if not state.use_custom_prompt:
                state.custom_prompt = build_model_prompt(state.characteristics)
            logger.info("Model pose changed to %s", new_pose.value)
            self._report(PanelMode.GENERATE, state.image)
        except MockupStudioError as e:
            state.error = str(e)
        finally:
            state.is_loading = False

    # ── Upload mode ────────────────────────────────────────────

    async def upload(self, file: UploadedFile) -> None:
        """Accept a user photo unless it shows a recognizable public figure."""
        state = self.upload_state
        if state.is_uploading:
            logger.debug("Upload ignored, check already pending")
            return

        try:
            candidate = file.to_image()
        except MockupStudioError as e:
            state.error = str(e)
            return

        state.preview = candidate
        state.is_uploading = True
        state.error = None
        self.generate_state.error = None
        try:
            is_public = await self.gateway.classify_image(
                candidate,
                PUBLIC_FIGURE_QUESTION,
                match=AnswerMatch.PREFIX,
                failure_message="Failed to analyze the uploaded model image.",
            )
            if is_public:
                logger.info("Rejected upload %s: public figure", file.filename)
                state.error = PUBLIC_FIGURE_REJECTION
                state.image = None
                self._report(PanelMode.UPLOAD, None)
            else:
                state.image = candidate
                logger.info("Accepted uploaded model %s", file.filename)
                self._report(PanelMode.UPLOAD, candidate)
        except MockupStudioError as e:
            state.error = str(e)
        finally:
            state.is_uploading = False

    def _report(self, origin: PanelMode, image: ImageArtifact | None) -> None:
        # Results from an inactive mode stay local until that mode is selected
        if origin is self.mode:
            self.on_model_image(image)
