"""Request and response bodies for the Mockup Studio API."""

from pydantic import BaseModel

from mockup_studio.config import ImageModel
from mockup_studio.models import FlowScreen, ImageArtifact, ModelCharacteristics, Option, VideoStatus
from mockup_studio.panels import GarmentPanel, ModelPanel, PanelMode
from mockup_studio.pipeline import FlowController


# ── Requests ───────────────────────────────────────────────────

class CharacteristicUpdate(BaseModel):
    """Set one model characteristic."""
    name: str
    value: str


class CustomPromptRequest(BaseModel):
    enabled: bool
    prompt: str | None = None


class ModeRequest(BaseModel):
    mode: PanelMode


class GenerateRequest(BaseModel):
    model: ImageModel | None = None


class UploadRequest(BaseModel):
    """A local file read by the browser."""
    data_url: str  # Base64 data URL, e.g. "data:image/png;base64,..."
    filename: str = "upload"


class CredentialRequest(BaseModel):
    api_key: str


class VariantRequest(BaseModel):
    description: str


# ── Responses ──────────────────────────────────────────────────

def _data_url(image: ImageArtifact | None) -> str | None:
    return image.data_url if image else None


class GenerateModeView(BaseModel):
    characteristics: ModelCharacteristics
    use_custom_prompt: bool
    custom_prompt: str
    prompt: str
    generation_model: ImageModel
    image: str | None
    is_loading: bool
    error: str | None


class UploadModeView(BaseModel):
    preview: str | None
    image: str | None
    is_uploading: bool
    error: str | None


class ModelPanelView(BaseModel):
    mode: PanelMode
    generate: GenerateModeView
    upload: UploadModeView

    @classmethod
    def from_panel(cls, panel: ModelPanel) -> "ModelPanelView":
        gen = panel.generate_state
        up = panel.upload_state
        return cls(
            mode=panel.mode,
            generate=GenerateModeView(
                characteristics=gen.characteristics,
                use_custom_prompt=gen.use_custom_prompt,
                custom_prompt=gen.custom_prompt,
                prompt=gen.prompt,
                generation_model=gen.generation_model,
                image=_data_url(gen.image),
                is_loading=gen.is_loading,
                error=gen.error,
            ),
            upload=UploadModeView(
                preview=_data_url(up.preview),
                image=_data_url(up.image),
                is_uploading=up.is_uploading,
                error=up.error,
            ),
        )


class GarmentPanelView(BaseModel):
    filename: str | None
    preview: str | None
    is_valid: bool | None
    is_loading: bool
    error: str | None

    @classmethod
    def from_panel(cls, panel: GarmentPanel) -> "GarmentPanelView":
        return cls(
            filename=panel.filename,
            preview=_data_url(panel.preview),
            is_valid=panel.is_valid,
            is_loading=panel.is_loading,
            error=panel.error,
        )


class VideoJobView(BaseModel):
    status: VideoStatus
    error: str | None
    attempts: int


class SceneVariantView(BaseModel):
    index: int
    description: str
    image: str
    video: VideoJobView
    download_url: str


class ReviewView(BaseModel):
    mockup: str | None
    is_composing: bool
    error: str | None
    scene_prompt: str
    is_reimagining: bool
    reimagine_error: str | None
    variants: list[SceneVariantView]


class SessionView(BaseModel):
    session_id: str
    screen: FlowScreen
    can_proceed: bool
    has_model_image: bool
    has_garment_image: bool
    model_panel: ModelPanelView
    garment_panel: GarmentPanelView
    review: ReviewView | None = None

    @classmethod
    def from_flow(cls, session_id: str, flow: FlowController) -> "SessionView":
        review = None
        if flow.composition is not None and flow.gallery is not None:
            gallery = flow.gallery
            variants = []
            for index, variant in enumerate(gallery.variants):
                job = variant.video
                variants.append(SceneVariantView(
                    index=index,
                    description=variant.description,
                    image=variant.image.data_url,
                    video=VideoJobView(status=job.status, error=job.error, attempts=job.attempts),
                    # Serves the video once ready, the still before that
                    download_url=f"/api/sessions/{session_id}/variants/{index}/download",
                ))
            review = ReviewView(
                mockup=_data_url(flow.composition.mockup),
                is_composing=flow.composition.is_loading,
                error=flow.composition.error,
                scene_prompt=gallery.scene_prompt,
                is_reimagining=gallery.is_reimagining,
                reimagine_error=gallery.error,
                variants=variants,
            )

        return cls(
            session_id=session_id,
            screen=flow.screen,
            can_proceed=flow.can_proceed,
            has_model_image=flow.model_image is not None,
            has_garment_image=flow.garment_image is not None,
            model_panel=ModelPanelView.from_panel(flow.model_panel),
            garment_panel=GarmentPanelView.from_panel(flow.garment_panel),
            review=review,
        )


class OptionsView(BaseModel):
    """Everything the browser needs to render the characteristic dropdowns."""
    characteristics: dict[str, list[Option]]
    models: list[Option]
