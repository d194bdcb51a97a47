"""FastAPI server for Mockup Studio.

The browser front end drives one session per tab:
- build inputs: configure/generate or upload a model, upload a garment
- proceed: compose the mockup
- review: restage the mockup into scenes and animate them into videos
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mockup_studio import __version__
from mockup_studio.config import ImageModel, StudioConfig, load_config
from mockup_studio.errors import FlowTransitionError, InvalidCharacteristicError, InvalidImageError
from mockup_studio.models import CHARACTERISTIC_OPTIONS, MediaDownload, Option, UploadedFile
from mockup_studio.models.media import file_extension
from mockup_studio.models.session import FlowScreen
from mockup_studio.panels import PanelMode
from mockup_studio.services import GeminiGateway
from mockup_studio.utils.logger import setup_logging

from .schemas import (
    CharacteristicUpdate,
    CredentialRequest,
    CustomPromptRequest,
    GenerateRequest,
    ModeRequest,
    OptionsView,
    SessionView,
    UploadRequest,
    VariantRequest,
)
from .sessions import SessionRegistry, StudioSession


logger = logging.getLogger(__name__)

MODEL_CHOICES = [
    Option(label="Imagen 4.0 (Highest Quality)", value=ImageModel.QUALITY.value),
    Option(label="Gemini 2.5 Flash (Fast)", value=ImageModel.FAST.value),
]


# Initialized on first use
_config: StudioConfig | None = None
_gateway: GeminiGateway | None = None
_registry: SessionRegistry | None = None


def get_config() -> StudioConfig:
    global _config
    if _config is None:
        _config = load_config()  # Loads from .env automatically via pydantic-settings
    return _config


def get_gateway() -> GeminiGateway:
    """Get or create the gateway instance."""
    global _gateway
    if _gateway is None:
        config = get_config()
        _gateway = GeminiGateway(
            config.gemini.model_copy(update={"api_key": config.api_key}),
            generation_config=config.generation,
            video_config=config.video,
        )
    return _gateway


def get_registry() -> SessionRegistry:
    global _registry
    if _registry is None:
        _registry = SessionRegistry(get_gateway(), get_config())
    return _registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(get_config().logging)
    yield
    if _gateway is not None:
        await _gateway.close()


app = FastAPI(
    title="Mockup Studio API",
    description="AI apparel mockups: model generation, garment validation, scene restaging and video",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FlowTransitionError)
async def flow_transition_error(request: Request, exc: FlowTransitionError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InvalidCharacteristicError)
async def invalid_characteristic_error(request: Request, exc: InvalidCharacteristicError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(InvalidImageError)
async def invalid_image_error(request: Request, exc: InvalidImageError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def _session(session_id: str) -> StudioSession:
    try:
        return get_registry().get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")


def _view(session: StudioSession) -> SessionView:
    return SessionView.from_flow(session.session_id, session.flow)


def _reviewing(session: StudioSession):
    flow = session.flow
    if flow.screen is not FlowScreen.REVIEWING or flow.gallery is None:
        raise HTTPException(status_code=409, detail="No mockup is being reviewed.")
    return flow.gallery


def _download(media: MediaDownload) -> Response:
    return Response(
        content=media.content,
        media_type=media.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{media.filename}"'},
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Mockup Studio API", "version": __version__}


@app.get("/health")
async def health():
    """Detailed health check."""
    gemini_ok = await get_gateway().check_connection()
    return {
        "status": "ok" if gemini_ok else "degraded",
        "gemini": "connected" if gemini_ok else "disconnected",
        "sessions": len(get_registry()),
    }


@app.get("/api/options", response_model=OptionsView)
async def options():
    return OptionsView(characteristics=CHARACTERISTIC_OPTIONS, models=MODEL_CHOICES)


# ── Sessions ───────────────────────────────────────────────────

@app.post("/api/sessions", response_model=SessionView, status_code=201)
async def create_session():
    return _view(get_registry().create())


@app.get("/api/sessions/{session_id}", response_model=SessionView)
async def get_session(session_id: str):
    return _view(_session(session_id))


@app.delete("/api/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str):
    _session(session_id)
    get_registry().discard(session_id)
    return Response(status_code=204)


@app.post("/api/sessions/{session_id}/credential", response_model=SessionView)
async def select_credential(session_id: str, request: CredentialRequest):
    session = _session(session_id)
    session.credentials.select(request.api_key)
    return _view(session)


# ── Model panel ────────────────────────────────────────────────

@app.patch("/api/sessions/{session_id}/model/characteristics", response_model=SessionView)
async def update_characteristic(session_id: str, request: CharacteristicUpdate):
    session = _session(session_id)
    session.flow.model_panel.set_characteristic(request.name, request.value)
    return _view(session)


@app.post("/api/sessions/{session_id}/model/custom-prompt", response_model=SessionView)
async def update_custom_prompt(session_id: str, request: CustomPromptRequest):
    session = _session(session_id)
    panel = session.flow.model_panel
    panel.set_custom_prompt_enabled(request.enabled)
    if request.enabled and request.prompt is not None:
        panel.set_custom_prompt(request.prompt)
    return _view(session)


@app.post("/api/sessions/{session_id}/model/mode", response_model=SessionView)
async def switch_mode(session_id: str, request: ModeRequest):
    session = _session(session_id)
    session.flow.model_panel.switch_mode(request.mode)
    return _view(session)


@app.post("/api/sessions/{session_id}/model/generate", response_model=SessionView)
async def generate_model(session_id: str, request: GenerateRequest):
    session = _session(session_id)
    panel = session.flow.model_panel
    if request.model is not None:
        panel.set_generation_model(request.model)
    await panel.generate()
    return _view(session)


@app.post("/api/sessions/{session_id}/model/pose", response_model=SessionView)
async def change_pose(session_id: str):
    session = _session(session_id)
    await session.flow.model_panel.change_pose()
    return _view(session)


@app.post("/api/sessions/{session_id}/model/upload", response_model=SessionView)
async def upload_model(session_id: str, request: UploadRequest):
    session = _session(session_id)
    if session.flow.model_panel.mode is not PanelMode.UPLOAD:
        raise HTTPException(status_code=409, detail="Switch the model panel to upload mode first.")
    file = UploadedFile.from_data_url(request.data_url, filename=request.filename)
    await session.flow.model_panel.upload(file)
    return _view(session)


@app.get("/api/sessions/{session_id}/model/download")
async def download_model(session_id: str):
    image = _session(session_id).flow.model_panel.image
    if image is None:
        raise HTTPException(status_code=404, detail="No model image yet.")
    return _download(MediaDownload(
        filename=f"model{file_extension(image.mime_type)}", mime_type=image.mime_type, content=image.to_bytes()
    ))


# ── Garment panel ──────────────────────────────────────────────

@app.post("/api/sessions/{session_id}/garment/upload", response_model=SessionView)
async def upload_garment(session_id: str, request: UploadRequest):
    session = _session(session_id)
    file = UploadedFile.from_data_url(request.data_url, filename=request.filename)
    await session.flow.garment_panel.upload(file)
    return _view(session)


# ── Flow ───────────────────────────────────────────────────────

@app.post("/api/sessions/{session_id}/proceed", response_model=SessionView)
async def proceed(session_id: str):
    session = _session(session_id)
    await session.flow.proceed()
    return _view(session)


@app.post("/api/sessions/{session_id}/back", response_model=SessionView)
async def go_back(session_id: str):
    session = _session(session_id)
    session.flow.go_back()
    return _view(session)


# ── Review ─────────────────────────────────────────────────────

@app.get("/api/sessions/{session_id}/mockup/download")
async def download_mockup(session_id: str):
    media = _reviewing(_session(session_id)).download_mockup()
    if media is None:
        raise HTTPException(status_code=404, detail="No mockup yet.")
    return _download(media)


@app.post("/api/sessions/{session_id}/variants", response_model=SessionView)
async def add_variant(session_id: str, request: VariantRequest):
    session = _session(session_id)
    await _reviewing(session).add_variant(request.description)
    return _view(session)


@app.post("/api/sessions/{session_id}/variants/{index}/animate", response_model=SessionView, status_code=202)
async def animate_variant(session_id: str, index: int):
    """Start (or retry) a video job; poll GET /api/sessions/{id} for its status."""
    session = _session(session_id)
    try:
        _reviewing(session).start_animation(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _view(session)


@app.get("/api/sessions/{session_id}/variants/{index}/download")
async def download_variant(session_id: str, index: int):
    try:
        media = _reviewing(_session(session_id)).download(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _download(media)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
