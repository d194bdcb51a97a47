"""Configuration management for Mockup Studio."""

from enum import Enum
from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class ImageModel(str, Enum):
    """Model variants offered for model-image generation."""
    QUALITY = "quality"  # Imagen, dedicated aspect-ratio parameter
    FAST = "fast"  # Gemini image model, aspect ratio told in-prompt


class GeminiConfig(BaseModel):
    """Gemini API connection and model settings."""
    api_key: str | None = None
    quality_image_model: str = "imagen-4.0-generate-001"
    fast_image_model: str = "gemini-2.5-flash-image"
    edit_model: str = "gemini-2.5-flash-image"
    classifier_model: str = "gemini-2.5-flash-image"
    video_model: str = "veo-3.1-fast-generate-preview"
    timeout_ms: int = 300_000
    
    def model_for(self, variant: ImageModel) -> str:
        if variant is ImageModel.QUALITY:
            return self.quality_image_model
        return self.fast_image_model


class GenerationConfig(BaseModel):
    """Still-image generation settings."""
    default_model: ImageModel = ImageModel.QUALITY
    aspect_ratio: str = "3:4"
    output_mime_type: str = "image/jpeg"


class VideoConfig(BaseModel):
    """Video job settings."""
    poll_interval: float = 10.0  # seconds between operation polls, no overall timeout
    aspect_ratio: str = "9:16"  # portrait for model shots
    resolution: str = "720p"
    download_timeout: float = 120.0


class SessionConfig(BaseModel):
    """In-memory session limits for the HTTP server."""
    idle_ttl: float = 3600.0  # seconds without a request before a session is evicted
    max_sessions: int = 200


class LoggingConfig(BaseModel):
    """Logging settings."""
    level: str = "INFO"
    file: Path | None = None


class StudioConfig(BaseSettings):
    """Main application configuration."""
    
    # Sub-configs
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    video: VideoConfig = Field(default_factory=VideoConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sessions: SessionConfig = Field(default_factory=SessionConfig)
    
    # Flat alias for the key most deployments set directly
    gemini_api_key: str | None = None
    
    class Config:
        env_file = ".env"
        env_prefix = ""
        env_nested_delimiter = "__"
        extra = "ignore"
    
    @property
    def api_key(self) -> str | None:
        return self.gemini.api_key or self.gemini_api_key


def load_config() -> StudioConfig:
    """Load configuration from environment and defaults."""
    return StudioConfig()
