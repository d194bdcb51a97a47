"""Workflow state: flow screens, scene variants and their video jobs."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .media import ImageArtifact, VideoMedia


class FlowScreen(str, Enum):
    BUILDING = "building"
    REVIEWING = "reviewing"


class VideoStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class VideoJob(BaseModel):
    """Animation state for exactly one scene variant.
    
    idle -> pending -> ready | failed; failed -> pending on retry.
    """
    
    status: VideoStatus = VideoStatus.IDLE
    media: VideoMedia | None = None
    error: str | None = None
    attempts: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    
    @property
    def is_pending(self) -> bool:
        return self.status is VideoStatus.PENDING
    
    def start(self) -> None:
        self.status = VideoStatus.PENDING
        self.media = None
        self.error = None
        self.attempts += 1
        self.started_at = datetime.now()
        self.completed_at = None
    
    def succeed(self, media: VideoMedia) -> None:
        self.status = VideoStatus.READY
        self.media = media
        self.completed_at = datetime.now()
    
    def fail(self, message: str) -> None:
        self.status = VideoStatus.FAILED
        self.error = message
        self.completed_at = datetime.now()


@dataclass
class SceneVariant:
    """One re-staged mockup and the video job that belongs to it."""
    
    image: ImageArtifact
    description: str
    video: VideoJob = field(default_factory=VideoJob)
    created_at: datetime = field(default_factory=datetime.now)
    # Background animation task, held so it is not garbage collected mid-poll
    task: asyncio.Task | None = field(default=None, repr=False)
