"""Data models for Mockup Studio."""

from .characteristics import CHARACTERISTIC_OPTIONS, ModelCharacteristics, Option, POSE_OPTIONS
from .media import ImageArtifact, MediaDownload, UploadedFile, VideoMedia
from .session import FlowScreen, SceneVariant, VideoJob, VideoStatus

__all__ = [
    "CHARACTERISTIC_OPTIONS",
    "ModelCharacteristics",
    "Option",
    "POSE_OPTIONS",
    "ImageArtifact",
    "MediaDownload",
    "UploadedFile",
    "VideoMedia",
    "FlowScreen",
    "SceneVariant",
    "VideoJob",
    "VideoStatus",
]
