"""Review-screen stages and the top-level flow controller."""

from .composition import CompositionStage
from .flow import FlowController
from .restaging import RestagingGallery

__all__ = [
    "CompositionStage",
    "FlowController",
    "RestagingGallery",
]
