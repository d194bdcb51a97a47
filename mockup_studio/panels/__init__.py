"""Input panels shown on the building screen."""

from .garment_panel import GarmentPanel
from .model_panel import GenerateMode, ModelPanel, PanelMode, UploadMode

__all__ = [
    "GarmentPanel",
    "GenerateMode",
    "ModelPanel",
    "PanelMode",
    "UploadMode",
]
