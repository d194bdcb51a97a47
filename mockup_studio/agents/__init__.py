"""Prompt templates sent to the Gemini gateway."""

from .prompt_builder import (
    GARMENT_QUESTION,
    MOCKUP_PROMPT,
    PUBLIC_FIGURE_QUESTION,
    VIDEO_PROMPT,
    build_fast_model_prompt,
    build_model_prompt,
    build_pose_change_prompt,
    build_restage_prompt,
)

__all__ = [
    "GARMENT_QUESTION",
    "MOCKUP_PROMPT",
    "PUBLIC_FIGURE_QUESTION",
    "VIDEO_PROMPT",
    "build_fast_model_prompt",
    "build_model_prompt",
    "build_pose_change_prompt",
    "build_restage_prompt",
]
