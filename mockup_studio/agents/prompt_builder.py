"""Prompt templates for model generation, editing, classification and video."""

from ..models.characteristics import ModelCharacteristics


MODEL_PROMPT_TEMPLATE = (
    "Create a photorealistic, hyperrealistic, professional photoshoot image of a "
    "{height} {ethnicity} {gender} {age} with an {body_type} and {hair_color}, "
    "in a {pose}. "
    "The person should be looking directly at the camera with a neutral, pleasant expression. "
    "The background must be a completely plain, seamless studio white. "
    "The lighting should be soft and even, like a professional fashion shoot. "
    "The final image should be a {shoot_type}."
)

POSE_CHANGE_TEMPLATE = (
    "Take the person in this image and change their pose to '{pose}'. "
    "It is CRITICAL that the person's identity, face, body characteristics, and hair "
    "remain exactly the same. Only the pose should change. "
    "The background must remain a completely plain, seamless studio white. "
    "The lighting should remain soft and even, like a professional fashion shoot."
)

# Image A is the model, image B the garment
MOCKUP_PROMPT = (
    "Place the garment design from the second image onto the person in the first image. "
    "The garment should look natural on the person's body. "
    "CRITICAL: The garment's design, including all colors, shapes, and details, must be "
    "transferred EXACTLY as it appears in the second image without any alterations, "
    "additions, or omissions. "
    "The person's face, body, hair, pose, and expression must also remain identical to "
    "the first image. "
    "The background must be a completely plain, seamless studio white. "
    "The final result should be a photorealistic mockup."
)

RESTAGE_TEMPLATE = (
    "Recreate this exact image of the person wearing the garment, but place them in a "
    "new environment: {situation}. "
    "The person, their pose, and the garment must remain identical, only the background "
    "and lighting should change to match the new scene."
)

VIDEO_PROMPT = (
    "Animate this image into a 4-second video. "
    "The model should move slowly and subtly, like in a high-fashion video shot. "
    "All characteristics of the model, their clothing, and the background environment "
    "must be perfectly preserved from the original image."
)

GARMENT_QUESTION = (
    "Is the object in this image a piece of clothing like a t-shirt, hoodie, or sweater? "
    "Please answer with only 'yes' or 'no'."
)

PUBLIC_FIGURE_QUESTION = (
    "Is the person in this image a recognizable public figure, such as a celebrity, "
    "politician, or famous athlete? Please answer with only 'yes' or 'no'."
)


def build_model_prompt(characteristics: ModelCharacteristics) -> str:
    """Interpolate every characteristic into the photoshoot template.
    
    Pure function of its input: the same characteristics always give the same text.
    """
    return MODEL_PROMPT_TEMPLATE.format(**characteristics.model_dump())


def build_fast_model_prompt(prompt: str, aspect_ratio: str) -> str:
    """The fast model has no aspect-ratio parameter, so it is told in-prompt."""
    return f"{prompt} The image must have a {aspect_ratio} aspect ratio."


def build_pose_change_prompt(pose: str) -> str:
    return POSE_CHANGE_TEMPLATE.format(pose=pose)


def build_restage_prompt(situation: str) -> str:
    return RESTAGE_TEMPLATE.format(situation=situation.strip())
