"""Gemini API client: image generation, editing, classification and video."""

import asyncio
import logging
from enum import Enum
from typing import Any

import httpx
from google import genai
from google.genai import types

from ..agents.prompt_builder import build_fast_model_prompt
from ..config import GeminiConfig, GenerationConfig, ImageModel, VideoConfig
from ..errors import CredentialError, GatewayError, ModelDeclinedError
from ..models.media import ImageArtifact, VideoMedia


logger = logging.getLogger(__name__)

# Phrases the API uses when a key is wrong or lacks access
CREDENTIAL_FAULT_PHRASES = ("Requested entity was not found.", "API key not valid")

INVALID_KEY_MESSAGE = (
    "API key is invalid or not found. Please select a valid key and ensure the "
    "'Generative Language API' is enabled on your Cloud project."
)


class AnswerMatch(str, Enum):
    """How a yes/no answer is read.

    PREFIX only accepts answers starting with "yes", so "no, but yes..." is a no.
    CONTAINS accepts "yes" anywhere in the answer.
    """
    PREFIX = "prefix"
    CONTAINS = "contains"


def is_affirmative(answer: str, match: AnswerMatch) -> bool:
    text = answer.strip().lower()
    if match is AnswerMatch.PREFIX:
        return text.startswith("yes")
    return "yes" in text


def _image_part(image: ImageArtifact) -> types.Part:
    return types.Part.from_bytes(data=image.to_bytes(), mime_type=image.mime_type)


class GeminiGateway:
    """Client for the Gemini, Imagen and Veo APIs.

    Every method either returns a usable payload or raises GatewayError
    (or one of its subclasses) carrying a message fit to show the user.
    """

    def __init__(
        self,
        config: GeminiConfig,
        generation_config: GenerationConfig | None = None,
        video_config: VideoConfig | None = None,
    ):
        self.config = config
        self.generation = generation_config or GenerationConfig()
        self.video = video_config or VideoConfig()
        self._clients: dict[str, genai.Client] = {}
        self._http: httpx.AsyncClient | None = None

    def client_for(self, api_key: str | None = None) -> genai.Client:
        """Get or create the SDK client for a key (server key by default)."""
        key = api_key or self.config.api_key
        if not key:
            raise CredentialError(INVALID_KEY_MESSAGE)
        if key not in self._clients:
            self._clients[key] = genai.Client(
                api_key=key,
                http_options=types.HttpOptions(timeout=self.config.timeout_ms),
            )
        return self._clients[key]

    @property
    def http(self) -> httpx.AsyncClient:
        """Get or create the HTTP client used for video downloads."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=self.video.download_timeout,
                follow_redirects=True,
            )
        return self._http

    async def check_connection(self) -> bool:
        """Verify the API key works and the edit model is reachable."""
        try:
            await self.client_for().aio.models.get(model=self.config.edit_model)
            return True
        except Exception as e:
            logger.warning("Gemini connection check failed: %s", e)
            return False

    # ── Still images ───────────────────────────────────────────

    async def generate_image(
        self,
        prompt: str,
        model: ImageModel = ImageModel.QUALITY,
        aspect_ratio: str | None = None,
    ) -> bytes:
        """Generate a model image from a text prompt.

        Args:
            prompt: Full photoshoot prompt
            model: QUALITY uses Imagen's aspect-ratio parameter; FAST is told in-prompt
            aspect_ratio: e.g. "3:4"; defaults to the generation config

        Returns:
            Raw image bytes (JPEG for Imagen)
        """
        aspect_ratio = aspect_ratio or self.generation.aspect_ratio
        model_name = self.config.model_for(model)
        logger.info("Generating model image with %s (%s)", model_name, aspect_ratio)

        try:
            if model is ImageModel.QUALITY:
                response = await self.client_for().aio.models.generate_images(
                    model=model_name,
                    prompt=prompt,
                    config=types.GenerateImagesConfig(
                        number_of_images=1,
                        output_mime_type=self.generation.output_mime_type,
                        aspect_ratio=aspect_ratio,
                    ),
                )
                generated = response.generated_images or []
                if generated and generated[0].image and generated[0].image.image_bytes:
                    return generated[0].image.image_bytes
                raise GatewayError("Image generation failed, no images returned.")

            return await self._generate_image_content(
                model_name,
                [build_fast_model_prompt(prompt, aspect_ratio)],
                no_image_message="Image generation failed, no image data returned.",
            )
        except ModelDeclinedError:
            raise
        except Exception as e:
            logger.exception("Error generating model image")
            raise GatewayError("Failed to generate model image. Please try again.") from e

    async def edit_image(
        self,
        images: list[ImageArtifact],
        instruction: str,
        failure_message: str = "Failed to edit the image.",
    ) -> bytes:
        """Edit or combine images according to a text instruction.

        The instruction goes first, followed by the images in order, so
        prompts can refer to "the first image" and "the second image".
        """
        contents: list[Any] = [instruction]
        contents.extend(_image_part(image) for image in images)
        logger.info("Editing %d image(s) with %s", len(images), self.config.edit_model)

        try:
            return await self._generate_image_content(
                self.config.edit_model,
                contents,
                no_image_message="No image data returned from the model.",
            )
        except ModelDeclinedError:
            raise
        except Exception as e:
            logger.exception("Error editing image")
            raise GatewayError(failure_message) from e

    async def _generate_image_content(
        self,
        model_name: str,
        contents: list[Any],
        no_image_message: str,
    ) -> bytes:
        response = await self.client_for().aio.models.generate_content(
            model=model_name,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=[types.Modality.IMAGE],
            ),
        )

        candidates = response.candidates or []
        if candidates and candidates[0].content and candidates[0].content.parts:
            for part in candidates[0].content.parts:
                if part.inline_data and part.inline_data.data:
                    return part.inline_data.data

        # The model sometimes explains a refusal instead of drawing
        text = response.text
        if text:
            logger.error("Model %s returned text instead of an image: %s", model_name, text)
            raise ModelDeclinedError(text.strip())

        raise GatewayError(no_image_message)

    # ── Classification ─────────────────────────────────────────

    async def ask(
        self,
        image: ImageArtifact,
        question: str,
        failure_message: str = "Failed to analyze the image.",
    ) -> str:
        """Ask a free-text question about an image and return the answer."""
        try:
            response = await self.client_for().aio.models.generate_content(
                model=self.config.classifier_model,
                contents=[_image_part(image), question],
            )
            return (response.text or "").strip()
        except Exception as e:
            logger.exception("Error classifying image")
            raise GatewayError(failure_message) from e

    async def classify_image(
        self,
        image: ImageArtifact,
        question: str,
        match: AnswerMatch = AnswerMatch.CONTAINS,
        failure_message: str = "Failed to analyze the image.",
    ) -> bool:
        """Ask a yes/no question about an image."""
        answer = await self.ask(image, question, failure_message=failure_message)
        result = is_affirmative(answer, match)
        logger.debug("Classifier answered %r -> %s (%s)", answer, result, match.value)
        return result

    # ── Video ──────────────────────────────────────────────────

    async def request_video(
        self,
        image: ImageArtifact,
        prompt: str,
        api_key: str | None = None,
        aspect_ratio: str | None = None,
        resolution: str | None = None,
    ) -> types.GenerateVideosOperation:
        """Start an image-to-video job and return its operation handle."""
        return await self.client_for(api_key).aio.models.generate_videos(
            model=self.config.video_model,
            prompt=prompt,
            image=types.Image(image_bytes=image.to_bytes(), mime_type=image.mime_type),
            config=types.GenerateVideosConfig(
                number_of_videos=1,
                resolution=resolution or self.video.resolution,
                aspect_ratio=aspect_ratio or self.video.aspect_ratio,
            ),
        )

    async def poll_video(
        self,
        operation: types.GenerateVideosOperation,
        api_key: str | None = None,
    ) -> types.GenerateVideosOperation:
        """Refresh a video operation's status."""
        return await self.client_for(api_key).aio.operations.get(operation)

    async def fetch_video_bytes(self, uri: str, api_key: str) -> bytes:
        """Download a finished video; the file endpoint takes the key as a query param."""
        separator = "&" if "?" in uri else "?"
        response = await self.http.get(f"{uri}{separator}key={api_key}")
        if response.status_code != 200:
            logger.error(
                "Failed to fetch video data. Status: %s Body: %s",
                response.status_code,
                response.text[:500],
            )
            raise GatewayError(f"Failed to fetch video data: {response.reason_phrase}")
        return response.content

    async def animate(
        self,
        image: ImageArtifact,
        prompt: str,
        api_key: str | None = None,
    ) -> VideoMedia:
        """Turn an image into a short video, polling until the job finishes.

        Polls at a fixed interval with no overall timeout; the job's own
        lifecycle bounds the wait. There is no cancellation: callers that lose
        interest simply drop the awaiting task's result.

        Raises:
            CredentialError: the key is missing or the API rejected it
            GatewayError: any other failure
        """
        key = api_key or self.config.api_key
        try:
            operation = await self.request_video(image, prompt, api_key=key)
            logger.info("Video job started: %s", getattr(operation, "name", "<unnamed>"))

            while not operation.done:
                await asyncio.sleep(self.video.poll_interval)
                operation = await self.poll_video(operation, api_key=key)

            if operation.error:
                raise GatewayError(f"Video generation failed: {operation.error}")

            videos = operation.response.generated_videos if operation.response else None
            uri = videos[0].video.uri if videos and videos[0].video else None
            if not uri:
                raise GatewayError("Video generation completed but no download link was found.")

            content = await self.fetch_video_bytes(uri, api_key=key)
            logger.info("Video ready: %d bytes", len(content))
            return VideoMedia(uri=uri, content=content, mime_type="video/mp4")

        except CredentialError:
            raise
        except Exception as e:
            logger.exception("Error generating fashion video")
            if any(phrase in str(e) for phrase in CREDENTIAL_FAULT_PHRASES):
                raise CredentialError(INVALID_KEY_MESSAGE) from e
            raise GatewayError("Failed to generate the video. Please try again.") from e

    async def close(self):
        """Close the HTTP client."""
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()
            self._http = None
