"""Restaging gallery: scene variants of the mockup and their videos."""

import asyncio
import logging

from ..agents.prompt_builder import VIDEO_PROMPT, build_restage_prompt
from ..errors import MockupStudioError
from ..models.media import ImageArtifact, MediaDownload, file_extension
from ..models.session import SceneVariant, VideoStatus
from ..services.credentials import CredentialProvider


logger = logging.getLogger(__name__)


class RestagingGallery:
    """An append-only sequence of scene variants built from one mockup.

    Each variant owns its own video job, so animating or retrying one
    variant never touches another.
    """

    def __init__(self, gateway, credentials: CredentialProvider, mockup: ImageArtifact | None = None):
        self.gateway = gateway
        self.credentials = credentials
        self.mockup = mockup

        self.variants: list[SceneVariant] = []
        self.scene_prompt = ""
        self.is_reimagining = False
        self.error: str | None = None

    def set_mockup(self, mockup: ImageArtifact | None) -> None:
        self.mockup = mockup

    @property
    def can_add_variant(self) -> bool:
        return self.mockup is not None and not self.is_reimagining and bool(self.scene_prompt.strip())

    async def add_variant(self, description: str | None = None) -> SceneVariant | None:
        """Re-stage the mockup in a new scene and append the result.

        Uses ``description`` if given, otherwise the current ``scene_prompt``
        draft. On success the draft is cleared; on failure the sequence is
        left unchanged.
        """
        if description is not None:
            self.scene_prompt = description
        situation = self.scene_prompt.strip()
        if self.mockup is None or not situation:
            return None
        if self.is_reimagining:
            logger.debug("Restage ignored, request already pending")
            return None

        self.is_reimagining = True
        self.error = None
        try:
            raw = await self.gateway.edit_image(
                [self.mockup],
                build_restage_prompt(situation),
                failure_message="Failed to re-imagine the mockup.",
            )
            variant = SceneVariant(
                image=ImageArtifact.from_generated(raw),
                description=situation,
            )
            self.variants.append(variant)
            self.scene_prompt = ""
            logger.info("Scene variant %d added: %s", len(self.variants) - 1, situation)
            return variant
        except MockupStudioError as e:
            self.error = str(e)
            return None
        finally:
            self.is_reimagining = False

    def _variant(self, index: int) -> SceneVariant:
        if not 0 <= index < len(self.variants):
            raise IndexError(f"No scene variant at index {index}")
        return self.variants[index]

    async def animate(self, index: int) -> None:
        """Animate one variant into a short video.

        Safe to call again after a failure; the job goes back to pending.
        While a job is pending this waits on it instead of starting another.
        """
        await self.start_animation(index)

    async def _run_animation(self, index: int, variant: SceneVariant) -> None:
        job = variant.video
        logger.info("Video job for variant %d pending (attempt %d)", index, job.attempts)
        try:
            if not await self.credentials.has_selected_key():
                await self.credentials.select_key()
            media = await self.gateway.animate(
                variant.image,
                VIDEO_PROMPT,
                api_key=self.credentials.current_key(),
            )
            job.succeed(media)
            logger.info("Video job for variant %d ready", index)
        except MockupStudioError as e:
            job.fail(str(e))
            logger.warning("Video job for variant %d failed: %s", index, e)
        except Exception:
            job.fail("Failed to generate the video. Please try again.")
            logger.exception("Video job for variant %d crashed", index)
            raise

    def start_animation(self, index: int) -> asyncio.Task:
        """Schedule the animation on the running loop and return the task.

        The task is kept on the variant and is the only in-flight request for
        that slot. There is no cancellation: dropping the gallery drops
        interest in the result.
        """
        variant = self._variant(index)
        if variant.task is not None and not variant.task.done():
            logger.debug("Animate ignored for variant %d, job already pending", index)
            return variant.task
        # Pending from the moment it is requested, before the task first runs
        variant.video.start()
        variant.task = asyncio.create_task(self._run_animation(index, variant))
        return variant.task

    def download(self, index: int) -> MediaDownload:
        """The most current media for a slot: its video once ready, else the still."""
        variant = self._variant(index)
        job = variant.video
        if job.status is VideoStatus.READY and job.media is not None:
            return MediaDownload(
                filename=f"scene-variant-{index + 1}{file_extension(job.media.mime_type)}",
                mime_type=job.media.mime_type,
                content=job.media.content,
            )
        return MediaDownload(
            filename=f"scene-variant-{index + 1}{file_extension(variant.image.mime_type)}",
            mime_type=variant.image.mime_type,
            content=variant.image.to_bytes(),
        )

    def download_mockup(self) -> MediaDownload | None:
        if self.mockup is None:
            return None
        return MediaDownload(
            filename=f"mockup{file_extension(self.mockup.mime_type)}",
            mime_type=self.mockup.mime_type,
            content=self.mockup.to_bytes(),
        )
