"""Tests for the composition stage, restaging gallery and flow controller."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from mockup_studio.agents.prompt_builder import MOCKUP_PROMPT, VIDEO_PROMPT
from mockup_studio.config import StudioConfig
from mockup_studio.errors import CredentialError, FlowTransitionError, GatewayError
from mockup_studio.models import FlowScreen, ImageArtifact, VideoMedia, VideoStatus
from mockup_studio.pipeline import CompositionStage, FlowController, RestagingGallery


def video(uri="https://example.test/v1/files/abc:download?alt=media"):
    return VideoMedia(uri=uri, content=b"\x00\x00\x00\x18ftypmp42")


class TestCompositionStage:

    @pytest.mark.asyncio
    async def test_compose_sends_model_then_garment(self, gateway, model_image, garment_image):
        stage = CompositionStage(gateway, model_image, garment_image)
        mockup = await stage.compose()

        gateway.edit_image.assert_awaited_once()
        images, instruction = gateway.edit_image.await_args.args
        assert images == [model_image, garment_image]
        assert instruction == MOCKUP_PROMPT
        assert stage.mockup == mockup
        assert stage.is_loading is False

    @pytest.mark.asyncio
    async def test_compose_failure_recorded(self, gateway, model_image, garment_image):
        gateway.edit_image = AsyncMock(side_effect=GatewayError("Failed to create the mockup."))
        stage = CompositionStage(gateway, model_image, garment_image)

        assert await stage.compose() is None
        assert stage.error == "Failed to create the mockup."
        gateway.edit_image.assert_awaited_once()


class TestRestagingGallery:

    @pytest.fixture
    def gallery(self, gateway, credentials, model_image):
        return RestagingGallery(gateway, credentials, mockup=model_image)

    @pytest.mark.asyncio
    async def test_add_variant_appends_and_clears_draft(self, gallery, gateway):
        gallery.scene_prompt = "on a rainy Paris street"
        first = await gallery.add_variant()
        second = await gallery.add_variant("in a cozy, rustic coffee shop")

        assert gallery.variants == [first, second]
        assert first.description == "on a rainy Paris street"
        assert gallery.scene_prompt == ""
        assert gateway.edit_image.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_add_leaves_sequence_unchanged(self, gallery, gateway):
        await gallery.add_variant("at the beach")
        before = list(gallery.variants)

        gateway.edit_image = AsyncMock(side_effect=GatewayError("Failed to re-imagine the mockup."))
        assert await gallery.add_variant("on a rooftop") is None

        assert gallery.variants == before
        assert gallery.error == "Failed to re-imagine the mockup."
        assert gallery.scene_prompt == "on a rooftop"

    @pytest.mark.asyncio
    async def test_blank_description_ignored(self, gallery, gateway):
        assert await gallery.add_variant("   ") is None
        gateway.edit_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_mockup_no_call(self, gateway, credentials):
        gallery = RestagingGallery(gateway, credentials)
        assert await gallery.add_variant("in a forest") is None
        gateway.edit_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_animate_ready(self, gallery, gateway):
        variant = await gallery.add_variant("in a studio loft")
        gateway.animate = AsyncMock(return_value=video())

        await gallery.animate(0)

        gateway.animate.assert_awaited_once_with(variant.image, VIDEO_PROMPT, api_key="test-key")
        assert variant.video.status is VideoStatus.READY
        download = gallery.download(0)
        assert download.mime_type == "video/mp4"
        assert download.filename.endswith(".mp4")

    @pytest.mark.asyncio
    async def test_animate_selects_key_when_absent(self, gallery, gateway, credentials):
        await gallery.add_variant("in a garden")
        credentials.has_selected_key = AsyncMock(return_value=False)
        gateway.animate = AsyncMock(return_value=video())

        await gallery.animate(0)

        credentials.select_key.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_key_fails_job(self, gallery, gateway, credentials):
        await gallery.add_variant("in a garden")
        credentials.has_selected_key = AsyncMock(return_value=False)
        credentials.select_key = AsyncMock(side_effect=CredentialError("No API key selected."))

        await gallery.animate(0)

        job = gallery.variants[0].video
        assert job.status is VideoStatus.FAILED
        assert job.error == "No API key selected."
        gateway.animate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retry_only_touches_its_variant(self, gallery, gateway):
        await gallery.add_variant("scene A")
        await gallery.add_variant("scene B")

        gateway.animate = AsyncMock(return_value=video())
        await gallery.animate(0)

        gateway.animate = AsyncMock(side_effect=GatewayError("Failed to generate the video. Please try again."))
        await gallery.animate(1)
        assert gallery.variants[1].video.status is VideoStatus.FAILED
        assert gallery.variants[0].video.status is VideoStatus.READY

        gateway.animate = AsyncMock(return_value=video())
        await gallery.animate(1)

        assert gallery.variants[1].video.status is VideoStatus.READY
        assert gallery.variants[1].video.attempts == 2
        assert gallery.variants[0].video.attempts == 1

    @pytest.mark.asyncio
    async def test_start_animation_is_pending_immediately(self, gallery, gateway):
        await gallery.add_variant("in a desert")
        release = asyncio.Event()

        async def slow_animate(*args, **kwargs):
            await release.wait()
            return video()

        gateway.animate = AsyncMock(side_effect=slow_animate)
        task = gallery.start_animation(0)

        assert gallery.variants[0].video.status is VideoStatus.PENDING
        assert gallery.start_animation(0) is task
        release.set()
        await task
        assert gallery.variants[0].video.status is VideoStatus.READY
        gateway.animate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_one_video_request_per_slot(self, gallery, gateway):
        """A pending animate and a scheduled one share a single request."""
        await gallery.add_variant("on a ferry")
        release = asyncio.Event()

        async def slow_animate(*args, **kwargs):
            await release.wait()
            return video()

        gateway.animate = AsyncMock(side_effect=slow_animate)
        waiting = asyncio.create_task(gallery.animate(0))
        await asyncio.sleep(0)

        task = gallery.start_animation(0)
        release.set()
        await asyncio.gather(waiting, task)

        gateway.animate.assert_awaited_once()
        assert gallery.variants[0].video.attempts == 1
        assert gallery.variants[0].video.status is VideoStatus.READY

    @pytest.mark.asyncio
    async def test_download_still_before_video(self, gallery, jpeg_bytes):
        await gallery.add_variant("at night")
        download = gallery.download(0)

        assert download.content == jpeg_bytes
        assert download.mime_type == "image/jpeg"

    def test_unknown_index(self, gallery):
        with pytest.raises(IndexError):
            gallery.download(3)


class TestFlowController:

    @pytest.fixture
    def flow(self, gateway, credentials):
        return FlowController(gateway, credentials, StudioConfig())

    @pytest.mark.asyncio
    async def test_blocked_without_garment(self, flow):
        await flow.model_panel.generate()

        assert flow.model_image is not None
        assert flow.can_proceed is False
        with pytest.raises(FlowTransitionError):
            await flow.proceed()
        assert flow.screen is FlowScreen.BUILDING

    @pytest.mark.asyncio
    async def test_blocked_without_model(self, flow, gateway, png_upload):
        gateway.classify_image = AsyncMock(return_value=True)
        await flow.garment_panel.upload(png_upload)

        assert flow.can_proceed is False
        with pytest.raises(FlowTransitionError):
            await flow.proceed()

    @pytest.mark.asyncio
    async def test_proceed_composes_once(self, flow, gateway, png_upload):
        await flow.model_panel.generate()
        gateway.classify_image = AsyncMock(return_value=True)
        await flow.garment_panel.upload(png_upload)

        await flow.proceed()

        assert flow.screen is FlowScreen.REVIEWING
        assert gateway.edit_image.await_count == 1
        assert flow.gallery.mockup == flow.composition.mockup
        with pytest.raises(FlowTransitionError):
            await flow.proceed()

    @pytest.mark.asyncio
    async def test_back_discards_everything(self, flow, gateway, png_upload):
        await flow.model_panel.generate()
        gateway.classify_image = AsyncMock(return_value=True)
        await flow.garment_panel.upload(png_upload)
        await flow.proceed()
        await flow.gallery.add_variant("in Tokyo")
        old_panel = flow.model_panel

        flow.go_back()

        assert flow.screen is FlowScreen.BUILDING
        assert flow.model_image is None
        assert flow.garment_image is None
        assert flow.gallery is None
        assert flow.composition is None
        assert flow.model_panel is not old_panel
        assert flow.model_panel.image is None

    @pytest.mark.asyncio
    async def test_reentry_composes_again(self, flow, gateway, model_image, garment_image):
        """No caching across navigations: one edit call per stage entry."""
        for expected_calls in (1, 2):
            flow.model_panel.on_model_image(model_image)
            flow.garment_panel.on_garment_image(garment_image)
            await flow.proceed()
            assert gateway.edit_image.await_count == expected_calls
            flow.go_back()

    @pytest.mark.asyncio
    async def test_late_result_from_discarded_panel_ignored(self, flow, model_image):
        stale_callback = flow.model_panel.on_model_image
        flow.go_back()

        stale_callback(model_image)

        assert flow.model_image is None

    @pytest.mark.asyncio
    async def test_withdrawn_garment_blocks_transition(self, flow, gateway, png_upload):
        await flow.model_panel.generate()
        gateway.classify_image = AsyncMock(return_value=True)
        await flow.garment_panel.upload(png_upload)
        assert flow.can_proceed

        gateway.classify_image = AsyncMock(return_value=False)
        await flow.garment_panel.upload(png_upload)

        assert flow.garment_image is None
        assert flow.can_proceed is False
