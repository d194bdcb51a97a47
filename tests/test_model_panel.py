"""Tests for the model configuration panel."""

import random
from unittest.mock import AsyncMock

import pytest
from mockup_studio.agents.prompt_builder import PUBLIC_FIGURE_QUESTION, build_model_prompt
from mockup_studio.config import ImageModel
from mockup_studio.errors import GatewayError, ModelDeclinedError
from mockup_studio.models import ImageArtifact, ModelCharacteristics, Option
from mockup_studio.panels import ModelPanel, PanelMode
from mockup_studio.panels.model_panel import PUBLIC_FIGURE_REJECTION
from mockup_studio.services.gemini_client import AnswerMatch


class Reported:
    """Records what the panel reports upward."""

    def __init__(self):
        self.calls = []

    def __call__(self, image):
        self.calls.append(image)

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def reported():
    return Reported()


@pytest.fixture
def panel(gateway, reported):
    return ModelPanel(gateway, reported, rng=random.Random(7))


class TestPromptOverride:

    def test_prompt_follows_characteristics(self, panel):
        panel.set_characteristic("gender", "man")
        expected = build_model_prompt(ModelCharacteristics(gender="man"))

        assert panel.prompt == expected
        assert panel.generate_state.custom_prompt == expected

    def test_custom_prompt_freezes_template(self, panel):
        """While the override is on, characteristic changes do not alter the prompt."""
        panel.set_custom_prompt_enabled(True)
        panel.set_custom_prompt("A model in a red coat.")
        panel.set_characteristic("hair_color", "red hair")
        panel.set_characteristic("pose", "sitting pose")

        assert panel.prompt == "A model in a red coat."

    def test_custom_prompt_starts_from_template_text(self, panel):
        before = panel.prompt
        panel.set_custom_prompt_enabled(True)
        panel.set_characteristic("age", "in their 30s")

        assert panel.prompt == before

    def test_disabling_override_resumes_template(self, panel):
        panel.set_custom_prompt_enabled(True)
        panel.set_custom_prompt("anything")
        panel.set_characteristic("age", "in their 40s")
        panel.set_custom_prompt_enabled(False)

        assert panel.prompt == build_model_prompt(ModelCharacteristics(age="in their 40s"))


class TestGenerate:

    @pytest.mark.asyncio
    async def test_generate_reports_image(self, panel, gateway, reported, jpeg_bytes):
        panel.set_generation_model(ImageModel.FAST)
        await panel.generate()

        gateway.generate_image.assert_awaited_once_with(panel.prompt, ImageModel.FAST, "3:4")
        assert panel.image.to_bytes() == jpeg_bytes
        assert reported.last == panel.image
        assert panel.generate_state.error is None
        assert panel.generate_state.is_loading is False

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_image(self, panel, gateway, reported):
        await panel.generate()
        first = panel.image

        gateway.generate_image = AsyncMock(side_effect=GatewayError("Failed to generate model image. Please try again."))
        await panel.generate()

        assert panel.image == first
        assert panel.generate_state.error == "Failed to generate model image. Please try again."
        assert len(reported.calls) == 1

    @pytest.mark.asyncio
    async def test_declined_message_surfaced(self, panel, gateway, reported):
        gateway.generate_image = AsyncMock(side_effect=ModelDeclinedError("I can't draw that."))
        await panel.generate()

        assert panel.image is None
        assert panel.generate_state.error == "Model Error: I can't draw that."
        assert reported.calls == []


class TestChangePose:

    @pytest.mark.asyncio
    async def test_requires_generated_model(self, panel, gateway):
        await panel.change_pose()

        assert panel.generate_state.error == "No model generated yet to change pose."
        gateway.edit_image.assert_not_awaited()

    def test_never_picks_current_pose(self, panel):
        current = panel.generate_state.characteristics.pose
        for _ in range(50):
            assert panel.pick_new_pose().value != current

    @pytest.mark.asyncio
    async def test_single_pose_option_fails(self, gateway, reported):
        only = [Option(label="Standing", value="standing pose")]
        panel = ModelPanel(gateway, reported, pose_options=only)
        await panel.generate()
        await panel.change_pose()

        assert panel.generate_state.error == "No other poses available."
        gateway.edit_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pose_change_updates_pose_and_reports(self, panel, gateway, reported):
        await panel.generate()
        original = panel.image
        await panel.change_pose()

        new_pose = panel.generate_state.characteristics.pose
        assert new_pose != "standing pose"
        images, instruction = gateway.edit_image.await_args.args
        assert images == [original]
        assert f"'{new_pose}'" in instruction
        assert reported.last == panel.image
        assert new_pose in panel.prompt

    @pytest.mark.asyncio
    async def test_pose_change_failure_keeps_image(self, panel, gateway):
        await panel.generate()
        original = panel.image
        gateway.edit_image = AsyncMock(side_effect=GatewayError("Failed to change the model's pose."))

        await panel.change_pose()

        assert panel.image == original
        assert panel.generate_state.characteristics.pose == "standing pose"
        assert panel.generate_state.error == "Failed to change the model's pose."


class TestUpload:

    @pytest.fixture
    def upload_panel(self, panel):
        panel.switch_mode(PanelMode.UPLOAD)
        return panel

    @pytest.mark.asyncio
    async def test_accepts_private_person(self, upload_panel, gateway, reported, png_upload):
        await upload_panel.upload(png_upload)

        image, question = gateway.classify_image.await_args.args
        assert question == PUBLIC_FIGURE_QUESTION
        assert gateway.classify_image.await_args.kwargs["match"] is AnswerMatch.PREFIX
        assert upload_panel.image == image
        assert reported.last == image

    @pytest.mark.asyncio
    async def test_public_figure_clears_accepted_model(self, upload_panel, gateway, reported, png_upload):
        await upload_panel.upload(png_upload)
        assert reported.last is not None

        gateway.classify_image = AsyncMock(return_value=True)
        await upload_panel.upload(png_upload)

        assert upload_panel.image is None
        assert upload_panel.upload_state.error == PUBLIC_FIGURE_REJECTION
        assert reported.last is None

    @pytest.mark.asyncio
    async def test_non_image_rejected_locally(self, upload_panel, gateway, text_upload):
        await upload_panel.upload(text_upload)

        assert "valid image file" in upload_panel.upload_state.error
        gateway.classify_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_classifier_failure_shown(self, upload_panel, gateway, reported, png_upload):
        gateway.classify_image = AsyncMock(side_effect=GatewayError("Failed to analyze the uploaded model image."))
        await upload_panel.upload(png_upload)

        assert upload_panel.upload_state.error == "Failed to analyze the uploaded model image."
        assert upload_panel.image is None
        assert upload_panel.upload_state.is_uploading is False


class TestModes:

    @pytest.mark.asyncio
    async def test_modes_keep_independent_images(self, panel, reported, png_upload):
        await panel.generate()
        generated = panel.image

        panel.switch_mode(PanelMode.UPLOAD)
        assert panel.image is None
        assert reported.last is None

        await panel.upload(png_upload)
        uploaded = panel.image
        assert uploaded != generated

        panel.switch_mode(PanelMode.GENERATE)
        assert panel.image == generated
        assert reported.last == generated

    @pytest.mark.asyncio
    async def test_inactive_mode_result_not_reported(self, panel, gateway, reported):
        """A generation finishing after a switch to upload stays local."""
        async def generate_then_switch(*args):
            panel.switch_mode(PanelMode.UPLOAD)
            return b"\xff\xd8\xff"

        gateway.generate_image = AsyncMock(side_effect=generate_then_switch)
        await panel.generate()

        assert panel.generate_state.image is not None
        assert all(call is None for call in reported.calls)

    def test_state_is_tagged(self, panel):
        assert panel.state.kind is PanelMode.GENERATE
        panel.switch_mode(PanelMode.UPLOAD)
        assert panel.state.kind is PanelMode.UPLOAD
        assert not hasattr(panel.state, "characteristics")
