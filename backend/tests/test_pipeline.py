"""Tests for vidscribe.services.pipeline (state machine and orchestrator)."""

import asyncio
from pathlib import Path

import pytest

from conftest import (
    BOT_CHECK_STDERR,
    GENERIC_URL,
    LIFECYCLE,
    VALID_RESPONSE,
    YOUTUBE_URL,
    FakeAIClient,
    FakeRunner,
    FakeTranscriber,
    make_orchestrator,
)
from vidscribe.models.schemas import PipelineStage, PipelineState, StagePatch
from vidscribe.services.pipeline import PipelineError, PipelineOrchestrator, merge_patch, transition
from vidscribe.services.stages import BaseStage

SKIPPED = "skipped: precondition unmet"


# =============================================================================
# State machine
# =============================================================================


class TestTransition:
    """Tests for the forward-only lifecycle."""

    def test_linear_path_is_accepted(self):
        state = PipelineState(url=GENERIC_URL)
        for stage in [*LIFECYCLE, PipelineStage.COMPLETED]:
            state = transition(state, stage)
        assert state.stage == PipelineStage.COMPLETED

    @pytest.mark.parametrize(
        "path",
        [
            [PipelineStage.TRANSCRIBING],
            [PipelineStage.ACQUIRING, PipelineStage.ACQUIRING],
            [PipelineStage.ACQUIRING, PipelineStage.ENRICHING],
            [PipelineStage.ACQUIRING, PipelineStage.TRANSCRIBING, PipelineStage.ACQUIRING],
            [*LIFECYCLE, PipelineStage.FAILED, PipelineStage.COMPLETED],
        ],
    )
    def test_skips_and_reentry_are_rejected(self, path):
        state = PipelineState(url=GENERIC_URL)
        with pytest.raises(PipelineError):
            for stage in path:
                state = transition(state, stage)

    def test_transition_does_not_mutate_input(self):
        state = PipelineState(url=GENERIC_URL)
        transition(state, PipelineStage.ACQUIRING)
        assert state.stage == PipelineStage.CREATED


class TestMergePatch:
    """Tests for the pure merge function."""

    def acquiring_state(self) -> PipelineState:
        return transition(PipelineState(url=GENERIC_URL), PipelineStage.ACQUIRING)

    def test_merges_owned_fields_and_status(self):
        state = self.acquiring_state()
        patch = StagePatch(
            stage=PipelineStage.ACQUIRING,
            updates={"artifact_path": Path("/tmp/a.mp3"), "duration": 12.0, "strategy_used": "default"},
            status="Audio downloaded (12s, strategy: default)",
        )

        merged = merge_patch(state, patch)

        assert merged.artifact_path == Path("/tmp/a.mp3")
        assert merged.duration == 12.0
        assert merged.status == patch.status
        assert merged.stage_statuses == {"acquiring": patch.status}
        assert state.artifact_path is None

    def test_foreign_field_is_rejected(self):
        patch = StagePatch(
            stage=PipelineStage.ACQUIRING,
            updates={"summary": "sneaky"},
            status="ok",
        )
        with pytest.raises(PipelineError):
            merge_patch(self.acquiring_state(), patch)

    def test_patch_from_other_stage_is_rejected(self):
        patch = StagePatch(stage=PipelineStage.ENRICHING, status="ok")
        with pytest.raises(PipelineError):
            merge_patch(self.acquiring_state(), patch)

    def test_none_never_clears_a_value(self):
        state = self.acquiring_state()
        state = merge_patch(
            state,
            StagePatch(stage=PipelineStage.ACQUIRING, updates={"strategy_used": "ios"}, status="ok"),
        )
        state = merge_patch(
            state,
            StagePatch(stage=PipelineStage.ACQUIRING, updates={"strategy_used": None}, status="again"),
        )
        assert state.strategy_used == "ios"

    def test_first_failure_keeps_pipeline_status(self):
        state = self.acquiring_state()
        state = merge_patch(
            state,
            StagePatch(
                stage=PipelineStage.ACQUIRING,
                status="Download failed: boom",
                ok=False,
                hint="try again",
            ),
        )
        state = transition(state, PipelineStage.TRANSCRIBING)
        state = merge_patch(
            state,
            StagePatch(
                stage=PipelineStage.TRANSCRIBING,
                status="Transcription skipped: precondition unmet (no audio artifact)",
                ok=False,
                skipped=True,
            ),
        )

        assert state.status == "Download failed: boom"
        assert state.failed_stage == PipelineStage.ACQUIRING
        assert state.error_hint == "try again"
        assert state.stage_statuses["transcribing"].startswith("Transcription skipped")


# =============================================================================
# Orchestrator
# =============================================================================


class TestOrchestrator:
    """Tests for PipelineOrchestrator.run."""

    @pytest.mark.asyncio
    async def test_happy_path(self, settings):
        orchestrator = make_orchestrator(settings)

        state = await orchestrator.run(url=GENERIC_URL)

        assert state.stage == PipelineStage.COMPLETED
        assert state.failed_stage is None
        assert state.duration == 42.5
        assert state.strategy_used == "default"
        assert state.transcript == "Hello and welcome to the talk."
        assert state.summary == "A talk about resilient pipelines."
        assert state.engine_used == "Claude"
        assert state.status == "Completed"

    @pytest.mark.asyncio
    async def test_generic_download_failure_soft_fails_forward(self, settings):
        runner = FakeRunner(["network unreachable"])
        transcriber = FakeTranscriber()
        primary = FakeAIClient("Claude", [VALID_RESPONSE])
        orchestrator = make_orchestrator(settings, runner, transcriber, primary)

        state = await orchestrator.run(url=GENERIC_URL)

        assert len(runner.ytdlp_calls) == 1
        assert state.stage == PipelineStage.FAILED
        assert state.failed_stage == PipelineStage.ACQUIRING
        assert state.status == "Download failed: network unreachable"
        assert SKIPPED in state.stage_statuses["transcribing"]
        assert SKIPPED in state.stage_statuses["enriching"]
        assert transcriber.calls == []
        assert primary.prompts == []

    @pytest.mark.asyncio
    async def test_tool_error_tag_is_not_shown_in_status(self, settings):
        runner = FakeRunner(["WARNING: falling back\nERROR: network unreachable"])
        state = await make_orchestrator(settings, runner).run(url=GENERIC_URL)
        assert state.status == "Download failed: network unreachable"

    @pytest.mark.asyncio
    async def test_exhausted_cascade_carries_hint(self, settings):
        runner = FakeRunner([BOT_CHECK_STDERR, BOT_CHECK_STDERR])
        state = await make_orchestrator(settings, runner).run(url=YOUTUBE_URL)

        assert state.failed_stage == PipelineStage.ACQUIRING
        assert state.status.startswith("Download failed: All 2 acquisition strategies were blocked")
        assert "YTDLP_PO_TOKEN" in state.error_hint

    @pytest.mark.asyncio
    async def test_probe_failure_defaults_duration_to_zero(self, settings):
        runner = FakeRunner(["ok"], probe_output=None)
        state = await make_orchestrator(settings, runner).run(url=GENERIC_URL)

        assert state.stage == PipelineStage.COMPLETED
        assert state.duration == 0.0
        assert state.stage_statuses["acquiring"].startswith("Audio downloaded")

    @pytest.mark.asyncio
    async def test_unparsable_probe_output_defaults_duration_to_zero(self, settings):
        runner = FakeRunner(["ok"], probe_output="N/A\n")
        state = await make_orchestrator(settings, runner).run(url=GENERIC_URL)
        assert state.duration == 0.0

    @pytest.mark.asyncio
    async def test_empty_transcript_is_a_failure(self, settings):
        transcriber = FakeTranscriber(text="   ")
        state = await make_orchestrator(settings, transcriber=transcriber).run(url=GENERIC_URL)

        assert state.failed_stage == PipelineStage.TRANSCRIBING
        assert state.status == "Transcription failed: empty transcript"
        assert SKIPPED in state.stage_statuses["enriching"]

    @pytest.mark.asyncio
    async def test_transcriber_error_becomes_status(self, settings):
        transcriber = FakeTranscriber(error=RuntimeError("Whisper is down"))
        state = await make_orchestrator(settings, transcriber=transcriber).run(url=GENERIC_URL)

        assert state.status == "Transcription failed: Whisper is down"
        assert state.artifact_path is not None

    @pytest.mark.asyncio
    async def test_enrichment_failure_after_both_providers(self, settings):
        primary = FakeAIClient("Claude", [""])
        secondary = FakeAIClient("Groq", [""])
        state = await make_orchestrator(settings, primary=primary, secondary=secondary).run(
            url=GENERIC_URL
        )

        assert state.failed_stage == PipelineStage.ENRICHING
        assert state.status.startswith("Summarization failed: Both providers failed")
        assert state.transcript

    @pytest.mark.asyncio
    async def test_text_input_skips_download(self, settings):
        runner = FakeRunner()
        transcriber = FakeTranscriber()
        passage = "A long passage about distributed systems and failure handling."
        state = await make_orchestrator(settings, runner, transcriber).run(text=passage)

        assert state.stage == PipelineStage.COMPLETED
        assert state.transcript == passage
        assert runner.ytdlp_calls == []
        assert transcriber.calls == []
        assert state.stage_statuses["acquiring"] == "Download skipped: text input"

    @pytest.mark.asyncio
    async def test_transitions_are_reported_in_order(self, settings):
        seen: list[PipelineStage] = []

        async def on_transition(state: PipelineState) -> None:
            seen.append(state.stage)

        await make_orchestrator(settings).run(url=GENERIC_URL, on_transition=on_transition)

        assert seen == [*LIFECYCLE, PipelineStage.COMPLETED]

    @pytest.mark.asyncio
    async def test_stage_timeout_becomes_failure(self, settings):
        class SlowTranscriber(FakeTranscriber):
            async def transcribe(self, audio_path):
                await asyncio.sleep(10)
                return "never"

        settings.transcribe_timeout = 0.05
        orchestrator = make_orchestrator(settings, transcriber=SlowTranscriber())

        state = await orchestrator.run(url=GENERIC_URL)

        assert state.failed_stage == PipelineStage.TRANSCRIBING
        assert "timed out" in state.status

    @pytest.mark.asyncio
    async def test_artifact_deleted_when_not_kept(self, settings):
        settings.keep_artifacts = False
        state = await make_orchestrator(settings).run(url=GENERIC_URL)

        assert state.artifact_path is not None
        assert not state.artifact_path.exists()

    @pytest.mark.asyncio
    async def test_artifact_kept_by_default(self, settings):
        state = await make_orchestrator(settings).run(url=GENERIC_URL)
        assert state.artifact_path.exists()

    @pytest.mark.asyncio
    async def test_requires_some_input(self, settings):
        with pytest.raises(PipelineError):
            await make_orchestrator(settings).run()

    def test_rejects_misordered_stages(self, settings):
        orchestrator = make_orchestrator(settings)
        with pytest.raises(PipelineError):
            PipelineOrchestrator(list(reversed(orchestrator.stages)), settings)

    @pytest.mark.asyncio
    async def test_stage_cannot_mutate_pipeline_state(self, settings):
        primary = FakeAIClient("Claude", [""])
        secondary = FakeAIClient("Groq", [""])
        orchestrator = make_orchestrator(settings, primary=primary, secondary=secondary)
        acquire = orchestrator.stages[0]

        class MutatingStage(BaseStage):
            name = PipelineStage.ACQUIRING
            failure_label = "Download"

            async def run(self, state):
                state.summary = "written by the wrong stage"
                return await acquire.run(state)

        orchestrator.stages[0] = MutatingStage()
        state = await orchestrator.run(url=GENERIC_URL)

        assert state.summary is None
        assert state.failed_stage == PipelineStage.ENRICHING
