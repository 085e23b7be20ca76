"""
Pipeline orchestrator for media summarization.

Runs Acquire -> Transcribe -> Enrich over one request-scoped PipelineState.
Every stage runs (soft-fail-forward): a stage whose input is missing returns
a "skipped" patch, and any stage-local error or timeout becomes a failure
patch. The pipeline therefore always ends in `completed` or `failed`.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from vidscribe.config import Settings
from vidscribe.models.schemas import PipelineStage, PipelineState, StagePatch
from vidscribe.services.handles import ServiceHandles
from vidscribe.services.stages import AcquireStage, BaseStage, EnrichStage, TranscribeStage

from .state import PipelineError, merge_patch, transition

logger = logging.getLogger(__name__)
perf_logger = logging.getLogger("vidscribe.perf")

# Signature: (state right after entering a new lifecycle stage) -> None
TransitionCallback = Callable[[PipelineState], Awaitable[None]]


class PipelineOrchestrator:
    """
    Sequences stages over one PipelineState per request.

    Instances hold no per-request state and can serve concurrent requests.

    Example:
        orchestrator = PipelineOrchestrator.from_handles(handles)
        state = await orchestrator.run(url="https://youtu.be/...")
        print(state.stage, state.status, state.summary)
    """

    def __init__(self, stages: list[BaseStage], settings: Settings):
        """
        Initialize orchestrator.

        Args:
            stages: Acquire, Transcribe and Enrich stages, in this order
            settings: Application settings (artifact cleanup)

        Raises:
            PipelineError: If the stages do not follow the lifecycle order
        """
        expected = [PipelineStage.ACQUIRING, PipelineStage.TRANSCRIBING, PipelineStage.ENRICHING]
        if [stage.name for stage in stages] != expected:
            raise PipelineError(
                PipelineStage.CREATED,
                f"Stages must be {[s.value for s in expected]}, "
                f"got {[stage.name.value for stage in stages]}",
            )
        self.stages = stages
        self.settings = settings

    @classmethod
    def from_handles(cls, handles: ServiceHandles) -> "PipelineOrchestrator":
        """
        Create orchestrator wired to the shared service handles.

        Args:
            handles: Clients and cascade built at startup

        Returns:
            Configured PipelineOrchestrator
        """
        settings = handles.settings
        return cls(
            stages=[
                AcquireStage(handles.cascade, settings),
                TranscribeStage(handles.transcriber, settings),
                EnrichStage(handles.failover, settings),
            ],
            settings=settings,
        )

    async def run(
        self,
        url: str | None = None,
        text: str | None = None,
        on_transition: TransitionCallback | None = None,
    ) -> PipelineState:
        """
        Run the full pipeline for one request.

        Args:
            url: Source URL (media input)
            text: Passage to summarize (text input)
            on_transition: Awaited after every lifecycle transition,
                including the terminal one

        Returns:
            Terminal PipelineState (stage is COMPLETED or FAILED)

        Raises:
            PipelineError: If neither url nor text is given
        """
        if not url and not text:
            raise PipelineError(PipelineStage.CREATED, "Pipeline needs a URL or text input")

        state = PipelineState(url=url, source_text=text)
        started_at = time.time()

        try:
            for stage in self.stages:
                state = transition(state, stage.name)
                await self._notify(on_transition, state)

                patch = await self._run_stage(stage, state)
                state = merge_patch(state, patch)

            final = PipelineStage.COMPLETED if state.failed_stage is None else PipelineStage.FAILED
            state = transition(state, final)
        finally:
            self._cleanup(state)

        elapsed = time.time() - started_at
        perf_logger.info(f"PIPELINE | {state.stage.value} | {state.source} | {elapsed:.1f}s")
        if state.stage == PipelineStage.FAILED:
            logger.warning(f"Pipeline failed at {state.failed_stage.value}: {state.status}")
        else:
            logger.info(f"Pipeline completed: {state.status}")

        await self._notify(on_transition, state)
        return state

    async def _run_stage(self, stage: BaseStage, state: PipelineState) -> StagePatch:
        """
        Run one stage and convert any stage-local error into a failure patch.

        The stage gets a deep copy, so it cannot mutate the pipeline state.
        """
        start_time = time.time()
        snapshot = state.model_copy(deep=True)

        try:
            patch = await asyncio.wait_for(stage.run(snapshot), timeout=stage.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Stage {stage.name.value} timed out after {stage.timeout}s")
            patch = stage.failed(f"timed out after {stage.timeout:.0f}s")
        except Exception as e:
            logger.error(f"Stage {stage.name.value} failed: {type(e).__name__}: {e}")
            patch = stage.failed(e)

        elapsed = time.time() - start_time
        outcome = "skipped" if patch.skipped else ("ok" if patch.ok else "failed")
        perf_logger.info(f"STAGE | {stage.name.value} | {outcome} | {elapsed:.1f}s")
        return patch

    @staticmethod
    async def _notify(callback: TransitionCallback | None, state: PipelineState) -> None:
        if callback is not None:
            await callback(state.model_copy(deep=True))

    def _cleanup(self, state: PipelineState) -> None:
        """Delete the audio artifact unless artifacts are kept."""
        if self.settings.keep_artifacts or state.artifact_path is None:
            return
        try:
            state.artifact_path.unlink(missing_ok=True)
            logger.info(f"Deleted artifact: {state.artifact_path.name}")
        except OSError as e:
            logger.warning(f"Failed to delete artifact {state.artifact_path}: {e}")
