"""
Progress stream: pipeline transitions -> ordered ProgressEvents.

One producer task runs the orchestrator and appends an event for every
lifecycle transition. The single consumer iterates events() until the
terminal `completed` event. Closing the stream early cancels the producer,
which kills any running extraction subprocess.
"""

import asyncio
import logging
from typing import AsyncIterator

from vidscribe.models.schemas import (
    InputMode,
    PipelineStage,
    PipelineState,
    ProgressEvent,
    TaskState,
)
from vidscribe.services.parser import PrecheckError, parse_request_text

from .orchestrator import PipelineOrchestrator

logger = logging.getLogger(__name__)


class ProgressStream:
    """
    Append-only event stream for one request.

    Example:
        stream = ProgressStream(orchestrator, "summarize https://youtu.be/abc")
        async for event in stream.events():
            print(event.state.value, event.message)
    """

    def __init__(
        self,
        orchestrator: PipelineOrchestrator,
        request_text: str | None,
        mode: InputMode = InputMode.AUTO,
    ):
        """
        Initialize stream. Nothing runs until start() or events().

        Args:
            orchestrator: Pipeline orchestrator
            request_text: Raw caller payload
            mode: How to interpret the payload
        """
        self.orchestrator = orchestrator
        self.request_text = request_text
        self.mode = mode
        self.history: list[ProgressEvent] = []
        self._queue: asyncio.Queue[ProgressEvent] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    @property
    def is_finished(self) -> bool:
        return bool(self.history) and self.history[-1].is_terminal

    def start(self) -> None:
        """Start the producer task (idempotent)."""
        if self._task is None:
            self._task = asyncio.create_task(self._produce())

    async def events(self) -> AsyncIterator[ProgressEvent]:
        """
        Yield events in emission order, ending with the terminal event.

        Leaving the iteration early cancels the pipeline.
        """
        self.start()
        try:
            while True:
                event = await self._queue.get()
                yield event
                if event.is_terminal:
                    break
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        """Cancel the producer if it is still running."""
        if self._task is None or self._task.done():
            return
        logger.info("Progress consumer gone, cancelling pipeline")
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _produce(self) -> None:
        try:
            parsed = parse_request_text(self.request_text, self.mode)
        except PrecheckError as e:
            await self._emit(TaskState.COMPLETED, e.message)
            return

        try:
            await self.orchestrator.run(
                url=parsed.url,
                text=parsed.text,
                on_transition=self._on_transition,
            )
        except Exception as e:
            logger.exception("Pipeline crashed")
            if not self.is_finished:
                await self._emit(TaskState.COMPLETED, f"Error processing request: {e}")

    async def _on_transition(self, state: PipelineState) -> None:
        if state.stage in (PipelineStage.COMPLETED, PipelineStage.FAILED):
            await self._emit(TaskState.COMPLETED, format_result(state), state.stage, state)
        else:
            await self._emit(TaskState.WORKING, format_transition(state), state.stage)

    async def _emit(
        self,
        state: TaskState,
        message: str,
        stage: PipelineStage | None = None,
        result: PipelineState | None = None,
    ) -> None:
        event = ProgressEvent(state=state, message=message, stage=stage, result=result)
        self.history.append(event)
        await self._queue.put(event)
        logger.debug(f"Progress event: {state.value} {stage.value if stage else '-'}")


# ═══════════════════════════════════════════════════════════════════════════
# Message formatting
# ═══════════════════════════════════════════════════════════════════════════


def format_transition(state: PipelineState) -> str:
    """Status message for entering a working stage."""
    statuses = state.stage_statuses

    if state.stage == PipelineStage.ACQUIRING:
        return f"### Process Status\nStarting processing for: {state.source}"

    if state.stage == PipelineStage.TRANSCRIBING:
        outcome = statuses.get(PipelineStage.ACQUIRING.value, "")
        return f"### Process Status\n{outcome}\nStarting transcription..."

    if state.stage == PipelineStage.ENRICHING:
        if state.transcript:
            return (
                f"### Transcription Completed\n\n{state.transcript}\n\n"
                "---\nGenerating summary..."
            )
        outcome = statuses.get(PipelineStage.TRANSCRIBING.value, "")
        return f"### Process Status\n{outcome}\nGenerating summary..."

    return f"### Process Status\n{state.status}"


def format_result(state: PipelineState) -> str:
    """Consolidated terminal message with every available result."""
    if state.stage == PipelineStage.FAILED:
        header = f"### Processing Failed ({state.failed_stage.value})"
    else:
        header = "### Processing Finished"

    if state.ideas:
        ideas = "\n".join(f"- {idea}" for idea in state.ideas)
    else:
        ideas = "No ideas generated."

    lines = [
        header,
        f"**Source:** {state.source}",
        "",
        "#### Full Transcription",
        state.transcript or "Not available.",
        "",
        "---",
        "",
        "#### Executive Summary",
        state.summary or "Summary could not be generated.",
        "",
        "#### Content Ideas",
        ideas,
        "",
        "---",
        f"*Status: {state.status}*",
    ]
    if state.engine_used:
        lines.append(f"*Engine: {state.engine_used}*")
    if state.strategy_used:
        lines.append(f"*Download strategy: {state.strategy_used}*")
    if state.error_hint:
        lines += ["", f"> **Hint:** {state.error_hint}"]

    return "\n".join(lines)
