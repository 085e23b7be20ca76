"""
Stage abstraction for pipeline processing.

Each stage:
- Has a lifecycle name (PipelineStage) and a per-stage timeout
- Receives a read-only copy of the accumulated PipelineState
- Returns a StagePatch with its own fields and a status line
- Checks its own preconditions and returns a "skipped" patch when they are
  not met, instead of working on missing data

Example:
    class EnrichStage(BaseStage):
        name = PipelineStage.ENRICHING
        failure_label = "Summarization"

        async def run(self, state: PipelineState) -> StagePatch:
            if not state.transcript:
                return self.skipped("no transcript")
            result = await self.failover.enrich(state.transcript)
            return self.succeeded(result.status, summary=result.summary)
"""

from abc import ABC, abstractmethod

from vidscribe.models.schemas import PipelineStage, PipelineState, StagePatch


class BaseStage(ABC):
    """Abstract base class for pipeline stages.

    Subclasses must implement:
    - name: Lifecycle stage the pipeline is in while this stage runs
    - failure_label: Prefix of failure/skip statuses ("Download", ...)
    - run(): Async method that performs the work

    Attributes:
        timeout: Seconds before the orchestrator abandons the stage
            (None = no limit)
    """

    name: PipelineStage
    failure_label: str
    timeout: float | None = None

    @abstractmethod
    async def run(self, state: PipelineState) -> StagePatch:
        """Execute the stage.

        Args:
            state: Accumulated state (read-only copy)

        Returns:
            Patch with the stage's fields and status

        Raises:
            Exception: Any stage-local error. The orchestrator converts it
                into a failure patch with failed().
        """
        pass

    def succeeded(self, status: str, **updates) -> StagePatch:
        """Patch for a completed stage."""
        return StagePatch(stage=self.name, updates=updates, status=status)

    def skipped(self, reason: str, ok: bool = False) -> StagePatch:
        """Patch for a stage that did not run.

        Args:
            reason: Why the stage did not run
            ok: True when skipping is the expected path (e.g. text input)
        """
        if ok:
            status = f"{self.failure_label} skipped: {reason}"
        else:
            status = f"{self.failure_label} skipped: precondition unmet ({reason})"
        return StagePatch(stage=self.name, status=status, ok=ok, skipped=True)

    def failed(self, error: Exception | str, hint: str | None = None) -> StagePatch:
        """Patch for a failed stage.

        Args:
            error: Underlying error or message
            hint: Remediation hint (taken from error.hint if not given)
        """
        if hint is None:
            hint = getattr(error, "hint", None)
        message = str(error) or type(error).__name__
        return StagePatch(
            stage=self.name,
            status=f"{self.failure_label} failed: {message}",
            ok=False,
            hint=hint,
        )
