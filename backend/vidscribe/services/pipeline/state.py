"""
Pipeline state machine and patch merging.

The lifecycle is strictly linear:

    created -> acquiring -> transcribing -> enriching -> completed | failed

Stages never mutate PipelineState. They return a StagePatch and
merge_patch() produces the next state.
"""

from vidscribe.models.schemas import PipelineStage, PipelineState, StagePatch

# Fields each stage is allowed to write
STAGE_FIELDS: dict[PipelineStage, frozenset[str]] = {
    PipelineStage.ACQUIRING: frozenset({"artifact_path", "duration", "strategy_used"}),
    PipelineStage.TRANSCRIBING: frozenset({"transcript"}),
    PipelineStage.ENRICHING: frozenset({"summary", "ideas", "engine_used"}),
}

# Legal forward transitions
TRANSITIONS: dict[PipelineStage, frozenset[PipelineStage]] = {
    PipelineStage.CREATED: frozenset({PipelineStage.ACQUIRING}),
    PipelineStage.ACQUIRING: frozenset({PipelineStage.TRANSCRIBING}),
    PipelineStage.TRANSCRIBING: frozenset({PipelineStage.ENRICHING}),
    PipelineStage.ENRICHING: frozenset({PipelineStage.COMPLETED, PipelineStage.FAILED}),
    PipelineStage.COMPLETED: frozenset(),
    PipelineStage.FAILED: frozenset(),
}

TERMINAL_STAGES = frozenset({PipelineStage.COMPLETED, PipelineStage.FAILED})


class PipelineError(Exception):
    """
    Pipeline state machine violation.

    Attributes:
        stage: Stage the pipeline was in
        message: Error description
        cause: Original exception (if any)
    """

    def __init__(
        self,
        stage: PipelineStage,
        message: str,
        cause: Exception | None = None,
    ):
        self.stage = stage
        self.message = message
        self.cause = cause
        super().__init__(f"[{stage.value}] {message}")


def transition(state: PipelineState, target: PipelineStage) -> PipelineState:
    """
    Move the pipeline to the next lifecycle stage.

    Args:
        state: Current state
        target: Stage to enter

    Returns:
        New state with `stage` set to target

    Raises:
        PipelineError: If the transition is not a legal forward step
    """
    if target not in TRANSITIONS[state.stage]:
        raise PipelineError(
            state.stage,
            f"Illegal transition {state.stage.value} -> {target.value}",
        )
    return state.model_copy(update={"stage": target}, deep=True)


def merge_patch(state: PipelineState, patch: StagePatch) -> PipelineState:
    """
    Merge a stage patch into the state.

    Rules:
    - the patch must come from the stage the pipeline is in
    - only fields owned by that stage may be written
    - None values are ignored, so earlier values are never cleared
    - the stage outcome is always recorded in stage_statuses
    - the pipeline-level status follows the latest stage until the first
      failure, then stays on that failure

    Args:
        state: Current state (not modified)
        patch: Stage output

    Returns:
        New merged state

    Raises:
        PipelineError: On a stage mismatch or a write to a foreign field
    """
    if patch.stage != state.stage:
        raise PipelineError(
            state.stage,
            f"Patch from {patch.stage.value} applied while in {state.stage.value}",
        )

    allowed = STAGE_FIELDS.get(patch.stage, frozenset())
    foreign = set(patch.updates) - allowed
    if foreign:
        raise PipelineError(
            state.stage,
            f"Stage {patch.stage.value} cannot write fields: {sorted(foreign)}",
        )

    update = {key: value for key, value in patch.updates.items() if value is not None}
    update["stage_statuses"] = {**state.stage_statuses, patch.stage.value: patch.status}

    if state.failed_stage is None:
        update["status"] = patch.status
        if not patch.ok:
            update["failed_stage"] = patch.stage
            update["error_hint"] = patch.hint

    return state.model_copy(update=update, deep=True)
