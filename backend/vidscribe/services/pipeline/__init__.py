"""
Pipeline module for media summarization.

This package contains the pipeline components:
- state: lifecycle state machine and pure patch merging
- orchestrator: Acquire -> Transcribe -> Enrich coordination
- progress_stream: ordered progress events for one request

Example:
    from vidscribe.services.pipeline import PipelineOrchestrator, ProgressStream

    orchestrator = PipelineOrchestrator.from_handles(handles)
    stream = ProgressStream(orchestrator, "https://youtu.be/...")
    async for event in stream.events():
        ...
"""

from .orchestrator import PipelineOrchestrator, TransitionCallback
from .progress_stream import ProgressStream, format_result, format_transition
from .state import STAGE_FIELDS, PipelineError, merge_patch, transition

__all__ = [
    # Main orchestrator
    "PipelineOrchestrator",
    "PipelineError",
    "TransitionCallback",
    # State machine
    "STAGE_FIELDS",
    "merge_patch",
    "transition",
    # Progress
    "ProgressStream",
    "format_result",
    "format_transition",
]
