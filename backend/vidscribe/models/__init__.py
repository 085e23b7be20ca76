"""
Pydantic models for the media summarization pipeline.
"""

from vidscribe.models.schemas import (
    AcquisitionResult,
    AcquisitionStrategy,
    AgentMessage,
    EnrichmentResult,
    InputMode,
    MessagePart,
    PipelineStage,
    PipelineState,
    PlatformClass,
    ProcessingJob,
    ProcessRequest,
    ProgressEvent,
    StagePatch,
    TaskState,
)

__all__ = [
    # Enums
    "InputMode",
    "PipelineStage",
    "PlatformClass",
    "TaskState",
    # Acquisition / enrichment
    "AcquisitionResult",
    "AcquisitionStrategy",
    "EnrichmentResult",
    # Pipeline
    "PipelineState",
    "StagePatch",
    "ProgressEvent",
    # API
    "AgentMessage",
    "MessagePart",
    "ProcessRequest",
    "ProcessingJob",
]
