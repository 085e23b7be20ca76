"""
Pydantic models for the media summarization pipeline.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, computed_field


class PlatformClass(str, Enum):
    """Acquisition class of a source URL."""
    RESTRICTED = "restricted-platform"
    GENERIC = "generic"


class PipelineStage(str, Enum):
    """Lifecycle of one pipeline run. Strictly forward-only."""
    CREATED = "created"
    ACQUIRING = "acquiring"
    TRANSCRIBING = "transcribing"
    ENRICHING = "enriching"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskState(str, Enum):
    """Lifecycle tag of a progress event."""
    WORKING = "working"
    COMPLETED = "completed"


class InputMode(str, Enum):
    """How the caller payload should be interpreted.

    - auto: first http(s) URL in the text, otherwise rejected
    - text: the whole payload is a passage to summarize
    """
    AUTO = "auto"
    TEXT = "text"


# ═══════════════════════════════════════════════════════════════════════════
# Acquisition
# ═══════════════════════════════════════════════════════════════════════════


class AcquisitionStrategy(BaseModel):
    """One spoofing variant for the extraction tool.

    Attributes:
        name: Identifier reported as the strategy used
        player_client: Simulated client identity (yt-dlp player_client)
        use_credentials: Attach the stored cookies file
        use_override_token: Attach the manual override (PO) token
        user_agent: User-Agent header for the tool
        referer: Referer header for the tool
        extra_args: Additional raw tool parameters
    """

    name: str
    player_client: str | None = None
    use_credentials: bool = False
    use_override_token: bool = False
    user_agent: str | None = None
    referer: str | None = None
    extra_args: list[str] = Field(default_factory=list)


class AcquisitionResult(BaseModel):
    """Local audio artifact produced by the cascade."""

    artifact_path: Path
    duration: float = 0.0
    strategy_used: str
    attempts: int = 1


# ═══════════════════════════════════════════════════════════════════════════
# Enrichment
# ═══════════════════════════════════════════════════════════════════════════


class EnrichmentResult(BaseModel):
    """Structured summary produced by the enrichment providers."""

    summary: str
    ideas: list[str] = Field(default_factory=list)
    status: str
    engine_used: str


# ═══════════════════════════════════════════════════════════════════════════
# Pipeline State
# ═══════════════════════════════════════════════════════════════════════════


class PipelineState(BaseModel):
    """Request-scoped record threaded through Acquire/Transcribe/Enrich.

    Stage-owned fields are written only by their stage (see STAGE_FIELDS in
    vidscribe.services.pipeline.state). Bookkeeping fields (stage,
    failed_stage, status, stage_statuses, error_hint) are written by the
    merge function.
    """

    # Input
    url: str | None = None
    source_text: str | None = None

    # Acquire
    artifact_path: Path | None = None
    duration: float = 0.0
    strategy_used: str | None = None

    # Transcribe
    transcript: str | None = None

    # Enrich
    summary: str | None = None
    ideas: list[str] = Field(default_factory=list)
    engine_used: str | None = None

    # Bookkeeping
    stage: PipelineStage = PipelineStage.CREATED
    failed_stage: PipelineStage | None = None
    status: str = "Created"
    stage_statuses: dict[str, str] = Field(default_factory=dict)
    error_hint: str | None = None

    @computed_field
    @property
    def source(self) -> str:
        """URL or a short preview of the text passage."""
        if self.url:
            return self.url
        text = (self.source_text or "").strip()
        if len(text) > 80:
            return text[:80].rsplit(" ", 1)[0] + "..."
        return text


class StagePatch(BaseModel):
    """Partial update returned by a stage.

    Attributes:
        stage: Stage that produced the patch
        updates: Values for fields owned by the stage
        status: Human-readable stage outcome
        ok: False if the stage failed or was skipped
        skipped: True if the stage did not run due to unmet preconditions
        hint: Remediation hint for the caller (failure only)
    """

    stage: PipelineStage
    updates: dict = Field(default_factory=dict)
    status: str
    ok: bool = True
    skipped: bool = False
    hint: str | None = None


# ═══════════════════════════════════════════════════════════════════════════
# Progress
# ═══════════════════════════════════════════════════════════════════════════


class ProgressEvent(BaseModel):
    """One unit of the live notification stream."""

    state: TaskState
    message: str
    stage: PipelineStage | None = None
    timestamp: datetime = Field(default_factory=datetime.now)
    result: PipelineState | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state == TaskState.COMPLETED


# ═══════════════════════════════════════════════════════════════════════════
# API Request/Response Models
# ═══════════════════════════════════════════════════════════════════════════


class MessagePart(BaseModel):
    """A2A-style message part."""

    type: str = "text"
    text: str | None = None


class AgentMessage(BaseModel):
    """A2A-style message with text parts."""

    role: str = "user"
    parts: list[MessagePart] = Field(default_factory=list)


class ProcessRequest(BaseModel):
    """Request to process a URL or a text passage.

    Either `text` or an A2A-style `message` may carry the payload.
    """

    text: str | None = Field(
        default=None,
        description="URL or passage to process",
        examples=["https://www.youtube.com/watch?v=q6EoRBvdVPQ"],
    )
    message: AgentMessage | None = None
    mode: InputMode = InputMode.AUTO

    def combined_text(self) -> str:
        """Join the plain text and all text parts of the message."""
        chunks: list[str] = []
        if self.text:
            chunks.append(self.text)
        if self.message:
            chunks.extend(
                part.text for part in self.message.parts
                if part.type == "text" and part.text
            )
        return "\n".join(chunks)


class ProcessingJob(BaseModel):
    """Background processing job state."""

    job_id: str
    source: str
    stage: PipelineStage = PipelineStage.CREATED
    current_message: str = ""
    events: list[ProgressEvent] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = None
    result: PipelineState | None = None

    @property
    def is_finished(self) -> bool:
        return any(event.is_terminal for event in self.events)
