"""
HTTP API routes for the summarization pipeline.

Provides endpoints for:
- Streaming one request as Server-Sent Events
- Starting background jobs
- Querying job status
"""

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from fastapi.responses import StreamingResponse

from vidscribe.models.schemas import ProcessingJob, ProcessRequest
from vidscribe.services.job_manager import get_job_manager
from vidscribe.services.pipeline import PipelineOrchestrator, ProgressStream

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["pipeline"])


def get_orchestrator(request: Request) -> PipelineOrchestrator:
    """Orchestrator built at startup (see main.lifespan)."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Pipeline is not initialized")
    return orchestrator


@router.post("/process")
async def process_stream(body: ProcessRequest, request: Request) -> StreamingResponse:
    """
    Process a URL or passage, streaming progress as Server-Sent Events.

    Each event is one `data: <ProgressEvent JSON>` frame. The stream ends
    after the `completed` event. Disconnecting cancels the pipeline.

    Args:
        body: ProcessRequest with text or an A2A-style message

    Returns:
        text/event-stream response
    """
    stream = ProgressStream(get_orchestrator(request), body.combined_text(), body.mode)

    async def event_source():
        try:
            async for event in stream.events():
                yield f"data: {event.model_dump_json()}\n\n"
        finally:
            await stream.aclose()

    logger.info(f"Streaming request ({body.mode.value})")
    return StreamingResponse(
        event_source(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("/jobs", response_model=ProcessingJob)
async def start_job(
    body: ProcessRequest,
    request: Request,
    background_tasks: BackgroundTasks,
) -> ProcessingJob:
    """
    Start background processing.

    Use WebSocket /ws/{job_id} or GET /api/jobs/{job_id} to follow progress.

    Args:
        body: ProcessRequest with text or an A2A-style message

    Returns:
        ProcessingJob with job_id for tracking
    """
    orchestrator = get_orchestrator(request)
    text = body.combined_text()

    job_manager = get_job_manager()
    job = job_manager.create_job(text)

    stream = ProgressStream(orchestrator, text, body.mode)
    background_tasks.add_task(job_manager.run_job, job.job_id, stream)

    logger.info(f"Started job {job.job_id}")
    return job


@router.get("/jobs/{job_id}", response_model=ProcessingJob)
async def get_job_status(job_id: str) -> ProcessingJob:
    """
    Get processing job status and event history.

    Raises:
        404: Job not found
    """
    job_manager = get_job_manager()
    job = job_manager.get_job(job_id)

    if not job:
        raise HTTPException(
            status_code=404,
            detail=f"Job not found: {job_id}",
        )

    return job


@router.get("/jobs", response_model=list[ProcessingJob])
async def list_jobs() -> list[ProcessingJob]:
    """List all processing jobs."""
    job_manager = get_job_manager()
    return job_manager.list_jobs()
