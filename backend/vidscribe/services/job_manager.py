"""
Job manager for background pipeline runs.

Handles job lifecycle and WebSocket broadcasting for progress events.
"""

import asyncio
import logging
import uuid
from datetime import datetime

from vidscribe.models.schemas import ProcessingJob, ProgressEvent
from vidscribe.services.pipeline import ProgressStream

logger = logging.getLogger(__name__)


class JobManager:
    """
    Manager for processing jobs with WebSocket broadcasting.

    Stores jobs in-memory. Every event of a job is kept in its history and
    pushed to subscribed WebSocket clients.

    Example:
        manager = JobManager()
        job = manager.create_job("https://youtu.be/abc")

        # Subscribe to updates
        queue = manager.subscribe(job.job_id)

        # Drive the stream (records and broadcasts every event)
        await manager.run_job(job.job_id, ProgressStream(orchestrator, text))
    """

    def __init__(self):
        """Initialize job manager with empty stores."""
        self._jobs: dict[str, ProcessingJob] = {}
        self._subscribers: dict[str, list[asyncio.Queue]] = {}

    def create_job(self, source: str) -> ProcessingJob:
        """
        Create a new processing job.

        Args:
            source: Caller payload (URL or text)

        Returns:
            Created ProcessingJob with unique ID
        """
        job_id = str(uuid.uuid4())[:8]

        preview = source.strip()
        if len(preview) > 120:
            preview = preview[:120] + "..."

        job = ProcessingJob(job_id=job_id, source=preview)

        self._jobs[job_id] = job
        self._subscribers[job_id] = []

        logger.info(f"Created job {job_id} for {preview!r}")
        return job

    def get_job(self, job_id: str) -> ProcessingJob | None:
        """
        Get job by ID.

        Args:
            job_id: Job identifier

        Returns:
            ProcessingJob or None if not found
        """
        return self._jobs.get(job_id)

    def list_jobs(self) -> list[ProcessingJob]:
        """List all jobs."""
        return list(self._jobs.values())

    async def run_job(self, job_id: str, stream: ProgressStream) -> None:
        """
        Consume a progress stream, recording and broadcasting each event.

        Args:
            job_id: Job identifier
            stream: Not yet started progress stream for the job
        """
        async for event in stream.events():
            await self.record_event(job_id, event)

    async def record_event(self, job_id: str, event: ProgressEvent) -> None:
        """
        Append an event to the job and broadcast it to subscribers.

        Args:
            job_id: Job identifier
            event: Progress event
        """
        job = self._jobs.get(job_id)
        if not job:
            logger.warning(f"Job {job_id} not found for progress event")
            return

        job.events.append(event)
        job.current_message = event.message
        if event.stage is not None:
            job.stage = event.stage

        if event.is_terminal:
            job.completed_at = datetime.now()
            job.result = event.result
            logger.info(f"Job {job_id} finished: {job.stage.value}")

        await self._broadcast(job_id, event.model_dump(mode="json"))

    def subscribe(self, job_id: str) -> asyncio.Queue:
        """
        Subscribe to job progress events.

        Args:
            job_id: Job identifier

        Returns:
            Queue that will receive serialized events
        """
        queue: asyncio.Queue = asyncio.Queue()

        if job_id not in self._subscribers:
            self._subscribers[job_id] = []

        self._subscribers[job_id].append(queue)
        logger.debug(f"Client subscribed to job {job_id}")

        return queue

    def unsubscribe(self, job_id: str, queue: asyncio.Queue) -> None:
        """
        Unsubscribe from job progress events.

        Args:
            job_id: Job identifier
            queue: Queue to remove
        """
        if job_id in self._subscribers:
            try:
                self._subscribers[job_id].remove(queue)
                logger.debug(f"Client unsubscribed from job {job_id}")
            except ValueError:
                pass

    async def _broadcast(self, job_id: str, message: dict) -> None:
        """
        Broadcast message to all subscribers of a job.

        Args:
            job_id: Job identifier
            message: Message to broadcast
        """
        subscribers = self._subscribers.get(job_id, [])

        for queue in subscribers:
            await queue.put(message)


# Global job manager instance
job_manager = JobManager()


def get_job_manager() -> JobManager:
    """Get global job manager instance."""
    return job_manager
