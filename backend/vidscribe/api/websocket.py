"""
WebSocket handler for real-time job progress.

Replays the job's event history, then streams live events until the
terminal `completed` event.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from vidscribe.models.schemas import TaskState
from vidscribe.services.job_manager import get_job_manager

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

HEARTBEAT_INTERVAL = 30.0


@router.websocket("/ws/{job_id}")
async def job_progress_websocket(websocket: WebSocket, job_id: str) -> None:
    """
    WebSocket endpoint for job progress events.

    Messages are serialized ProgressEvent objects (state, message, stage,
    timestamp, result). Connection closes after the `completed` event.

    Example client (Python):
        async with websockets.connect(f"ws://localhost:8801/ws/{job_id}") as ws:
            async for message in ws:
                data = json.loads(message)
                print(f"{data['state']}: {data['message']}")

    Args:
        websocket: WebSocket connection
        job_id: Job identifier to subscribe to
    """
    job_manager = get_job_manager()

    job = job_manager.get_job(job_id)
    if not job:
        await websocket.close(code=4004, reason=f"Job not found: {job_id}")
        return

    await websocket.accept()
    logger.info(f"WebSocket connected for job {job_id}")

    # Subscribe before replaying so no event falls between history and live
    queue = job_manager.subscribe(job_id)
    replayed = len(job.events)

    try:
        for event in job.events[:replayed]:
            await websocket.send_json(event.model_dump(mode="json"))

        if replayed and job.events[replayed - 1].is_terminal:
            await websocket.close()
            return

        while True:
            try:
                message = await asyncio.wait_for(queue.get(), timeout=HEARTBEAT_INTERVAL)
            except asyncio.TimeoutError:
                await websocket.send_json({"type": "heartbeat"})
                continue

            await websocket.send_json(message)

            if message.get("state") == TaskState.COMPLETED.value:
                await websocket.close()
                break

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for job {job_id}")
    finally:
        job_manager.unsubscribe(job_id, queue)
        logger.info(f"WebSocket closed for job {job_id}")
