"""
Acquire stage: source URL -> local audio artifact + duration.
"""

import logging

from vidscribe.config import Settings
from vidscribe.models.schemas import PipelineStage, PipelineState, StagePatch
from vidscribe.services.acquisition import AcquisitionStrategyCascade
from vidscribe.services.stages.base import BaseStage
from vidscribe.utils.media_utils import get_media_duration

logger = logging.getLogger(__name__)


class AcquireStage(BaseStage):
    """Download audio through the strategy cascade, then probe its duration.

    Input (from state):
        - url: Source URL (text input skips the stage)

    Output fields:
        artifact_path, duration, strategy_used

    A failed duration probe leaves duration at 0 and never fails the stage.
    """

    name = PipelineStage.ACQUIRING
    failure_label = "Download"

    def __init__(self, cascade: AcquisitionStrategyCascade, settings: Settings):
        """Initialize acquire stage.

        Args:
            cascade: Acquisition strategy cascade
            settings: Application settings (probe and timeouts)
        """
        self.cascade = cascade
        self.settings = settings
        self.timeout = settings.acquire_timeout

    async def run(self, state: PipelineState) -> StagePatch:
        if not state.url:
            if state.source_text:
                return self.skipped("text input", ok=True)
            return self.skipped("no source URL")

        result = await self.cascade.acquire(state.url)

        duration = await get_media_duration(
            result.artifact_path,
            ffprobe_path=self.settings.ffprobe_path,
            timeout=self.settings.probe_timeout,
            runner=self.cascade.runner,
        )
        if duration is None:
            logger.warning(f"Duration probe failed for {result.artifact_path.name}, using 0")
            duration = 0.0

        return self.succeeded(
            f"Audio downloaded ({round(duration)}s, strategy: {result.strategy_used})",
            artifact_path=result.artifact_path,
            duration=duration,
            strategy_used=result.strategy_used,
        )
