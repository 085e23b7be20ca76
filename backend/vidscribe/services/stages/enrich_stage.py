"""
Enrich stage: transcript -> summary + content ideas.
"""

from vidscribe.config import Settings
from vidscribe.models.schemas import PipelineStage, PipelineState, StagePatch
from vidscribe.services.stages.base import BaseStage
from vidscribe.services.summarizer import EnrichmentFailover


class EnrichStage(BaseStage):
    """Summarize the transcript with primary/secondary provider failover.

    Input (from state):
        - transcript: Non-empty transcript

    Output fields:
        summary, ideas, engine_used
    """

    name = PipelineStage.ENRICHING
    failure_label = "Summarization"

    def __init__(self, failover: EnrichmentFailover, settings: Settings):
        self.failover = failover
        self.timeout = settings.enrich_timeout

    async def run(self, state: PipelineState) -> StagePatch:
        if not (state.transcript or "").strip():
            return self.skipped("no transcript")

        result = await self.failover.enrich(state.transcript)

        return self.succeeded(
            result.status,
            summary=result.summary,
            ideas=result.ideas,
            engine_used=result.engine_used,
        )
