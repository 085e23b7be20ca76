"""
Pipeline stages: Acquire -> Transcribe -> Enrich.

Each stage reads the accumulated PipelineState and returns a StagePatch.

Usage:
    from vidscribe.services.stages import AcquireStage, EnrichStage, TranscribeStage

    stages = [
        AcquireStage(cascade, settings),
        TranscribeStage(transcriber, settings),
        EnrichStage(failover, settings),
    ]
"""

from vidscribe.services.stages.acquire_stage import AcquireStage
from vidscribe.services.stages.base import BaseStage
from vidscribe.services.stages.enrich_stage import EnrichStage
from vidscribe.services.stages.transcribe_stage import TranscribeStage

__all__ = [
    "BaseStage",
    "AcquireStage",
    "TranscribeStage",
    "EnrichStage",
]
