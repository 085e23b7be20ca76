"""
Service handles shared by all requests.

Clients and the acquisition cascade are built once at startup and passed
explicitly to the pipeline stages. They hold no per-request state.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from vidscribe.config import Settings, resolve_cookies_file
from vidscribe.services.acquisition import AcquisitionStrategyCascade
from vidscribe.services.ai_clients import BaseAIClient, ClaudeClient, GroqClient, WhisperClient
from vidscribe.services.summarizer import EnrichmentFailover
from vidscribe.services.transcriber import WhisperTranscriber

logger = logging.getLogger(__name__)


@dataclass
class ServiceHandles:
    """
    Long-lived collaborators of the pipeline.

    Example:
        handles = ServiceHandles.from_settings(settings)
        try:
            orchestrator = PipelineOrchestrator.from_handles(handles)
            ...
        finally:
            await handles.aclose()
    """

    settings: Settings
    cascade: AcquisitionStrategyCascade
    transcriber: WhisperTranscriber
    failover: EnrichmentFailover
    whisper_client: WhisperClient
    primary: BaseAIClient
    secondary: BaseAIClient
    cookies_file: Path | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceHandles":
        """
        Build all handles from settings.

        Args:
            settings: Application settings (provider keys must be set)

        Returns:
            ServiceHandles ready for use
        """
        cookies_file = resolve_cookies_file(settings)
        if cookies_file:
            logger.info(f"Stored credentials available: {cookies_file}")

        whisper_client = WhisperClient.from_settings(settings)
        primary = ClaudeClient.from_settings(settings)
        secondary = GroqClient.from_settings(settings)

        return cls(
            settings=settings,
            cascade=AcquisitionStrategyCascade.from_settings(settings, cookies_file),
            transcriber=WhisperTranscriber(whisper_client),
            failover=EnrichmentFailover(primary, secondary, settings),
            whisper_client=whisper_client,
            primary=primary,
            secondary=secondary,
            cookies_file=cookies_file,
        )

    async def check_services(self) -> dict:
        """
        Report availability of external services.

        Returns:
            Dict with speech-to-text reachability and provider names
        """
        return {
            "whisper": await self.whisper_client.check_health(),
            "primary": self.primary.display_name,
            "secondary": self.secondary.display_name,
            "cookies": self.cookies_file is not None,
            "po_token": bool(self.settings.ytdlp_po_token),
        }

    async def aclose(self) -> None:
        """Close all provider clients."""
        for client in (self.primary, self.secondary, self.whisper_client):
            try:
                await client.close()
            except Exception as e:
                logger.warning(f"Failed to close {type(client).__name__}: {e}")
