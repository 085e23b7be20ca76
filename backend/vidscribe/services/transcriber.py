"""
Speech-to-text service.

Reads the acquired audio artifact and sends the raw bytes to the Whisper API.
No fallback provider: a failure here is reported by the transcribe stage.
"""

import asyncio
import logging
import time
from pathlib import Path

from vidscribe.services.ai_clients import WhisperClient
from vidscribe.utils.media_utils import audio_mime_type

logger = logging.getLogger(__name__)
perf_logger = logging.getLogger("vidscribe.perf")


class WhisperTranscriber:
    """
    Audio transcription service using the Whisper API.

    Example:
        async with WhisperClient.from_settings(settings) as client:
            transcriber = WhisperTranscriber(client)
            text = await transcriber.transcribe(Path("data/downloads/audio_1.mp3"))
    """

    def __init__(self, whisper_client: WhisperClient):
        """
        Initialize transcriber.

        Args:
            whisper_client: Whisper client for transcription API calls
        """
        self.whisper_client = whisper_client

    async def transcribe(self, audio_path: Path) -> str:
        """
        Transcribe an audio file.

        Args:
            audio_path: Path to audio artifact

        Returns:
            Transcript text (may be empty if the audio has no speech)

        Raises:
            FileNotFoundError: If the artifact doesn't exist
            AIClientError: If the provider call fails
        """
        audio_path = Path(audio_path)
        if not audio_path.exists():
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        start_time = time.time()

        # File read off the event loop
        audio = await asyncio.to_thread(audio_path.read_bytes)

        text = await self.whisper_client.transcribe(
            audio,
            filename=audio_path.name,
            content_type=audio_mime_type(audio_path),
        )

        elapsed = time.time() - start_time
        perf_logger.info(
            f"TRANSCRIBE | {len(audio) / 1024 / 1024:.1f}MB | "
            f"chars={len(text)} | {elapsed:.1f}s"
        )
        return text
