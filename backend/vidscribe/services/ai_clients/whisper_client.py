"""
Whisper transcription client implementation.

Async HTTP client for Groq's OpenAI-compatible Whisper transcription API
with retry logic on transient network errors.
"""

import logging
import time

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vidscribe.config import Settings
from vidscribe.services.ai_clients.base import (
    AIClientConnectionError,
    AIClientResponseError,
    AIClientTimeoutError,
)

logger = logging.getLogger(__name__)

# Retry configuration for transient errors
RETRY_DECORATOR = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=60),
    retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
    reraise=True,
)


class WhisperClient:
    """
    Async HTTP client for the Whisper transcription API.

    Raw audio bytes in, transcript text out.

    Example:
        async with WhisperClient.from_settings(settings) as client:
            text = await client.transcribe(audio_bytes, "audio.mp3", "audio/mpeg")
    """

    provider = "whisper"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = "whisper-large-v3-turbo",
        language: str | None = None,
        timeout: float = 600.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize Whisper client.

        Args:
            base_url: OpenAI-compatible API base URL
            api_key: API key
            model: Transcription model
            language: Language code (None = auto-detect)
            timeout: Request timeout in seconds
            http_client: Optional preconfigured HTTP client
        """
        self.base_url = base_url
        self.model = model
        self.language = language
        self.http_client = http_client or httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "WhisperClient":
        """
        Create WhisperClient from application settings.

        Args:
            settings: Application settings

        Returns:
            Configured WhisperClient instance
        """
        return cls(
            base_url=settings.groq_url,
            api_key=(settings.groq_api_key or "").strip(),
            model=settings.whisper_model,
            language=settings.whisper_language,
            timeout=settings.transcribe_timeout,
        )

    async def __aenter__(self) -> "WhisperClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.http_client.aclose()

    async def check_health(self) -> bool:
        """
        Check availability of the transcription API.

        Returns:
            True if the models endpoint answers, False otherwise
        """
        try:
            response = await self.http_client.get("/models", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"Whisper API not available: {e}")
        return False

    async def transcribe(
        self,
        audio: bytes,
        filename: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        Transcribe raw audio bytes.

        Args:
            audio: Audio file content
            filename: Upload file name (extension hints the format)
            content_type: Upload MIME type

        Returns:
            Transcript text

        Raises:
            AIClientError: If transcription fails
        """
        size_mb = len(audio) / 1024 / 1024
        logger.info(f"Transcribing: {filename} ({size_mb:.1f} MB), model: {self.model}")

        start_time = time.time()

        try:
            result = await self._post_transcription(audio, filename, content_type)
        except httpx.TimeoutException as e:
            elapsed = time.time() - start_time
            logger.error(f"Transcription timeout after {elapsed:.1f}s: {e}")
            raise AIClientTimeoutError(
                f"Transcription timeout after {elapsed:.1f}s",
                provider=self.provider,
                model=self.model,
                original_error=e,
            ) from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Transcription HTTP error: "
                f"{e.response.status_code} - {e.response.text[:200]}"
            )
            raise AIClientResponseError(
                f"Transcription failed: HTTP {e.response.status_code}",
                provider=self.provider,
                model=self.model,
                status_code=e.response.status_code,
                response_body=e.response.text[:500],
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Transcription failed: {type(e).__name__}: {e}")
            raise AIClientConnectionError(
                f"Transcription failed: {e}",
                provider=self.provider,
                original_error=e,
            ) from e

        text = (result.get("text") or "").strip()
        elapsed = time.time() - start_time
        logger.info(f"Transcription complete: {len(text)} chars, elapsed: {elapsed:.1f}s")
        return text

    @RETRY_DECORATOR
    async def _post_transcription(
        self,
        audio: bytes,
        filename: str,
        content_type: str,
    ) -> dict:
        data = {"model": self.model, "response_format": "json"}
        if self.language:
            data["language"] = self.language

        response = await self.http_client.post(
            "/audio/transcriptions",
            files={"file": (filename, audio, content_type)},
            data=data,
        )
        response.raise_for_status()
        return response.json()
