"""
Media utilities for audio artifact handling.

Provides common functions for media file operations:
- Duration detection via ffprobe
- Artifact validity check
- Audio MIME type detection for upload
"""

import asyncio
import logging
from pathlib import Path

from vidscribe.utils.process_utils import ProcessRunner, run_process

logger = logging.getLogger(__name__)

AUDIO_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
    ".webm": "audio/webm",
}


def is_valid_artifact(path: Path) -> bool:
    """Check that an artifact exists and is non-empty.

    Args:
        path: Path to artifact

    Returns:
        True if the file exists with size > 0
    """
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


def audio_mime_type(path: Path) -> str:
    """Guess upload MIME type from extension."""
    return AUDIO_MIME_TYPES.get(path.suffix.lower(), "application/octet-stream")


async def get_media_duration(
    media_path: Path,
    ffprobe_path: str = "ffprobe",
    timeout: float | None = 30.0,
    runner: ProcessRunner = run_process,
) -> float | None:
    """Get media duration using ffprobe.

    Args:
        media_path: Path to media file
        ffprobe_path: ffprobe executable
        timeout: Probe timeout in seconds
        runner: Subprocess runner

    Returns:
        Duration in seconds, or None if ffprobe fails
    """
    cmd = [
        ffprobe_path,
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(media_path),
    ]
    try:
        result = await runner(cmd, timeout)
        if result.ok and result.stdout.strip():
            return float(result.stdout.strip().splitlines()[0])
        logger.warning(
            f"ffprobe failed for {media_path.name}: "
            f"code {result.returncode}, {result.stderr.strip()[:200]}"
        )
    except (OSError, ValueError, asyncio.TimeoutError) as e:
        logger.warning(f"ffprobe failed for {media_path.name}: {e}")

    return None
