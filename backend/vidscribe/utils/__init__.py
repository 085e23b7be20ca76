"""
Shared utilities for pipeline services.

Modules:
    json_utils: JSON object extraction from LLM responses
    media_utils: Artifact checks and ffprobe duration probe
    process_utils: Async subprocess execution with cancellation
"""

from vidscribe.utils.json_utils import (
    JSONExtractionError,
    extract_json_object,
    parse_json_object,
)
from vidscribe.utils.media_utils import (
    audio_mime_type,
    get_media_duration,
    is_valid_artifact,
)
from vidscribe.utils.process_utils import ProcessResult, ProcessRunner, run_process

__all__ = [
    # json_utils
    "JSONExtractionError",
    "extract_json_object",
    "parse_json_object",
    # media_utils
    "audio_mime_type",
    "get_media_duration",
    "is_valid_artifact",
    # process_utils
    "ProcessResult",
    "ProcessRunner",
    "run_process",
]
