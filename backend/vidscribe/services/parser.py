"""
Request payload parser.

Turns the caller's free text into pipeline input:

1. auto mode: the first http(s) URL found anywhere in the text.
    Example: "please summarize https://youtu.be/abc123 thanks" -> https://youtu.be/abc123

2. text mode: the whole (stripped) payload is a passage to summarize.

Anything else is rejected before a pipeline is created.
"""

import logging
import re
from dataclasses import dataclass

from vidscribe.models.schemas import InputMode

logger = logging.getLogger(__name__)

# Characters that commonly trail a URL in chat text but are not part of it
TRAILING_PUNCTUATION = ".,;:!?)]}>'\""

URL_PATTERN = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)

INVALID_INPUT_MESSAGE = (
    "Please provide a valid video URL (YouTube or any public media link) "
    "to process, or send a text passage with mode \"text\"."
)


class PrecheckError(Exception):
    """Raised when the payload holds no recognizable URL or text."""

    def __init__(self, message: str = INVALID_INPUT_MESSAGE):
        self.message = message
        super().__init__(message)


@dataclass
class ParsedInput:
    """
    Pipeline input extracted from a request.

    Exactly one of url / text is set.
    """

    url: str | None = None
    text: str | None = None

    @property
    def is_url(self) -> bool:
        return self.url is not None


def extract_url(text: str) -> str | None:
    """
    Find the first http(s) URL in free text.

    Args:
        text: Caller message

    Returns:
        URL without trailing punctuation, or None
    """
    match = URL_PATTERN.search(text or "")
    if not match:
        return None
    url = match.group(0).rstrip(TRAILING_PUNCTUATION)
    return url or None


def parse_request_text(text: str | None, mode: InputMode = InputMode.AUTO) -> ParsedInput:
    """
    Parse caller text into pipeline input.

    Args:
        text: Joined text payload of the request
        mode: auto (URL required) or text (passage)

    Returns:
        ParsedInput with either url or text

    Raises:
        PrecheckError: If nothing usable was found
    """
    stripped = (text or "").strip()
    if not stripped:
        raise PrecheckError()

    if mode == InputMode.TEXT:
        logger.debug(f"Text input: {len(stripped)} chars")
        return ParsedInput(text=stripped)

    url = extract_url(stripped)
    if url is None:
        logger.info("No URL found in request payload")
        raise PrecheckError()

    logger.debug(f"URL input: {url}")
    return ParsedInput(url=url)
