"""
Access-control block classification of extraction tool errors.

The cascade only advances on errors a different client identity can fix.
Everything the classifier does not recognize is treated as non-retryable.
"""

import logging
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

# Signature: (error_text) -> True if access-control block
AccessBlockClassifier = Callable[[str], bool]


class MarkerClassifier:
    """
    Case-insensitive substring classifier.

    Example:
        classifier = MarkerClassifier(["sign in to confirm", "not a bot"])
        classifier("ERROR: Sign in to confirm you're not a bot")  # True
        classifier("ERROR: Unable to download webpage")            # False
    """

    def __init__(self, markers: Iterable[str]):
        self.markers = tuple(m.lower() for m in markers if m and m.strip())

    def __call__(self, error_text: str) -> bool:
        text = (error_text or "").lower()
        for marker in self.markers:
            if marker in text:
                logger.debug(f"Access block marker matched: {marker!r}")
                return True
        return False

    @classmethod
    def from_config(cls, config: dict) -> "MarkerClassifier":
        """Build from the access_block_markers list of acquisition.yaml."""
        return cls(config.get("access_block_markers") or [])
