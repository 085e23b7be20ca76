"""
JSON object extraction from LLM responses.

Providers asked for strict JSON still occasionally wrap the object in a
markdown code block or add a sentence around it. These helpers locate the
single top-level object and parse it, raising on anything else.

Example:
    from vidscribe.utils.json_utils import parse_json_object

    data = parse_json_object('```json\\n{"summary": "..."}\\n```')
"""

import json
import logging
import re

logger = logging.getLogger(__name__)

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class JSONExtractionError(ValueError):
    """Raised when a response does not contain exactly one JSON object."""

    pass


def extract_json_object(text: str) -> str:
    """
    Extract the first balanced JSON object from a response.

    Args:
        text: Raw LLM response

    Returns:
        JSON object text (empty string if no opening brace was found)

    Example:
        >>> extract_json_object('Result: {"a": {"b": 1}} done')
        '{"a": {"b": 1}}'
    """
    if not text:
        return ""

    cleaned = text.strip()

    code_block_match = _CODE_BLOCK_RE.search(cleaned)
    if code_block_match:
        cleaned = code_block_match.group(1).strip()

    start = cleaned.find("{")
    if start == -1:
        return ""

    end = _matching_brace(cleaned, start)
    if end == -1:
        # Unbalanced - let the JSON parser report it
        return cleaned[start:]
    return cleaned[start : end + 1]


def _matching_brace(text: str, start: int) -> int:
    """Index of the brace closing text[start], ignoring braces in strings."""
    depth = 0
    in_string = False
    escape_next = False

    for i in range(start, len(text)):
        char = text[i]
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i

    return -1


def parse_json_object(text: str) -> dict:
    """
    Parse a response that must contain one JSON object.

    Args:
        text: Raw LLM response

    Returns:
        Parsed object

    Raises:
        JSONExtractionError: If the response is empty, has no object,
            or the object is malformed
    """
    if not text or not text.strip():
        raise JSONExtractionError("empty response")

    json_str = extract_json_object(text)
    if not json_str:
        raise JSONExtractionError("no JSON object found in response")

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        preview = json_str[:200] + "..." if len(json_str) > 200 else json_str
        logger.warning(f"Failed to parse JSON: {e}. Input: {preview}")
        raise JSONExtractionError(f"malformed JSON: {e}") from e

    if not isinstance(data, dict):
        raise JSONExtractionError(f"expected JSON object, got {type(data).__name__}")

    return data
