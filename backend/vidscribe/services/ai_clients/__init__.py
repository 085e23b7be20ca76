"""
AI Clients package for LLM and speech-to-text providers.

- ClaudeClient: Anthropic Claude API (primary enrichment)
- GroqClient: Groq chat completions (secondary enrichment)
- WhisperClient: Groq Whisper transcription

Usage:
    from vidscribe.services.ai_clients import BaseAIClient, ClaudeClient, GroqClient

    async def enrich(client: BaseAIClient, prompt: str) -> str:
        return await client.generate(prompt, json_output=True)
"""

from vidscribe.services.ai_clients.base import (
    AIClientConfig,
    AIClientConnectionError,
    AIClientError,
    AIClientResponseError,
    AIClientTimeoutError,
    BaseAIClient,
    BaseAIClientImpl,
)
from vidscribe.services.ai_clients.claude_client import ClaudeClient
from vidscribe.services.ai_clients.groq_client import GroqClient
from vidscribe.services.ai_clients.whisper_client import WhisperClient

__all__ = [
    # Protocol and base classes
    "BaseAIClient",
    "BaseAIClientImpl",
    "AIClientConfig",
    # Errors
    "AIClientError",
    "AIClientTimeoutError",
    "AIClientConnectionError",
    "AIClientResponseError",
    # Implementations
    "ClaudeClient",
    "GroqClient",
    "WhisperClient",
]
