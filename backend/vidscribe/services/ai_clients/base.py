"""
Base AI client protocol for LLM providers.

Defines the interface that enrichment providers implement, allowing
interchangeable use of Claude, Groq, and future providers as primary or
secondary backend.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class AIClientConfig:
    """
    Configuration for AI client instances.

    Attributes:
        base_url: API endpoint URL
        timeout: Request timeout in seconds
        api_key: API key for authenticated services
        max_retries: Number of retry attempts for transient errors
    """

    base_url: str
    timeout: float = 300.0
    api_key: str | None = None
    max_retries: int = 3


@runtime_checkable
class BaseAIClient(Protocol):
    """
    Protocol defining the interface for AI/LLM clients.

    Example:
        async def enrich(client: BaseAIClient, prompt: str) -> str:
            return await client.generate(prompt, json_output=True)
    """

    provider: str
    default_model: str

    @property
    def display_name(self) -> str:
        """Human-readable provider + model name."""
        ...

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        json_output: bool = False,
    ) -> str:
        """
        Generate text from a prompt.

        Args:
            prompt: Text prompt for generation
            model: Model name (uses default if None)
            json_output: Ask the provider for a JSON object response

        Returns:
            Generated text

        Raises:
            AIClientError: If generation fails
        """
        ...

    async def close(self) -> None:
        """Close the client and release resources."""
        ...


class AIClientError(Exception):
    """
    Base exception for AI client errors.

    Attributes:
        message: Error description
        provider: AI provider name (claude, groq, whisper)
        model: Model that caused the error
        original_error: Underlying exception if available
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        model: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.provider = provider
        self.model = model
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.append(f"provider={self.provider}")
        if self.model:
            parts.append(f"model={self.model}")
        return " | ".join(parts)


class AIClientTimeoutError(AIClientError):
    """Raised when a request times out."""

    pass


class AIClientConnectionError(AIClientError):
    """Raised when connection to AI service fails."""

    pass


class AIClientResponseError(AIClientError):
    """
    Raised when AI service returns an error response.

    Attributes:
        status_code: HTTP status code if available
        response_body: Response body if available
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.response_body = response_body


class BaseAIClientImpl(ABC):
    """
    Abstract base class for AI client implementations.

    Provides context manager protocol and the display name used as
    `engine_used` in enrichment results.

    Subclasses must set `provider` and implement:
        - generate()
        - close()
    """

    provider: str = "unknown"
    provider_label: str = "Unknown"

    def __init__(self, config: AIClientConfig, default_model: str):
        """
        Initialize AI client with configuration.

        Args:
            config: Client configuration with URL, timeout, etc.
            default_model: Model used when none is given per call
        """
        self.config = config
        self.default_model = default_model

    @property
    def display_name(self) -> str:
        return f"{self.provider_label} {self.default_model}"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        json_output: bool = False,
    ) -> str:
        """Generate text from a prompt."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the client and release resources."""
        pass

    async def __aenter__(self) -> "BaseAIClientImpl":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
