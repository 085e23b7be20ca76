"""
Groq AI client implementation.

Async HTTP client for Groq's OpenAI-compatible chat completions API with
retry logic. Used as the secondary (failover) enrichment provider.
"""

import logging

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vidscribe.config import Settings
from vidscribe.services.ai_clients.base import (
    AIClientConfig,
    AIClientConnectionError,
    AIClientResponseError,
    AIClientTimeoutError,
    BaseAIClientImpl,
)

logger = logging.getLogger(__name__)

DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"

# Retry configuration for transient errors
RETRY_DECORATOR = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=30),
    retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
    reraise=True,
)


class GroqClient(BaseAIClientImpl):
    """
    Async HTTP client for Groq chat completions.

    Example:
        async with GroqClient.from_settings(settings) as client:
            text = await client.generate("Summarize...", json_output=True)
    """

    provider = "groq"
    provider_label = "Groq"

    def __init__(
        self,
        config: AIClientConfig,
        default_model: str = DEFAULT_GROQ_MODEL,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize Groq client.

        Args:
            config: AI client configuration with API URL and key
            default_model: Default model for generation
            http_client: Optional preconfigured HTTP client

        Raises:
            ValueError: If API key is not provided
        """
        super().__init__(config, default_model)

        if not config.api_key:
            raise ValueError(
                "GroqClient requires API key. "
                "Set GROQ_API_KEY environment variable."
            )

        self.http_client = http_client or httpx.AsyncClient(
            base_url=config.base_url,
            headers={"Authorization": f"Bearer {config.api_key}"},
            timeout=config.timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GroqClient":
        """
        Create GroqClient from application settings.

        Args:
            settings: Application settings

        Returns:
            Configured GroqClient instance
        """
        config = AIClientConfig(
            base_url=settings.groq_url,
            api_key=(settings.groq_api_key or "").strip() or None,
            timeout=settings.llm_timeout,
        )
        return cls(config=config, default_model=settings.secondary_model)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.http_client.aclose()

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        json_output: bool = False,
    ) -> str:
        """
        Generate text via /chat/completions with a single user message.

        Args:
            prompt: Text prompt for generation
            model: Model name (default: secondary model)
            json_output: Request response_format json_object

        Returns:
            Generated text

        Raises:
            AIClientError: If generation fails
        """
        if model is None:
            model = self.default_model

        request_body: dict = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.3,
        }
        if json_output:
            request_body["response_format"] = {"type": "json_object"}

        logger.debug(f"Groq generate: model={model}, prompt={len(prompt)} chars")

        try:
            result = await self._post_chat(request_body)
        except httpx.TimeoutException as e:
            logger.error(f"Groq timeout with {model}: {e}")
            raise AIClientTimeoutError(
                "Groq request timeout",
                provider=self.provider,
                model=model,
                original_error=e,
            ) from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Groq API error: {e.response.status_code} - {e.response.text[:200]}"
            )
            raise AIClientResponseError(
                f"Groq API error: HTTP {e.response.status_code}",
                provider=self.provider,
                model=model,
                status_code=e.response.status_code,
                response_body=e.response.text[:500],
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Groq connection error: {e}")
            raise AIClientConnectionError(
                f"Cannot connect to Groq API: {e}",
                provider=self.provider,
                original_error=e,
            ) from e

        choices = result.get("choices") or []
        content = ""
        if choices:
            content = (choices[0].get("message") or {}).get("content") or ""

        if not content.strip():
            logger.error(f"Empty response from Groq, model: {model}")

        usage = result.get("usage") or {}
        logger.info(
            f"Groq response: {len(content)} chars, tokens: "
            f"{usage.get('prompt_tokens', 0)} in / {usage.get('completion_tokens', 0)} out"
        )
        return content

    @RETRY_DECORATOR
    async def _post_chat(self, request_body: dict) -> dict:
        response = await self.http_client.post("/chat/completions", json=request_body)
        response.raise_for_status()
        return response.json()
