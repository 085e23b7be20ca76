"""
Claude API client implementation.

Provides async client for Anthropic's Claude API. Used as the primary
enrichment provider.
"""

import logging

from anthropic import APIConnectionError, APIStatusError, APITimeoutError, AsyncAnthropic

from vidscribe.config import Settings
from vidscribe.services.ai_clients.base import (
    AIClientConfig,
    AIClientConnectionError,
    AIClientResponseError,
    AIClientTimeoutError,
    BaseAIClientImpl,
)

logger = logging.getLogger(__name__)

# Default Claude model (using alias for auto-updates)
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5"

# Enrichment output is a summary plus a few ideas
DEFAULT_MAX_TOKENS = 4096

# Claude has no JSON mode; prefilling the assistant turn forces an object
JSON_PREFILL = "{"


class ClaudeClient(BaseAIClientImpl):
    """
    Async client for Anthropic's Claude API.

    Retries on transient errors are delegated to the SDK (max_retries).

    Example:
        async with ClaudeClient.from_settings(settings) as client:
            text = await client.generate("Summarize...", json_output=True)
    """

    provider = "claude"
    provider_label = "Claude"

    def __init__(
        self,
        config: AIClientConfig,
        default_model: str = DEFAULT_CLAUDE_MODEL,
    ):
        """
        Initialize Claude client.

        Args:
            config: AI client configuration with API key
            default_model: Default Claude model to use

        Raises:
            ValueError: If API key is not provided
        """
        super().__init__(config, default_model)

        if not config.api_key:
            raise ValueError(
                "ClaudeClient requires API key. "
                "Set ANTHROPIC_API_KEY environment variable."
            )

        self.client = AsyncAnthropic(
            api_key=config.api_key,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

        logger.info(f"ClaudeClient initialized, model: {default_model}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClaudeClient":
        """
        Create ClaudeClient from application settings.

        Args:
            settings: Application settings

        Returns:
            Configured ClaudeClient instance
        """
        config = AIClientConfig(
            base_url="https://api.anthropic.com",
            api_key=(settings.anthropic_api_key or "").strip() or None,
            timeout=settings.llm_timeout,
            max_retries=2,
        )
        return cls(config=config, default_model=settings.primary_model)

    async def close(self) -> None:
        """Close the client and release resources."""
        await self.client.close()
        logger.debug("ClaudeClient closed")

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        json_output: bool = False,
    ) -> str:
        """
        Generate text using the Messages API with a single user message.

        Args:
            prompt: Text prompt for generation
            model: Model name (default: primary model)
            json_output: Prefill the response with "{" to force a JSON object

        Returns:
            Generated text (including the prefill when json_output is set)

        Raises:
            AIClientError: If generation fails
        """
        if model is None:
            model = self.default_model

        messages = [{"role": "user", "content": prompt}]
        if json_output:
            messages.append({"role": "assistant", "content": JSON_PREFILL})

        logger.debug(f"Claude generate: model={model}, prompt={len(prompt)} chars")

        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=DEFAULT_MAX_TOKENS,
                temperature=0.3,
                messages=messages,
            )
        except APITimeoutError as e:
            logger.error(f"Claude timeout: {e}")
            raise AIClientTimeoutError(
                "Claude request timeout",
                provider=self.provider,
                model=model,
                original_error=e,
            ) from e
        except APIConnectionError as e:
            logger.error(f"Claude connection error: {e}")
            raise AIClientConnectionError(
                f"Cannot connect to Claude API: {e}",
                provider=self.provider,
                original_error=e,
            ) from e
        except APIStatusError as e:
            logger.error(f"Claude API error: {e.status_code} - {e.message}")
            raise AIClientResponseError(
                f"Claude API error: {e.message}",
                provider=self.provider,
                model=model,
                status_code=e.status_code,
                response_body=str(e.body) if e.body else None,
                original_error=e,
            ) from e

        content = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )

        logger.info(
            f"Claude response: {len(content)} chars, "
            f"tokens: {response.usage.input_tokens} in / {response.usage.output_tokens} out"
        )

        if json_output and content.strip():
            return JSON_PREFILL + content
        return content
