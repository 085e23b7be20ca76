"""
Text enrichment with primary/secondary provider failover.

Produces a structured summary and content ideas from a transcript. The
primary provider is tried once; any failure (provider error, empty or
unparsable output, missing summary) triggers exactly one independent call to
the secondary provider with the identical prompt.
"""

import logging
import time

from vidscribe.config import Settings, load_prompt
from vidscribe.models.schemas import EnrichmentResult
from vidscribe.services.ai_clients import BaseAIClient
from vidscribe.utils.json_utils import JSONExtractionError, parse_json_object

logger = logging.getLogger(__name__)
perf_logger = logging.getLogger("vidscribe.perf")

STATUS_COMPLETED = "Completed"


class EnrichmentError(Exception):
    """
    Base exception for enrichment failures.

    Attributes:
        message: Error description
        provider: Provider display name
        cause: Underlying exception (if any)
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        cause: Exception | None = None,
    ):
        self.message = message
        self.provider = provider
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ResponseParseError(EnrichmentError):
    """Provider output is empty, not one JSON object, or lacks a summary."""

    pass


class PrimaryProviderError(EnrichmentError):
    """Primary attempt failed. Recovered by the secondary call."""

    pass


class SecondaryProviderError(EnrichmentError):
    """
    Secondary attempt failed after the primary. Final for the request.

    Attributes:
        primary_error: The primary failure that triggered the failover
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        cause: Exception | None = None,
        primary_error: PrimaryProviderError | None = None,
    ):
        super().__init__(message, provider, cause)
        self.primary_error = primary_error


class EnrichmentFailover:
    """
    Summary + content ideas with one-shot failover.

    Example:
        failover = EnrichmentFailover(claude_client, groq_client, settings)
        result = await failover.enrich(transcript)
        print(result.engine_used, result.summary)
    """

    def __init__(
        self,
        primary: BaseAIClient,
        secondary: BaseAIClient,
        settings: Settings,
    ):
        """
        Initialize failover.

        Args:
            primary: Primary AI provider client
            secondary: Secondary AI provider client
            settings: Application settings (prompt lookup)
        """
        self.primary = primary
        self.secondary = secondary
        self.settings = settings
        self.prompt_template = load_prompt("enrichment", "template", settings)

    def build_prompt(self, text: str) -> str:
        """Fixed-structure prompt demanding one JSON object."""
        return self.prompt_template.format(content=text.strip())

    async def enrich(self, text: str) -> EnrichmentResult:
        """
        Summarize text and propose content ideas.

        Args:
            text: Non-empty transcript or passage

        Returns:
            EnrichmentResult with the provider actually used

        Raises:
            ValueError: If text is empty
            SecondaryProviderError: If both providers failed
        """
        if not text or not text.strip():
            raise ValueError("Enrichment requires non-empty text")

        prompt = self.build_prompt(text)

        try:
            return await self._attempt(self.primary, prompt, STATUS_COMPLETED)
        except EnrichmentError as e:
            primary_error = PrimaryProviderError(e.message, provider=e.provider, cause=e.cause)
            logger.warning(
                f"Primary provider failed ({e}), "
                f"switching to {self.secondary.display_name}"
            )

        try:
            return await self._attempt(
                self.secondary,
                prompt,
                f"{STATUS_COMPLETED} (failover: {self.secondary.display_name})",
            )
        except EnrichmentError as e:
            logger.error(f"Both enrichment providers failed, last: {e}")
            raise SecondaryProviderError(
                f"Both providers failed. {self.secondary.display_name}: {e.message}",
                provider=self.secondary.display_name,
                cause=e.cause,
                primary_error=primary_error,
            ) from e.cause

    async def _attempt(
        self,
        client: BaseAIClient,
        prompt: str,
        status: str,
    ) -> EnrichmentResult:
        """
        One self-contained provider call.

        Any failure is raised as EnrichmentError; the caller decides
        whether it is recoverable.
        """
        name = client.display_name
        start_time = time.time()

        try:
            response = await client.generate(prompt, json_output=True)
            summary, ideas = self.parse_response(response, name)
        except Exception as e:
            raise EnrichmentError(str(e), provider=name, cause=e) from e

        elapsed = time.time() - start_time
        perf_logger.info(f"ENRICH | {name} | ideas={len(ideas)} | {elapsed:.1f}s")

        return EnrichmentResult(
            summary=summary,
            ideas=ideas,
            status=status,
            engine_used=name,
        )

    @staticmethod
    def parse_response(response: str, provider: str) -> tuple[str, list[str]]:
        """
        Validate provider output.

        Args:
            response: Raw provider text
            provider: Provider display name (for errors)

        Returns:
            Tuple of (summary, ideas). Missing ideas default to [].

        Raises:
            ResponseParseError: Empty, unparsable, or no summary field
        """
        try:
            data = parse_json_object(response)
        except JSONExtractionError as e:
            raise ResponseParseError(f"{provider} returned {e}", provider=provider, cause=e) from e

        summary = data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            raise ResponseParseError(
                f"{provider} response has no summary field",
                provider=provider,
            )

        raw_ideas = data.get("contentIdeas", data.get("ideas")) or []
        if not isinstance(raw_ideas, list):
            raw_ideas = []
        ideas = [idea.strip() for idea in raw_ideas if isinstance(idea, str) and idea.strip()]

        return summary.strip(), ideas
