"""
Audio acquisition via yt-dlp with an ordered strategy cascade.

Restricted platforms (YouTube) reject requests that look automated. Each
strategy simulates a different client identity; the cascade walks them in
declared order and stops at the first success or at the first error that
another identity cannot fix.
"""

import logging
import secrets
import time
from pathlib import Path
from urllib.parse import urlparse

from vidscribe.config import Settings, load_acquisition_config
from vidscribe.models.schemas import AcquisitionResult, AcquisitionStrategy, PlatformClass
from vidscribe.utils.media_utils import is_valid_artifact
from vidscribe.utils.process_utils import ProcessRunner, run_process

from .classifier import AccessBlockClassifier, MarkerClassifier
from .errors import (
    AcquisitionError,
    AllStrategiesExhaustedError,
    ArtifactMissingError,
    ToolInvocationError,
)
from .strategies import StrategyCatalog

logger = logging.getLogger(__name__)
perf_logger = logging.getLogger("vidscribe.perf")

# Lines of tool stderr kept in error messages
STDERR_TAIL_LINES = 5

# yt-dlp stderr line tags
ERROR_TAG = "ERROR:"
WARNING_TAG = "WARNING:"


class AcquisitionStrategyCascade:
    """
    Downloads audio for a URL, trying spoofing strategies in order.

    Generic URLs get exactly one attempt. Restricted-platform URLs advance to
    the next strategy only when the classifier recognizes the error as an
    access-control block; any other error aborts the cascade.

    Example:
        cascade = AcquisitionStrategyCascade.from_settings(settings, cookies_file)
        result = await cascade.acquire("https://www.youtube.com/watch?v=...")
        print(result.artifact_path, result.strategy_used)
    """

    def __init__(
        self,
        settings: Settings,
        catalog: StrategyCatalog,
        classifier: AccessBlockClassifier,
        runner: ProcessRunner = run_process,
        cookies_file: Path | None = None,
    ):
        """
        Initialize cascade.

        Args:
            settings: Application settings (tool paths, transcoding, token)
            catalog: Platform patterns and ordered strategies
            classifier: Predicate over error text, True for access blocks
            runner: Subprocess runner
            cookies_file: Stored credential file (None if not configured)
        """
        self.settings = settings
        self.catalog = catalog
        self.classifier = classifier
        self.runner = runner
        self.cookies_file = cookies_file

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cookies_file: Path | None = None,
        runner: ProcessRunner = run_process,
    ) -> "AcquisitionStrategyCascade":
        """
        Create cascade from application settings and acquisition.yaml.

        Args:
            settings: Application settings
            cookies_file: Resolved stored credential file
            runner: Subprocess runner

        Returns:
            Configured AcquisitionStrategyCascade
        """
        config = load_acquisition_config(settings)
        return cls(
            settings=settings,
            catalog=StrategyCatalog.from_config(config),
            classifier=MarkerClassifier.from_config(config),
            runner=runner,
            cookies_file=cookies_file,
        )

    def classify_url(self, url: str) -> PlatformClass:
        """Classify a URL as restricted-platform or generic."""
        return self.catalog.classify(url)

    @staticmethod
    def new_artifact_stem() -> str:
        """
        Unique per-request artifact name.

        Nanosecond timestamp plus a random suffix, so concurrent requests
        never share a path.
        """
        return f"audio_{time.time_ns()}_{secrets.token_hex(3)}"

    def artifact_path(self, stem: str) -> Path:
        """Final artifact path for a stem, after audio transcoding."""
        return self.settings.downloads_dir / f"{stem}.{self.settings.audio_format}"

    async def acquire(self, url: str) -> AcquisitionResult:
        """
        Download audio for a URL.

        Args:
            url: Source URL (http/https)

        Returns:
            AcquisitionResult with artifact path and strategy used
            (duration is left at 0; probing is the caller's concern)

        Raises:
            ToolInvocationError: Invalid URL, tool failure, or no usable strategy
            ArtifactMissingError: Tool succeeded but produced no artifact
            AllStrategiesExhaustedError: Every restricted-platform strategy was blocked
        """
        url = (url or "").strip()
        self._validate_url(url)

        platform_class, strategies = self.catalog.plan(url)
        platform = self.catalog.find_platform(url)
        stem = self.new_artifact_stem()
        self.settings.downloads_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Acquiring {url} ({platform_class.value}, {len(strategies)} strategies)")

        if platform_class == PlatformClass.GENERIC:
            strategy = strategies[0]
            path = await self._attempt(url, strategy, stem, platform_key=None)
            return AcquisitionResult(artifact_path=path, strategy_used=strategy.name, attempts=1)

        last_error: AcquisitionError | None = None
        attempts = 0

        for strategy in strategies:
            if not self._is_applicable(strategy):
                continue

            attempts += 1
            try:
                path = await self._attempt(url, strategy, stem, platform_key=platform.name)
            except AcquisitionError as e:
                if not self.classifier(e.message):
                    logger.warning(
                        f"Strategy '{strategy.name}' failed with non-access error, "
                        f"aborting cascade: {e}"
                    )
                    raise
                logger.warning(f"Strategy '{strategy.name}' blocked: {e}")
                last_error = e
                continue

            logger.info(f"Strategy '{strategy.name}' succeeded after {attempts} attempt(s)")
            return AcquisitionResult(
                artifact_path=path,
                strategy_used=strategy.name,
                attempts=attempts,
            )

        if last_error is None:
            raise ToolInvocationError(
                f"No applicable acquisition strategy for {url}: every strategy "
                "requires credential material that is not configured"
            )

        raise AllStrategiesExhaustedError(
            last_error=last_error,
            hint=self.remediation_hint(),
            attempts=attempts,
        )

    def remediation_hint(self) -> str:
        """Hint shown to the caller when every strategy was blocked."""
        if self.settings.ytdlp_po_token:
            return (
                "The platform rejected every download strategy, including the "
                "configured manual override token. Refresh YTDLP_PO_TOKEN "
                "(and the cookies in YTDLP_COOKIES_FILE / YTDLP_COOKIES) and retry."
            )
        return (
            "The platform rejected every automated download strategy. Provide a "
            "manual override token via YTDLP_PO_TOKEN (optionally with exported "
            "cookies via YTDLP_COOKIES_FILE or YTDLP_COOKIES) and retry."
        )

    def build_command(
        self,
        url: str,
        strategy: AcquisitionStrategy,
        output_template: Path,
        platform_key: str | None = None,
    ) -> list[str]:
        """
        Build yt-dlp command for one strategy.

        Credential material is attached only when the strategy requests it.

        Args:
            url: Source URL
            strategy: Strategy to apply
            output_template: yt-dlp output template (with %(ext)s)
            platform_key: Extractor name for --extractor-args (restricted only)

        Returns:
            Command and arguments
        """
        settings = self.settings
        cmd = [settings.ytdlp_path]

        extractor_args = []
        if strategy.player_client:
            extractor_args.append(f"player_client={strategy.player_client}")
        if strategy.use_override_token and settings.ytdlp_po_token:
            extractor_args.append(f"po_token={self._format_po_token(strategy)}")
        if platform_key and extractor_args:
            cmd += ["--extractor-args", f"{platform_key}:{';'.join(extractor_args)}"]

        if strategy.use_credentials and self.cookies_file:
            cmd += ["--cookies", str(self.cookies_file)]
        if strategy.user_agent:
            cmd += ["--user-agent", strategy.user_agent]
        if strategy.referer:
            cmd += ["--referer", strategy.referer]

        cmd += ["-x", "--audio-format", settings.audio_format]
        if settings.ffmpeg_location:
            cmd += ["--ffmpeg-location", str(settings.ffmpeg_location)]
        cmd += [
            "--postprocessor-args",
            f"ffmpeg:-ar {settings.audio_sample_rate} "
            f"-ac {settings.audio_channels} -b:a {settings.audio_bitrate}",
            "--no-playlist",
            "--no-progress",
        ]
        cmd += strategy.extra_args
        cmd += ["--output", str(output_template), url]
        return cmd

    def _format_po_token(self, strategy: AcquisitionStrategy) -> str:
        """PO token in yt-dlp CLIENT.CONTEXT+TOKEN form."""
        token = self.settings.ytdlp_po_token.strip()
        if "+" in token:
            return token
        client = (strategy.player_client or "web").split(",")[0]
        return f"{client}.gvs+{token}"

    def _is_applicable(self, strategy: AcquisitionStrategy) -> bool:
        """A strategy needing unconfigured credential material is skipped."""
        if strategy.use_credentials and not self.cookies_file:
            logger.info(f"Skipping strategy '{strategy.name}': no stored credentials")
            return False
        if strategy.use_override_token and not self.settings.ytdlp_po_token:
            logger.info(f"Skipping strategy '{strategy.name}': no override token")
            return False
        return True

    async def _attempt(
        self,
        url: str,
        strategy: AcquisitionStrategy,
        stem: str,
        platform_key: str | None,
    ) -> Path:
        """Run the tool once and verify the artifact."""
        output_template = self.settings.downloads_dir / f"{stem}.%(ext)s"
        expected_path = self.artifact_path(stem)
        cmd = self.build_command(url, strategy, output_template, platform_key)

        logger.info(f"Attempting strategy '{strategy.name}' for {url}")
        start_time = time.time()

        try:
            result = await self.runner(cmd, None)
        except OSError as e:
            raise ToolInvocationError(
                f"Extraction tool could not be started: {e}",
                strategy=strategy.name,
            ) from e

        elapsed = time.time() - start_time
        perf_logger.info(f"ytdlp | {strategy.name} | code={result.returncode} | {elapsed:.1f}s")

        if result.stderr.strip():
            logger.debug(f"yt-dlp stderr ({strategy.name}): {result.stderr.strip()[:500]}")

        if not result.ok:
            raise ToolInvocationError(
                self._summarize_stderr(result.stderr, result.returncode),
                strategy=strategy.name,
                returncode=result.returncode,
                stderr=result.stderr,
            )

        if not is_valid_artifact(expected_path):
            raise ArtifactMissingError(
                f"Extraction finished but artifact is missing or empty: {expected_path.name}",
                strategy=strategy.name,
            )

        size_mb = expected_path.stat().st_size / 1024 / 1024
        logger.info(f"Audio acquired: {expected_path.name} ({size_mb:.1f} MB)")
        return expected_path

    @staticmethod
    def _validate_url(url: str) -> None:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ToolInvocationError(f"Invalid URL: {url!r}")

    @staticmethod
    def _summarize_stderr(stderr: str, returncode: int) -> str:
        """
        Diagnostic summary of yt-dlp stderr.

        ERROR lines win, with their tag stripped. Without them the tail of
        stderr is used. WARNING lines are never included: yt-dlp prints
        PO token and 403 warnings on runs that fail for unrelated reasons.
        """
        lines = [line.strip() for line in stderr.splitlines() if line.strip()]
        errors = [
            line[len(ERROR_TAG):].strip() for line in lines if line.startswith(ERROR_TAG)
        ]
        if not errors:
            errors = [line for line in lines if not line.startswith(WARNING_TAG)]
            errors = errors[-STDERR_TAIL_LINES:]
        if not errors:
            return f"yt-dlp exited with code {returncode}"
        return "; ".join(errors)
