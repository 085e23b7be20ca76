"""Pytest configuration and fixtures.

No test touches the network or starts a subprocess: the extraction tool,
the duration probe, the speech-to-text client and the AI providers are
replaced by the fakes below.
"""

from pathlib import Path

import pytest

from vidscribe.config import Settings
from vidscribe.models.schemas import PipelineStage
from vidscribe.services.acquisition import AcquisitionStrategyCascade
from vidscribe.services.pipeline import PipelineOrchestrator
from vidscribe.services.stages import AcquireStage, EnrichStage, TranscribeStage
from vidscribe.services.summarizer import EnrichmentFailover
from vidscribe.utils.process_utils import ProcessResult

YOUTUBE_URL = "https://www.youtube.com/watch?v=q6EoRBvdVPQ"
GENERIC_URL = "https://cdn.example.com/talks/keynote.mp4"

BOT_CHECK_STDERR = (
    "ERROR: [youtube] q6EoRBvdVPQ: Sign in to confirm you're not a bot. "
    "Use --cookies-from-browser or --cookies for the authentication."
)
NETWORK_STDERR = "ERROR: Unable to download webpage: <urlopen error [Errno -3] Temporary failure in name resolution>"
PO_TOKEN_WARNING = (
    "WARNING: [youtube] q6EoRBvdVPQ: Some web client https formats have been skipped as they "
    "require a PO Token which was not provided. They will be skipped as they may yield "
    "HTTP Error 403."
)

VALID_RESPONSE = '{"summary": "A talk about resilient pipelines.", "contentIdeas": ["Thread on retries", "Blog post on failover"]}'


# =============================================================================
# Fakes
# =============================================================================


class FakeRunner:
    """Scripted replacement for run_process.

    yt-dlp calls consume `outcomes` in order. Each outcome is either a
    stderr string (non-zero exit), "ok" (artifact written at the --output
    template), "ok-empty" (clean exit, zero-byte artifact) or "ok-missing"
    (clean exit, no artifact). ffprobe calls answer with `probe_output`.
    """

    def __init__(
        self,
        outcomes: list[str] | None = None,
        probe_output: str | None = "42.5\n",
        ytdlp_path: str = "yt-dlp",
    ):
        self.outcomes = list(outcomes or ["ok"])
        self.probe_output = probe_output
        self.ytdlp_path = ytdlp_path
        self.ytdlp_calls: list[list[str]] = []
        self.probe_calls: list[list[str]] = []

    async def __call__(self, cmd: list[str], timeout: float | None = None) -> ProcessResult:
        if cmd[0] == self.ytdlp_path:
            return self._download(cmd)
        self.probe_calls.append(cmd)
        if self.probe_output is None:
            return ProcessResult(returncode=1, stderr="Invalid data found when processing input")
        return ProcessResult(returncode=0, stdout=self.probe_output)

    def _download(self, cmd: list[str]) -> ProcessResult:
        self.ytdlp_calls.append(cmd)
        outcome = self.outcomes.pop(0) if self.outcomes else "ok"
        if not outcome.startswith("ok"):
            return ProcessResult(returncode=1, stderr=outcome)

        template = Path(cmd[cmd.index("--output") + 1])
        audio_format = cmd[cmd.index("--audio-format") + 1]
        artifact = Path(str(template).replace("%(ext)s", audio_format))
        if outcome == "ok":
            artifact.write_bytes(b"ID3" + b"\x00" * 64)
        elif outcome == "ok-empty":
            artifact.write_bytes(b"")
        return ProcessResult(returncode=0)


class FakeAIClient:
    """Enrichment provider returning scripted responses or raising errors."""

    def __init__(self, name: str, responses: list):
        self.provider = name.lower()
        self.default_model = "test-model"
        self.display_name = name
        self.responses = list(responses)
        self.prompts: list[str] = []
        self.closed = False

    async def generate(self, prompt: str, model: str | None = None, json_output: bool = False) -> str:
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


class FakeTranscriber:
    """Speech-to-text replacement."""

    def __init__(self, text: str = "Hello and welcome to the talk.", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[Path] = []

    async def transcribe(self, audio_path: Path) -> str:
        self.calls.append(audio_path)
        if self.error:
            raise self.error
        return self.text


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment and .env."""
    return Settings(
        _env_file=None,
        anthropic_api_key="test-anthropic",
        groq_api_key="test-groq",
        data_root=tmp_path,
        downloads_dir=tmp_path / "downloads",
        ytdlp_cookies_file=None,
        ytdlp_cookies=None,
        ytdlp_po_token=None,
        keep_artifacts=True,
    )


@pytest.fixture
def cookies_file(tmp_path) -> Path:
    path = tmp_path / "cookies.txt"
    path.write_text("# Netscape HTTP Cookie File\n.youtube.com\tTRUE\t/\tTRUE\t0\tSID\tabc\n")
    return path


def make_cascade(settings: Settings, runner: FakeRunner, cookies_file: Path | None = None):
    return AcquisitionStrategyCascade.from_settings(settings, cookies_file, runner=runner)


def make_orchestrator(
    settings: Settings,
    runner: FakeRunner | None = None,
    transcriber: FakeTranscriber | None = None,
    primary: FakeAIClient | None = None,
    secondary: FakeAIClient | None = None,
) -> PipelineOrchestrator:
    runner = runner or FakeRunner()
    primary = primary or FakeAIClient("Claude", [VALID_RESPONSE])
    secondary = secondary or FakeAIClient("Groq", [VALID_RESPONSE])
    return PipelineOrchestrator(
        stages=[
            AcquireStage(make_cascade(settings, runner), settings),
            TranscribeStage(transcriber or FakeTranscriber(), settings),
            EnrichStage(EnrichmentFailover(primary, secondary, settings), settings),
        ],
        settings=settings,
    )


LIFECYCLE = [
    PipelineStage.ACQUIRING,
    PipelineStage.TRANSCRIBING,
    PipelineStage.ENRICHING,
]
