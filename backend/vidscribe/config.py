"""
Application configuration and settings.
"""

import base64
import binascii
import logging
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Built-in prompts and YAML configs shipped with the package
RESOURCES_DIR = Path(__file__).resolve().parent / "resources"


class ConfigurationError(Exception):
    """Raised when mandatory startup configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # AI providers
    anthropic_api_key: str | None = None
    groq_api_key: str | None = None
    primary_model: str = "claude-sonnet-4-5"  # Enrichment, primary provider
    secondary_model: str = "llama-3.3-70b-versatile"  # Enrichment, failover provider
    groq_url: str = "https://api.groq.com/openai/v1"
    whisper_model: str = "whisper-large-v3-turbo"
    whisper_language: str | None = None  # None = provider auto-detect
    llm_timeout: int = 300

    # External tools
    ytdlp_path: str = "yt-dlp"
    ffprobe_path: str = "ffprobe"
    ffmpeg_location: Path | None = None  # Directory with ffmpeg, if not on PATH
    audio_format: str = "mp3"
    audio_sample_rate: int = 16000
    audio_channels: int = 1
    audio_bitrate: str = "64k"

    # Credential material for the extraction tool
    ytdlp_cookies_file: Path | None = None
    ytdlp_cookies: str | None = None  # Netscape cookie blob, plain or base64
    ytdlp_po_token: str | None = None  # Manual override token

    # Paths
    data_root: Path = Path("data")
    downloads_dir: Path = Path("data/downloads")
    config_dir: Path = RESOURCES_DIR
    prompts_dir: Path | None = None  # External prompts directory (overrides built-in)
    keep_artifacts: bool = True

    # Stage timeouts (seconds)
    acquire_timeout: float = 900.0
    transcribe_timeout: float = 600.0
    enrich_timeout: float = 300.0
    probe_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "structured"  # "simple" or "structured"

    # Per-module log levels (optional overrides)
    log_level_ai_client: str | None = None
    log_level_acquisition: str | None = None
    log_level_pipeline: str | None = None
    log_level_transcriber: str | None = None
    log_level_summarizer: str | None = None
    log_level_perf: str | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def validate_required_settings(settings: Settings) -> None:
    """
    Check configuration that the service cannot start without.

    Args:
        settings: Application settings

    Raises:
        ConfigurationError: If any provider credential is missing
    """
    missing = []
    if not (settings.anthropic_api_key or "").strip():
        missing.append("ANTHROPIC_API_KEY")
    if not (settings.groq_api_key or "").strip():
        missing.append("GROQ_API_KEY")

    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}. "
            "Set them in the environment or .env file."
        )


def resolve_cookies_file(settings: Settings) -> Path | None:
    """
    Locate the stored credential file for the extraction tool.

    An explicit YTDLP_COOKIES_FILE wins. Otherwise a pre-seeded YTDLP_COOKIES
    blob (plain Netscape format or base64 of it) is written to
    data_root/cookies.txt.

    Args:
        settings: Application settings

    Returns:
        Path to a cookies file, or None if no credential material is configured
    """
    if settings.ytdlp_cookies_file:
        if settings.ytdlp_cookies_file.exists():
            return settings.ytdlp_cookies_file
        logger.warning(f"Cookies file not found: {settings.ytdlp_cookies_file}")
        return None

    blob = (settings.ytdlp_cookies or "").strip()
    if not blob:
        return None

    content = blob
    if "\t" not in blob:
        try:
            content = base64.b64decode(blob, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.warning("YTDLP_COOKIES is neither Netscape text nor base64, ignoring")
            return None

    settings.data_root.mkdir(parents=True, exist_ok=True)
    cookies_path = settings.data_root / "cookies.txt"
    cookies_path.write_text(content, encoding="utf-8")
    logger.info(f"Materialized cookie blob to {cookies_path}")
    return cookies_path


def load_prompt(
    stage: str,
    component: str,
    settings: Settings | None = None,
) -> str:
    """
    Load a prompt template with external folder priority.

    Lookup order (first found wins):
    1. prompts_dir/{stage}/{component}.md (external)
    2. config_dir/prompts/{stage}/{component}.md (built-in)

    Args:
        stage: Pipeline stage ("enrichment")
        component: Prompt component ("template")
        settings: Optional settings instance

    Returns:
        Prompt template content

    Raises:
        FileNotFoundError: If no matching prompt file is found
    """
    if settings is None:
        settings = get_settings()

    paths_to_check: list[Path] = []

    if settings.prompts_dir and settings.prompts_dir.exists():
        paths_to_check.append(settings.prompts_dir / stage / f"{component}.md")

    paths_to_check.append(settings.config_dir / "prompts" / stage / f"{component}.md")

    for path in paths_to_check:
        if path.exists():
            return path.read_text(encoding="utf-8")

    raise FileNotFoundError(
        f"Prompt not found: stage={stage}, component={component}. "
        f"Checked paths: {[str(p) for p in paths_to_check]}"
    )


def load_acquisition_config(settings: Settings | None = None) -> dict:
    """
    Load acquisition configuration from config/acquisition.yaml.

    Contains restricted platform URL patterns, their ordered strategy lists,
    the default identity for generic URLs and access-block markers.

    Args:
        settings: Optional settings instance

    Returns:
        Acquisition configuration dictionary
    """
    if settings is None:
        settings = get_settings()

    config_path = settings.config_dir / "acquisition.yaml"
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)
