"""Tests for vidscribe.config."""

import base64
import logging

import pytest

from vidscribe.config import (
    ConfigurationError,
    load_acquisition_config,
    load_prompt,
    resolve_cookies_file,
    validate_required_settings,
)
from vidscribe.logging_config import MODULE_LOGGERS, PERF_LOGGER, StructuredFormatter, setup_logging

NETSCAPE_COOKIES = "# Netscape HTTP Cookie File\n.youtube.com\tTRUE\t/\tTRUE\t0\tSID\tabc\n"


class TestValidateRequiredSettings:
    """Startup validation of provider credentials."""

    def test_complete_configuration_passes(self, settings):
        validate_required_settings(settings)

    @pytest.mark.parametrize(
        "field, env_name",
        [("anthropic_api_key", "ANTHROPIC_API_KEY"), ("groq_api_key", "GROQ_API_KEY")],
    )
    def test_missing_key_is_reported(self, settings, field, env_name):
        setattr(settings, field, "  ")
        with pytest.raises(ConfigurationError) as exc_info:
            validate_required_settings(settings)
        assert env_name in str(exc_info.value)


class TestResolveCookiesFile:
    """Materialization of stored credential material."""

    def test_nothing_configured(self, settings):
        assert resolve_cookies_file(settings) is None

    def test_explicit_file_wins(self, settings, cookies_file):
        settings.ytdlp_cookies_file = cookies_file
        settings.ytdlp_cookies = NETSCAPE_COOKIES
        assert resolve_cookies_file(settings) == cookies_file

    def test_missing_explicit_file(self, settings, tmp_path):
        settings.ytdlp_cookies_file = tmp_path / "absent.txt"
        assert resolve_cookies_file(settings) is None

    def test_plain_blob_is_written(self, settings):
        settings.ytdlp_cookies = NETSCAPE_COOKIES
        path = resolve_cookies_file(settings)
        assert path == settings.data_root / "cookies.txt"
        assert path.read_text() == NETSCAPE_COOKIES.strip()

    def test_base64_blob_is_decoded(self, settings):
        settings.ytdlp_cookies = base64.b64encode(NETSCAPE_COOKIES.encode()).decode()
        path = resolve_cookies_file(settings)
        assert path.read_text() == NETSCAPE_COOKIES

    def test_garbage_blob_is_ignored(self, settings):
        settings.ytdlp_cookies = "not base64 at all!"
        assert resolve_cookies_file(settings) is None


class TestResources:
    """Built-in prompts and YAML configuration."""

    def test_builtin_prompt(self, settings):
        assert "{content}" in load_prompt("enrichment", "template", settings)

    def test_external_prompt_overrides_builtin(self, settings, tmp_path):
        prompts_dir = tmp_path / "prompts"
        (prompts_dir / "enrichment").mkdir(parents=True)
        (prompts_dir / "enrichment" / "template.md").write_text("Custom {content}")
        settings.prompts_dir = prompts_dir

        assert load_prompt("enrichment", "template", settings) == "Custom {content}"

    def test_unknown_prompt(self, settings):
        with pytest.raises(FileNotFoundError):
            load_prompt("enrichment", "missing", settings)

    def test_acquisition_config(self, settings):
        config = load_acquisition_config(settings)
        assert "youtube" in config["restricted_platforms"]
        assert config["generic"]["name"] == "default"
        assert "sign in to confirm" in config["access_block_markers"]


class TestSetupLogging:
    """Root handler, module overrides and the timing logger."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)
        for logger_name in MODULE_LOGGERS.values():
            logging.getLogger(logger_name).setLevel(logging.NOTSET)

    def test_module_overrides_include_perf_logger(self, settings):
        settings.log_level_acquisition = "DEBUG"
        settings.log_level_perf = "WARNING"

        setup_logging(settings)

        assert logging.getLogger("vidscribe.services.acquisition").level == logging.DEBUG
        assert logging.getLogger(PERF_LOGGER).level == logging.WARNING
        assert not logging.getLogger(PERF_LOGGER).isEnabledFor(logging.INFO)

    def test_structured_format_shortens_names(self):
        record = logging.LogRecord(PERF_LOGGER, logging.INFO, __file__, 1, "ytdlp | default", None, None)
        line = StructuredFormatter().format(record)
        assert line.split(" | ")[1:] == ["INFO    ", f"{'perf':20}", "ytdlp", "default"]
