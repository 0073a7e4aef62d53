"""Unit tests for runtime wiring and the command-line entry point.

Tests:
- Configuration loading with log level priority (CLI > env > config > INFO)
- Building the search service from configuration
- Exit codes for success, invalid searches and configuration errors
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from jobsearch.config.environment import EnvironmentConfig
from jobsearch.config.exceptions import ConfigurationError
from jobsearch.config.models import AppConfig, LoggingConfig, SearchSettings, VocabularyConfig
from jobsearch.main import build_search_service, load_runtime_config, main
from jobsearch.persistence import StoreUnavailableError, close_database
from jobsearch.search.service import JobSearchService


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    close_database()


def memory_env(log_level=None):
    return EnvironmentConfig(
        database_url="sqlite:///:memory:", log_level=log_level, environment="test"
    )


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    def test_log_level_priority(self):
        """Test log level priority: CLI > env > config > INFO."""
        with patch("jobsearch.main.load_config") as mock_load:
            app_config = AppConfig(logging=LoggingConfig(level="WARNING"))
            env_config = memory_env(log_level="INFO")
            mock_load.return_value = (app_config, env_config)

            # CLI override takes precedence
            _, resolved = load_runtime_config(None, "debug")
            assert resolved.log_level == "DEBUG"

            # Env override takes precedence over config
            env_config.log_level = "ERROR"
            _, resolved = load_runtime_config(None, None)
            assert resolved.log_level == "ERROR"

            # Config value used when no overrides
            env_config.log_level = None
            _, resolved = load_runtime_config(None, None)
            assert resolved.log_level == "WARNING"

    def test_defaults_to_info(self):
        with patch("jobsearch.main.load_config") as mock_load:
            mock_load.return_value = (AppConfig(), memory_env())

            _, resolved = load_runtime_config()

        assert resolved.log_level == "INFO"

    def test_configuration_error_propagates(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_runtime_config(tmp_path / "missing.yaml")


class TestBuildSearchService:
    """Test suite for build_search_service."""

    def test_builds_working_service(self):
        app_config = AppConfig(search=SearchSettings(default_limit=5, max_limit=10))

        service = build_search_service(app_config, memory_env("INFO"))

        assert isinstance(service, JobSearchService)
        assert service.settings.default_limit == 5
        assert service.search(text="nurse").total_count == 0

    def test_vocabulary_configuration_applied(self):
        app_config = AppConfig(
            vocabulary=VocabularyConfig(extra_synonyms={"kitchen": ["cook"]})
        )

        service = build_search_service(app_config, memory_env())

        assert service.engine.vocabulary.synonyms.lookup("kitchen") == ("cook",)

    def test_invalid_vocabulary_raises_configuration_error(self):
        app_config = AppConfig(
            vocabulary=VocabularyConfig(extra_title_mappings={"kitchen": ["Sous Chef"]})
        )

        with patch("jobsearch.main.init_database") as mock_init:
            with pytest.raises(ConfigurationError, match="Invalid vocabulary configuration"):
                build_search_service(app_config, memory_env())

        mock_init.assert_not_called()


class TestMain:
    """Test suite for main() function."""

    @patch("jobsearch.main.load_runtime_config")
    def test_main_prints_results(self, mock_load_config, capsys):
        mock_load_config.return_value = (AppConfig(), memory_env("WARNING"))

        exit_code = main(["--text", "nurse", "--limit", "5"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output == {"total_count": 0, "items": []}

    @patch("jobsearch.main.load_runtime_config")
    def test_main_without_selector_is_invalid(self, mock_load_config, capsys):
        mock_load_config.return_value = (AppConfig(), memory_env("WARNING"))

        exit_code = main([])

        assert exit_code == 2
        assert "Invalid search" in capsys.readouterr().err

    @patch("jobsearch.main.load_runtime_config")
    def test_main_configuration_error(self, mock_load_config, capsys):
        """Test main() reports ConfigurationError and exits with 1."""
        mock_load_config.side_effect = ConfigurationError(
            "Config file not found",
            suggestions=["Create config.yaml"],
        )

        exit_code = main(["--config", "nonexistent.yaml", "--text", "nurse"])

        assert exit_code == 1
        assert "Create config.yaml" in capsys.readouterr().err

    @patch("jobsearch.main.build_search_service")
    @patch("jobsearch.main.load_runtime_config")
    def test_main_store_unavailable(self, mock_load_config, mock_build):
        mock_load_config.return_value = (AppConfig(), memory_env("WARNING"))
        service = MagicMock()
        service.search.side_effect = StoreUnavailableError("statement timeout")
        mock_build.return_value = service

        assert main(["--location", "Seattle"]) == 1

    @patch("jobsearch.main.build_search_service")
    @patch("jobsearch.main.load_runtime_config")
    def test_main_log_level_override(self, mock_load_config, mock_build):
        """Test that --log-level is passed to load_runtime_config."""
        mock_load_config.return_value = (AppConfig(), memory_env("DEBUG"))
        mock_build.side_effect = ConfigurationError("exit early")

        main(["--log-level", "DEBUG", "--text", "nurse"])

        mock_load_config.assert_called_once()
        assert mock_load_config.call_args[0][1] == "DEBUG"

    @patch("jobsearch.main.build_search_service")
    @patch("jobsearch.main.load_runtime_config")
    def test_main_passes_search_arguments(self, mock_load_config, mock_build):
        mock_load_config.return_value = (AppConfig(), memory_env("WARNING"))
        service = MagicMock()
        service.search.return_value.to_dict.return_value = {"total_count": 0, "items": []}
        mock_build.return_value = service

        main(["--text", "nurse", "--location", "Portland", "--email", "absent", "--offset", "25"])

        service.search.assert_called_once_with(
            text="nurse", location="Portland", email_filter="absent", limit=None, offset=25
        )
