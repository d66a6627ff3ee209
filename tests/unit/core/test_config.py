"""Unit tests for application configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.core.config import (
    DEFAULT_API_DESCRIPTION,
    ApiDocsConfig,
    LogConfig,
    Settings,
    get_settings,
)


@pytest.mark.unit
class TestSettingsDefaults:
    """Test default configuration values."""

    def test_application_defaults(self) -> None:
        settings = Settings()

        assert settings.app_name == "Maestro"
        assert settings.app_version == "1.0.0"
        assert settings.environment == "development"
        assert settings.is_development

    def test_api_docs_defaults(self) -> None:
        docs = Settings().api_docs_config

        assert docs.description == DEFAULT_API_DESCRIPTION
        assert docs.contact_name == ".NET Core Engineering"
        assert docs.contact_email == "dnceng@microsoft.com"
        assert docs.version_query_parameter == "api-version"
        assert docs.api_versions == ["2018-07-16", "2019-01-16", "2020-02-20"]
        assert docs.document_url_template == "/api/{version}/swagger.json"
        assert docs.ui_url == "/swagger"
        assert docs.xml_comments_file == "Maestro.Web.xml"
        assert docs.content_root_path is None

    def test_log_defaults(self) -> None:
        log_config = LogConfig()

        assert log_config.log_level == "INFO"
        assert "authorization" in log_config.sensitive_fields


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Test environment variable overrides."""

    def test_nested_api_docs_settings(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("API_DOCS_CONFIG__VERSION_QUERY_PARAMETER", "v")
        clean_env.setenv("API_DOCS_CONFIG__API_VERSIONS", '["2020-02-20"]')
        clean_env.setenv("API_DOCS_CONFIG__CONTENT_ROOT_PATH", "/srv/maestro")

        docs = Settings().api_docs_config

        assert docs.version_query_parameter == "v"
        assert docs.api_versions == ["2020-02-20"]
        assert docs.content_root_path == Path("/srv/maestro")

    def test_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("ENVIRONMENT", "production")

        settings = Settings()

        assert settings.environment == "production"
        assert not settings.is_development
        assert settings.log_config.log_formatter_type == "json"

    def test_formatter_detection_on_container_platforms(
        self, clean_env: pytest.MonkeyPatch
    ) -> None:
        clean_env.setenv("K_SERVICE", "maestro")

        assert Settings().log_config.log_formatter_type == "json"

    def test_console_formatter_in_development(self) -> None:
        assert Settings().log_config.log_formatter_type == "console"

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


@pytest.mark.unit
class TestApiDocsConfigValidation:
    """Test validation of the documentation configuration."""

    def test_document_url_requires_version_placeholder(self) -> None:
        with pytest.raises(ValidationError, match="placeholder"):
            ApiDocsConfig(document_url_template="/swagger.json")

    def test_at_least_one_version(self) -> None:
        with pytest.raises(ValidationError):
            ApiDocsConfig(api_versions=[])

    def test_version_parameter_cannot_be_empty(self) -> None:
        with pytest.raises(ValidationError):
            ApiDocsConfig(version_query_parameter="")

    def test_empty_ui_url_disables_ui(self) -> None:
        assert ApiDocsConfig(ui_url="").ui_url is None
