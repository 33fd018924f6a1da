"""Unit tests for configuration templating and models."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from src.users_api.runtime.config.config_data import (
    ConfigData,
    DatabaseConfig,
    PaginationConfig,
)
from src.users_api.runtime.config.config_template import (
    load_templated_yaml,
    promote_environment_variables,
    substitute_env_vars,
)
from src.users_api.runtime.config.settings import EnvironmentVariables

REPO_CONFIG = Path(__file__).resolve().parents[4] / "config.yaml"


class TestSubstituteEnvVars:
    """Test cases for substitute_env_vars function."""

    def test_substitute_simple_env_var(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert substitute_env_vars("${TEST_VAR}") == "test_value"

    def test_substitute_env_var_in_text(self):
        with patch.dict(os.environ, {"HOST": "localhost", "PORT": "8080"}):
            result = substitute_env_vars("http://${HOST}:${PORT}/api")
            assert result == "http://localhost:8080/api"

    def test_default_used_when_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-fallback}") == "fallback"

    def test_default_ignored_when_set(self):
        with patch.dict(os.environ, {"PRESENT_VAR": "actual"}):
            assert substitute_env_vars("${PRESENT_VAR:-fallback}") == "actual"

    def test_empty_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-}") == ""

    def test_required_env_var_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(
                ValueError, match="Required environment variable MISSING_VAR not set"
            ):
                substitute_env_vars("${MISSING_VAR}")

    def test_required_with_custom_error(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(
                ValueError,
                match="Required environment variable DB: database is required",
            ):
                substitute_env_vars("${DB:?database is required}")

    def test_complex_default_value(self):
        with patch.dict(os.environ, {}, clear=True):
            result = substitute_env_vars("${DATABASE_URL:-sqlite:///./database/users.db}")
            assert result == "sqlite:///./database/users.db"

    def test_plain_text_unchanged(self):
        text = "This has $MALFORMED and ${UNCLOSED variables"
        assert substitute_env_vars(text) == text


class TestPromoteEnvironmentVariables:
    def test_prefixed_variables_promoted(self):
        env = {"PRODUCTION_DATABASE_URL": "postgresql://db/users", "OTHER": "x"}
        with patch.dict(os.environ, env, clear=True):
            promoted = promote_environment_variables("production")

            assert promoted == ["DATABASE_URL"]
            assert os.environ["DATABASE_URL"] == "postgresql://db/users"

    def test_other_environments_untouched(self):
        with patch.dict(os.environ, {"TEST_LOG_LEVEL": "DEBUG"}, clear=True):
            assert promote_environment_variables("development") == []
            assert "LOG_LEVEL" not in os.environ


class TestLoadTemplatedYaml:
    """Test cases for load_templated_yaml function."""

    SAMPLE = """
config:
  app:
    environment: ${APP_ENVIRONMENT:-development}
    port: ${PORT:-8000}
    api_prefix: ${API_PREFIX:-/api}
  database:
    url: ${DATABASE_URL:-sqlite:///./database/users.db}
  pagination:
    max_page_size: ${MAX_PAGE_SIZE:-100}
"""

    def _write(self, tmp_path: Path, content: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(content)
        return path

    def test_values_substituted(self, tmp_path):
        path = self._write(tmp_path, self.SAMPLE)
        env = {"APP_ENVIRONMENT": "test", "PORT": "9000", "MAX_PAGE_SIZE": "50"}

        with patch.dict(os.environ, env, clear=True):
            config = load_templated_yaml(path)

        assert config.app.environment == "test"
        assert config.app.port == 9000
        assert config.app.api_prefix == "/api"
        assert config.database.url == "sqlite:///./database/users.db"
        assert config.pagination.max_page_size == 50
        # Sections absent from the file fall back to model defaults
        assert config.stats.recent_days == 7

    def test_environment_override_applied(self, tmp_path):
        path = self._write(tmp_path, self.SAMPLE)
        env = {"APP_ENVIRONMENT": "test", "TEST_DATABASE_URL": "sqlite://"}

        with patch.dict(os.environ, env, clear=True):
            config = load_templated_yaml(path)

        assert config.database.url == "sqlite://"

    def test_invalid_yaml_raises(self, tmp_path):
        path = self._write(tmp_path, "config: [unclosed")

        with pytest.raises(ValueError, match="Error parsing YAML"):
            load_templated_yaml(path)

    def test_empty_file_raises(self, tmp_path):
        path = self._write(tmp_path, "")

        with pytest.raises(ValueError):
            load_templated_yaml(path)

    def test_invalid_values_raise(self, tmp_path):
        path = self._write(tmp_path, "config:\n  app:\n    port: not-a-port\n")

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_templated_yaml(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_templated_yaml(tmp_path / "absent.yaml")

    def test_repository_config_loads_with_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(REPO_CONFIG)

        assert config.app.environment == "development"
        assert config.app.api_prefix == "/api"
        assert config.database.backend == "sqlite"
        assert config.database.echo is False
        assert config.pagination.default_page_size == 10
        assert config.pagination.max_page_size == 100
        assert config.stats.top_countries == 5


class TestConfigModels:
    def test_defaults(self):
        config = ConfigData()

        assert config.app.api_prefix == "/api"
        assert config.pagination.default_page_size == 10
        assert config.stats.recent_limit == 10

    @pytest.mark.parametrize(
        ("url", "backend", "file_path"),
        [
            ("sqlite:///./database/users.db", "sqlite", "./database/users.db"),
            ("sqlite://", "sqlite", None),
            ("sqlite:///:memory:", "sqlite", None),
            ("postgresql+psycopg2://u:p@db:5432/users", "postgresql", None),
        ],
    )
    def test_database_url_introspection(self, url, backend, file_path):
        config = DatabaseConfig(url=url)

        assert config.backend == backend
        assert config.file_path == file_path

    def test_default_page_size_cannot_exceed_maximum(self):
        with pytest.raises(ValueError):
            PaginationConfig(default_page_size=50, max_page_size=20)

    def test_environment_variables(self):
        env = {"APP_ENVIRONMENT": "production", "USERS_API_CONFIG": "/etc/users.yaml"}
        with patch.dict(os.environ, env, clear=True):
            settings = EnvironmentVariables(_env_file=None)

        assert settings.app_environment == "production"
        assert settings.config_file == "/etc/users.yaml"
