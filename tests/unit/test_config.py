"""Unit tests for REMic configuration."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError as PydanticValidationError

from remic.config.settings import RemicConfig
from remic.utils.env import load_environment


class TestRemicConfig:
    """Test configuration settings."""

    @patch.dict(os.environ, {"HOME": "/home/dreamer"}, clear=True)
    def test_default_values(self):
        """Test that default configuration values are correct."""
        config = RemicConfig()

        assert config.debug is False
        assert config.environment == "development"
        assert config.log_level == "INFO"
        assert config.log_file is None
        assert config.log_rotation == "5 MB"
        assert config.rewrite_provider == "auto"
        assert config.rewrite_timeout == 60.0
        assert config.rewrite_max_attempts == 3
        assert config.backend_url == "http://localhost:3002/api"
        assert config.llm_api_key == ""
        assert config.store_path == Path("/home/dreamer/.remic/dreams.json")

    @patch.dict(os.environ, {
        "REMIC_ENVIRONMENT": "production",
        "REMIC_LOG_LEVEL": "DEBUG",
        "REMIC_REWRITE_PROVIDER": "Backend",
        "REMIC_REWRITE_TIMEOUT": "12.5",
        "REMIC_DATA_DIR": "/tmp/journal",
        "REMIC_STORE_FILENAME": "night.json",
    })
    def test_environment_variables(self):
        """Test that environment variables override defaults."""
        config = RemicConfig()

        assert config.environment == "production"
        assert config.log_level == "DEBUG"
        assert config.rewrite_provider == "backend"
        assert config.rewrite_timeout == 12.5
        assert config.store_path == Path("/tmp/journal/night.json")

    @patch.dict(os.environ, {"OPENAI_API_KEY": "sk-standard"})
    def test_standard_openai_key(self):
        """Test that the unprefixed OpenAI key is picked up."""
        config = RemicConfig()

        assert config.llm_api_key == "sk-standard"
        assert config.llm_configured is True

    @patch.dict(os.environ, {"OPENAI_API_KEY": "sk-standard", "REMIC_LLM_API_KEY": "sk-remic"})
    def test_prefixed_key_wins(self):
        assert RemicConfig().llm_api_key == "sk-remic"

    def test_invalid_provider(self):
        with pytest.raises(PydanticValidationError):
            RemicConfig(rewrite_provider="carrier-pigeon")

    def test_max_attempts_at_least_one(self):
        assert RemicConfig(rewrite_max_attempts=0).rewrite_max_attempts == 1

    def test_backend_configured(self):
        assert RemicConfig().backend_configured is False
        assert RemicConfig(backend_token="tok").backend_configured is True

    def test_environment_properties(self):
        """Test environment detection properties."""
        config = RemicConfig(environment="development")
        assert config.is_development is True
        assert config.is_production is False
        assert config.is_testing is False

        config = RemicConfig(environment="prod")
        assert config.is_development is False
        assert config.is_production is True

        config = RemicConfig(environment="test")
        assert config.is_testing is True


class TestLoadEnvironment:
    """Test dotenv loading."""

    @patch.dict(os.environ, {})
    def test_loads_file(self, tmp_path):
        os.environ.pop("REMIC_TEST_VALUE", None)
        env_file = tmp_path / "custom.env"
        env_file.write_text("REMIC_TEST_VALUE=from-file\n")

        assert load_environment(env_file) is True
        assert os.environ["REMIC_TEST_VALUE"] == "from-file"

    @patch.dict(os.environ, {"REMIC_TEST_VALUE": "from-shell"})
    def test_existing_variables_win(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("REMIC_TEST_VALUE=from-file\n")

        load_environment(str(env_file))

        assert os.environ["REMIC_TEST_VALUE"] == "from-shell"

    def test_missing_file(self, tmp_path):
        assert load_environment(tmp_path / "absent.env") is False

    @patch.dict(os.environ, {})
    def test_defaults_to_cwd(self, tmp_path):
        os.environ.pop("REMIC_CWD_VALUE", None)
        (tmp_path / ".env").write_text("REMIC_CWD_VALUE=here\n")

        load_environment()

        assert os.environ["REMIC_CWD_VALUE"] == "here"
