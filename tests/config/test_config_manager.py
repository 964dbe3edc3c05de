# tests/config/test_config_manager.py
from pathlib import Path
from unittest.mock import patch

import pytest

from chatrelay.config.manager import ConfigManager, Settings
from chatrelay.config.providers import ProviderType


@pytest.fixture
def config_manager(temp_home_dir):
    return ConfigManager()


def test_creates_config_files(config_manager, temp_home_dir):
    config_dir = temp_home_dir / ".chatrelay"
    assert (config_dir / "config.json").exists()
    assert (config_dir / "secrets.enc").exists()
    assert config_manager.load_config() == {}
    assert config_manager.load_secrets() == {}


def test_no_create_leaves_home_untouched(temp_home_dir):
    manager = ConfigManager(create=False)
    assert not (temp_home_dir / ".chatrelay").exists()
    assert manager.load_config() == {}
    assert manager.get_provider_credentials(ProviderType.GROQ) == {}


def test_save_provider_config_round_trip(config_manager):
    config_manager.save_provider_config(
        ProviderType.GROQ, "llama3-8b-8192", {"GROQ_API_KEY": "gsk-test"}
    )

    assert config_manager.get_provider_model(ProviderType.GROQ) == "llama3-8b-8192"
    assert config_manager.get_provider_credentials(ProviderType.GROQ) == {
        "GROQ_API_KEY": "gsk-test"
    }
    assert config_manager.load_config() == {
        "providers": {
            "groq": {"default_model": "llama3-8b-8192", "env_vars": ["GROQ_API_KEY"]}
        }
    }


def test_secrets_are_encrypted_on_disk(config_manager):
    config_manager.save_provider_config(
        ProviderType.GROQ, "llama3-8b-8192", {"GROQ_API_KEY": "gsk-secret"}
    )
    assert b"gsk-secret" not in config_manager.secrets_file.read_bytes()


def test_corrupt_config_reads_as_empty(config_manager):
    config_manager.config_file.write_text("{not json")
    assert config_manager.load_config() == {}


def test_validate_provider_setup_uses_litellm(config_manager):
    with patch("litellm.completion") as mock_completion:
        assert config_manager.validate_provider_setup(
            ProviderType.GROQ, "llama3-8b-8192", "gsk-test"
        )
        kwargs = mock_completion.call_args.kwargs
        assert kwargs["model"] == "groq/llama3-8b-8192"
        assert kwargs["api_key"] == "gsk-test"
        assert kwargs["max_tokens"] == 1

        mock_completion.side_effect = Exception("bad key")
        assert not config_manager.validate_provider_setup(
            ProviderType.GROQ, "llama3-8b-8192", "gsk-bad"
        )


class TestSettings:
    def test_defaults(self, temp_home_dir):
        settings = Settings.from_env(environ={})
        assert settings.port == 3001
        assert settings.data_dir == Path("data")
        assert settings.ollama_model == "llama3"
        assert settings.ollama_host == "http://localhost:11434"
        assert settings.groq_api_key == ""
        assert settings.default_provider == ProviderType.OLLAMA
        assert settings.console_provider == ProviderType.OLLAMA
        assert settings.restore_sessions is False

    def test_environment_values(self, temp_home_dir):
        settings = Settings.from_env(
            environ={
                "PORT": "8080",
                "DATA_DIR": "/tmp/chats",
                "OLLAMA_MODEL": "mistral",
                "OLLAMA_HOST": "gpu-box:11434",
                "GROQ_MODEL": "mixtral-8x7b-32768",
                "GROQ_API_KEY": " gsk-env ",
                "USE_GROQ": "TRUE",
                "RESTORE_SESSIONS": "1",
                "LOG_LEVEL": "debug",
            }
        )
        assert settings.port == 8080
        assert settings.data_dir == Path("/tmp/chats")
        assert settings.ollama_model == "mistral"
        assert settings.ollama_host == "http://gpu-box:11434"
        assert settings.groq_model == "mixtral-8x7b-32768"
        assert settings.groq_api_key == "gsk-env"
        assert settings.default_provider == ProviderType.GROQ
        assert settings.console_provider == ProviderType.GROQ
        assert settings.restore_sessions is True
        assert settings.log_level == "DEBUG"

    def test_use_groq_flag_is_independent_of_key(self, temp_home_dir):
        settings = Settings.from_env(environ={"GROQ_API_KEY": "gsk-env"})
        assert settings.default_provider == ProviderType.OLLAMA
        assert settings.console_provider == ProviderType.GROQ

    def test_stored_values_fill_gaps(self, config_manager):
        config_manager.save_provider_config(
            ProviderType.GROQ, "llama3-8b-8192", {"GROQ_API_KEY": "gsk-stored"}
        )
        settings = Settings.from_env(environ={}, config_manager=config_manager)
        assert settings.groq_api_key == "gsk-stored"
        assert settings.groq_model == "llama3-8b-8192"

        settings = Settings.from_env(
            environ={"GROQ_API_KEY": "gsk-env", "GROQ_MODEL": "other"},
            config_manager=config_manager,
        )
        assert settings.groq_api_key == "gsk-env"
        assert settings.groq_model == "other"

    def test_bad_port(self, temp_home_dir):
        with pytest.raises(ValueError, match="PORT must be an integer"):
            Settings.from_env(environ={"PORT": "abc"})

    def test_empty_port_uses_default(self, temp_home_dir):
        assert Settings.from_env(environ={"PORT": ""}).port == 3001

    def test_model_for(self):
        settings = Settings(ollama_model="a", groq_model="b")
        assert settings.model_for(ProviderType.OLLAMA) == "a"
        assert settings.model_for(ProviderType.GROQ) == "b"
