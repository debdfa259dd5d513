"""
Tests for explorer settings read from the environment.
"""

import pytest

from explorer.config import ExplorerSettings
from query.completion import CompletionService

ENV_VARS = ("OPENAI_BASE_URL", "OPENAI_API_KEY", "OPENAI_MODEL", "EXPLORER_TIMEOUT", "EXPLORER_TEMPERATURE")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes values load_dotenv adds
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    # A .env path that does not exist keeps the developer's own .env out of the tests
    return str(tmp_path / "missing.env")


class TestExplorerSettings:

    def test_defaults(self, clean_env):
        settings = ExplorerSettings.from_env(clean_env)

        assert settings.base_url == "https://api.openai.com/v1"
        assert settings.api_key == ""
        assert settings.model == "gpt-4o-mini"
        assert settings.timeout == 30.0
        assert settings.temperature == 0.3
        assert settings.max_prompt_classes == 30
        assert settings.max_prompt_properties == 20
        assert settings.max_prompt_individuals == 20
        assert settings.max_explain_chars == 15000
        assert not settings.is_configured

    def test_values_from_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("OPENAI_BASE_URL", "https://proxy.example.org/v1")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test-123456")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1-mini")
        monkeypatch.setenv("EXPLORER_TIMEOUT", "12.5")
        monkeypatch.setenv("EXPLORER_TEMPERATURE", "0")

        settings = ExplorerSettings.from_env(clean_env)

        assert settings.base_url == "https://proxy.example.org/v1"
        assert settings.model == "gpt-4.1-mini"
        assert settings.timeout == 12.5
        assert settings.temperature == 0.0
        assert settings.is_configured

    def test_values_from_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("OPENAI_API_KEY=demo\nOPENAI_MODEL=local-model\n", encoding="utf-8")

        settings = ExplorerSettings.from_env(str(env_file))

        assert settings.api_key == "demo"
        assert settings.model == "local-model"

    def test_blank_key_is_not_configured(self):
        assert not ExplorerSettings(api_key="   ").is_configured

    def test_create_completion_service_requires_key(self):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            ExplorerSettings().create_completion_service()

    def test_create_completion_service(self):
        settings = ExplorerSettings(api_key="demo", model="m", base_url="https://proxy.example.org/v1")
        service = settings.create_completion_service()

        assert isinstance(service, CompletionService)
        assert service.model == "m"
        assert service.base_url == "https://proxy.example.org/v1"

    def test_describe_masks_key(self):
        text = ExplorerSettings(api_key="sk-secret-value-42").describe()

        assert "sk-secret-value-42" not in text
        assert "sk-s…42" in text
        assert "(not set)" in ExplorerSettings().describe()


# Test runner for manual execution
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
