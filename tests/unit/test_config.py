"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.core.config import LLMConfig, Settings

CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "settings.yaml"


class TestSettingsDefaults:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.llm.provider == "openai"
        assert settings.llm.plan_temperature == 0.1
        assert settings.llm.narration_temperature == 0.7
        assert settings.stream.write_timeout_seconds == 30.0
        assert settings.narration.top_candidates == 5
        assert settings.dataset.path == "data/candidates.csv"


class TestSettingsFromYaml:
    def test_bundled_config_loads(self) -> None:
        settings = Settings.from_yaml(CONFIG_PATH)
        assert settings.llm.provider == "openai"
        assert settings.llm.plan_model is None
        assert settings.stream.queue_size == 64
        assert settings.server.port == 8000

    def test_partial_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("llm:\n  provider: anthropic\n")
        settings = Settings.from_yaml(path)
        assert settings.llm.provider == "anthropic"
        assert settings.narration.top_skills == 10

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert Settings.from_yaml(path) == Settings()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            Settings.from_yaml(tmp_path / "nope.yaml")

    def test_bad_timeout_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("stream:\n  write_timeout_seconds: 0\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(path)


class TestLLMConfig:
    def test_provider_normalized(self) -> None:
        assert LLMConfig(provider="  Gemini ").provider == "gemini"

    def test_unknown_provider_rejected(self) -> None:
        with pytest.raises(ValidationError, match="provider must be one of"):
            LLMConfig(provider="watson")

    def test_temperature_range(self) -> None:
        with pytest.raises(ValidationError):
            LLMConfig(plan_temperature=3.0)
