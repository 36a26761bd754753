"""Configuration models and YAML loader for the candidate query engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from src.llm import available_providers


class LLMConfig(BaseModel):
    """Reasoning provider selection and sampling settings."""

    provider: str = "openai"
    plan_model: str | None = None
    narration_model: str | None = None
    plan_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    narration_temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    @field_validator("provider")
    @classmethod
    def provider_registered(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in available_providers():
            msg = f"provider must be one of {available_providers()}, got '{v}'"
            raise ValueError(msg)
        return v


class DatasetConfig(BaseModel):
    """Location of the candidate dataset."""

    path: str = "data/candidates.csv"


class StreamConfig(BaseModel):
    """Outbound event stream limits."""

    write_timeout_seconds: float = Field(default=30.0, gt=0)
    queue_size: int = Field(default=64, ge=1)


class NarrationConfig(BaseModel):
    """How much of the ranked set the narrator sees."""

    top_candidates: int = Field(default=5, ge=1, le=50)
    top_skills: int = Field(default=10, ge=1)


class ServerConfig(BaseModel):
    """HTTP server bind address."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    narration: NarrationConfig = Field(default_factory=NarrationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
