"""Pydantic configuration schema for CLI and server YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class EvaluatorConfig(BaseModel):
    skills: dict[str, Any] | None = None
    experience: dict[str, Any] | None = None
    industry: dict[str, Any] | None = None
    salary: dict[str, Any] | None = None
    hard_kills: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")


class ServerConfig(BaseModel):
    public_base_url: str = "http://localhost:8000"
    profiles_dir: str | None = None

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    matching: dict[str, Any] | None = None
    evaluators: EvaluatorConfig = Field(default_factory=EvaluatorConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {"server": self.server.model_dump()}
        if self.matching:
            settings["matching"] = dict(self.matching)
        evaluator_settings = self.evaluators.model_dump(exclude_none=True)
        if evaluator_settings:
            settings["evaluators"] = evaluator_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
