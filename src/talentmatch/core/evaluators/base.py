"""Helpers shared by the matching evaluators."""

from __future__ import annotations

from typing import Any, Literal

import pendulum

from ...schemas.common import to_utc
from ...schemas.matching import MatchingConfig

GateLevel = Literal["warn", "fail", "kill"]


def resolve_config(context: dict[str, Any]) -> MatchingConfig:
    config = context.get("matching_config")
    if config is None:
        return MatchingConfig()
    if isinstance(config, MatchingConfig):
        return config
    return MatchingConfig.from_record(config)


def resolve_as_of(context: dict[str, Any]) -> pendulum.DateTime:
    as_of = context.get("as_of")
    if as_of is None:
        return pendulum.now("UTC")
    return to_utc(as_of)


def gate(factor: str, level: GateLevel, reason: str) -> dict[str, str]:
    return {"factor": factor, "level": level, "reason": reason}

