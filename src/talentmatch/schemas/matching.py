"""Matching configuration value object."""

from __future__ import annotations

from typing import Any, Iterable

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ConfigError

logger = structlog.get_logger(__name__)

WEIGHT_TOLERANCE = 0.01
SENIORITY_LEVELS: tuple[str, ...] = (
    "junior",
    "mid",
    "senior",
    "lead",
    "head",
    "director",
    "vp",
    "c-level",
)


class WeightSplit(BaseModel):
    fit: float = 0.70
    constraints: float = 0.30

    model_config = ConfigDict(extra="forbid")


class FitBreakdown(BaseModel):
    skills: float = 0.50
    experience: float = 0.30
    industry: float = 0.20

    model_config = ConfigDict(extra="forbid")


class ConstraintBreakdown(BaseModel):
    salary: float = 0.40
    commute: float = 0.35
    start_date: float = Field(default=0.25, alias="startDate")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class GateThresholds(BaseModel):
    """Warn/fail cutoffs per constraint dimension."""

    salary_warn_percent: float = 10.0
    salary_fail_percent: float = 30.0
    commute_warn_minutes: float = 45.0
    commute_fail_minutes: float = 75.0
    availability_warn_days: int = 60
    availability_fail_days: int = 120
    experience_warn_years: float = 0.0
    experience_fail_years: float = 2.0
    min_skill_match_percent: float = 30.0

    model_config = ConfigDict(extra="forbid")


class HardKillDefaults(BaseModel):
    visa_required: bool = True
    language_required: bool = True
    onsite_required: bool = True
    license_required: bool = True

    model_config = ConfigDict(extra="forbid")


class DisplayPolicy(BaseModel):
    """Thresholds one tier requires."""

    min_score: float = Field(alias="minScore")
    min_coverage: float = Field(alias="minCoverage")
    max_blockers: int = Field(default=0, alias="maxBlockers")
    requires_full_multiplier: bool = Field(default=False, alias="requiresMultiplier1")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class DisplayPolicies(BaseModel):
    hot: DisplayPolicy = Field(
        default_factory=lambda: DisplayPolicy(min_score=80, min_coverage=0.80, max_blockers=0)
    )
    standard: DisplayPolicy = Field(
        default_factory=lambda: DisplayPolicy(min_score=65, min_coverage=0.60, max_blockers=0)
    )
    maybe: DisplayPolicy = Field(
        default_factory=lambda: DisplayPolicy(min_score=45, min_coverage=0.40, max_blockers=2)
    )

    model_config = ConfigDict(extra="forbid")

    def ordered(self) -> list[tuple[str, DisplayPolicy]]:
        """Tiers from strictest to loosest."""
        return [("hot", self.hot), ("standard", self.standard), ("maybe", self.maybe)]


class RangeMultiplier(BaseModel):
    min: float
    max: float | None = None
    multiplier: float

    model_config = ConfigDict(extra="forbid")

    def contains(self, value: float) -> bool:
        return value >= self.min and (self.max is None or value < self.max)


class SeniorityMultiplier(BaseModel):
    gap: int
    multiplier: float

    model_config = ConfigDict(extra="forbid")


def _default_salary_table() -> list[RangeMultiplier]:
    return [
        RangeMultiplier(min=0, max=10, multiplier=0.6),
        RangeMultiplier(min=10, max=20, multiplier=0.3),
        RangeMultiplier(min=20, max=30, multiplier=0.15),
        RangeMultiplier(min=30, max=None, multiplier=0.05),
    ]


def _default_start_date_table() -> list[RangeMultiplier]:
    return [
        RangeMultiplier(min=14, max=30, multiplier=0.95),
        RangeMultiplier(min=30, max=60, multiplier=0.85),
        RangeMultiplier(min=60, max=90, multiplier=0.7),
        RangeMultiplier(min=90, max=None, multiplier=0.4),
    ]


def _default_seniority_table() -> list[SeniorityMultiplier]:
    return [
        SeniorityMultiplier(gap=1, multiplier=0.6),
        SeniorityMultiplier(gap=2, multiplier=0.25),
        SeniorityMultiplier(gap=3, multiplier=0.1),
    ]


class DealbreakerMultipliers(BaseModel):
    """Piecewise penalty tables feeding the deal probability."""

    salary: list[RangeMultiplier] = Field(default_factory=_default_salary_table)
    start_date: list[RangeMultiplier] = Field(
        default_factory=_default_start_date_table, alias="startDate"
    )
    seniority: list[SeniorityMultiplier] = Field(default_factory=_default_seniority_table)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @staticmethod
    def lookup(table: Iterable[RangeMultiplier], value: float) -> float:
        for entry in table:
            if entry.contains(value):
                return entry.multiplier
        return 1.0

    def seniority_multiplier(self, gap: int) -> float:
        if gap <= 0:
            return 1.0
        ordered = sorted(self.seniority, key=lambda item: item.gap)
        for entry in ordered:
            if entry.gap == gap:
                return entry.multiplier
        if ordered and gap > ordered[-1].gap:
            return ordered[-1].multiplier
        return 1.0


_GROUPS: dict[str, tuple[str, ...]] = {
    "weights": ("fit", "constraints"),
    "fit_breakdown": ("skills", "experience", "industry"),
    "constraint_breakdown": ("salary", "commute", "start_date"),
}


class MatchingConfig(BaseModel):
    """Versioned matching configuration with normalized weight groups."""

    profile: str = "default"
    version: int = Field(default=1, ge=1)
    active: bool = True
    weights: WeightSplit = Field(default_factory=WeightSplit)
    fit_breakdown: FitBreakdown = Field(default_factory=FitBreakdown)
    constraint_breakdown: ConstraintBreakdown = Field(default_factory=ConstraintBreakdown)
    gate_thresholds: GateThresholds = Field(default_factory=GateThresholds)
    hard_kill_defaults: HardKillDefaults = Field(default_factory=HardKillDefaults)
    display_policies: DisplayPolicies = Field(default_factory=DisplayPolicies)
    dealbreaker_multipliers: DealbreakerMultipliers = Field(
        default_factory=DealbreakerMultipliers
    )
    weight_warnings: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_record(cls, record: dict[str, Any] | None, *, strict: bool = False) -> "MatchingConfig":
        """Build a config from a stored or submitted record.

        Weight groups drifting from 1.0 are renormalized and flagged in
        ``weight_warnings``; with ``strict`` they raise ``ConfigError``.
        Warnings already carried by a stored record are kept, since its
        weights were renormalized when it was saved.
        Negative weights, zero-sum groups and a ``hot`` tier tolerating
        blockers are always rejected.
        """
        payload = _lift_nested_breakdowns(record or {})
        carried = payload.pop("weight_warnings", None) or []
        if not isinstance(carried, list):
            raise ConfigError("weight_warnings must be a list", issues=["weight_warnings"])
        try:
            config = cls.model_validate(payload)
        except ValidationError as exc:
            issues = [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            ]
            raise ConfigError("Invalid matching config", issues=issues) from exc

        if config.display_policies.hot.max_blockers != 0:
            raise ConfigError(
                "display_policies.hot.maxBlockers must be 0",
                issues=["hot tier cannot tolerate blockers"],
            )

        updates: dict[str, Any] = {}
        warnings: list[str] = []
        for group, keys in _GROUPS.items():
            values = getattr(config, group).model_dump()
            negative = [key for key in keys if values[key] < 0]
            if negative:
                raise ConfigError(
                    f"{group} contains negative weights",
                    issues=[f"{group}.{key} < 0" for key in negative],
                )
            total = sum(values[key] for key in keys)
            if total <= 0:
                raise ConfigError(f"{group} weights sum to zero", issues=[f"{group} sum is 0"])
            if abs(total - 1.0) < WEIGHT_TOLERANCE:
                continue
            drift = f"{group} sums to {total:.2f}"
            if strict:
                raise ConfigError(f"{group} must sum to 1.0", issues=[drift])
            warnings.append(f"{drift}; renormalized to 1.00")
            updates[group] = getattr(config, group).model_copy(
                update={key: values[key] / total for key in keys}
            )
            logger.warning(
                "config.weights_renormalized",
                profile=config.profile,
                group=group,
                total=round(total, 4),
            )

        warnings = [str(item) for item in carried] + [
            item for item in warnings if item not in carried
        ]
        if warnings:
            updates["weight_warnings"] = warnings
        return config.model_copy(update=updates) if updates else config

    @staticmethod
    def weight_issues(record: dict[str, Any] | None) -> list[str]:
        """Report weight-sum drift on a raw record without constructing it."""
        payload = _lift_nested_breakdowns(record or {})
        defaults = MatchingConfig()
        issues: list[str] = []
        for group, keys in _GROUPS.items():
            raw = payload.get(group) or {}
            if not isinstance(raw, dict):
                issues.append(f"{group} must be a mapping")
                continue
            fallback = getattr(defaults, group).model_dump()
            total = 0.0
            for key in keys:
                value = raw.get(key, raw.get(_wire_name(key), fallback[key]))
                try:
                    total += float(value)
                except (TypeError, ValueError):
                    issues.append(f"{group}.{key} is not numeric")
                    break
            else:
                if abs(total - 1.0) >= WEIGHT_TOLERANCE:
                    issues.append(f"{group} sums to {total:.2f}")
        return issues

    def to_record(self) -> dict[str, Any]:
        """Serialize with the wire aliases the admin surface uses."""
        return self.model_dump(mode="json", by_alias=True)


def _wire_name(key: str) -> str:
    return "startDate" if key == "start_date" else key


def _lift_nested_breakdowns(record: dict[str, Any]) -> dict[str, Any]:
    payload = dict(record)
    weights = payload.get("weights")
    if isinstance(weights, dict):
        weights = dict(weights)
        for group in ("fit_breakdown", "constraint_breakdown"):
            nested = weights.pop(group, None)
            if nested is not None and group not in payload:
                payload[group] = nested
        payload["weights"] = weights
    return payload


__all__ = [
    "ConstraintBreakdown",
    "DealbreakerMultipliers",
    "DisplayPolicies",
    "DisplayPolicy",
    "FitBreakdown",
    "GateThresholds",
    "HardKillDefaults",
    "MatchingConfig",
    "RangeMultiplier",
    "SENIORITY_LEVELS",
    "SeniorityMultiplier",
    "WeightSplit",
]
