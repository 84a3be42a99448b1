"""Dependency injection container for the matching services."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from dependency_injector import containers, providers

from .api import create_app
from .config import ConfigManager
from .core import (
    CommuteEvaluator,
    DealHealthCalculator,
    ExperienceEvaluator,
    HardKillEvaluator,
    IndustryEvaluator,
    InfluenceScorer,
    MatchingEngine,
    SalaryEvaluator,
    SkillsEvaluator,
    StartDateEvaluator,
)
from .core.evaluators import (
    ExperienceConfig,
    HardKillConfig,
    IndustryConfig,
    SalaryConfig,
    SkillsConfig,
)
from .functions import FunctionRegistry
from .pipeline import MatchingPipeline
from .schemas import MatchingConfig
from .schemas.common import utc_now
from .services import DealHealthService, InfluenceService, InterviewService, MatchService
from .storage import InMemoryRepository, Repository


class TalentMatchContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    clock = providers.Object(utc_now)

    skills_evaluator = providers.Singleton(SkillsEvaluator)
    experience_evaluator = providers.Singleton(ExperienceEvaluator)
    industry_evaluator = providers.Singleton(IndustryEvaluator)
    salary_evaluator = providers.Singleton(SalaryEvaluator)
    commute_evaluator = providers.Singleton(CommuteEvaluator)
    start_date_evaluator = providers.Singleton(StartDateEvaluator)
    hard_kill_evaluator = providers.Singleton(HardKillEvaluator)

    evaluators = providers.List(
        skills_evaluator,
        experience_evaluator,
        industry_evaluator,
        salary_evaluator,
        commute_evaluator,
        start_date_evaluator,
    )

    default_matching_config = providers.Singleton(MatchingConfig)

    matching_engine = providers.Singleton(
        MatchingEngine,
        evaluators=evaluators,
        hard_kills=hard_kill_evaluator,
        default_config=default_matching_config,
        now_provider=clock,
    )

    repository = providers.Singleton(InMemoryRepository)
    config_manager = providers.Object(None)

    deal_health_calculator = providers.Singleton(DealHealthCalculator, now_provider=clock)
    influence_scorer = providers.Singleton(InfluenceScorer, now_provider=clock)

    match_service = providers.Singleton(
        MatchService,
        repository=repository,
        engine=matching_engine,
        config_manager=config_manager,
        now_provider=clock,
    )
    deal_health_service = providers.Singleton(
        DealHealthService,
        repository=repository,
        calculator=deal_health_calculator,
    )
    influence_service = providers.Singleton(
        InfluenceService,
        repository=repository,
        scorer=influence_scorer,
    )
    interview_service = providers.Singleton(
        InterviewService,
        repository=repository,
        public_base_url=config.server.public_base_url,
        now_provider=clock,
    )

    registry = providers.Singleton(
        FunctionRegistry,
        match_service=match_service,
        deal_health_service=deal_health_service,
        influence_service=influence_service,
        interview_service=interview_service,
    )

    api = providers.Singleton(
        create_app,
        registry=registry,
        interview_service=interview_service,
    )

    pipeline = providers.Factory(MatchingPipeline, engine=matching_engine)


EVALUATOR_OVERRIDES: dict[str, tuple[str, type, type]] = {
    "skills": ("skills_evaluator", SkillsEvaluator, SkillsConfig),
    "experience": ("experience_evaluator", ExperienceEvaluator, ExperienceConfig),
    "industry": ("industry_evaluator", IndustryEvaluator, IndustryConfig),
    "salary": ("salary_evaluator", SalaryEvaluator, SalaryConfig),
    "hard_kills": ("hard_kill_evaluator", HardKillEvaluator, HardKillConfig),
}


def create_container(
    *,
    settings: dict | None = None,
    repository: Repository | None = None,
    now_provider: Callable[[], Any] | None = None,
) -> TalentMatchContainer:
    """Instantiate container with optional overrides."""

    container = TalentMatchContainer()

    if repository is not None:
        container.repository.override(providers.Object(repository))
    if now_provider is not None:
        container.clock.override(providers.Object(now_provider))

    if not settings:
        return container

    server_settings = settings.get("server", {}) if isinstance(settings, dict) else {}
    if server_settings:
        container.config.override({"server": server_settings})
        profiles_dir = server_settings.get("profiles_dir")
        if profiles_dir:
            container.config_manager.override(
                providers.Object(ConfigManager(Path(profiles_dir)))
            )

    matching_record = settings.get("matching") if isinstance(settings, dict) else None
    if matching_record:
        container.default_matching_config.override(
            providers.Object(MatchingConfig.from_record(matching_record))
        )

    evaluator_settings = settings.get("evaluators", {}) if isinstance(settings, dict) else {}
    for key, (provider_name, evaluator_cls, config_cls) in EVALUATOR_OVERRIDES.items():
        if key in evaluator_settings:
            evaluator_config = config_cls(**evaluator_settings[key])
            getattr(container, provider_name).override(
                providers.Singleton(evaluator_cls, config=evaluator_config)
            )

    return container
