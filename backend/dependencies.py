"""
Dependency injection for FastAPI endpoints.

Provides shared Config and row store instances plus per-request services
to be used across all API routes.

Tests swap the store for an in-memory one through
app.dependency_overrides[get_database].
"""

from functools import lru_cache

from fastapi import Depends

from tracker.core.config import Config
from tracker.core.database import RowStore, get_database as build_database
from tracker.dashboard.aggregator import DashboardAggregator
from tracker.services.action_logs import ActionLogService
from tracker.services.outcomes import OutcomeService
from tracker.skills.service import SkillService


@lru_cache()
def get_config() -> Config:
    """
    Get cached Config instance.

    lru_cache keeps a single Config for the lifetime of the application.
    """
    return Config()


@lru_cache()
def get_database() -> RowStore:
    """
    Get cached row store.

    SQLite opens a connection per operation, so one instance is enough.
    """
    return build_database(get_config())


def get_outcome_service(
    db: RowStore = Depends(get_database),
    config: Config = Depends(get_config),
) -> OutcomeService:
    """Get OutcomeService for outcome and output operations."""
    return OutcomeService(db, config)


def get_skill_service(
    db: RowStore = Depends(get_database),
    config: Config = Depends(get_config),
) -> SkillService:
    """Get SkillService for skill items, logs and graduation."""
    return SkillService(db, config)


def get_action_log_service(
    db: RowStore = Depends(get_database),
    config: Config = Depends(get_config),
    skills: SkillService = Depends(get_skill_service),
) -> ActionLogService:
    """Get ActionLogService sharing the request's SkillService."""
    return ActionLogService(db, config, skill_service=skills)


def get_dashboard_aggregator(
    db: RowStore = Depends(get_database),
    config: Config = Depends(get_config),
) -> DashboardAggregator:
    """Get DashboardAggregator for dashboard data."""
    return DashboardAggregator(db, config)
