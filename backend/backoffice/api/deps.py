"""Shared API dependencies."""

from backoffice.services.auto_analytics_repository import AutoAnalyticsRepository
from backoffice.services.auto_analytics_service import AutoAnalyticsService

_repository = AutoAnalyticsRepository()


def get_repository() -> AutoAnalyticsRepository:
    """Process-wide model store (swap via dependency_overrides in tests)."""
    return _repository


def get_auto_analytics_service() -> AutoAnalyticsService:
    return AutoAnalyticsService()


__all__ = ["get_repository", "get_auto_analytics_service"]
