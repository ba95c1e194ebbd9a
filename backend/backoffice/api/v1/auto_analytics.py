"""Auto-analytics API routes.

CRUD and lifecycle on auto-analytical models, plus the engine entry points:
validate, simulate, suggestions, bulk-apply and coverage-report.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from backoffice.api.deps import get_auto_analytics_service, get_repository
from backoffice.schemas.auto_analytics import (
    AutoAnalyticalModel,
    BulkApplyResult,
    CoverageReport,
    ModelCreate,
    ModelListResponse,
    ModelUpdate,
    SimulationResult,
    SuggestionsResult,
    TransactionBatchRequest,
    TransactionRequest,
    ValidationResult,
)
from backoffice.services.auto_analytics_matching import validate_model
from backoffice.services.auto_analytics_repository import AutoAnalyticsRepository
from backoffice.services.auto_analytics_service import AutoAnalyticsService

router = APIRouter()


# ── Engine ────────────────────────────────────────


@router.post("/validate", response_model=ValidationResult)
async def validate(data: dict[str, Any] = Body(...)):
    """Check a model definition without storing it. Lists every violation."""
    return validate_model(data)


@router.post("/simulate", response_model=SimulationResult)
async def simulate(
    data: TransactionRequest,
    repository: AutoAnalyticsRepository = Depends(get_repository),
    service: AutoAnalyticsService = Depends(get_auto_analytics_service),
):
    """Preview the decision for a transaction; nothing is written."""
    return await service.simulate(data.transaction, repository.all_models)


@router.post("/suggestions", response_model=SuggestionsResult)
async def suggestions(
    data: TransactionRequest,
    repository: AutoAnalyticsRepository = Depends(get_repository),
    service: AutoAnalyticsService = Depends(get_auto_analytics_service),
):
    """List every confirmed model matching a transaction, best first."""
    return await service.suggestions(data.transaction, repository.all_models)


@router.post("/bulk-apply", response_model=BulkApplyResult)
async def bulk_apply(
    data: TransactionBatchRequest,
    repository: AutoAnalyticsRepository = Depends(get_repository),
    service: AutoAnalyticsService = Depends(get_auto_analytics_service),
):
    """Classify a batch of transactions. Decisions are returned, not persisted."""
    return await service.bulk_apply(data.transactions, repository.all_models)


@router.post("/coverage-report", response_model=CoverageReport)
async def coverage_report(
    data: TransactionBatchRequest,
    repository: AutoAnalyticsRepository = Depends(get_repository),
    service: AutoAnalyticsService = Depends(get_auto_analytics_service),
):
    """Share of the batch covered by at least one confirmed model."""
    return await service.coverage_report(data.transactions, repository.all_models)


# ── Models ────────────────────────────────────────


@router.get("", response_model=ModelListResponse)
async def list_models(
    page: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1),
    search: str = "",
    repository: AutoAnalyticsRepository = Depends(get_repository),
):
    return await repository.list_models(page, limit, search)


@router.post("", response_model=AutoAnalyticalModel, status_code=201)
async def create_model(
    data: ModelCreate,
    repository: AutoAnalyticsRepository = Depends(get_repository),
):
    """Create a draft model; confirm it to make it eligible for matching."""
    return await repository.create_model(data)


@router.get("/{model_id}", response_model=AutoAnalyticalModel)
async def get_model(
    model_id: str,
    repository: AutoAnalyticsRepository = Depends(get_repository),
):
    return await repository.get_model(model_id)


@router.patch("/{model_id}", response_model=AutoAnalyticalModel)
async def update_model(
    model_id: str,
    data: ModelUpdate,
    repository: AutoAnalyticsRepository = Depends(get_repository),
):
    """Edit a draft model. Confirmed and cancelled models are immutable."""
    return await repository.update_model(model_id, data)


@router.post("/{model_id}/confirm", response_model=AutoAnalyticalModel)
async def confirm_model(
    model_id: str,
    repository: AutoAnalyticsRepository = Depends(get_repository),
):
    return await repository.confirm_model(model_id)


@router.post("/{model_id}/cancel", response_model=AutoAnalyticalModel)
async def cancel_model(
    model_id: str,
    repository: AutoAnalyticsRepository = Depends(get_repository),
):
    return await repository.cancel_model(model_id)


@router.delete("/{model_id}", status_code=204)
async def delete_model(
    model_id: str,
    repository: AutoAnalyticsRepository = Depends(get_repository),
):
    await repository.delete_model(model_id)
