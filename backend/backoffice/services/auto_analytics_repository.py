"""In-memory store for auto-analytical models.

Stands in for the persistence layer: CRUD plus the draft → confirmed →
cancelled lifecycle. Confirmed and cancelled models are immutable; only
drafts may be edited. `all_models` is the rule provider handed to
AutoAnalyticsService.
"""

import itertools
import math
from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from backoffice.config import settings
from backoffice.core.exceptions import ConflictError, NotFoundError, ValidationError
from backoffice.schemas.auto_analytics import (
    AutoAnalyticalModel,
    Identifier,
    ModelCreate,
    ModelListResponse,
    ModelState,
    ModelUpdate,
)
from backoffice.services.auto_analytics_matching import validate_model

logger = structlog.get_logger()


class AutoAnalyticsRepository:
    def __init__(self, models: Iterable[AutoAnalyticalModel] = ()):
        self._models: dict[str, AutoAnalyticalModel] = {}
        self._ids = itertools.count(1)
        for model in models:
            self._models[str(model.id)] = model

    # ── Queries ────────────────────────────────────────

    async def all_models(self) -> list[AutoAnalyticalModel]:
        """Every stored model, in creation order (rule provider contract)."""
        return list(self._models.values())

    async def list_models(
        self,
        page: int = 0,
        limit: int | None = None,
        search: str = "",
    ) -> ModelListResponse:
        """Page through models, optionally filtered on name/description."""
        limit = min(limit or settings.auto_analytics_page_size, settings.auto_analytics_max_page_size)
        models = list(self._models.values())
        if search:
            needle = search.lower()
            models = [
                m for m in models
                if needle in (m.name or "").lower() or needle in (m.description or "").lower()
            ]

        start = page * limit
        return ModelListResponse(
            data=models[start:start + limit],
            total=len(models),
            page=page,
            limit=limit,
            total_pages=math.ceil(len(models) / limit),
        )

    async def get_model(self, model_id: Identifier) -> AutoAnalyticalModel:
        model = self._models.get(str(model_id))
        if not model:
            raise NotFoundError("AutoAnalyticalModel")
        return model

    # ── Commands ───────────────────────────────────────

    async def create_model(self, data: ModelCreate) -> AutoAnalyticalModel:
        """Validate and store a new draft model. Invalid definitions raise with every violation."""
        fields = {**data.model_dump(), "state": ModelState.DRAFT}
        validation = validate_model(fields)
        if not validation.is_valid:
            raise ValidationError(validation.errors)

        model_id = self._next_id()
        now = datetime.now(timezone.utc)
        model = AutoAnalyticalModel(
            id=model_id,
            **fields,
            created_at=now,
            updated_at=now,
        )
        self._models[str(model_id)] = model

        logger.info("auto_analytics_model_created", model_id=model_id, state=model.state.value)
        return model

    async def update_model(self, model_id: Identifier, data: ModelUpdate) -> AutoAnalyticalModel:
        model = await self.get_model(model_id)
        if model.state != ModelState.DRAFT:
            raise ConflictError(f"Only draft models can be modified (state: {model.state.value})")

        candidate = model.model_copy(update=data.model_dump(exclude_unset=True))
        validation = validate_model(candidate)
        if not validation.is_valid:
            raise ValidationError(validation.errors)

        # model_copy skips validation
        updated = AutoAnalyticalModel.model_validate(
            {**candidate.model_dump(), "updated_at": datetime.now(timezone.utc)}
        )
        self._models[str(model.id)] = updated
        return updated

    async def confirm_model(self, model_id: Identifier) -> AutoAnalyticalModel:
        return await self._transition(model_id, ModelState.CONFIRMED, {ModelState.DRAFT})

    async def cancel_model(self, model_id: Identifier) -> AutoAnalyticalModel:
        return await self._transition(
            model_id, ModelState.CANCELLED, {ModelState.DRAFT, ModelState.CONFIRMED}
        )

    async def delete_model(self, model_id: Identifier) -> None:
        model = await self.get_model(model_id)
        if model.state == ModelState.CONFIRMED:
            raise ConflictError("Confirmed models must be cancelled before deletion")
        del self._models[str(model.id)]
        logger.info("auto_analytics_model_deleted", model_id=model.id)

    # ── Helpers ────────────────────────────────────────

    def _next_id(self) -> int:
        model_id = next(self._ids)
        while str(model_id) in self._models:
            model_id = next(self._ids)
        return model_id

    async def _transition(
        self,
        model_id: Identifier,
        target: ModelState,
        allowed_from: set[ModelState],
    ) -> AutoAnalyticalModel:
        model = await self.get_model(model_id)
        if model.state not in allowed_from:
            raise ConflictError(
                f"Cannot move model from {model.state.value} to {target.value}"
            )
        updated = model.model_copy(update={"state": target, "updated_at": datetime.now(timezone.utc)})
        self._models[str(model.id)] = updated

        logger.info(
            "auto_analytics_model_state_changed",
            model_id=model.id,
            from_state=model.state.value,
            to_state=target.value,
        )
        return updated
