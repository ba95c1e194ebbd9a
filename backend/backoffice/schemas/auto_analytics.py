"""Auto-analytics schemas: rules (auto-analytical models), decisions and reports."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

Identifier = int | str


class ModelState(str, Enum):
    """Lifecycle of an auto-analytical model. Only confirmed models are matched."""
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class MatchField(str, Enum):
    PARTNER = "partner_id"
    PARTNER_TAG = "partner_tag_id"
    PRODUCT = "product_id"
    PRODUCT_CATEGORY = "product_category_id"


class SpecificityLevel(str, Enum):
    """How many match fields a model specifies (display only)."""
    NONE = "none"
    GENERIC = "generic"
    MODERATE = "moderate"
    SPECIFIC = "specific"
    HIGHLY_SPECIFIC = "highly_specific"


class AutoAnalyticalModel(BaseModel):
    """A rule mapping a partial attribute signature to a cost center.

    Match fields left as None are not specified and never constrain a match.
    """
    id: Identifier
    name: str | None = None
    description: str | None = None
    partner_id: Identifier | None = None
    partner_tag_id: Identifier | None = None
    product_id: Identifier | None = None
    product_category_id: Identifier | None = None
    analytics_to_apply: Identifier
    state: ModelState = ModelState.DRAFT
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"frozen": True, "from_attributes": True}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ModelCreate(BaseModel):
    name: str | None = None
    description: str | None = None
    partner_id: Identifier | None = None
    partner_tag_id: Identifier | None = None
    product_id: Identifier | None = None
    product_category_id: Identifier | None = None
    analytics_to_apply: Identifier | None = None

    @field_validator(
        "partner_id", "partner_tag_id", "product_id", "product_category_id",
        mode="before",
    )
    @classmethod
    def blank_match_field_is_unspecified(cls, v):
        return _blank_to_none(v)


class ModelUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    partner_id: Identifier | None = None
    partner_tag_id: Identifier | None = None
    product_id: Identifier | None = None
    product_category_id: Identifier | None = None
    analytics_to_apply: Identifier | None = None

    @field_validator(
        "partner_id", "partner_tag_id", "product_id", "product_category_id",
        mode="before",
    )
    @classmethod
    def blank_match_field_is_unspecified(cls, v):
        return _blank_to_none(v)


class ModelListResponse(BaseModel):
    data: list[AutoAnalyticalModel]
    total: int
    page: int
    limit: int
    total_pages: int


class ValidationResult(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


# ── Engine output ──────────────────────────────────


class Decision(BaseModel):
    """Outcome of classifying one transaction.

    success=False only when the rule provider failed; every other
    non-application is a normal business outcome.
    """
    success: bool = True
    applied: bool
    selected_model: AutoAnalyticalModel | None = None
    matched_fields: list[MatchField] = Field(default_factory=list)
    score: int = 0
    reason: str
    error: str | None = None


class TransactionDecision(Decision):
    transaction_id: Identifier | None = None


class BulkApplySummary(BaseModel):
    total: int
    applied: int
    skipped: int
    errors: int


class BulkApplyResult(BaseModel):
    success: bool = True
    results: list[TransactionDecision]
    summary: BulkApplySummary


class CoverageStats(BaseModel):
    total_transactions: int = 0
    covered_transactions: int = 0
    uncovered_transactions: int = 0
    coverage_percentage: float = 0.0


class CoverageDetail(BaseModel):
    transaction_id: Identifier | None = None
    covered: bool
    model_id: Identifier | None = None
    suggested_analytics: Identifier | None = None
    match_score: int | None = None
    reason: str | None = None

    model_config = {"protected_namespaces": ()}


class CoverageReport(BaseModel):
    success: bool = True
    coverage: CoverageStats = Field(default_factory=CoverageStats)
    details: list[CoverageDetail] = Field(default_factory=list)
    error: str | None = None


class TransactionAttributesResponse(BaseModel):
    partner_id: Identifier | None = None
    partner_tag_id: Identifier | None = None
    product_id: Identifier | None = None
    product_category_id: Identifier | None = None


class SimulationResult(Decision):
    simulation: bool = True
    would_apply: bool
    transaction_attributes: TransactionAttributesResponse


class Suggestion(BaseModel):
    model_id: Identifier
    analytics_to_apply: Identifier
    match_score: int
    matched_fields: list[MatchField]
    specificity_level: SpecificityLevel

    model_config = {"protected_namespaces": ()}


class SuggestionsResult(BaseModel):
    success: bool = True
    suggestions: list[Suggestion] = Field(default_factory=list)
    recommended_analytics: Identifier | None = None
    error: str | None = None


# ── Request bodies ─────────────────────────────────


class TransactionRequest(BaseModel):
    """A single transaction, passed through as-is to the attribute extractor."""
    transaction: dict[str, Any]


class TransactionBatchRequest(BaseModel):
    transactions: list[dict[str, Any]]
