"""Matching primitives for auto-analytics assignment.

Pure functions, no I/O:
    - extract_attributes: normalize a transaction into TransactionAttributes
    - validate_model: structural checks on a model definition
    - any_field_matches / calculate_score / matched_fields: match strength
    - rank_models / select_best_model: pick the winning model

Matching is permissive: a model matches as soon as ONE field it specifies is
equal to the transaction's value for that field. Fields a model leaves as
None are never constraints. Score is the number of such equal fields, so a
model that agrees on more attributes at once is considered more specific.

Example:
    model  {partner_id="google_llc", product_category_id="digital_marketing"}
    txn    {contactId="google_llc", productCategoryId="digital_marketing"}
    → match, score=2, matched_fields=[partner_id, product_category_id]
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from backoffice.schemas.auto_analytics import (
    AutoAnalyticalModel,
    Identifier,
    MatchField,
    ModelState,
    SpecificityLevel,
    ValidationResult,
)

MATCH_FIELDS: tuple[MatchField, ...] = (
    MatchField.PARTNER,
    MatchField.PARTNER_TAG,
    MatchField.PRODUCT,
    MatchField.PRODUCT_CATEGORY,
)

# Transaction keys read for each match field, first non-None wins.
# The counterparty is a contact, customer or supplier depending on the document.
ATTRIBUTE_ALIASES: dict[MatchField, tuple[str, ...]] = {
    MatchField.PARTNER: (
        "partner_id", "partnerId",
        "contact_id", "contactId",
        "customer_id", "customerId",
        "supplier_id", "supplierId",
    ),
    MatchField.PARTNER_TAG: ("partner_tag_id", "partnerTagId"),
    MatchField.PRODUCT: ("product_id", "productId"),
    MatchField.PRODUCT_CATEGORY: ("product_category_id", "productCategoryId"),
}

_SPECIFICITY_BY_COUNT = {
    0: SpecificityLevel.NONE,
    1: SpecificityLevel.GENERIC,
    2: SpecificityLevel.MODERATE,
    3: SpecificityLevel.SPECIFIC,
    4: SpecificityLevel.HIGHLY_SPECIFIC,
}

_VALID_STATES = frozenset(state.value for state in ModelState)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class TransactionAttributes:
    """Canonical attributes of a transaction, None when absent."""
    partner_id: Identifier | None = None
    partner_tag_id: Identifier | None = None
    product_id: Identifier | None = None
    product_category_id: Identifier | None = None

    def get(self, field: MatchField) -> Identifier | None:
        return getattr(self, field.value)


def read_field(source: Any, key: str) -> Any:
    """Read `key` from a mapping or an object, None when missing."""
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def read_first(source: Any, keys: Iterable[str]) -> Any:
    for key in keys:
        value = read_field(source, key)
        if value is not None:
            return value
    return None


# ── Extraction & validation ───────────────────────


def extract_attributes(transaction: Any) -> TransactionAttributes:
    """Normalize a transaction (dict or object) into its four match attributes."""
    return TransactionAttributes(**{
        field.value: read_first(transaction, aliases)
        for field, aliases in ATTRIBUTE_ALIASES.items()
    })


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_model(data: Any) -> ValidationResult:
    """Check a model definition; report every violation, not just the first."""
    errors: list[str] = []

    if _is_blank(read_field(data, "analytics_to_apply")):
        errors.append("Analytics to apply (cost center) is required")

    state = read_field(data, "state")
    if isinstance(state, ModelState):
        state = state.value
    if not isinstance(state, str) or state not in _VALID_STATES:
        errors.append("State must be one of: draft, confirmed, cancelled")

    if not any(read_field(data, field.value) is not None for field in MATCH_FIELDS):
        errors.append(
            "At least one matching field must be specified "
            "(partner_id, partner_tag_id, product_id, product_category_id)"
        )

    return ValidationResult(is_valid=not errors, errors=errors)


# ── Matching & scoring ────────────────────────────


def _field_matches(model: AutoAnalyticalModel, attributes: TransactionAttributes, field: MatchField) -> bool:
    model_value = getattr(model, field.value)
    if model_value is None:
        return False
    transaction_value = attributes.get(field)
    if transaction_value is None:
        return False
    return model_value == transaction_value


def any_field_matches(model: AutoAnalyticalModel, attributes: TransactionAttributes) -> bool:
    """True if at least one field specified by the model equals the transaction's."""
    return any(_field_matches(model, attributes, field) for field in MATCH_FIELDS)


def matched_fields(model: AutoAnalyticalModel, attributes: TransactionAttributes) -> list[MatchField]:
    return [field for field in MATCH_FIELDS if _field_matches(model, attributes, field)]


def calculate_score(model: AutoAnalyticalModel, attributes: TransactionAttributes) -> int:
    """Number of fields on which model and transaction agree (0-4)."""
    return len(matched_fields(model, attributes))


def specificity_level(model: AutoAnalyticalModel) -> SpecificityLevel:
    """Label from how many fields the model specifies, regardless of any transaction."""
    count = sum(1 for field in MATCH_FIELDS if getattr(model, field.value) is not None)
    return _SPECIFICITY_BY_COUNT[count]


def confirmed_models(models: Iterable[AutoAnalyticalModel]) -> list[AutoAnalyticalModel]:
    return [m for m in models if m.state == ModelState.CONFIRMED]


def find_matching_models(
    models: Iterable[AutoAnalyticalModel],
    attributes: TransactionAttributes,
) -> list[AutoAnalyticalModel]:
    return [m for m in models if any_field_matches(m, attributes)]


# ── Selection ─────────────────────────────────────


def _created_key(model: AutoAnalyticalModel) -> datetime:
    created = model.created_at
    if created is None:
        return _OLDEST
    if created.tzinfo is None:
        # Naive timestamps are taken as UTC so they compare with aware ones
        return created.replace(tzinfo=timezone.utc)
    return created


def rank_models(
    candidates: Iterable[AutoAnalyticalModel],
    attributes: TransactionAttributes,
) -> list[tuple[AutoAnalyticalModel, int]]:
    """Order candidates by score desc, then creation date desc.

    The sort is stable: models tied on both keys keep the caller's order.
    """
    scored = [(model, calculate_score(model, attributes)) for model in candidates]
    scored.sort(key=lambda pair: (pair[1], _created_key(pair[0])), reverse=True)
    return scored


def select_best_model(
    candidates: Sequence[AutoAnalyticalModel],
    attributes: TransactionAttributes,
) -> AutoAnalyticalModel:
    if not candidates:
        raise ValueError("select_best_model needs at least one candidate")
    return rank_models(candidates, attributes)[0][0]
