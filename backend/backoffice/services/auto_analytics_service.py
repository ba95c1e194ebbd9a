"""Auto-analytics assignment service.

Classifies posted transactions against confirmed auto-analytical models,
in bulk or one at a time, and reports rule coverage over a batch.

The service holds no state: every call receives a rule provider (an async
callable returning the current models) and returns a decision for the caller
to persist. Transactions are never modified here.
"""

from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import asdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog

from backoffice.schemas.auto_analytics import (
    AutoAnalyticalModel,
    BulkApplyResult,
    BulkApplySummary,
    CoverageDetail,
    CoverageReport,
    CoverageStats,
    Decision,
    SimulationResult,
    Suggestion,
    SuggestionsResult,
    TransactionAttributesResponse,
    TransactionDecision,
)
from backoffice.services.auto_analytics_matching import (
    calculate_score,
    confirmed_models,
    extract_attributes,
    find_matching_models,
    matched_fields,
    rank_models,
    read_field,
    read_first,
    select_best_model,
    specificity_level,
)

logger = structlog.get_logger()

RuleProvider = Callable[[], Awaitable[Sequence[AutoAnalyticalModel]]]

POSTED_STATUS = "posted"
STATUS_KEYS = ("status", "state")
MANUAL_ANALYTICS_KEYS = ("cost_center_id", "costCenterId", "analytics_id", "analyticsId")

REASON_NOT_POSTED = "only posted transactions are classified"
REASON_MANUAL_PRESENT = "manual classification present, not overwritten"
REASON_NO_ACTIVE_RULES = "no active rules"
REASON_NO_MATCH = "no matching rule"
REASON_APPLIED = "auto analytics applied"
REASON_FAILED = "failed to apply"
REASON_UNCOVERED = "no matching auto analytical model"


def _percentage(part: int, total: int) -> float:
    """part/total as a percentage, rounded half-up to two decimals; 0 for an empty total."""
    if not total:
        return 0.0
    ratio = Decimal(part * 100) / Decimal(total)
    return float(ratio.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class AutoAnalyticsService:
    # ── Classification ─────────────────────────────────

    async def apply(self, transaction: Any, get_models: RuleProvider) -> Decision:
        """Pick the cost center for one transaction.

        Short-circuits, in order: not posted, manual classification present,
        no confirmed models, no match. Only a failure while loading or
        evaluating the rules is reported with success=False.
        """
        if read_first(transaction, STATUS_KEYS) != POSTED_STATUS:
            return Decision(applied=False, reason=REASON_NOT_POSTED)

        # Manual assignment always wins over automatic assignment
        if read_first(transaction, MANUAL_ANALYTICS_KEYS) is not None:
            return Decision(applied=False, reason=REASON_MANUAL_PRESENT)

        try:
            models = await get_models()
            active = confirmed_models(models)
            if not active:
                return Decision(applied=False, reason=REASON_NO_ACTIVE_RULES)

            attributes = extract_attributes(transaction)
            candidates = find_matching_models(active, attributes)
            if not candidates:
                return Decision(applied=False, reason=REASON_NO_MATCH)

            selected = select_best_model(candidates, attributes)
            return Decision(
                applied=True,
                selected_model=selected,
                matched_fields=matched_fields(selected, attributes),
                score=calculate_score(selected, attributes),
                reason=REASON_APPLIED,
            )
        except Exception as e:
            logger.warning(
                "auto_analytics_apply_failed",
                transaction_id=read_field(transaction, "id"),
                error=str(e),
            )
            return Decision(success=False, applied=False, reason=REASON_FAILED, error=str(e))

    async def simulate(self, transaction: Any, get_models: RuleProvider) -> SimulationResult:
        """Run apply() as a preview, exposing the extracted attributes."""
        decision = await self.apply(transaction, get_models)
        attributes = extract_attributes(transaction)
        return SimulationResult(
            **decision.model_dump(),
            would_apply=decision.applied,
            transaction_attributes=TransactionAttributesResponse(**asdict(attributes)),
        )

    async def suggestions(self, transaction: Any, get_models: RuleProvider) -> SuggestionsResult:
        """List every confirmed model matching the transaction, best first.

        Unlike apply(), posting status and manual classification are ignored.
        """
        try:
            active = confirmed_models(await get_models())
        except Exception as e:
            logger.warning("auto_analytics_provider_failed", error=str(e))
            return SuggestionsResult(success=False, error=str(e))

        attributes = extract_attributes(transaction)
        candidates = find_matching_models(active, attributes)
        suggestions = [
            Suggestion(
                model_id=model.id,
                analytics_to_apply=model.analytics_to_apply,
                match_score=score,
                matched_fields=matched_fields(model, attributes),
                specificity_level=specificity_level(model),
            )
            for model, score in rank_models(candidates, attributes)
        ]
        return SuggestionsResult(
            suggestions=suggestions,
            recommended_analytics=suggestions[0].analytics_to_apply if suggestions else None,
        )

    # ── Batches ────────────────────────────────────────

    async def bulk_apply(
        self,
        transactions: Iterable[Any],
        get_models: RuleProvider,
    ) -> BulkApplyResult:
        """Classify each transaction independently; one failure never stops the batch."""
        results: list[TransactionDecision] = []
        for transaction in transactions:
            decision = await self.apply(transaction, get_models)
            results.append(TransactionDecision(
                transaction_id=read_field(transaction, "id"),
                **decision.model_dump(),
            ))

        summary = BulkApplySummary(
            total=len(results),
            applied=sum(1 for r in results if r.applied),
            skipped=sum(1 for r in results if r.success and not r.applied),
            errors=sum(1 for r in results if not r.success),
        )

        logger.info(
            "auto_analytics_bulk_applied",
            total=summary.total,
            applied=summary.applied,
            skipped=summary.skipped,
            errors=summary.errors,
        )

        return BulkApplyResult(results=results, summary=summary)

    async def coverage_report(
        self,
        transactions: Sequence[Any],
        get_models: RuleProvider,
    ) -> CoverageReport:
        """Share of transactions at least one confirmed model would match.

        A what-if view: posting status and manual classification are ignored.
        """
        try:
            active = confirmed_models(await get_models())
        except Exception as e:
            logger.warning("auto_analytics_provider_failed", error=str(e))
            return CoverageReport(success=False, error=str(e))

        covered = 0
        details: list[CoverageDetail] = []

        for transaction in transactions:
            transaction_id = read_field(transaction, "id")
            attributes = extract_attributes(transaction)
            candidates = find_matching_models(active, attributes)

            if not candidates:
                details.append(CoverageDetail(
                    transaction_id=transaction_id,
                    covered=False,
                    reason=REASON_UNCOVERED,
                ))
                continue

            covered += 1
            best = select_best_model(candidates, attributes)
            details.append(CoverageDetail(
                transaction_id=transaction_id,
                covered=True,
                model_id=best.id,
                suggested_analytics=best.analytics_to_apply,
                match_score=calculate_score(best, attributes),
            ))

        total = len(transactions)
        percentage = _percentage(covered, total)

        logger.info(
            "auto_analytics_coverage_computed",
            total=total,
            covered=covered,
            coverage_percentage=percentage,
        )

        return CoverageReport(
            coverage=CoverageStats(
                total_transactions=total,
                covered_transactions=covered,
                uncovered_transactions=total - covered,
                coverage_percentage=percentage,
            ),
            details=details,
        )
