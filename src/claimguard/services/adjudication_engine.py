"""
Claim Adjudication Engine.
Source: Design Document Section 4.2 - Adjudication Engine
Verified: 2026-10-19

Applies a member's resolved benefits to every line item of a claim:
exclusions, preventive care bypass, deductible, copay and coinsurance,
then derives the claim totals and final status.

The engine is synchronous and holds no per-claim state. It works on a
deep copy of the claim and returns the updated copy, so a failure part
way through never leaves the caller's claim half adjudicated.
"""

import time
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from claimguard.core.enums import AdjustmentType, ClaimItemStatus, ClaimStatus
from claimguard.schemas.adjudication import (
    AdjudicationResult,
    DeductibleAccumulator,
    ItemAdjudication,
)
from claimguard.schemas.benefit import BenefitsCoverage
from claimguard.schemas.claim import Claim, ClaimAdjustment, ClaimItem
from claimguard.services.copay_classifier import CopayClassifier, get_copay_classifier
from claimguard.utils.errors import (
    AdjudicationTimeoutError,
    InvalidStateError,
    MissingBenefitsError,
)
from claimguard.utils.logging import get_logger
from claimguard.utils.money import ZERO, to_money

logger = get_logger(__name__)

EXCLUDED_DENIAL_REASON = "Service is excluded from coverage"
NO_SERVICES_APPROVED_REASON = "No services approved for coverage"


class AdjudicationEngine:
    """
    Pure benefit application over a claim's line items.

    Items are processed strictly in order; the deductible balance is an
    immutable accumulator passed from one item to the next.
    """

    def __init__(
        self,
        copay_classifier: Optional[CopayClassifier] = None,
        clock: Callable[[], date] = date.today,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize AdjudicationEngine.

        Args:
            copay_classifier: Copay classification table
            clock: Source of the adjustment date
            monotonic: Monotonic time source used for deadlines
        """
        self.copay_classifier = copay_classifier or get_copay_classifier()
        self.clock = clock
        self.monotonic = monotonic

    def adjudicate(
        self,
        claim: Claim,
        coverage: Optional[BenefitsCoverage],
        deadline: Optional[float] = None,
    ) -> AdjudicationResult:
        """
        Adjudicate a claim against resolved coverage.

        Args:
            claim: Claim to adjudicate. Not modified.
            coverage: Resolved benefits for the claim's member
            deadline: Optional absolute deadline on the monotonic clock,
                checked before each line item

        Returns:
            AdjudicationResult with the updated claim copy and adjustments

        Raises:
            InvalidStateError: Claim status does not allow adjudication
            MissingBenefitsError: No coverage supplied
            AdjudicationTimeoutError: Deadline passed between line items
        """
        if claim.status not in ClaimStatus.adjudicable():
            raise InvalidStateError(claim.id, claim.status)
        if coverage is None:
            raise MissingBenefitsError(claim.member_id)

        adjustment_date = self.clock()
        accumulator = DeductibleAccumulator(
            remaining_individual=coverage.deductible.remaining_individual
        )

        updated = claim.model_copy(deep=True)
        adjustments: list[ClaimAdjustment] = []
        items: list[ClaimItem] = []

        for index, item in enumerate(updated.items):
            if deadline is not None and self.monotonic() > deadline:
                logger.warning(
                    f"Adjudication deadline passed for claim {claim.id} after {index} item(s)"
                )
                raise AdjudicationTimeoutError(claim.id, index)

            outcome = self.adjudicate_item(
                updated, item, coverage, accumulator, adjustment_date
            )
            items.append(outcome.item)
            adjustments.extend(outcome.adjustments)
            accumulator = outcome.deductible

        updated.items = items
        self._aggregate(updated)

        logger.info(
            f"Adjudicated claim {claim.id}: status={updated.status.value}, "
            f"approved={updated.approved_amount}, "
            f"member_responsibility={updated.member_responsibility}, "
            f"adjustments={len(adjustments)}"
        )

        return AdjudicationResult(
            claim=updated,
            adjustments=adjustments,
            deductible=accumulator,
        )

    def adjudicate_item(
        self,
        claim: Claim,
        item: ClaimItem,
        coverage: BenefitsCoverage,
        accumulator: DeductibleAccumulator,
        adjustment_date: date,
    ) -> ItemAdjudication:
        """
        Adjudicate one line item.

        Returns a new item, the adjustments it produced and the deductible
        accumulator to hand to the next item.
        """

        def adjustment(kind: AdjustmentType, amount: Decimal, reason: str) -> ClaimAdjustment:
            return ClaimAdjustment(
                claim_id=claim.id,
                claim_item_id=item.id,
                adjustment_type=kind,
                amount=amount,
                reason=reason,
                adjustment_date=adjustment_date,
            )

        total = item.total_price

        # Exclusions
        if coverage.is_excluded(item.service_code):
            denied = item.model_copy(
                update={
                    "status": ClaimItemStatus.DENIED,
                    "denial_reason": EXCLUDED_DENIAL_REASON,
                    "approved_amount": ZERO,
                    "paid_amount": ZERO,
                    "member_responsibility": total,
                    "is_excluded_service": True,
                }
            )
            return ItemAdjudication(
                item=denied,
                adjustments=[
                    adjustment(
                        AdjustmentType.NON_COVERED, total, "Service excluded from coverage"
                    )
                ],
                deductible=accumulator,
            )

        # Preventive care is paid in full
        if item.is_preventive_care and coverage.preventive_care:
            approved = item.model_copy(
                update={
                    "status": ClaimItemStatus.APPROVED,
                    "approved_amount": total,
                    "paid_amount": total,
                    "member_responsibility": ZERO,
                }
            )
            return ItemAdjudication(item=approved, deductible=accumulator)

        adjustments: list[ClaimAdjustment] = []
        remaining = total

        # Deductible
        deductible_applied, accumulator = accumulator.apply(remaining)
        remaining -= deductible_applied
        if deductible_applied > 0:
            adjustments.append(
                adjustment(AdjustmentType.DEDUCTIBLE, deductible_applied, "Annual deductible applied")
            )

        # Copay
        copay_applied = ZERO
        category = self.copay_classifier.classify(item.service_code)
        if category is not None:
            copay_applied = min(coverage.copay.amount_for(category), remaining)
            remaining -= copay_applied
            if copay_applied > 0:
                adjustments.append(adjustment(AdjustmentType.COPAY, copay_applied, "Copay applied"))

        # Coinsurance
        coinsurance_applied = ZERO
        if remaining > 0:
            rate = coverage.coinsurance.rate_for(claim.is_out_of_network)
            coinsurance_applied = to_money(remaining * rate / Decimal("100"))
            if coinsurance_applied > 0:
                adjustments.append(
                    adjustment(
                        AdjustmentType.COINSURANCE,
                        coinsurance_applied,
                        f"{rate:f}% coinsurance applied",
                    )
                )

        member_responsibility = deductible_applied + copay_applied + coinsurance_applied
        approved_amount = total - member_responsibility

        adjudicated = item.model_copy(
            update={
                "status": ClaimItemStatus.APPROVED,
                "approved_amount": approved_amount,
                "paid_amount": approved_amount,
                "member_responsibility": member_responsibility,
            }
        )
        return ItemAdjudication(item=adjudicated, adjustments=adjustments, deductible=accumulator)

    @staticmethod
    def _aggregate(claim: Claim) -> None:
        """Roll item results up to the claim and set its final status."""
        approved = sum((i.approved_amount for i in claim.items), ZERO)
        member = sum((i.member_responsibility for i in claim.items), ZERO)

        claim.approved_amount = approved
        claim.paid_amount = approved
        claim.member_responsibility = member

        if approved == 0:
            claim.status = ClaimStatus.DENIED
            claim.denial_reason = NO_SERVICES_APPROVED_REASON
        elif approved == claim.total_amount:
            claim.status = ClaimStatus.APPROVED
            claim.denial_reason = None
        else:
            claim.status = ClaimStatus.PARTIALLY_APPROVED
            claim.denial_reason = None


# Singleton instance
_adjudication_engine: Optional[AdjudicationEngine] = None


def get_adjudication_engine() -> AdjudicationEngine:
    """Get singleton AdjudicationEngine instance."""
    global _adjudication_engine
    if _adjudication_engine is None:
        _adjudication_engine = AdjudicationEngine()
    return _adjudication_engine
