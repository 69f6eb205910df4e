"""
Pydantic Schemas for Claim Adjudication Results.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from claimguard.core.enums import AdjustmentType
from claimguard.schemas.claim import Claim, ClaimAdjustment, ClaimItem


class DeductibleAccumulator(BaseModel):
    """
    Running individual deductible balance for one claim.

    Immutable: each line item step receives an accumulator and returns a
    new one, so items must be processed strictly in order.
    """

    model_config = ConfigDict(frozen=True)

    remaining_individual: Decimal = Field(..., ge=0)
    applied_total: Decimal = Field(default=Decimal("0"), ge=0)

    def apply(self, amount: Decimal) -> tuple[Decimal, "DeductibleAccumulator"]:
        """
        Apply as much of the remaining deductible to amount as possible.

        Returns:
            Tuple of (amount applied, next accumulator)
        """
        if amount <= 0 or self.remaining_individual <= 0:
            return Decimal("0"), self
        applied = min(amount, self.remaining_individual)
        return applied, DeductibleAccumulator(
            remaining_individual=self.remaining_individual - applied,
            applied_total=self.applied_total + applied,
        )


class ItemAdjudication(BaseModel):
    """Outcome of adjudicating a single line item."""

    item: ClaimItem
    adjustments: list[ClaimAdjustment] = Field(default_factory=list)
    deductible: DeductibleAccumulator

    def amount_for(self, adjustment_type: AdjustmentType) -> Decimal:
        return sum(
            (a.amount for a in self.adjustments if a.adjustment_type == adjustment_type),
            Decimal("0"),
        )


class AdjudicationResult(BaseModel):
    """Updated claim plus the adjustments emitted while adjudicating it."""

    claim: Claim
    adjustments: list[ClaimAdjustment] = Field(default_factory=list)
    deductible: DeductibleAccumulator

    @property
    def remaining_deductible(self) -> Decimal:
        return self.deductible.remaining_individual

    def adjustments_of(self, adjustment_type: AdjustmentType) -> list[ClaimAdjustment]:
        return [a for a in self.adjustments if a.adjustment_type == adjustment_type]
