"""
Pydantic Schemas for Claims, Line Items and Adjustments.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from claimguard.core.enums import (
    AdjustmentType,
    ClaimItemStatus,
    ClaimStatus,
    ClaimType,
)


class ClaimItem(BaseModel):
    """One billed service line on a claim."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    service_code: str = Field(..., min_length=1, max_length=50)
    service_description: str = ""
    service_date: Optional[date] = None
    quantity: int = Field(default=1, ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    total_price: Decimal = Field(..., ge=0, description="quantity x unit price, caller supplied")

    # Adjudication output
    approved_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    member_responsibility: Decimal = Decimal("0")
    status: ClaimItemStatus = ClaimItemStatus.PENDING
    denial_reason: Optional[str] = None

    modifiers: Optional[str] = None
    is_excluded_service: bool = False
    is_preventive_care: bool = False


class Claim(BaseModel):
    """
    Insurance claim aggregate.

    Created at intake with status SUBMITTED. total_amount is the billed
    sum of the line items; when omitted (or zero) it is filled in from
    them. The other monetary totals are populated by adjudication.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    claim_number: str = ""
    insurance_company_id: Optional[UUID] = None
    member_id: UUID
    provider_id: UUID
    provider_specialty: Optional[str] = None

    status: ClaimStatus = ClaimStatus.SUBMITTED
    claim_type: ClaimType = ClaimType.MEDICAL

    service_start_date: date
    service_end_date: Optional[date] = None
    submission_date: Optional[date] = None

    total_amount: Decimal = Field(default=Decimal("0"), ge=0)
    approved_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    member_responsibility: Decimal = Decimal("0")
    denial_reason: Optional[str] = None

    diagnosis_code: Optional[str] = None
    additional_diagnosis_codes: list[str] = Field(default_factory=list)
    is_emergency: bool = False
    is_out_of_network: bool = False

    items: list[ClaimItem] = Field(default_factory=list)

    @property
    def service_codes(self) -> list[str]:
        """Service codes of all line items, in line order."""
        return [item.service_code for item in self.items]

    @property
    def diagnosis_codes(self) -> list[str]:
        codes = [self.diagnosis_code] if self.diagnosis_code else []
        return codes + list(self.additional_diagnosis_codes)

    @model_validator(mode="after")
    def check_total_amount(self) -> "Claim":
        """Default total_amount to the billed item sum and reject a mismatch."""
        billed = sum((item.total_price for item in self.items), Decimal("0"))
        if self.total_amount == 0:
            self.total_amount = billed
        elif self.total_amount != billed:
            raise ValueError(
                f"total_amount {self.total_amount} does not match line item total {billed}"
            )
        return self

    def has_any_code(self, codes: set[str] | frozenset[str]) -> bool:
        """Whether any line item bills one of the given service codes."""
        return any(item.service_code in codes for item in self.items)


class ClaimAdjustment(BaseModel):
    """Immutable audit record of one deduction applied to one line item."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    claim_id: UUID
    claim_item_id: Optional[UUID] = None
    adjustment_type: AdjustmentType
    amount: Decimal = Field(..., ge=0)
    reason: str
    adjustment_date: date
