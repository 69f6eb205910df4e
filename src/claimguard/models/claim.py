"""
Claim Models for Adjudication.
Source: Design Document Section 6 - Persistence
Verified: 2026-10-19

Tables: claims, claim_items, claim_adjustments.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from claimguard.core.enums import (
    AdjustmentType,
    ClaimItemStatus,
    ClaimStatus,
    ClaimType,
)
from claimguard.models.base import Base, TimeStampedModel, UUIDModel


class ClaimRecord(Base, UUIDModel, TimeStampedModel):
    """Stored insurance claim with its adjudicated totals."""

    __tablename__ = "claims"

    claim_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="",
        index=True,
        comment="Human-readable claim number",
    )
    insurance_company_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )
    member_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    provider_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )
    provider_specialty: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Status
    status: Mapped[ClaimStatus] = mapped_column(
        Enum(ClaimStatus),
        default=ClaimStatus.SUBMITTED,
        nullable=False,
        index=True,
    )
    claim_type: Mapped[ClaimType] = mapped_column(
        Enum(ClaimType),
        default=ClaimType.MEDICAL,
        nullable=False,
    )

    # Service Dates
    service_start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    service_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    submission_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Financial Summary
    total_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    approved_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    member_responsibility: Mapped[Decimal] = mapped_column(
        default=Decimal("0"), nullable=False
    )
    denial_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Diagnosis Information
    diagnosis_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    additional_diagnosis_codes: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    is_emergency: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_out_of_network: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    items: Mapped[list["ClaimItemRecord"]] = relationship(
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="ClaimItemRecord.line_number",
    )

    __table_args__ = (
        Index("ix_claims_member_service_date", "member_id", "service_start_date"),
        Index("ix_claims_provider_service_date", "provider_id", "service_start_date"),
    )

    def __repr__(self) -> str:
        return f"<ClaimRecord(id={self.id}, status={self.status})>"


class ClaimItemRecord(Base, UUIDModel, TimeStampedModel):
    """One billed service line. line_number preserves billing order."""

    __tablename__ = "claim_items"

    claim_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)

    service_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    service_description: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    service_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(nullable=False)

    approved_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    member_responsibility: Mapped[Decimal] = mapped_column(
        default=Decimal("0"), nullable=False
    )
    status: Mapped[ClaimItemStatus] = mapped_column(
        Enum(ClaimItemStatus),
        default=ClaimItemStatus.PENDING,
        nullable=False,
    )
    denial_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    modifiers: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_excluded_service: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_preventive_care: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    claim: Mapped[ClaimRecord] = relationship(back_populates="items")


class ClaimAdjustmentRecord(Base, UUIDModel, TimeStampedModel):
    """Append-only audit row for a deduction applied to a claim item."""

    __tablename__ = "claim_adjustments"

    claim_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    claim_item_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("claim_items.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    adjustment_type: Mapped[AdjustmentType] = mapped_column(Enum(AdjustmentType), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    adjustment_date: Mapped[date] = mapped_column(Date, nullable=False)
