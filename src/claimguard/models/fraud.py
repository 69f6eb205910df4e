"""
Fraud Rule and Alert Models.
Source: Design Document Section 6 - Persistence
Verified: 2026-10-19

Tables: fraud_rules, claim_fraud_alerts.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from claimguard.core.enums import (
    AlertResolution,
    AlertStatus,
    RuleSeverity,
    RuleStatus,
)
from claimguard.models.base import Base, TimeStampedModel, UUIDModel


class FraudRuleRecord(Base, UUIDModel, TimeStampedModel):
    """Administrator-defined fraud rule. configuration is validated on load."""

    __tablename__ = "fraud_rules"

    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    # Plain string so rows written by newer releases still load
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    severity: Mapped[RuleSeverity] = mapped_column(
        Enum(RuleSeverity),
        default=RuleSeverity.MEDIUM,
        nullable=False,
    )
    status: Mapped[RuleStatus] = mapped_column(
        Enum(RuleStatus),
        default=RuleStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    configuration: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    insurance_company_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )
    is_system_wide: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<FraudRuleRecord(code={self.code}, type={self.type})>"


class ClaimFraudAlertRecord(Base, UUIDModel, TimeStampedModel):
    """Alert raised by one rule against one claim, plus its review trail."""

    __tablename__ = "claim_fraud_alerts"

    claim_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rule_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("fraud_rules.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    rule_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    insurance_company_id: Mapped[Optional[UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)

    severity: Mapped[RuleSeverity] = mapped_column(Enum(RuleSeverity), nullable=False)
    status: Mapped[AlertStatus] = mapped_column(
        Enum(AlertStatus),
        default=AlertStatus.NEW,
        nullable=False,
        index=True,
    )
    resolution: Mapped[AlertResolution] = mapped_column(
        Enum(AlertResolution),
        default=AlertResolution.NONE,
        nullable=False,
    )
    explanation: Mapped[str] = mapped_column(Text, nullable=False)
    confidence_score: Mapped[int] = mapped_column(Integer, nullable=False)
    additional_data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    # Review
    reviewed_by_user_id: Mapped[Optional[UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
