"""
Member Model.
Source: Design Document Section 6 - Persistence
Verified: 2026-10-19

Only the parts of a member record adjudication reads: identity, insurer
and the raw benefits document.
"""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from claimguard.models.base import Base, TimeStampedModel, UUIDModel


class MemberRecord(Base, UUIDModel, TimeStampedModel):
    """Insured member with an unnormalized benefits document."""

    __tablename__ = "members"

    member_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    insurance_company_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    # Camel or snake case keys, resolved by BenefitsResolver
    benefits: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<MemberRecord(id={self.id}, member_number={self.member_number})>"
