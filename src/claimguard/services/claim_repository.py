"""
Claim Repository.
Source: Design Document Section 6 - External Interfaces
Verified: 2026-10-19

SQLAlchemy implementation of ClaimRepository and ClaimHistoryProvider.
Each call runs in its own session; save_adjudication commits the claim,
its items and the new adjustments in a single transaction.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from claimguard.db.connection import get_session_maker
from claimguard.models.claim import ClaimAdjustmentRecord, ClaimItemRecord, ClaimRecord
from claimguard.schemas.claim import Claim, ClaimAdjustment
from claimguard.utils.errors import ClaimNotFoundError, DataProviderError
from claimguard.utils.logging import get_logger

logger = get_logger(__name__)

# Item columns written back after adjudication
_ITEM_RESULT_FIELDS = (
    "approved_amount",
    "paid_amount",
    "member_responsibility",
    "status",
    "denial_reason",
    "is_excluded_service",
)

_CLAIM_RESULT_FIELDS = (
    "status",
    "approved_amount",
    "paid_amount",
    "member_responsibility",
    "denial_reason",
)


class SqlClaimRepository:
    """Claims stored in the claims / claim_items / claim_adjustments tables."""

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_maker = session_maker or get_session_maker()

    async def add_claim(self, claim: Claim) -> None:
        """Insert a new claim with its line items."""
        record = ClaimRecord(
            id=claim.id,
            claim_number=claim.claim_number,
            insurance_company_id=claim.insurance_company_id,
            member_id=claim.member_id,
            provider_id=claim.provider_id,
            provider_specialty=claim.provider_specialty,
            status=claim.status,
            claim_type=claim.claim_type,
            service_start_date=claim.service_start_date,
            service_end_date=claim.service_end_date,
            submission_date=claim.submission_date,
            total_amount=claim.total_amount,
            approved_amount=claim.approved_amount,
            paid_amount=claim.paid_amount,
            member_responsibility=claim.member_responsibility,
            denial_reason=claim.denial_reason,
            diagnosis_code=claim.diagnosis_code,
            additional_diagnosis_codes=list(claim.additional_diagnosis_codes),
            is_emergency=claim.is_emergency,
            is_out_of_network=claim.is_out_of_network,
            items=[
                ClaimItemRecord(
                    id=item.id,
                    line_number=line_number,
                    **item.model_dump(exclude={"id"}),
                )
                for line_number, item in enumerate(claim.items, start=1)
            ],
        )
        try:
            async with self.session_maker() as session, session.begin():
                session.add(record)
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to store claim {claim.id}", provider="claims", original_error=e
            ) from e

    async def get_claim(self, claim_id: UUID) -> Optional[Claim]:
        try:
            async with self.session_maker() as session:
                record = await self._load(session, claim_id)
                return Claim.model_validate(record) if record is not None else None
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to load claim {claim_id}", provider="claims", original_error=e
            ) from e

    async def save_adjudication(self, claim: Claim, adjustments: list[ClaimAdjustment]) -> None:
        """
        Persist an adjudicated claim atomically.

        Raises:
            ClaimNotFoundError: Claim is not stored
            DataProviderError: An item does not belong to the claim, or the
                database failed. Nothing is written in either case.
        """
        try:
            async with self.session_maker() as session, session.begin():
                record = await self._load(session, claim.id)
                if record is None:
                    raise ClaimNotFoundError(claim.id)

                for field in _CLAIM_RESULT_FIELDS:
                    setattr(record, field, getattr(claim, field))

                stored_items = {item.id: item for item in record.items}
                for item in claim.items:
                    stored = stored_items.get(item.id)
                    if stored is None:
                        raise DataProviderError(
                            f"Claim item {item.id} does not belong to claim {claim.id}",
                            provider="claims",
                        )
                    for field in _ITEM_RESULT_FIELDS:
                        setattr(stored, field, getattr(item, field))

                session.add_all(
                    ClaimAdjustmentRecord(
                        id=adjustment.id,
                        claim_id=adjustment.claim_id,
                        claim_item_id=adjustment.claim_item_id,
                        adjustment_type=adjustment.adjustment_type,
                        amount=adjustment.amount,
                        reason=adjustment.reason,
                        adjustment_date=adjustment.adjustment_date,
                    )
                    for adjustment in adjustments
                )
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to save adjudication for claim {claim.id}",
                provider="claims",
                original_error=e,
            ) from e

        logger.info(
            f"Saved adjudication for claim {claim.id}: "
            f"{len(claim.items)} item(s), {len(adjustments)} adjustment(s)"
        )

    async def list_adjustments(self, claim_id: UUID) -> list[ClaimAdjustment]:
        """Adjustments recorded for a claim, oldest first."""
        stmt = (
            select(ClaimAdjustmentRecord)
            .where(ClaimAdjustmentRecord.claim_id == claim_id)
            .order_by(ClaimAdjustmentRecord.adjustment_date)
        )
        try:
            async with self.session_maker() as session:
                result = await session.execute(stmt)
                return [ClaimAdjustment.model_validate(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to load adjustments for claim {claim_id}",
                provider="claims",
                original_error=e,
            ) from e

    async def find_claims(
        self,
        *,
        member_id: Optional[UUID] = None,
        provider_id: Optional[UUID] = None,
        start_date: date,
        end_date: date,
        limit: int = 100,
    ) -> list[Claim]:
        """Claims with a service start date in [start_date, end_date], newest first."""
        stmt = (
            select(ClaimRecord)
            .options(selectinload(ClaimRecord.items))
            .where(ClaimRecord.service_start_date >= start_date)
            .where(ClaimRecord.service_start_date <= end_date)
            .order_by(ClaimRecord.service_start_date.desc())
            .limit(limit)
        )
        if member_id is not None:
            stmt = stmt.where(ClaimRecord.member_id == member_id)
        if provider_id is not None:
            stmt = stmt.where(ClaimRecord.provider_id == provider_id)

        try:
            async with self.session_maker() as session:
                result = await session.execute(stmt)
                return [Claim.model_validate(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            raise DataProviderError(
                "Failed to query claim history", provider="claims", original_error=e
            ) from e

    @staticmethod
    async def _load(session: AsyncSession, claim_id: UUID) -> Optional[ClaimRecord]:
        result = await session.execute(
            select(ClaimRecord)
            .options(selectinload(ClaimRecord.items))
            .where(ClaimRecord.id == claim_id)
        )
        return result.scalar_one_or_none()
