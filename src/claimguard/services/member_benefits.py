"""
Member Benefits Provider.

SQLAlchemy implementation of BenefitsProvider reading the raw benefits
document stored on the member record.
"""

from collections.abc import Mapping
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from claimguard.db.connection import get_session_maker
from claimguard.models.member import MemberRecord
from claimguard.utils.errors import DataProviderError
from claimguard.utils.logging import get_logger

logger = get_logger(__name__)


class SqlBenefitsProvider:
    """Benefits looked up from the members table."""

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_maker = session_maker or get_session_maker()

    async def get_benefits(self, member_id: UUID) -> Optional[Mapping[str, Any]]:
        """
        Raw benefits for a member.

        Returns:
            The stored benefits document, or None when the member is unknown
            or has no benefits recorded

        Raises:
            DataProviderError: Database lookup failed
        """
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(MemberRecord.benefits).where(MemberRecord.id == member_id)
                )
                benefits = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to load benefits for member {member_id}",
                provider="members",
                original_error=e,
            ) from e

        if benefits is None:
            logger.debug(f"No benefits stored for member {member_id}")
        return benefits

    async def set_benefits(self, member_id: UUID, benefits: Mapping[str, Any]) -> None:
        """Replace a member's benefits document."""
        try:
            async with self.session_maker() as session, session.begin():
                member = await session.get(MemberRecord, member_id)
                if member is None:
                    raise DataProviderError(f"Member {member_id} not found", provider="members")
                member.benefits = dict(benefits)
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to store benefits for member {member_id}",
                provider="members",
                original_error=e,
            ) from e
