"""
Claim Adjudication Orchestrator Service.
Source: Design Document Section 4.4 - Orchestration Services
Verified: 2026-10-19

Loads a claim and the member's benefits, resolves coverage, runs the
adjudication engine and persists the outcome in one transaction.
"""

import time
from collections.abc import Mapping
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from claimguard.core.config import EngineSettings, get_engine_settings
from claimguard.core.enums import ClaimStatus
from claimguard.schemas.adjudication import AdjudicationResult
from claimguard.services.adjudication_engine import (
    AdjudicationEngine,
    get_adjudication_engine,
)
from claimguard.services.benefits_resolver import BenefitsResolver, get_benefits_resolver
from claimguard.services.claim_repository import SqlClaimRepository
from claimguard.services.member_benefits import SqlBenefitsProvider
from claimguard.services.providers import BenefitsProvider, ClaimRepository
from claimguard.utils.errors import (
    ClaimEngineError,
    ClaimNotFoundError,
    DataProviderError,
    InvalidStateError,
    MissingBenefitsError,
)
from claimguard.utils.logging import claim_context, get_logger

logger = get_logger(__name__)


class ClaimAdjudicationService:
    """
    Orchestrates adjudication of a stored claim.

    The pipeline consists of:
    1. Load Claim - Missing claims raise ClaimNotFoundError
    2. State Check - Only SUBMITTED, PENDING, IN_REVIEW and APPEALED claims
    3. Benefits Lookup - No benefits raises MissingBenefitsError
    4. Coverage Resolution - Defaults fill missing benefit fields
    5. Adjudication - Engine works on a copy of the claim
    6. Persistence - Claim, items and adjustments saved atomically

    Any failure before step 6 completes leaves the stored claim untouched.
    """

    def __init__(
        self,
        claim_repository: ClaimRepository,
        benefits_provider: BenefitsProvider,
        engine: Optional[AdjudicationEngine] = None,
        resolver: Optional[BenefitsResolver] = None,
        settings: Optional[EngineSettings] = None,
    ):
        """
        Initialize ClaimAdjudicationService.

        Args:
            claim_repository: Loads and saves claims
            benefits_provider: Supplies raw member benefits
            engine: AdjudicationEngine instance
            resolver: BenefitsResolver instance
            settings: Engine settings (deadline)
        """
        self.claim_repository = claim_repository
        self.benefits_provider = benefits_provider
        self.engine = engine or get_adjudication_engine()
        self.resolver = resolver or get_benefits_resolver()
        self.settings = settings or get_engine_settings()

    async def adjudicate_claim(self, claim_id: UUID) -> AdjudicationResult:
        """
        Adjudicate a stored claim.

        Args:
            claim_id: Claim to adjudicate

        Returns:
            AdjudicationResult with the updated claim and adjustments

        Raises:
            ClaimNotFoundError: Claim does not exist
            InvalidStateError: Claim status does not allow adjudication
            MissingBenefitsError: Member has no benefits information
            DataProviderError: A lookup or the save failed
            AdjudicationTimeoutError: Deadline passed between line items
        """
        with claim_context(claim_id):
            return await self._adjudicate(claim_id)

    async def _adjudicate(self, claim_id: UUID) -> AdjudicationResult:
        start_time = time.monotonic()

        claim = await self.claim_repository.get_claim(claim_id)
        if claim is None:
            raise ClaimNotFoundError(claim_id)

        if claim.status not in ClaimStatus.adjudicable():
            raise InvalidStateError(claim.id, claim.status)

        raw_benefits = await self._fetch_benefits(claim.member_id)
        if raw_benefits is None:
            raise MissingBenefitsError(claim.member_id)

        coverage = self.resolver.resolve(raw_benefits)

        deadline = None
        if self.settings.ADJUDICATION_DEADLINE_SECONDS is not None:
            deadline = self.engine.monotonic() + self.settings.ADJUDICATION_DEADLINE_SECONDS

        result = self.engine.adjudicate(claim, coverage, deadline=deadline)
        await self.claim_repository.save_adjudication(result.claim, result.adjustments)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            f"Claim {claim_id} adjudicated as {result.claim.status.value} in {elapsed_ms}ms"
        )
        return result

    async def _fetch_benefits(self, member_id: UUID) -> Optional[Mapping[str, Any]]:
        try:
            return await self.benefits_provider.get_benefits(member_id)
        except ClaimEngineError:
            raise
        except Exception as e:
            logger.error(f"Benefits lookup failed for member {member_id}: {e}")
            raise DataProviderError(
                f"Benefits lookup failed for member {member_id}",
                provider="benefits",
                original_error=e,
            ) from e


def create_adjudication_service(
    session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
    engine: Optional[AdjudicationEngine] = None,
    resolver: Optional[BenefitsResolver] = None,
) -> ClaimAdjudicationService:
    """Create a ClaimAdjudicationService backed by the SQL repositories."""
    return ClaimAdjudicationService(
        claim_repository=SqlClaimRepository(session_maker),
        benefits_provider=SqlBenefitsProvider(session_maker),
        engine=engine,
        resolver=resolver,
    )
