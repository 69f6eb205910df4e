"""
Provider Code Usage Statistics.
Source: Design Document Section 4.3 - Fraud Rule Engine
Verified: 2026-10-19

Computes how often a provider bills the higher of a lower/higher code
pair, from the provider's own claim history. Used by UPCODING rules.
Subclass CodeUsageAnalyzer to source the statistics elsewhere (e.g. a
precomputed warehouse table).
"""

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from claimguard.core.config import EngineSettings, get_engine_settings
from claimguard.schemas.fraud import CodeUsageStats
from claimguard.services.providers import ClaimHistoryProvider
from claimguard.utils.logging import get_logger

logger = get_logger(__name__)


class CodeUsageAnalyzer:
    """Counts line items billed with each code of a pair over a lookback window."""

    def __init__(
        self,
        history: ClaimHistoryProvider,
        settings: Optional[EngineSettings] = None,
    ):
        settings = settings or get_engine_settings()
        self.history = history
        self.lookback_days = settings.UPCODING_LOOKBACK_DAYS
        self.claim_limit = settings.HISTORY_CLAIM_LIMIT

    async def usage(
        self,
        provider_id: UUID,
        lower_code: str,
        higher_code: str,
        *,
        as_of: date,
        exclude_claim_id: Optional[UUID] = None,
    ) -> CodeUsageStats:
        """
        Usage of a code pair by a provider in [as_of - lookback, as_of].

        Args:
            provider_id: Provider whose history is examined
            lower_code: Lower-paying code of the pair
            higher_code: Higher-paying code of the pair
            as_of: End of the lookback window
            exclude_claim_id: Claim to leave out (the one under evaluation)

        Returns:
            CodeUsageStats; ratio is 0.0 when the provider has no usage
        """
        claims = await self.history.find_claims(
            provider_id=provider_id,
            start_date=as_of - timedelta(days=self.lookback_days),
            end_date=as_of,
            limit=self.claim_limit,
        )

        lower_count = 0
        higher_count = 0
        for claim in claims:
            if claim.id == exclude_claim_id:
                continue
            for item in claim.items:
                if item.service_code == lower_code:
                    lower_count += 1
                elif item.service_code == higher_code:
                    higher_count += 1

        stats = CodeUsageStats(
            provider_id=provider_id,
            lower_code=lower_code,
            higher_code=higher_code,
            lower_count=lower_count,
            higher_count=higher_count,
        )
        logger.debug(
            f"Provider {provider_id} usage {lower_code}/{higher_code}: "
            f"{lower_count}/{higher_count} over {len(claims)} claim(s)"
        )
        return stats
