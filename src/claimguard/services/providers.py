"""
Collaborator Interfaces.

Structural interfaces for the data access the services depend on.
SQLAlchemy implementations live in claim_repository, member_benefits
and fwa.repository; tests pass in-memory fakes.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any, Optional, Protocol, runtime_checkable
from uuid import UUID

from claimguard.schemas.claim import Claim, ClaimAdjustment
from claimguard.schemas.fraud import ClaimFraudAlert, FraudRule


@runtime_checkable
class BenefitsProvider(Protocol):
    async def get_benefits(self, member_id: UUID) -> Optional[Mapping[str, Any]]:
        """Raw benefits mapping for the member, or None if there is none."""
        ...


@runtime_checkable
class ClaimRepository(Protocol):
    async def get_claim(self, claim_id: UUID) -> Optional[Claim]:
        ...

    async def save_adjudication(
        self, claim: Claim, adjustments: list[ClaimAdjustment]
    ) -> None:
        """Persist the claim, its items and the adjustments in one transaction."""
        ...


@runtime_checkable
class ClaimHistoryProvider(Protocol):
    async def find_claims(
        self,
        *,
        member_id: Optional[UUID] = None,
        provider_id: Optional[UUID] = None,
        start_date: date,
        end_date: date,
        limit: int = 100,
    ) -> list[Claim]:
        """
        Claims whose service start date falls within [start_date, end_date].

        Filters by member and/or provider when given. Items are loaded.
        """
        ...


@runtime_checkable
class RuleProvider(Protocol):
    async def list_applicable_rules(
        self, insurance_company_id: Optional[UUID]
    ) -> list[FraudRule]:
        """Rules for the insurer plus system-wide rules, INACTIVE excluded."""
        ...


@runtime_checkable
class AlertSink(Protocol):
    async def save_alerts(self, alerts: list[ClaimFraudAlert]) -> None:
        ...

    async def get_alert(self, alert_id: UUID) -> Optional[ClaimFraudAlert]:
        ...
