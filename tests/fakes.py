"""
Test builders and in-memory collaborators.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

from claimguard.core.enums import RuleSeverity, RuleStatus, RuleType
from claimguard.schemas.claim import Claim, ClaimAdjustment, ClaimItem
from claimguard.schemas.fraud import ClaimFraudAlert, FraudRule


# =============================================================================
# Builders
# =============================================================================


def make_item(service_code: str = "80053", total_price: Any = "100.00", **kwargs) -> ClaimItem:
    """Build a claim line item with a single unit at total_price."""
    total = Decimal(str(total_price))
    kwargs.setdefault("unit_price", total)
    return ClaimItem(service_code=service_code, total_price=total, **kwargs)


def make_claim(
    items: Optional[list[ClaimItem]] = None,
    total_amount: Any = None,
    **kwargs,
) -> Claim:
    """Build a claim; total_amount defaults to the sum of item prices."""
    items = items if items is not None else [make_item()]
    if total_amount is None:
        total = sum((i.total_price for i in items), Decimal("0"))
    else:
        total = Decimal(str(total_amount))
    kwargs.setdefault("member_id", uuid4())
    kwargs.setdefault("provider_id", uuid4())
    kwargs.setdefault("service_start_date", date(2026, 3, 15))
    kwargs.setdefault("claim_number", f"CLM-{uuid4().hex[:8].upper()}")
    return Claim(items=items, total_amount=total, **kwargs)


def make_rule(
    rule_type: RuleType,
    configuration: dict,
    severity: RuleSeverity = RuleSeverity.HIGH,
    status: RuleStatus = RuleStatus.ACTIVE,
    **kwargs,
) -> FraudRule:
    kwargs.setdefault("code", f"{rule_type.value[:4]}-{uuid4().hex[:6].upper()}")
    return FraudRule(
        type=rule_type,
        configuration=configuration,
        severity=severity,
        status=status,
        **kwargs,
    )


# =============================================================================
# In-memory Collaborators
# =============================================================================


class InMemoryClaimStore:
    """ClaimRepository and ClaimHistoryProvider over a dict."""

    def __init__(self, claims: Optional[list[Claim]] = None):
        self.claims: dict[UUID, Claim] = {c.id: c for c in claims or []}
        self.saved: list[tuple[Claim, list[ClaimAdjustment]]] = []
        self.history_calls: list[dict[str, Any]] = []

    def add(self, claim: Claim) -> Claim:
        self.claims[claim.id] = claim
        return claim

    async def get_claim(self, claim_id: UUID) -> Optional[Claim]:
        claim = self.claims.get(claim_id)
        return claim.model_copy(deep=True) if claim is not None else None

    async def save_adjudication(self, claim: Claim, adjustments: list[ClaimAdjustment]) -> None:
        self.claims[claim.id] = claim
        self.saved.append((claim, list(adjustments)))

    async def find_claims(
        self,
        *,
        member_id: Optional[UUID] = None,
        provider_id: Optional[UUID] = None,
        start_date: date,
        end_date: date,
        limit: int = 100,
    ) -> list[Claim]:
        self.history_calls.append(
            {
                "member_id": member_id,
                "provider_id": provider_id,
                "start_date": start_date,
                "end_date": end_date,
                "limit": limit,
            }
        )
        found = [
            c
            for c in self.claims.values()
            if (member_id is None or c.member_id == member_id)
            and (provider_id is None or c.provider_id == provider_id)
            and start_date <= c.service_start_date <= end_date
        ]
        found.sort(key=lambda c: c.service_start_date, reverse=True)
        return found[:limit]


class InMemoryBenefitsProvider:
    def __init__(self, benefits: Optional[dict[UUID, Any]] = None, error: Optional[Exception] = None):
        self.benefits = benefits or {}
        self.error = error

    async def get_benefits(self, member_id: UUID) -> Optional[dict]:
        if self.error is not None:
            raise self.error
        return self.benefits.get(member_id)


class InMemoryRuleProvider:
    def __init__(self, rules: Optional[list[FraudRule]] = None):
        self.rules = rules or []
        self.requested: list[Optional[UUID]] = []

    async def list_applicable_rules(self, insurance_company_id: Optional[UUID]) -> list[FraudRule]:
        self.requested.append(insurance_company_id)
        return [
            r
            for r in self.rules
            if r.status != RuleStatus.INACTIVE
            and (r.is_system_wide or r.insurance_company_id == insurance_company_id)
        ]


class InMemoryAlertSink:
    def __init__(self):
        self.alerts: dict[UUID, ClaimFraudAlert] = {}
        self.save_calls = 0

    async def save_alerts(self, alerts: list[ClaimFraudAlert]) -> None:
        self.save_calls += 1
        for alert in alerts:
            self.alerts[alert.id] = alert

    async def get_alert(self, alert_id: UUID) -> Optional[ClaimFraudAlert]:
        return self.alerts.get(alert_id)


