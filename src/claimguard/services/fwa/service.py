"""
Fraud Detection Orchestrator Service.
Source: Design Document Section 4.4 - Orchestration Services
Verified: 2026-10-19

Loads the rules that apply to a claim's insurer, runs the fraud rule
engine, stores the resulting alerts and handles the reviewer workflow.
"""

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from claimguard.core.enums import AlertResolution, AlertStatus
from claimguard.schemas.claim import Claim
from claimguard.schemas.fraud import ClaimFraudAlert
from claimguard.services.claim_repository import SqlClaimRepository
from claimguard.services.fwa.engine import FraudRuleEngine, get_fraud_rule_engine
from claimguard.services.fwa.repository import SqlAlertRepository, SqlFraudRuleRepository
from claimguard.services.fwa.usage_stats import CodeUsageAnalyzer
from claimguard.services.providers import (
    AlertSink,
    ClaimHistoryProvider,
    ClaimRepository,
    RuleProvider,
)
from claimguard.utils.errors import AlertNotFoundError, ClaimNotFoundError
from claimguard.utils.logging import claim_context, get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def apply_review(
    alert: ClaimFraudAlert,
    status: AlertStatus,
    reviewer_id: UUID,
    reviewed_at: datetime,
    resolution: Optional[AlertResolution] = None,
    notes: Optional[str] = None,
) -> ClaimFraudAlert:
    """
    Return a copy of the alert with a reviewer decision applied.

    Resolution and notes are only replaced when given.
    """
    update = {
        "status": status,
        "reviewed_by_user_id": reviewer_id,
        "reviewed_at": reviewed_at,
    }
    if resolution is not None:
        update["resolution"] = resolution
    if notes is not None:
        update["review_notes"] = notes
    return alert.model_copy(update=update)


class FraudDetectionService:
    """
    Orchestrates rule-based fraud screening of claims.

    Alerts already stored for a (claim, rule) pair are kept as they are
    when a claim is screened again, so reviewer decisions survive
    re-evaluation.
    """

    def __init__(
        self,
        rule_provider: RuleProvider,
        alert_sink: AlertSink,
        history_provider: ClaimHistoryProvider,
        claim_repository: Optional[ClaimRepository] = None,
        engine: Optional[FraudRuleEngine] = None,
        usage_analyzer: Optional[CodeUsageAnalyzer] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize FraudDetectionService.

        Args:
            rule_provider: Supplies the rules applicable to an insurer
            alert_sink: Stores and loads alerts
            history_provider: Member and provider claim history
            claim_repository: Needed only by analyze_claim
            engine: FraudRuleEngine instance
            usage_analyzer: Provider code usage source for UPCODING rules
            clock: Source of review timestamps
        """
        self.rule_provider = rule_provider
        self.alert_sink = alert_sink
        self.history_provider = history_provider
        self.claim_repository = claim_repository
        self.engine = engine or get_fraud_rule_engine()
        self.usage_analyzer = usage_analyzer
        self.clock = clock

    async def detect_fraud_for_claim(self, claim: Claim) -> list[ClaimFraudAlert]:
        """
        Screen a claim and store any new alerts.

        Args:
            claim: Claim to screen

        Returns:
            One alert per violated rule; previously stored alerts are
            returned in their stored state
        """
        with claim_context(claim.id):
            return await self._detect(claim)

    async def _detect(self, claim: Claim) -> list[ClaimFraudAlert]:
        rules = await self.rule_provider.list_applicable_rules(claim.insurance_company_id)
        report = await self.engine.evaluate_with_report(
            claim,
            rules,
            self.history_provider,
            usage_analyzer=self.usage_analyzer,
        )

        alerts: list[ClaimFraudAlert] = []
        new_alerts: list[ClaimFraudAlert] = []
        for alert in report.alerts:
            existing = await self.alert_sink.get_alert(alert.id)
            if existing is not None:
                alerts.append(existing)
            else:
                alerts.append(alert)
                new_alerts.append(alert)

        if new_alerts:
            await self.alert_sink.save_alerts(new_alerts)

        if report.has_failures:
            logger.warning(
                f"Claim {claim.id} screened with {len(report.failures)} failed rule(s): "
                f"{', '.join(f.rule_code for f in report.failures)}"
            )
        return alerts

    async def analyze_claim(self, claim_id: UUID) -> list[ClaimFraudAlert]:
        """Load a stored claim by id and screen it."""
        if self.claim_repository is None:
            raise RuntimeError("analyze_claim requires a claim repository")
        claim = await self.claim_repository.get_claim(claim_id)
        if claim is None:
            raise ClaimNotFoundError(claim_id)
        return await self.detect_fraud_for_claim(claim)

    async def scan_claims(self, claims: Iterable[Claim]) -> dict[UUID, list[ClaimFraudAlert]]:
        """
        Screen a batch of claims.

        A claim whose screening fails is logged and left out of the result;
        the rest of the batch continues.

        Returns:
            Mapping of claim id to its alerts
        """
        results: dict[UUID, list[ClaimFraudAlert]] = {}
        failed = 0
        for claim in claims:
            try:
                results[claim.id] = await self.detect_fraud_for_claim(claim)
            except Exception as e:
                failed += 1
                logger.error(f"Fraud scan failed for claim {claim.id}: {e}")

        flagged = sum(1 for alerts in results.values() if alerts)
        logger.info(
            f"Fraud scan complete: {len(results)} claim(s) screened, "
            f"{flagged} flagged, {failed} failed"
        )
        return results

    async def review_alert(
        self,
        alert_id: UUID,
        status: AlertStatus,
        reviewer_id: UUID,
        resolution: Optional[AlertResolution] = None,
        notes: Optional[str] = None,
    ) -> ClaimFraudAlert:
        """
        Record a reviewer decision on an alert.

        Raises:
            AlertNotFoundError: Alert does not exist
        """
        alert = await self.alert_sink.get_alert(alert_id)
        if alert is None:
            raise AlertNotFoundError(alert_id)

        reviewed = apply_review(
            alert,
            status=status,
            reviewer_id=reviewer_id,
            reviewed_at=self.clock(),
            resolution=resolution,
            notes=notes,
        )
        await self.alert_sink.save_alerts([reviewed])
        logger.info(f"Alert {alert_id} reviewed by {reviewer_id}: {status.value}")
        return reviewed


def create_fraud_detection_service(
    session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
    engine: Optional[FraudRuleEngine] = None,
) -> FraudDetectionService:
    """Create a FraudDetectionService backed by the SQL repositories."""
    claims = SqlClaimRepository(session_maker)
    return FraudDetectionService(
        rule_provider=SqlFraudRuleRepository(session_maker),
        alert_sink=SqlAlertRepository(session_maker),
        history_provider=claims,
        claim_repository=claims,
        engine=engine,
    )
