"""
Fraud Rule and Alert Repositories.

SQLAlchemy implementations of RuleProvider and AlertSink.
"""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from claimguard.core.enums import RuleSeverity, RuleStatus
from claimguard.db.connection import get_session_maker
from claimguard.models.fraud import ClaimFraudAlertRecord, FraudRuleRecord
from claimguard.schemas.fraud import ClaimFraudAlert, FraudRule
from claimguard.services.fwa.rule_loader import load_fraud_rule
from claimguard.utils.errors import DataProviderError, MalformedRuleConfigError
from claimguard.utils.logging import get_logger

logger = get_logger(__name__)

# Most severe first
_SEVERITY_RANK = {
    RuleSeverity.CRITICAL: 0,
    RuleSeverity.HIGH: 1,
    RuleSeverity.MEDIUM: 2,
    RuleSeverity.LOW: 3,
}


def _rule_data(record: FraudRuleRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "code": record.code,
        "name": record.name,
        "description": record.description,
        "type": record.type,
        "severity": record.severity,
        "status": record.status,
        "configuration": record.configuration,
        "insurance_company_id": record.insurance_company_id,
        "is_system_wide": record.is_system_wide,
    }


class SqlFraudRuleRepository:
    """Fraud rules from the fraud_rules table."""

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_maker = session_maker or get_session_maker()

    async def add_rule(self, rule: FraudRule) -> None:
        """Store a validated rule. Configuration is stored with camelCase keys."""
        record = FraudRuleRecord(
            id=rule.id,
            code=rule.code,
            name=rule.name,
            description=rule.description,
            type=rule.type.value,
            severity=rule.severity,
            status=rule.status,
            configuration=rule.configuration.model_dump(mode="json", by_alias=True),
            insurance_company_id=rule.insurance_company_id,
            is_system_wide=rule.is_system_wide,
        )
        try:
            async with self.session_maker() as session, session.begin():
                session.add(record)
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to store fraud rule {rule.code}", provider="fraud_rules", original_error=e
            ) from e

    async def list_applicable_rules(self, insurance_company_id: Optional[UUID]) -> list[FraudRule]:
        """
        Non-inactive rules for an insurer plus all system-wide rules.

        Rules whose stored configuration is malformed are skipped with a
        warning. Results are ordered most severe first.
        """
        scope = FraudRuleRecord.is_system_wide.is_(True)
        if insurance_company_id is not None:
            scope = or_(scope, FraudRuleRecord.insurance_company_id == insurance_company_id)

        stmt = (
            select(FraudRuleRecord)
            .where(scope)
            .where(FraudRuleRecord.status != RuleStatus.INACTIVE)
            .order_by(FraudRuleRecord.code)
        )
        try:
            async with self.session_maker() as session:
                result = await session.execute(stmt)
                records = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DataProviderError(
                "Failed to load fraud rules", provider="fraud_rules", original_error=e
            ) from e

        rules: list[FraudRule] = []
        for record in records:
            try:
                rules.append(load_fraud_rule(_rule_data(record)))
            except MalformedRuleConfigError as e:
                logger.warning(f"Skipping fraud rule {record.code}: {e}")

        rules.sort(key=lambda r: _SEVERITY_RANK[r.severity])
        return rules


class SqlAlertRepository:
    """Fraud alerts in the claim_fraud_alerts table."""

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_maker = session_maker or get_session_maker()

    async def save_alerts(self, alerts: list[ClaimFraudAlert]) -> None:
        """Insert or update alerts by id, in one transaction."""
        if not alerts:
            return
        try:
            async with self.session_maker() as session, session.begin():
                for alert in alerts:
                    data = alert.model_dump(mode="json")
                    await session.merge(
                        ClaimFraudAlertRecord(
                            id=alert.id,
                            claim_id=alert.claim_id,
                            rule_id=alert.rule_id,
                            rule_code=alert.rule_code,
                            insurance_company_id=alert.insurance_company_id,
                            severity=alert.severity,
                            status=alert.status,
                            resolution=alert.resolution,
                            explanation=alert.explanation,
                            confidence_score=alert.confidence_score,
                            additional_data=data["additional_data"],
                            reviewed_by_user_id=alert.reviewed_by_user_id,
                            reviewed_at=alert.reviewed_at,
                            review_notes=alert.review_notes,
                        )
                    )
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to save {len(alerts)} fraud alert(s)",
                provider="fraud_alerts",
                original_error=e,
            ) from e

    async def get_alert(self, alert_id: UUID) -> Optional[ClaimFraudAlert]:
        try:
            async with self.session_maker() as session:
                record = await session.get(ClaimFraudAlertRecord, alert_id)
                return ClaimFraudAlert.model_validate(record) if record is not None else None
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to load fraud alert {alert_id}", provider="fraud_alerts", original_error=e
            ) from e

    async def list_alerts_for_claim(self, claim_id: UUID) -> list[ClaimFraudAlert]:
        stmt = (
            select(ClaimFraudAlertRecord)
            .where(ClaimFraudAlertRecord.claim_id == claim_id)
            .order_by(ClaimFraudAlertRecord.rule_code)
        )
        try:
            async with self.session_maker() as session:
                result = await session.execute(stmt)
                return [ClaimFraudAlert.model_validate(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            raise DataProviderError(
                f"Failed to load fraud alerts for claim {claim_id}",
                provider="fraud_alerts",
                original_error=e,
            ) from e
