"""
Fraud Rule Engine.
Source: Design Document Section 4.3 - Fraud Rule Engine
Verified: 2026-10-19

Evaluates a claim against a set of fraud rules and turns each violated
rule into exactly one alert. Rules are independent: a rule that raises
is logged and reported, and the remaining rules still run.
"""

from collections.abc import Iterable, Mapping
from typing import Optional
from uuid import UUID, uuid5

from claimguard.core.config import EngineSettings, get_engine_settings
from claimguard.core.enums import AlertResolution, AlertStatus, RuleStatus, RuleType
from claimguard.schemas.claim import Claim
from claimguard.schemas.fraud import (
    ClaimFraudAlert,
    FraudEvaluationReport,
    FraudRule,
    RuleFailure,
)
from claimguard.services.fwa.base import BaseFraudRule, EvaluationContext, RuleViolation
from claimguard.services.fwa.compatibility import CompatibilityRule
from claimguard.services.fwa.frequency import FrequencyRule
from claimguard.services.fwa.upcoding import UpcodingRule
from claimguard.services.fwa.usage_stats import CodeUsageAnalyzer
from claimguard.services.providers import ClaimHistoryProvider
from claimguard.utils.logging import get_logger
from claimguard.utils.money import clamp_score

logger = get_logger(__name__)

# Namespace for deterministic alert ids
ALERT_NAMESPACE = UUID("6f1f4c1e-2b7a-5d8e-9c3f-4a5b6c7d8e9f")


def alert_id_for(claim_id: UUID, rule_id: UUID) -> UUID:
    """Stable alert id for a (claim, rule) pair."""
    return uuid5(ALERT_NAMESPACE, f"{claim_id}:{rule_id}")


def default_evaluators() -> dict[RuleType, BaseFraudRule]:
    return {
        RuleType.FREQUENCY: FrequencyRule(),
        RuleType.COMPATIBILITY: CompatibilityRule(),
        RuleType.UPCODING: UpcodingRule(),
    }


class FraudRuleEngine:
    """
    Stateless rule evaluation over one claim at a time.

    INACTIVE rules are skipped. TESTING rules are evaluated and their
    alerts are tagged with rule_status=TESTING. Rule types without an
    evaluator never fire.
    """

    def __init__(
        self,
        evaluators: Optional[Mapping[RuleType, BaseFraudRule]] = None,
        settings: Optional[EngineSettings] = None,
    ):
        """
        Initialize FraudRuleEngine.

        Args:
            evaluators: Evaluator per rule type
            settings: Engine settings (history limits)
        """
        self.evaluators = dict(evaluators) if evaluators is not None else default_evaluators()
        self.settings = settings or get_engine_settings()

    async def evaluate(
        self,
        claim: Claim,
        rules: Iterable[FraudRule],
        history_provider: ClaimHistoryProvider,
        usage_analyzer: Optional[CodeUsageAnalyzer] = None,
    ) -> list[ClaimFraudAlert]:
        """Evaluate rules against a claim and return the alerts."""
        report = await self.evaluate_with_report(
            claim, rules, history_provider, usage_analyzer=usage_analyzer
        )
        return report.alerts

    async def evaluate_with_report(
        self,
        claim: Claim,
        rules: Iterable[FraudRule],
        history_provider: ClaimHistoryProvider,
        usage_analyzer: Optional[CodeUsageAnalyzer] = None,
    ) -> FraudEvaluationReport:
        """
        Evaluate rules against a claim.

        Args:
            claim: Claim to screen
            rules: Rules to apply, in order
            history_provider: Source of member and provider claim history
            usage_analyzer: Provider code usage source for UPCODING rules

        Returns:
            FraudEvaluationReport with alerts and per-rule failures
        """
        context = EvaluationContext(
            history=history_provider,
            usage=usage_analyzer or CodeUsageAnalyzer(history_provider, self.settings),
            settings=self.settings,
        )
        report = FraudEvaluationReport(claim_id=claim.id)

        for rule in rules:
            if not rule.is_evaluated:
                report.rules_skipped += 1
                continue

            report.rules_evaluated += 1
            evaluator = self.evaluators.get(rule.type)
            if evaluator is None:
                continue

            try:
                violation = await evaluator.evaluate(rule, claim, context)
            except Exception as e:
                logger.warning(
                    f"Fraud rule {rule.code} failed on claim {claim.id}: "
                    f"{type(e).__name__}: {e}"
                )
                report.failures.append(
                    RuleFailure(
                        rule_id=rule.id,
                        rule_code=rule.code,
                        error_type=type(e).__name__,
                        message=str(e),
                    )
                )
                continue

            if violation.is_violated:
                report.alerts.append(self._create_alert(rule, claim, violation))

        logger.info(
            f"Fraud evaluation for claim {claim.id}: "
            f"{len(report.alerts)} alert(s), {report.rules_evaluated} rule(s) evaluated, "
            f"{report.rules_skipped} skipped, {len(report.failures)} failed"
        )
        return report

    @staticmethod
    def _create_alert(rule: FraudRule, claim: Claim, violation: RuleViolation) -> ClaimFraudAlert:
        additional_data = dict(violation.additional_data)
        if rule.status == RuleStatus.TESTING:
            additional_data["rule_status"] = RuleStatus.TESTING.value

        return ClaimFraudAlert(
            id=alert_id_for(claim.id, rule.id),
            claim_id=claim.id,
            rule_id=rule.id,
            rule_code=rule.code,
            insurance_company_id=claim.insurance_company_id,
            severity=rule.severity,
            status=AlertStatus.NEW,
            resolution=AlertResolution.NONE,
            explanation=violation.explanation,
            confidence_score=clamp_score(violation.confidence_score),
            additional_data=additional_data,
        )


# Singleton instance
_fraud_rule_engine: Optional[FraudRuleEngine] = None


def get_fraud_rule_engine() -> FraudRuleEngine:
    """Get singleton FraudRuleEngine instance."""
    global _fraud_rule_engine
    if _fraud_rule_engine is None:
        _fraud_rule_engine = FraudRuleEngine()
    return _fraud_rule_engine
