"""
Frequency Rule Evaluation.
Source: Design Document Section 4.3 - Fraud Rule Engine
Verified: 2026-10-19

Flags members who receive the same procedures more often than a rule
allows within a window ending on the claim's service start date.
"""

from datetime import timedelta

from claimguard.core.enums import RuleType
from claimguard.schemas.claim import Claim
from claimguard.schemas.fraud import FraudRule, FrequencyRuleConfig
from claimguard.services.fwa.base import BaseFraudRule, EvaluationContext, RuleViolation


class FrequencyRule(BaseFraudRule):
    """
    Counts the member's claims that bill any of the rule's procedure codes.

    Occurrences are the matching historical claims in
    [service_start_date - timeframe_days, service_start_date], excluding
    the claim itself, plus one if the claim itself matches.
    """

    rule_type = RuleType.FREQUENCY

    # Confidence per multiple of the allowed occurrences
    CONFIDENCE_FACTOR = 70

    async def evaluate(
        self, rule: FraudRule, claim: Claim, context: EvaluationContext
    ) -> RuleViolation:
        config: FrequencyRuleConfig = rule.configuration  # type: ignore[assignment]
        codes = frozenset(config.procedure_codes)

        anchor = claim.service_start_date
        history = await context.history.find_claims(
            member_id=claim.member_id,
            start_date=anchor - timedelta(days=config.timeframe_days),
            end_date=anchor,
            limit=context.settings.HISTORY_CLAIM_LIMIT,
        )

        matching_claims = [
            str(past.id)
            for past in history
            if past.id != claim.id and past.has_any_code(codes)
        ]
        occurrences = len(matching_claims)
        if claim.has_any_code(codes):
            occurrences += 1

        evidence = {
            "occurrences": occurrences,
            "timeframe_days": config.timeframe_days,
            "max_occurrences": config.max_occurrences,
            "procedure_codes": list(config.procedure_codes),
            "matching_claims": matching_claims,
        }

        if occurrences <= config.max_occurrences:
            return self._not_violated(evidence)

        return self._violated(
            explanation=(
                f"Found {occurrences} occurrences of procedures "
                f"{', '.join(config.procedure_codes)} within {config.timeframe_days} days, "
                f"exceeding maximum of {config.max_occurrences}"
            ),
            confidence_score=occurrences / config.max_occurrences * self.CONFIDENCE_FACTOR,
            additional_data=evidence,
        )
