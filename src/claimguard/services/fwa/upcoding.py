"""
Upcoding Rule Evaluation.
Source: Design Document Section 4.3 - Fraud Rule Engine
Verified: 2026-10-19

Detects providers that bill the higher-paying code of a pair at a
suspicious rate relative to the lower-paying code.
"""

from claimguard.core.enums import RuleType
from claimguard.schemas.claim import Claim
from claimguard.schemas.fraud import FraudRule, UpcodingRuleConfig
from claimguard.services.fwa.base import BaseFraudRule, EvaluationContext, RuleViolation


class UpcodingRule(BaseFraudRule):
    """
    Checks each configured pattern whose higher code is on the claim.

    A pattern is skipped when it lists specialties and the claim's
    provider specialty is not among them. The provider's ratio comes from
    the context's CodeUsageAnalyzer, over history that excludes the claim
    under evaluation.
    """

    rule_type = RuleType.UPCODING

    # Confidence per multiple of the threshold
    CONFIDENCE_FACTOR = 80

    async def evaluate(
        self, rule: FraudRule, claim: Claim, context: EvaluationContext
    ) -> RuleViolation:
        config: UpcodingRuleConfig = rule.configuration  # type: ignore[assignment]
        specialty = claim.provider_specialty
        claim_codes = set(claim.service_codes)

        violations = []
        for pattern in config.upcoding_patterns:
            if not pattern.applies_to(specialty):
                continue
            if pattern.higher_code not in claim_codes:
                continue

            stats = await context.usage.usage(
                claim.provider_id,
                pattern.lower_code,
                pattern.higher_code,
                as_of=claim.service_start_date,
                exclude_claim_id=claim.id,
            )
            if stats.ratio > pattern.threshold:
                violations.append(
                    {
                        "lower_code": pattern.lower_code,
                        "higher_code": pattern.higher_code,
                        "provider_ratio": stats.ratio,
                        "lower_code_count": stats.lower_count,
                        "higher_code_count": stats.higher_count,
                        "threshold": pattern.threshold,
                        "specialty": specialty,
                    }
                )

        evidence = {"violations": violations, "provider_specialty": specialty}
        if not violations:
            return self._not_violated(evidence)

        confidence = max(
            v["provider_ratio"] / v["threshold"] * self.CONFIDENCE_FACTOR for v in violations
        )
        return self._violated(
            explanation=(
                "Potential upcoding detected: provider uses higher-paying codes "
                "at suspicious rates"
            ),
            confidence_score=confidence,
            additional_data=evidence,
        )
