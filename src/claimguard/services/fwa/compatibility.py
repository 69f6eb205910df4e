"""
Compatibility Rule Evaluation.

Flags claims that bill both codes of a pair that must not appear
together (e.g. a comprehensive panel and one of its components).
"""

from claimguard.core.enums import RuleType
from claimguard.schemas.claim import Claim
from claimguard.schemas.fraud import CompatibilityRuleConfig, FraudRule
from claimguard.services.fwa.base import BaseFraudRule, EvaluationContext, RuleViolation


class CompatibilityRule(BaseFraudRule):
    rule_type = RuleType.COMPATIBILITY

    CONFIDENCE = 90

    async def evaluate(
        self, rule: FraudRule, claim: Claim, context: EvaluationContext
    ) -> RuleViolation:
        config: CompatibilityRuleConfig = rule.configuration  # type: ignore[assignment]
        claim_codes = claim.service_codes
        present = set(claim_codes)

        violations = [
            {"code1": code1, "code2": code2}
            for code1, code2 in config.incompatible_codes
            if code1 in present and code2 in present
        ]

        evidence = {"violations": violations, "claim_service_codes": claim_codes}
        if not violations:
            return self._not_violated(evidence)

        pairs = ", ".join(f"{v['code1']} and {v['code2']}" for v in violations)
        return self._violated(
            explanation=f"Claim contains incompatible procedure codes: {pairs}",
            confidence_score=self.CONFIDENCE,
            additional_data=evidence,
        )
