"""
Base class for fraud rule evaluators.

Every evaluator implements `evaluate()` which takes a rule, a claim and
the evaluation context, and returns a RuleViolation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from claimguard.core.config import EngineSettings
from claimguard.core.enums import RuleType
from claimguard.schemas.claim import Claim
from claimguard.schemas.fraud import FraudRule
from claimguard.services.fwa.usage_stats import CodeUsageAnalyzer
from claimguard.services.providers import ClaimHistoryProvider


@dataclass
class RuleViolation:
    """Result of evaluating a single rule against a single claim."""

    is_violated: bool
    explanation: str = ""
    confidence_score: float = 0.0  # 0 - 100, unrounded
    additional_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class EvaluationContext:
    """Collaborators available to evaluators during one evaluation pass."""

    history: ClaimHistoryProvider
    usage: CodeUsageAnalyzer
    settings: EngineSettings


class BaseFraudRule(ABC):
    """Abstract base class for all fraud rule evaluators."""

    rule_type: RuleType

    @abstractmethod
    async def evaluate(
        self, rule: FraudRule, claim: Claim, context: EvaluationContext
    ) -> RuleViolation:
        """
        Evaluate one rule against one claim.

        Args:
            rule: Rule with its typed configuration
            claim: Claim under evaluation
            context: History access and settings

        Returns:
            RuleViolation; is_violated False when the rule does not fire
        """
        pass

    def _not_violated(self, additional_data: Optional[dict[str, Any]] = None) -> RuleViolation:
        """Helper for rules that don't fire."""
        return RuleViolation(is_violated=False, additional_data=additional_data or {})

    def _violated(
        self,
        explanation: str,
        confidence_score: float,
        additional_data: dict[str, Any],
    ) -> RuleViolation:
        """Helper for rules that fire."""
        return RuleViolation(
            is_violated=True,
            explanation=explanation,
            confidence_score=min(100.0, max(0.0, confidence_score)),
            additional_data=additional_data,
        )
