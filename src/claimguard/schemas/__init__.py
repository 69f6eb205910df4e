"""
Pydantic Schemas for Claim Adjudication and Fraud Detection.

This module exports the domain records shared by the engines and services.
"""

from claimguard.schemas.claim import Claim, ClaimAdjustment, ClaimItem
from claimguard.schemas.benefit import (
    BenefitsCoverage,
    CoinsuranceRates,
    CopaySchedule,
    DeductibleCoverage,
    OutOfPocketMax,
)
from claimguard.schemas.adjudication import (
    AdjudicationResult,
    DeductibleAccumulator,
    ItemAdjudication,
)
from claimguard.schemas.fraud import (
    ClaimFraudAlert,
    CodeUsageStats,
    CompatibilityRuleConfig,
    FraudEvaluationReport,
    FraudRule,
    FrequencyRuleConfig,
    GenericRuleConfig,
    RuleConfig,
    RuleFailure,
    UpcodingPattern,
    UpcodingRuleConfig,
    config_model_for,
)

__all__ = [
    # Claims
    "Claim",
    "ClaimAdjustment",
    "ClaimItem",
    # Benefits
    "BenefitsCoverage",
    "CoinsuranceRates",
    "CopaySchedule",
    "DeductibleCoverage",
    "OutOfPocketMax",
    # Adjudication
    "AdjudicationResult",
    "DeductibleAccumulator",
    "ItemAdjudication",
    # Fraud
    "ClaimFraudAlert",
    "CodeUsageStats",
    "CompatibilityRuleConfig",
    "FraudEvaluationReport",
    "FraudRule",
    "FrequencyRuleConfig",
    "GenericRuleConfig",
    "RuleConfig",
    "RuleFailure",
    "UpcodingPattern",
    "UpcodingRuleConfig",
    "config_model_for",
]
