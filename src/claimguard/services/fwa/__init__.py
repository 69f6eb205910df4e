"""
Fraud, Waste, and Abuse (FWA) Rule Services.
Source: Design Document Section 4.3 - Fraud Rule Engine
Verified: 2026-10-19

Provides configurable rule-based fraud detection: frequency abuse, code
incompatibility and upcoding, plus the alert review workflow.
"""

from claimguard.services.fwa.base import BaseFraudRule, EvaluationContext, RuleViolation
from claimguard.services.fwa.compatibility import CompatibilityRule
from claimguard.services.fwa.engine import (
    FraudRuleEngine,
    alert_id_for,
    get_fraud_rule_engine,
)
from claimguard.services.fwa.frequency import FrequencyRule
from claimguard.services.fwa.repository import SqlAlertRepository, SqlFraudRuleRepository
from claimguard.services.fwa.rule_loader import load_fraud_rule
from claimguard.services.fwa.service import (
    FraudDetectionService,
    apply_review,
    create_fraud_detection_service,
)
from claimguard.services.fwa.upcoding import UpcodingRule
from claimguard.services.fwa.usage_stats import CodeUsageAnalyzer

__all__ = [
    # Evaluators
    "BaseFraudRule",
    "EvaluationContext",
    "RuleViolation",
    "CompatibilityRule",
    "FrequencyRule",
    "UpcodingRule",
    "CodeUsageAnalyzer",
    # Engine
    "FraudRuleEngine",
    "alert_id_for",
    "get_fraud_rule_engine",
    "load_fraud_rule",
    # Persistence
    "SqlAlertRepository",
    "SqlFraudRuleRepository",
    # Service
    "FraudDetectionService",
    "apply_review",
    "create_fraud_detection_service",
]
