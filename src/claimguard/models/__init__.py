"""
SQLAlchemy Models for Claim Adjudication and Fraud Detection.
"""

from claimguard.models.base import Base, TimeStampedModel, UUIDModel
from claimguard.models.member import MemberRecord
from claimguard.models.claim import ClaimAdjustmentRecord, ClaimItemRecord, ClaimRecord
from claimguard.models.fraud import ClaimFraudAlertRecord, FraudRuleRecord

__all__ = [
    "Base",
    "TimeStampedModel",
    "UUIDModel",
    "MemberRecord",
    "ClaimRecord",
    "ClaimItemRecord",
    "ClaimAdjustmentRecord",
    "FraudRuleRecord",
    "ClaimFraudAlertRecord",
]
