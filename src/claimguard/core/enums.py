"""
Core Enumerations for Claim Adjudication and Fraud Detection.
Verified: 2026-10-19
"""

from enum import Enum


# =============================================================================
# Claim Enums
# =============================================================================


class ClaimStatus(str, Enum):
    """Claim lifecycle status."""

    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    PARTIALLY_APPROVED = "PARTIALLY_APPROVED"
    DENIED = "DENIED"
    APPEALED = "APPEALED"
    PAID = "PAID"  # Terminal
    VOID = "VOID"  # Terminal

    @classmethod
    def adjudicable(cls) -> frozenset["ClaimStatus"]:
        """Statuses from which a claim may be adjudicated."""
        return frozenset({cls.SUBMITTED, cls.PENDING, cls.IN_REVIEW, cls.APPEALED})

    @property
    def is_terminal(self) -> bool:
        return self in (ClaimStatus.PAID, ClaimStatus.VOID)


class ClaimType(str, Enum):
    """Line of business for a claim."""

    MEDICAL = "MEDICAL"
    DENTAL = "DENTAL"
    VISION = "VISION"
    PHARMACY = "PHARMACY"
    MENTAL_HEALTH = "MENTAL_HEALTH"


class ClaimItemStatus(str, Enum):
    """Adjudication status of a single service line."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    ADJUSTED = "ADJUSTED"


class AdjustmentType(str, Enum):
    """Kinds of monetary deductions recorded against a line item."""

    DEDUCTIBLE = "DEDUCTIBLE"
    COPAY = "COPAY"
    COINSURANCE = "COINSURANCE"
    NON_COVERED = "NON_COVERED"
    OUT_OF_NETWORK = "OUT_OF_NETWORK"
    DUPLICATE = "DUPLICATE"
    BUNDLING = "BUNDLING"
    COORDINATION_OF_BENEFITS = "COORDINATION_OF_BENEFITS"
    MAXIMUM_ALLOWABLE = "MAXIMUM_ALLOWABLE"
    POLICY_LIMITATION = "POLICY_LIMITATION"
    OTHER = "OTHER"


class CopayCategory(str, Enum):
    """Service classes that carry a fixed copay."""

    PRIMARY_CARE = "primary_care"
    SPECIALIST = "specialist"
    EMERGENCY_ROOM = "emergency_room"
    URGENT_CARE = "urgent_care"


# =============================================================================
# Fraud Detection Enums
# =============================================================================


class RuleType(str, Enum):
    """Fraud rule families. Only some have evaluators."""

    FREQUENCY = "FREQUENCY"
    COMPATIBILITY = "COMPATIBILITY"
    UPCODING = "UPCODING"
    PHANTOM_BILLING = "PHANTOM_BILLING"
    DUPLICATE = "DUPLICATE"
    UNBUNDLING = "UNBUNDLING"
    MEDICAL_NECESSITY = "MEDICAL_NECESSITY"
    PROVIDER_SPECIALTY = "PROVIDER_SPECIALTY"
    MEMBER_ELIGIBILITY = "MEMBER_ELIGIBILITY"
    GEOGRAPHIC = "GEOGRAPHIC"
    CUSTOM = "CUSTOM"


class RuleSeverity(str, Enum):
    """Severity attached to a rule and copied onto its alerts."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RuleStatus(str, Enum):
    """Rule activation status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TESTING = "TESTING"  # Evaluated, alerts tagged for calibration


class AlertStatus(str, Enum):
    """Reviewer workflow status of a fraud alert."""

    NEW = "NEW"
    UNDER_REVIEW = "UNDER_REVIEW"
    CONFIRMED_FRAUD = "CONFIRMED_FRAUD"
    FALSE_POSITIVE = "FALSE_POSITIVE"
    RESOLVED = "RESOLVED"


class AlertResolution(str, Enum):
    """Outcome recorded by the reviewer."""

    NONE = "NONE"
    CLAIM_DENIED = "CLAIM_DENIED"
    CLAIM_ADJUSTED = "CLAIM_ADJUSTED"
    PROVIDER_WARNED = "PROVIDER_WARNED"
    PROVIDER_SUSPENDED = "PROVIDER_SUSPENDED"
    MEMBER_WARNED = "MEMBER_WARNED"
    MEMBER_TERMINATED = "MEMBER_TERMINATED"
    REFERRED_TO_AUTHORITIES = "REFERRED_TO_AUTHORITIES"
    OTHER = "OTHER"
