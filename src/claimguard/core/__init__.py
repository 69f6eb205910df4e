"""Core configuration and enumerations."""

from claimguard.core.config import EngineSettings, get_engine_settings
from claimguard.core.enums import (
    AdjustmentType,
    AlertResolution,
    AlertStatus,
    ClaimItemStatus,
    ClaimStatus,
    ClaimType,
    CopayCategory,
    RuleSeverity,
    RuleStatus,
    RuleType,
)

__all__ = [
    "EngineSettings",
    "get_engine_settings",
    "AdjustmentType",
    "AlertResolution",
    "AlertStatus",
    "ClaimItemStatus",
    "ClaimStatus",
    "ClaimType",
    "CopayCategory",
    "RuleSeverity",
    "RuleStatus",
    "RuleType",
]
