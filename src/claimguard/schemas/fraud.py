"""
Pydantic Schemas for Fraud Rules and Alerts.

Rule configuration is a tagged union keyed by the rule's ``type``. Each
evaluated rule family has its own strongly typed configuration model;
the other families keep their payload as-is in GenericRuleConfig. A type
name this release does not know loads as CUSTOM.
Validation happens when a FraudRule is built, so a malformed rule is
rejected at load time instead of failing per claim.
"""

from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from claimguard.core.config import get_engine_settings
from claimguard.core.enums import (
    AlertResolution,
    AlertStatus,
    RuleSeverity,
    RuleStatus,
    RuleType,
)


# =============================================================================
# Rule Configuration Schemas
# =============================================================================


class RuleConfigBase(BaseModel):
    """Accepts camelCase (admin JSON) or snake_case keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class FrequencyRuleConfig(RuleConfigBase):
    """Limits how often a member may receive the given procedures."""

    timeframe_days: int = Field(
        default_factory=lambda: get_engine_settings().FREQUENCY_DEFAULT_TIMEFRAME_DAYS,
        ge=1,
    )
    max_occurrences: int = Field(
        default_factory=lambda: get_engine_settings().FREQUENCY_DEFAULT_MAX_OCCURRENCES,
        ge=1,
    )
    procedure_codes: list[str] = Field(..., min_length=1)


class CompatibilityRuleConfig(RuleConfigBase):
    """Pairs of service codes that must not be billed on the same claim."""

    incompatible_codes: list[tuple[str, str]] = Field(..., min_length=1)


class UpcodingPattern(RuleConfigBase):
    """A lower/higher code pair and the tolerated share of higher-code usage."""

    lower_code: str = Field(..., min_length=1)
    higher_code: str = Field(..., min_length=1)
    specialties: list[str] = Field(default_factory=list)
    threshold: float = Field(..., gt=0)

    def applies_to(self, specialty: Optional[str]) -> bool:
        """Patterns without specialties apply to every provider."""
        if not self.specialties:
            return True
        return specialty is not None and specialty in self.specialties


class UpcodingRuleConfig(RuleConfigBase):
    upcoding_patterns: list[UpcodingPattern] = Field(..., min_length=1)


class GenericRuleConfig(BaseModel):
    """Opaque payload for rule types without an evaluator."""

    model_config = ConfigDict(frozen=True, extra="allow")


RuleConfig = Union[
    FrequencyRuleConfig,
    CompatibilityRuleConfig,
    UpcodingRuleConfig,
    GenericRuleConfig,
]

RULE_CONFIG_MODELS: dict[RuleType, type[BaseModel]] = {
    RuleType.FREQUENCY: FrequencyRuleConfig,
    RuleType.COMPATIBILITY: CompatibilityRuleConfig,
    RuleType.UPCODING: UpcodingRuleConfig,
}


def config_model_for(rule_type: RuleType) -> type[BaseModel]:
    """Configuration model for a rule type (GenericRuleConfig if unevaluated)."""
    return RULE_CONFIG_MODELS.get(rule_type, GenericRuleConfig)


# =============================================================================
# Fraud Rule
# =============================================================================


class FraudRule(BaseModel):
    """Administrator-defined fraud rule. Read-only to the engine."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    code: str = Field(..., min_length=1, max_length=50)
    name: str = ""
    description: str = ""
    type: RuleType
    severity: RuleSeverity = RuleSeverity.MEDIUM
    status: RuleStatus = RuleStatus.ACTIVE
    configuration: RuleConfig
    insurance_company_id: Optional[UUID] = None
    is_system_wide: bool = False

    @model_validator(mode="before")
    @classmethod
    def parse_configuration(cls, data: Any) -> Any:
        """Validate the configuration against the model for the rule type."""
        if not isinstance(data, dict):
            return data

        raw_type = data.get("type")
        try:
            rule_type = RuleType(raw_type)
        except ValueError:
            if not isinstance(raw_type, str) or not raw_type.strip():
                # Left for field validation to report
                return data
            # Families added after this release load as unevaluated CUSTOM rules
            rule_type = RuleType.CUSTOM
            data = {**data, "type": rule_type}

        expected = config_model_for(rule_type)
        raw = data.get("configuration")
        if raw is None:
            raw = {}

        if isinstance(raw, BaseModel):
            if not isinstance(raw, expected):
                raise ValueError(
                    f"{rule_type.value} rule requires {expected.__name__}, "
                    f"got {type(raw).__name__}"
                )
            return data

        try:
            parsed = expected.model_validate(raw)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'configuration'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValueError(f"invalid {rule_type.value} configuration: {problems}") from None

        return {**data, "configuration": parsed}

    @property
    def is_evaluated(self) -> bool:
        """Whether the engine should run this rule at all."""
        return self.status != RuleStatus.INACTIVE


# =============================================================================
# Fraud Alert
# =============================================================================


class ClaimFraudAlert(BaseModel):
    """
    Output of fraud evaluation for one triggered rule on one claim.

    Created by the rule engine with status NEW; afterwards only the
    reviewer workflow changes status, resolution and review fields.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    claim_id: UUID
    rule_id: UUID
    rule_code: Optional[str] = None
    insurance_company_id: Optional[UUID] = None
    severity: RuleSeverity
    status: AlertStatus = AlertStatus.NEW
    resolution: AlertResolution = AlertResolution.NONE
    explanation: str
    confidence_score: int = Field(..., ge=0, le=100)
    additional_data: dict[str, Any] = Field(default_factory=dict)

    reviewed_by_user_id: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None


class RuleFailure(BaseModel):
    """Non-fatal diagnostic for a rule that raised during evaluation."""

    rule_id: UUID
    rule_code: str
    error_type: str
    message: str


class FraudEvaluationReport(BaseModel):
    """Alerts plus diagnostics from one evaluation pass over a claim."""

    claim_id: UUID
    alerts: list[ClaimFraudAlert] = Field(default_factory=list)
    failures: list[RuleFailure] = Field(default_factory=list)
    rules_evaluated: int = 0
    rules_skipped: int = 0

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


# =============================================================================
# Provider Code Usage
# =============================================================================


class CodeUsageStats(BaseModel):
    """Historical usage of a lower/higher code pair by one provider."""

    provider_id: UUID
    lower_code: str
    higher_code: str
    lower_count: int = Field(default=0, ge=0)
    higher_count: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.lower_count + self.higher_count

    @property
    def ratio(self) -> float:
        """Share of the pair's usage billed with the higher code (0.0 with no history)."""
        if self.total == 0:
            return 0.0
        return self.higher_count / self.total

    @field_validator("lower_code", "higher_code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        return v.strip()
