"""
Pydantic Schemas for Resolved Benefit Coverage.

BenefitsCoverage is the normalized, immutable view of a member's plan
used by adjudication. The only value that changes while a claim is
adjudicated is the remaining individual deductible, and that lives in
DeductibleAccumulator rather than on the coverage itself.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from claimguard.core.enums import CopayCategory


class DeductibleCoverage(BaseModel):
    """Deductible totals and remaining balances."""

    model_config = ConfigDict(frozen=True)

    individual: Decimal = Decimal("0")
    family: Decimal = Decimal("0")
    remaining_individual: Decimal = Field(default=Decimal("0"), ge=0)
    remaining_family: Decimal = Field(default=Decimal("0"), ge=0)


class CoinsuranceRates(BaseModel):
    """Member coinsurance share, as a percentage (20 means 20%)."""

    model_config = ConfigDict(frozen=True)

    in_network: Decimal = Field(default=Decimal("20"), ge=0, le=100)
    out_of_network: Decimal = Field(default=Decimal("40"), ge=0, le=100)

    def rate_for(self, is_out_of_network: bool) -> Decimal:
        return self.out_of_network if is_out_of_network else self.in_network


class CopaySchedule(BaseModel):
    """Fixed copay amounts by service class."""

    model_config = ConfigDict(frozen=True)

    primary_care: Decimal = Decimal("25")
    specialist: Decimal = Decimal("50")
    emergency_room: Decimal = Decimal("250")
    urgent_care: Decimal = Decimal("75")

    def amount_for(self, category: CopayCategory) -> Decimal:
        return getattr(self, category.value)


class OutOfPocketMax(BaseModel):
    """Out-of-pocket maximums. Carried for downstream use, not enforced."""

    model_config = ConfigDict(frozen=True)

    individual: Decimal = Decimal("6000")
    family: Decimal = Decimal("12000")
    remaining_individual: Decimal = Decimal("6000")
    remaining_family: Decimal = Decimal("12000")


class BenefitsCoverage(BaseModel):
    """Normalized coverage structure consumed by the adjudication engine."""

    model_config = ConfigDict(frozen=True)

    deductible: DeductibleCoverage = Field(default_factory=DeductibleCoverage)
    coinsurance: CoinsuranceRates = Field(default_factory=CoinsuranceRates)
    copay: CopaySchedule = Field(default_factory=CopaySchedule)
    out_of_pocket_max: OutOfPocketMax = Field(default_factory=OutOfPocketMax)
    preventive_care: bool = True
    excluded_services: frozenset[str] = Field(default_factory=frozenset)

    def is_excluded(self, service_code: str) -> bool:
        return service_code in self.excluded_services
