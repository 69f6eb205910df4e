"""
Benefits Resolver.
Source: Design Document Section 4.1 - Benefits Resolution
Verified: 2026-10-19

Normalizes a member's raw benefits document into BenefitsCoverage.
Raw documents come from member records and admin tooling, so keys may be
camelCase or snake_case and any field may be missing or malformed.
Resolution never raises: unusable values fall back to plan defaults.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional

from claimguard.core.config import EngineSettings, get_engine_settings
from claimguard.schemas.benefit import (
    BenefitsCoverage,
    CoinsuranceRates,
    CopaySchedule,
    DeductibleCoverage,
    OutOfPocketMax,
)
from claimguard.utils.logging import get_logger
from claimguard.utils.money import parse_decimal

logger = get_logger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _lookup(raw: Any, key: str) -> Any:
    """Fetch key from a mapping, trying the snake_case then camelCase spelling."""
    if not isinstance(raw, Mapping):
        return None
    if key in raw:
        return raw[key]
    return raw.get(_camel(key))


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = _lookup(raw, key)
    return value if isinstance(value, Mapping) else {}


class BenefitsResolver:
    """
    Resolves raw member benefits into a normalized coverage structure.

    A literal zero is honoured. Missing, negative or non-numeric values
    take the configured default; percentages above 100 are treated the
    same way.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_engine_settings()

    def resolve(self, raw: Optional[Mapping[str, Any]]) -> BenefitsCoverage:
        """
        Resolve raw benefits.

        Args:
            raw: Benefits document (mapping). None or a non-mapping yields
                a coverage made entirely of defaults.

        Returns:
            BenefitsCoverage
        """
        if not isinstance(raw, Mapping):
            raw = {}

        coverage = BenefitsCoverage(
            deductible=self._deductible(_section(raw, "deductible")),
            coinsurance=self._coinsurance(_section(raw, "coinsurance")),
            copay=self._copay(_section(raw, "copay")),
            out_of_pocket_max=self._out_of_pocket(_section(raw, "out_of_pocket_max")),
            preventive_care=_lookup(raw, "preventive_care") is not False,
            excluded_services=self._excluded(_lookup(raw, "excluded_services")),
        )
        logger.debug(
            f"Resolved benefits: deductible remaining="
            f"{coverage.deductible.remaining_individual}, "
            f"exclusions={len(coverage.excluded_services)}"
        )
        return coverage

    # =========================================================================
    # Sections
    # =========================================================================

    def _deductible(self, section: Mapping[str, Any]) -> DeductibleCoverage:
        return DeductibleCoverage(
            individual=self._amount(section, "individual", _ZERO),
            family=self._amount(section, "family", _ZERO),
            remaining_individual=self._amount(section, "remaining_individual", _ZERO),
            remaining_family=self._amount(section, "remaining_family", _ZERO),
        )

    def _coinsurance(self, section: Mapping[str, Any]) -> CoinsuranceRates:
        s = self.settings
        return CoinsuranceRates(
            in_network=self._percentage(section, "in_network", s.DEFAULT_COINSURANCE_IN_NETWORK),
            out_of_network=self._percentage(
                section, "out_of_network", s.DEFAULT_COINSURANCE_OUT_OF_NETWORK
            ),
        )

    def _copay(self, section: Mapping[str, Any]) -> CopaySchedule:
        s = self.settings
        return CopaySchedule(
            primary_care=self._amount(section, "primary_care", s.DEFAULT_COPAY_PRIMARY_CARE),
            specialist=self._amount(section, "specialist", s.DEFAULT_COPAY_SPECIALIST),
            emergency_room=self._amount(section, "emergency_room", s.DEFAULT_COPAY_EMERGENCY_ROOM),
            urgent_care=self._amount(section, "urgent_care", s.DEFAULT_COPAY_URGENT_CARE),
        )

    def _out_of_pocket(self, section: Mapping[str, Any]) -> OutOfPocketMax:
        s = self.settings
        individual = self._amount(section, "individual", s.DEFAULT_OOP_MAX_INDIVIDUAL)
        family = self._amount(section, "family", s.DEFAULT_OOP_MAX_FAMILY)
        return OutOfPocketMax(
            individual=individual,
            family=family,
            remaining_individual=self._amount(section, "remaining_individual", individual),
            remaining_family=self._amount(section, "remaining_family", family),
        )

    @staticmethod
    def _excluded(value: Any) -> frozenset[str]:
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
            return frozenset()
        return frozenset(code.strip() for code in value if isinstance(code, str) and code.strip())

    # =========================================================================
    # Values
    # =========================================================================

    @staticmethod
    def _amount(section: Mapping[str, Any], key: str, default: Decimal) -> Decimal:
        value = parse_decimal(_lookup(section, key))
        if value is None or value < 0:
            return default
        return value

    def _percentage(self, section: Mapping[str, Any], key: str, default: Decimal) -> Decimal:
        value = self._amount(section, key, default)
        if value > _HUNDRED:
            logger.warning(f"Coinsurance {key}={value} exceeds 100, using default {default}")
            return default
        return value


# Singleton instance
_benefits_resolver: Optional[BenefitsResolver] = None


def get_benefits_resolver() -> BenefitsResolver:
    """Get singleton BenefitsResolver instance."""
    global _benefits_resolver
    if _benefits_resolver is None:
        _benefits_resolver = BenefitsResolver()
    return _benefits_resolver


def resolve(raw: Optional[Mapping[str, Any]]) -> BenefitsCoverage:
    """Resolve raw member benefits with the default resolver."""
    return get_benefits_resolver().resolve(raw)
