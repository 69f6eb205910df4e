"""
Copay Classification.

Decides whether a service code carries a fixed copay and which copay
class applies. The lookup table is ordered and first match wins, so a
broad prefix placed early shadows more specific prefixes after it. The
default table keeps that ordering: codes starting 992 resolve to the
specialist copay before the emergency room or urgent care entries are
reached.
"""

from typing import Optional, Sequence

from claimguard.core.enums import CopayCategory

DEFAULT_COPAY_PREFIX = "99"

DEFAULT_COPAY_TABLE: tuple[tuple[str, CopayCategory], ...] = (
    ("99201", CopayCategory.PRIMARY_CARE),
    ("99211", CopayCategory.PRIMARY_CARE),
    ("992", CopayCategory.SPECIALIST),
    ("99281", CopayCategory.EMERGENCY_ROOM),
    ("99201", CopayCategory.URGENT_CARE),
)


class CopayClassifier:
    """Prefix-table copay classifier for office and facility visit codes."""

    def __init__(
        self,
        copay_prefixes: Sequence[str] = (DEFAULT_COPAY_PREFIX,),
        table: Sequence[tuple[str, CopayCategory]] = DEFAULT_COPAY_TABLE,
    ):
        self.copay_prefixes = tuple(copay_prefixes)
        self.table = tuple(table)

    def is_copay_bearing(self, service_code: str) -> bool:
        return service_code.startswith(self.copay_prefixes)

    def classify(self, service_code: str) -> Optional[CopayCategory]:
        """
        Copay class for a service code.

        Returns:
            The first matching category, or None when the code carries no
            copay or matches no table entry.
        """
        if not self.is_copay_bearing(service_code):
            return None
        for prefix, category in self.table:
            if service_code.startswith(prefix):
                return category
        return None


# Singleton instance
_copay_classifier: Optional[CopayClassifier] = None


def get_copay_classifier() -> CopayClassifier:
    """Get singleton CopayClassifier instance."""
    global _copay_classifier
    if _copay_classifier is None:
        _copay_classifier = CopayClassifier()
    return _copay_classifier
