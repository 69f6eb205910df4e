"""
Custom Exceptions
Error taxonomy for adjudication and fraud rule evaluation.
"""

from typing import Any, Optional
from uuid import UUID


class ClaimEngineError(Exception):
    """Base exception for all claim engine errors."""

    pass


class InvalidStateError(ClaimEngineError):
    """Raised when a claim is not in a status that allows adjudication."""

    def __init__(self, claim_id: UUID, status: Any):
        status_value = getattr(status, "value", status)
        super().__init__(f"Claim {claim_id} with status {status_value} cannot be adjudicated")
        self.claim_id = claim_id
        self.status = status


class MissingBenefitsError(ClaimEngineError):
    """Raised when the member has no benefits information at all."""

    def __init__(self, member_id: Optional[UUID] = None):
        detail = f" {member_id}" if member_id is not None else ""
        super().__init__(f"Member{detail} has no benefits information")
        self.member_id = member_id


class MalformedRuleConfigError(ClaimEngineError):
    """Raised when a fraud rule's configuration does not fit its declared type."""

    def __init__(self, rule_code: str, message: str, errors: Optional[list[dict]] = None):
        super().__init__(f"Rule {rule_code}: {message}")
        self.rule_code = rule_code
        self.errors = errors or []


class DataProviderError(ClaimEngineError):
    """Raised when a benefits, claim or history lookup fails."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.original_error = original_error


class ClaimNotFoundError(ClaimEngineError):
    """Raised when a claim cannot be found."""

    def __init__(self, claim_id: UUID):
        super().__init__(f"Claim with ID {claim_id} not found")
        self.claim_id = claim_id


class AlertNotFoundError(ClaimEngineError):
    """Raised when a fraud alert cannot be found."""

    def __init__(self, alert_id: UUID):
        super().__init__(f"Fraud alert with ID {alert_id} not found")
        self.alert_id = alert_id


class AdjudicationTimeoutError(ClaimEngineError):
    """Raised when adjudication overruns its deadline between line items."""

    def __init__(self, claim_id: UUID, items_processed: int):
        super().__init__(
            f"Adjudication of claim {claim_id} exceeded its deadline "
            f"after {items_processed} item(s)"
        )
        self.claim_id = claim_id
        self.items_processed = items_processed
