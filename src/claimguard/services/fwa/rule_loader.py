"""
Fraud Rule Loading.

Builds validated FraudRule objects from stored or admin-supplied data.
A configuration that does not fit the rule's type is rejected here,
once, rather than failing every time the rule is evaluated.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from claimguard.schemas.fraud import FraudRule
from claimguard.utils.errors import MalformedRuleConfigError


def load_fraud_rule(data: Mapping[str, Any]) -> FraudRule:
    """
    Validate rule data into a FraudRule.

    Args:
        data: Rule fields; configuration may use camelCase or snake_case keys

    Returns:
        FraudRule with a configuration model matching its type

    Raises:
        MalformedRuleConfigError: Configuration or other rule fields are invalid
    """
    try:
        return FraudRule.model_validate(dict(data))
    except ValidationError as e:
        code = str(data.get("code") or data.get("id") or "<unknown>")
        raise MalformedRuleConfigError(
            code,
            f"invalid rule definition ({e.error_count()} error(s))",
            errors=e.errors(include_url=False),
        ) from e
