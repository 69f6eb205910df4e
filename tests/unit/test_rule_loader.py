"""
Unit tests for fraud rule loading and configuration validation.
"""

from uuid import uuid4

import pytest

from claimguard.core.enums import RuleSeverity, RuleStatus, RuleType
from claimguard.schemas.fraud import (
    CompatibilityRuleConfig,
    FrequencyRuleConfig,
    GenericRuleConfig,
    UpcodingRuleConfig,
)
from claimguard.services.fwa.rule_loader import load_fraud_rule
from claimguard.utils.errors import MalformedRuleConfigError


def rule_data(rule_type: str, configuration, **kwargs):
    data = {
        "id": uuid4(),
        "code": kwargs.pop("code", "RULE-001"),
        "name": "Test rule",
        "type": rule_type,
        "severity": "HIGH",
        "status": "ACTIVE",
        "configuration": configuration,
    }
    data.update(kwargs)
    return data


@pytest.mark.unit
class TestTypedConfigurations:
    def test_frequency_camel_case(self):
        rule = load_fraud_rule(
            rule_data(
                "FREQUENCY",
                {"timeframeDays": 90, "maxOccurrences": 2, "procedureCodes": ["81002"]},
            )
        )

        assert rule.type == RuleType.FREQUENCY
        assert isinstance(rule.configuration, FrequencyRuleConfig)
        assert rule.configuration.timeframe_days == 90
        assert rule.configuration.max_occurrences == 2
        assert rule.configuration.procedure_codes == ["81002"]

    def test_frequency_defaults(self):
        rule = load_fraud_rule(rule_data("FREQUENCY", {"procedure_codes": ["81002"]}))

        assert rule.configuration.timeframe_days == 30
        assert rule.configuration.max_occurrences == 1

    def test_compatibility_pairs(self):
        rule = load_fraud_rule(
            rule_data("COMPATIBILITY", {"incompatibleCodes": [["80053", "82947"]]})
        )

        assert isinstance(rule.configuration, CompatibilityRuleConfig)
        assert rule.configuration.incompatible_codes == [("80053", "82947")]

    def test_upcoding_patterns(self):
        rule = load_fraud_rule(
            rule_data(
                "UPCODING",
                {
                    "upcodingPatterns": [
                        {
                            "lowerCode": "99213",
                            "higherCode": "99215",
                            "specialties": ["Cardiology"],
                            "threshold": 0.4,
                        }
                    ]
                },
            )
        )

        assert isinstance(rule.configuration, UpcodingRuleConfig)
        pattern = rule.configuration.upcoding_patterns[0]
        assert pattern.lower_code == "99213"
        assert pattern.applies_to("Cardiology")
        assert not pattern.applies_to("Dermatology")
        assert not pattern.applies_to(None)

    def test_unevaluated_type_keeps_payload(self):
        rule = load_fraud_rule(rule_data("GEOGRAPHIC", {"maxDistanceMiles": 150}))

        assert isinstance(rule.configuration, GenericRuleConfig)
        assert rule.configuration.model_dump() == {"maxDistanceMiles": 150}

    def test_unknown_type_loads_as_custom(self):
        rule = load_fraud_rule(rule_data("TELEPATHY", {"radiusMiles": 5}))

        assert rule.type == RuleType.CUSTOM
        assert isinstance(rule.configuration, GenericRuleConfig)
        assert rule.configuration.model_dump() == {"radiusMiles": 5}

    def test_enum_fields(self):
        rule = load_fraud_rule(rule_data("COMPATIBILITY", {"incompatibleCodes": [["A", "B"]]}))

        assert rule.severity == RuleSeverity.HIGH
        assert rule.status == RuleStatus.ACTIVE
        assert rule.is_evaluated


@pytest.mark.unit
class TestMalformedConfigurations:
    @pytest.mark.parametrize(
        "rule_type,configuration",
        [
            ("FREQUENCY", {}),
            ("FREQUENCY", {"procedureCodes": []}),
            ("FREQUENCY", {"procedureCodes": ["81002"], "maxOccurrences": 0}),
            ("FREQUENCY", {"procedureCodes": ["81002"], "timeframeDays": "soon"}),
            ("COMPATIBILITY", {"incompatibleCodes": []}),
            ("COMPATIBILITY", {"incompatibleCodes": [["80053"]]}),
            ("UPCODING", {"upcodingPatterns": []}),
            ("UPCODING", {"upcodingPatterns": [{"lowerCode": "99213", "higherCode": "99215"}]}),
            (
                "UPCODING",
                {"upcodingPatterns": [{"lowerCode": "99213", "higherCode": "99215", "threshold": 0}]},
            ),
            ("COMPATIBILITY", "not-a-mapping"),
        ],
    )
    def test_rejected_at_load_time(self, rule_type, configuration):
        with pytest.raises(MalformedRuleConfigError) as exc_info:
            load_fraud_rule(rule_data(rule_type, configuration, code="BAD-RULE"))

        assert exc_info.value.rule_code == "BAD-RULE"
        assert exc_info.value.errors

    @pytest.mark.parametrize("rule_type", [None, "", 7])
    def test_missing_rule_type(self, rule_type):
        with pytest.raises(MalformedRuleConfigError):
            load_fraud_rule(rule_data(rule_type, {}))

    def test_configuration_model_must_match_type(self):
        with pytest.raises(MalformedRuleConfigError):
            load_fraud_rule(
                rule_data(
                    "FREQUENCY",
                    CompatibilityRuleConfig(incompatible_codes=[("80053", "82947")]),
                )
            )

    def test_error_is_engine_error(self):
        from claimguard.utils.errors import ClaimEngineError

        with pytest.raises(ClaimEngineError):
            load_fraud_rule(rule_data("FREQUENCY", {}))
