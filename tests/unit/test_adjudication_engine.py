"""
Unit tests for the claim adjudication engine.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from claimguard.core.enums import AdjustmentType, ClaimItemStatus, ClaimStatus
from claimguard.schemas.adjudication import DeductibleAccumulator
from claimguard.schemas.benefit import (
    BenefitsCoverage,
    CoinsuranceRates,
    CopaySchedule,
    DeductibleCoverage,
)
from claimguard.schemas.claim import Claim, ClaimItem
from claimguard.services.adjudication_engine import AdjudicationEngine
from claimguard.utils.errors import (
    AdjudicationTimeoutError,
    InvalidStateError,
    MissingBenefitsError,
)
from tests.fakes import make_claim, make_item

TODAY = date(2026, 4, 1)


def coverage(remaining_deductible="0", excluded=(), preventive=True, **kwargs) -> BenefitsCoverage:
    return BenefitsCoverage(
        deductible=DeductibleCoverage(remaining_individual=Decimal(remaining_deductible)),
        excluded_services=frozenset(excluded),
        preventive_care=preventive,
        **kwargs,
    )


@pytest.fixture
def engine():
    return AdjudicationEngine(clock=lambda: TODAY)


def assert_conserved(result):
    for item in result.claim.items:
        assert item.approved_amount + item.member_responsibility == item.total_price
    claim = result.claim
    assert claim.approved_amount == sum(i.approved_amount for i in claim.items)
    assert claim.member_responsibility == sum(i.member_responsibility for i in claim.items)
    assert claim.paid_amount == claim.approved_amount


@pytest.mark.unit
class TestWorkedExample:
    """200.00 item, 50.00 deductible left, 20% coinsurance."""

    def test_amounts(self, engine):
        claim = make_claim(items=[make_item("80053", "200.00")])

        result = engine.adjudicate(claim, coverage("50"))
        item = result.claim.items[0]

        assert result.adjustments_of(AdjustmentType.DEDUCTIBLE)[0].amount == Decimal("50")
        assert result.adjustments_of(AdjustmentType.COINSURANCE)[0].amount == Decimal("30.00")
        assert result.adjustments_of(AdjustmentType.COPAY) == []
        assert item.approved_amount == Decimal("120")
        assert item.paid_amount == Decimal("120")
        assert item.member_responsibility == Decimal("80")
        assert item.status == ClaimItemStatus.APPROVED
        assert result.claim.status == ClaimStatus.PARTIALLY_APPROVED
        assert result.remaining_deductible == Decimal("0")
        assert_conserved(result)

    def test_adjustment_records(self, engine):
        claim = make_claim(items=[make_item("80053", "200.00")])

        result = engine.adjudicate(claim, coverage("50"))

        assert [a.adjustment_type for a in result.adjustments] == [
            AdjustmentType.DEDUCTIBLE,
            AdjustmentType.COINSURANCE,
        ]
        for adjustment in result.adjustments:
            assert adjustment.claim_id == claim.id
            assert adjustment.claim_item_id == claim.items[0].id
            assert adjustment.adjustment_date == TODAY
        assert result.adjustments[0].reason == "Annual deductible applied"
        assert result.adjustments[1].reason == "20% coinsurance applied"

    def test_input_claim_is_not_mutated(self, engine):
        claim = make_claim(items=[make_item("80053", "200.00")])
        before = claim.model_dump()

        result = engine.adjudicate(claim, coverage("50"))

        assert claim.model_dump() == before
        assert result.claim is not claim
        assert result.claim.id == claim.id


@pytest.mark.unit
class TestCopay:
    def test_specialist_copay_then_coinsurance(self, engine):
        claim = make_claim(items=[make_item("99213", "100.00")])

        result = engine.adjudicate(claim, coverage())
        item = result.claim.items[0]

        assert result.adjustments_of(AdjustmentType.COPAY)[0].amount == Decimal("50")
        assert result.adjustments_of(AdjustmentType.COINSURANCE)[0].amount == Decimal("10.00")
        assert item.member_responsibility == Decimal("60.00")
        assert item.approved_amount == Decimal("40.00")
        assert_conserved(result)

    def test_primary_care_copay(self, engine):
        claim = make_claim(items=[make_item("99211", "100.00")])

        result = engine.adjudicate(claim, coverage())

        assert result.adjustments_of(AdjustmentType.COPAY)[0].amount == Decimal("25")

    def test_copay_capped_at_remaining_amount(self, engine):
        claim = make_claim(items=[make_item("99213", "30.00")])

        result = engine.adjudicate(claim, coverage())
        item = result.claim.items[0]

        assert result.adjustments_of(AdjustmentType.COPAY)[0].amount == Decimal("30.00")
        assert result.adjustments_of(AdjustmentType.COINSURANCE) == []
        assert item.member_responsibility == Decimal("30.00")
        assert item.approved_amount == Decimal("0")
        assert result.claim.status == ClaimStatus.DENIED
        assert_conserved(result)

    def test_zero_copay_emits_no_adjustment(self, engine):
        claim = make_claim(items=[make_item("99213", "100.00")])
        plan = coverage(copay=CopaySchedule(specialist=Decimal("0")))

        result = engine.adjudicate(claim, plan)

        assert result.adjustments_of(AdjustmentType.COPAY) == []

    def test_deductible_exhausts_amount_before_copay(self, engine):
        claim = make_claim(items=[make_item("99213", "80.00")])

        result = engine.adjudicate(claim, coverage("100"))

        assert result.adjustments_of(AdjustmentType.DEDUCTIBLE)[0].amount == Decimal("80.00")
        assert result.adjustments_of(AdjustmentType.COPAY) == []
        assert result.remaining_deductible == Decimal("20.00")
        assert_conserved(result)


@pytest.mark.unit
class TestCoinsurance:
    def test_out_of_network_rate(self, engine):
        claim = make_claim(items=[make_item("80053", "100.00")], is_out_of_network=True)

        result = engine.adjudicate(claim, coverage())

        assert result.adjustments_of(AdjustmentType.COINSURANCE)[0].amount == Decimal("40.00")
        assert result.adjustments[0].reason == "40% coinsurance applied"

    def test_rounded_to_cents_half_up(self, engine):
        claim = make_claim(items=[make_item("80053", "33.33")])

        result = engine.adjudicate(claim, coverage())

        assert result.adjustments[0].amount == Decimal("6.67")
        assert result.claim.items[0].approved_amount == Decimal("26.66")
        assert_conserved(result)

    def test_zero_rate_approves_in_full(self, engine):
        claim = make_claim(items=[make_item("80053", "100.00")])
        plan = coverage(coinsurance=CoinsuranceRates(in_network=Decimal("0")))

        result = engine.adjudicate(claim, plan)

        assert result.adjustments == []
        assert result.claim.status == ClaimStatus.APPROVED


@pytest.mark.unit
class TestExclusions:
    def test_excluded_item_denied(self, engine):
        claim = make_claim(items=[make_item("97110", "150.00"), make_item("80053", "100.00")])

        result = engine.adjudicate(claim, coverage(excluded={"97110"}))
        excluded, covered = result.claim.items

        assert excluded.status == ClaimItemStatus.DENIED
        assert excluded.is_excluded_service is True
        assert excluded.denial_reason == "Service is excluded from coverage"
        assert excluded.approved_amount == Decimal("0")
        assert excluded.paid_amount == Decimal("0")
        assert excluded.member_responsibility == Decimal("150.00")

        non_covered = result.adjustments_of(AdjustmentType.NON_COVERED)
        assert len(non_covered) == 1
        assert non_covered[0].amount == Decimal("150.00")
        assert non_covered[0].claim_item_id == excluded.id

        assert covered.approved_amount == Decimal("80.00")
        assert result.claim.member_responsibility == Decimal("170.00")
        assert result.claim.status == ClaimStatus.PARTIALLY_APPROVED
        assert_conserved(result)

    def test_excluded_item_does_not_consume_deductible(self, engine):
        claim = make_claim(items=[make_item("97110", "150.00"), make_item("80053", "100.00")])

        result = engine.adjudicate(claim, coverage("60", excluded={"97110"}))

        assert result.adjustments_of(AdjustmentType.DEDUCTIBLE)[0].amount == Decimal("60")
        assert result.adjustments_of(AdjustmentType.DEDUCTIBLE)[0].claim_item_id == claim.items[1].id

    def test_all_items_excluded_denies_claim(self, engine):
        claim = make_claim(items=[make_item("97110", "150.00")])

        result = engine.adjudicate(claim, coverage(excluded={"97110"}))

        assert result.claim.status == ClaimStatus.DENIED
        assert result.claim.denial_reason == "No services approved for coverage"
        assert result.claim.approved_amount == Decimal("0")


@pytest.mark.unit
class TestPreventiveCare:
    def test_preventive_item_paid_in_full(self, engine):
        claim = make_claim(items=[make_item("99395", "250.00", is_preventive_care=True)])

        result = engine.adjudicate(claim, coverage("100"))
        item = result.claim.items[0]

        assert item.status == ClaimItemStatus.APPROVED
        assert item.approved_amount == Decimal("250.00")
        assert item.paid_amount == Decimal("250.00")
        assert item.member_responsibility == Decimal("0")
        assert result.adjustments == []
        assert result.remaining_deductible == Decimal("100")
        assert result.claim.status == ClaimStatus.APPROVED

    def test_plan_without_preventive_care_applies_cost_sharing(self, engine):
        claim = make_claim(items=[make_item("80061", "100.00", is_preventive_care=True)])

        result = engine.adjudicate(claim, coverage("100", preventive=False))

        assert result.claim.items[0].member_responsibility == Decimal("100.00")
        assert result.adjustments_of(AdjustmentType.DEDUCTIBLE)[0].amount == Decimal("100.00")

    def test_exclusion_wins_over_preventive(self, engine):
        claim = make_claim(items=[make_item("99395", "250.00", is_preventive_care=True)])

        result = engine.adjudicate(claim, coverage(excluded={"99395"}))

        assert result.claim.items[0].status == ClaimItemStatus.DENIED


@pytest.mark.unit
class TestDeductibleAccumulation:
    def test_deductible_spans_items_in_order(self, engine):
        claim = make_claim(items=[make_item("80053", "100.00"), make_item("80061", "100.00")])

        result = engine.adjudicate(claim, coverage("120"))
        deductibles = result.adjustments_of(AdjustmentType.DEDUCTIBLE)

        assert [d.amount for d in deductibles] == [Decimal("100.00"), Decimal("20.00")]
        assert result.deductible.applied_total == Decimal("120.00")
        assert result.remaining_deductible == Decimal("0")
        assert_conserved(result)

    def test_deductible_never_exceeds_remaining(self, engine):
        claim = make_claim(
            items=[make_item("80053", "40.00"), make_item("80061", "40.00"), make_item("85025", "40.00")]
        )

        result = engine.adjudicate(claim, coverage("50"))
        total_deductible = sum(a.amount for a in result.adjustments_of(AdjustmentType.DEDUCTIBLE))

        assert total_deductible == Decimal("50")
        assert result.remaining_deductible >= 0

    def test_accumulator_is_immutable(self):
        accumulator = DeductibleAccumulator(remaining_individual=Decimal("30"))

        applied, after = accumulator.apply(Decimal("50"))

        assert applied == Decimal("30")
        assert after.remaining_individual == Decimal("0")
        assert accumulator.remaining_individual == Decimal("30")
        assert after.apply(Decimal("10")) == (Decimal("0"), after)


@pytest.mark.unit
class TestClaimStatus:
    def test_fully_approved(self, engine):
        claim = make_claim(items=[make_item("80053", "100.00")])
        plan = coverage(coinsurance=CoinsuranceRates(in_network=Decimal("0")))

        result = engine.adjudicate(claim, plan)

        assert result.claim.status == ClaimStatus.APPROVED
        assert result.claim.approved_amount == result.claim.total_amount
        assert result.claim.denial_reason is None

    def test_partially_approved(self, engine):
        claim = make_claim(items=[make_item("80053", "100.00")])

        result = engine.adjudicate(claim, coverage())

        assert Decimal("0") < result.claim.approved_amount < result.claim.total_amount
        assert result.claim.status == ClaimStatus.PARTIALLY_APPROVED

    def test_omitted_total_defaults_to_item_sum(self, engine):
        claim = Claim(
            member_id=uuid4(),
            provider_id=uuid4(),
            service_start_date=TODAY,
            items=[ClaimItem(service_code="80053", total_price=Decimal("100"))],
        )

        result = engine.adjudicate(claim, coverage())

        assert claim.total_amount == Decimal("100")
        assert result.claim.approved_amount == Decimal("80.00")
        assert result.claim.member_responsibility == Decimal("20.00")
        assert result.claim.status == ClaimStatus.PARTIALLY_APPROVED

    def test_total_must_match_items(self):
        with pytest.raises(ValidationError, match="does not match line item total"):
            make_claim(items=[make_item("80053", "100.00")], total_amount="60.00")

    def test_claim_without_items_is_denied(self, engine):
        claim = make_claim(items=[], total_amount="0")

        result = engine.adjudicate(claim, coverage())

        assert result.claim.status == ClaimStatus.DENIED
        assert result.adjustments == []

    @pytest.mark.parametrize(
        "status",
        [ClaimStatus.SUBMITTED, ClaimStatus.PENDING, ClaimStatus.IN_REVIEW, ClaimStatus.APPEALED],
    )
    def test_adjudicable_statuses(self, engine, status):
        claim = make_claim(status=status)
        assert engine.adjudicate(claim, coverage()).claim.status != status


@pytest.mark.unit
class TestPreconditions:
    @pytest.mark.parametrize(
        "status",
        [
            ClaimStatus.APPROVED,
            ClaimStatus.PARTIALLY_APPROVED,
            ClaimStatus.DENIED,
            ClaimStatus.PAID,
            ClaimStatus.VOID,
        ],
    )
    def test_invalid_state(self, engine, status):
        claim = make_claim(status=status)

        with pytest.raises(InvalidStateError) as exc_info:
            engine.adjudicate(claim, coverage())

        assert exc_info.value.claim_id == claim.id
        assert exc_info.value.status == status

    def test_missing_coverage(self, engine):
        claim = make_claim()

        with pytest.raises(MissingBenefitsError) as exc_info:
            engine.adjudicate(claim, None)

        assert exc_info.value.member_id == claim.member_id


@pytest.mark.unit
class TestDeadline:
    def test_deadline_checked_between_items(self):
        ticks = iter([0.0, 5.0, 10.0])
        engine = AdjudicationEngine(clock=lambda: TODAY, monotonic=lambda: next(ticks))
        claim = make_claim(items=[make_item("80053", "10.00"), make_item("80061", "10.00")])

        with pytest.raises(AdjudicationTimeoutError) as exc_info:
            engine.adjudicate(claim, coverage(), deadline=1.0)

        assert exc_info.value.items_processed == 1
        assert claim.items[0].status == ClaimItemStatus.PENDING

    def test_deadline_not_reached(self):
        engine = AdjudicationEngine(clock=lambda: TODAY, monotonic=lambda: 0.0)
        claim = make_claim(items=[make_item("80053", "10.00"), make_item("80061", "10.00")])

        result = engine.adjudicate(claim, coverage(), deadline=1.0)

        assert len(result.claim.items) == 2
