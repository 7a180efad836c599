"""
Unit tests for the outcome evaluator.

WHAT: Test range intersection, fee tiers and deal construction
WHY: Pricing must be exact and the no-deal paths must never raise
HOW: Known scenarios plus parametrized boundary grids
"""

from datetime import datetime, timedelta

import pytest

from pricematch.models.domain import PriceRangeRecord
from pricematch.services.outcome_evaluator import (
    FEE_TIERS,
    NoDealReason,
    calculate_platform_fee,
    evaluate_outcome,
    fee_rate_for,
)
from pricematch.utils.exceptions import InvalidPriceRangeError

NOW = datetime(2026, 3, 1, 12, 0, 0)


def make_range(role, min_price, max_price, user_id=None, negotiation_id="neg_1"):
    return PriceRangeRecord(
        id=f"range_{role}",
        negotiation_id=negotiation_id,
        user_id=user_id or f"user_{role}",
        user_role=role,
        min_price=min_price,
        max_price=max_price,
        submitted_at=NOW,
    )


def unchecked_range(role, min_price, max_price, negotiation_id="neg_1"):
    """Range that skips record validation, as a buggy caller might pass."""
    return PriceRangeRecord.model_construct(
        id=f"range_{role}",
        negotiation_id=negotiation_id,
        user_id=f"user_{role}",
        user_role=role,
        min_price=min_price,
        max_price=max_price,
        submitted_at=NOW,
    )


@pytest.mark.unit
class TestFeeSchedule:
    """Volume-based fee tiers."""

    @pytest.mark.parametrize("count,rate", [
        (0, 0.01),
        (9, 0.01),
        (10, 0.009),
        (19, 0.009),
        (20, 0.008),
        (49, 0.008),
        (50, 0.007),
        (99, 0.007),
        (100, 0.005),
        (5000, 0.005),
    ])
    def test_fee_rate_for_tier(self, count, rate):
        assert fee_rate_for(count) == rate

    def test_fee_is_non_increasing_across_tiers(self):
        counts = [0, 9, 10, 19, 20, 49, 50, 99, 100, 250]
        fees = [calculate_platform_fee(1000.0, c) for c in counts]

        assert all(later <= earlier for earlier, later in zip(fees, fees[1:]))

    def test_tiers_listed_highest_threshold_first(self):
        thresholds = [threshold for threshold, _ in FEE_TIERS]
        assert thresholds == sorted(thresholds, reverse=True)
        assert thresholds[-1] == 0

    @pytest.mark.parametrize("count", [-1, 2.5, True, "10"])
    def test_invalid_count_rejected(self, count):
        with pytest.raises(InvalidPriceRangeError):
            fee_rate_for(count)


@pytest.mark.unit
class TestScenarios:
    """Worked examples."""

    def test_comfortable_overlap_creates_deal(self):
        result = evaluate_outcome(
            make_range("buyer", 700.0, 1000.0),
            make_range("seller", 900.0, 1200.0),
            0,
            now=NOW,
        )

        assert result.deal_found
        assert result.reason is None
        assert result.agreed_price == 950.0
        assert result.platform_fee == pytest.approx(9.50)
        assert result.final_price == pytest.approx(940.50)
        assert result.fee_rate == 0.01

        deal = result.deal
        assert deal.negotiation_id == "neg_1"
        assert deal.buyer_id == "user_buyer"
        assert deal.seller_id == "user_seller"
        assert deal.status == "active"
        assert deal.valid_until == NOW + timedelta(days=7)

    def test_fee_eats_thin_margin(self):
        result = evaluate_outcome(
            make_range("buyer", 900.0, 1000.0),
            make_range("seller", 999.99, 1100.0),
            0,
            now=NOW,
        )

        assert not result.deal_found
        assert result.deal is None
        assert result.reason == NoDealReason.FEE_EXCEEDS_MARGIN
        assert result.agreed_price == pytest.approx(999.995)
        assert result.platform_fee == pytest.approx(10.0, abs=0.01)
        assert result.final_price == pytest.approx(989.995, abs=0.01)

    def test_disjoint_ranges_no_deal(self):
        result = evaluate_outcome(
            make_range("buyer", 600.0, 800.0),
            make_range("seller", 850.0, 1000.0),
            0,
        )

        assert not result.deal_found
        assert result.reason == NoDealReason.NO_OVERLAP

    def test_high_volume_requester_gets_lowest_fee(self):
        result = evaluate_outcome(
            make_range("buyer", 4000.0, 5000.0),
            make_range("seller", 4500.0, 6000.0),
            120,
            now=NOW,
        )

        assert result.deal_found
        assert result.agreed_price == 4750.0
        assert result.platform_fee == pytest.approx(23.75)
        assert result.final_price == pytest.approx(4726.25)


@pytest.mark.unit
class TestProperties:
    """Invariants over grids of ranges."""

    @pytest.mark.parametrize("buyer_max,seller_min", [
        (1000.0, 500.0),
        (250.0, 200.0),
        (10.0, 9.0),
        (1_000_000.0, 900_000.0),
    ])
    @pytest.mark.parametrize("count", [0, 10, 20, 50, 100])
    def test_deal_prices_are_exact(self, buyer_max, seller_min, count):
        result = evaluate_outcome(
            make_range("buyer", 1.0, buyer_max),
            make_range("seller", seller_min, seller_min * 2),
            count,
        )

        assert result.deal_found
        assert result.agreed_price == (buyer_max + seller_min) / 2
        assert result.final_price == result.agreed_price - result.platform_fee
        assert result.platform_fee == result.agreed_price * fee_rate_for(count)
        assert result.final_price >= seller_min

    @pytest.mark.parametrize("count", [0, 10, 20, 50, 100, 1000])
    def test_no_overlap_never_deals(self, count):
        result = evaluate_outcome(
            make_range("buyer", 50.0, 99.99),
            make_range("seller", 100.0, 150.0),
            count,
        )

        assert result.reason == NoDealReason.NO_OVERLAP

    def test_touching_bounds_count_as_overlap(self):
        result = evaluate_outcome(
            make_range("buyer", 400.0, 500.0),
            make_range("seller", 500.0, 600.0),
            0,
        )

        # Overlap holds, so the candidate price is the shared bound;
        # any fee then drops the seller below their floor
        assert result.agreed_price == 500.0
        assert result.reason == NoDealReason.FEE_EXCEEDS_MARGIN

    def test_same_inputs_same_outcome(self):
        buyer = make_range("buyer", 700.0, 1000.0)
        seller = make_range("seller", 900.0, 1200.0)

        first = evaluate_outcome(buyer, seller, 15, now=NOW)
        second = evaluate_outcome(buyer, seller, 15, now=NOW)

        assert first == second

    def test_custom_split_weights_buyer_max(self):
        result = evaluate_outcome(
            make_range("buyer", 700.0, 1000.0),
            make_range("seller", 800.0, 1200.0),
            0,
            split=0.75,
        )

        assert result.agreed_price == pytest.approx(950.0)
        assert result.deal_found

    def test_custom_validity_window(self):
        result = evaluate_outcome(
            make_range("buyer", 700.0, 1000.0),
            make_range("seller", 800.0, 1200.0),
            0,
            now=NOW,
            validity=timedelta(days=3),
        )

        assert result.deal.valid_until == NOW + timedelta(days=3)


@pytest.mark.unit
class TestInvalidInput:
    """Malformed input fails fast with InvalidPriceRangeError."""

    def test_min_above_max(self):
        with pytest.raises(InvalidPriceRangeError, match="exceeds max_price"):
            evaluate_outcome(
                unchecked_range("buyer", 900.0, 800.0),
                make_range("seller", 500.0, 600.0),
                0,
            )

    @pytest.mark.parametrize("bad", [0.0, -5.0, float("nan"), float("inf")])
    def test_non_positive_or_non_finite(self, bad):
        with pytest.raises(InvalidPriceRangeError):
            evaluate_outcome(
                make_range("buyer", 500.0, 600.0),
                unchecked_range("seller", bad, 600.0),
                0,
            )

    def test_roles_swapped(self):
        with pytest.raises(InvalidPriceRangeError, match="expected a buyer range"):
            evaluate_outcome(
                make_range("seller", 500.0, 600.0),
                make_range("buyer", 500.0, 600.0),
                0,
            )

    def test_ranges_from_different_negotiations(self):
        with pytest.raises(InvalidPriceRangeError, match="different negotiations"):
            evaluate_outcome(
                make_range("buyer", 500.0, 600.0, negotiation_id="neg_a"),
                make_range("seller", 500.0, 600.0, negotiation_id="neg_b"),
                0,
            )

    def test_split_out_of_bounds(self):
        with pytest.raises(InvalidPriceRangeError):
            evaluate_outcome(
                make_range("buyer", 500.0, 600.0),
                make_range("seller", 500.0, 600.0),
                0,
                split=1.5,
            )
