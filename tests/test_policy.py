"""Tests for client pricing policies and post-evaluation adjustments."""

from decimal import Decimal
from typing import Any, Dict

import pytest

from delivery_pricing.models import CalculationInput
from delivery_pricing.policy import ClientPricingPolicy, TierThreshold, apply_policy
from delivery_pricing.rules import ItemizedLines, RuleType


def _customer_lines(**lines: int) -> ItemizedLines:
    base = {
        "base_fee": 0,
        "long_distance_charge": 0,
        "bridge_toll": 0,
        "extra_stops_charge": 0,
        "custom_charges": 0,
    }
    base.update(lines)
    return base


def _driver_lines(**lines: int) -> ItemizedLines:
    base = {
        "base_pay": 0,
        "mileage_pay": 0,
        "bridge_toll": 0,
        "extra_stops_bonus": 0,
        "custom_payments": 0,
    }
    base.update(lines)
    return base


def _policy(**overrides: Any) -> ClientPricingPolicy:
    values: Dict[str, Any] = {"client_id": "test-client"}
    values.update(overrides)
    return ClientPricingPolicy(**values)


class TestClientPricingPolicy:
    """Test policy construction."""

    def test_defaults(self) -> None:
        """Test the documented defaults."""
        policy = _policy()
        assert policy.mileage_threshold_miles == Decimal("10")
        assert policy.customer_mileage_rate_cents_per_mile == 300
        assert policy.driver_mileage_rate_cents_per_mile == 70
        assert policy.default_bridge_toll_cents == 800
        assert policy.include_bridge_toll_in_customer_fee is True
        assert policy.display_name == "test-client"

    def test_display_name_prefers_client_name(self) -> None:
        """Test that the configured name is shown when present."""
        assert _policy(client_name="Test Client").display_name == "Test Client"

    def test_empty_client_id(self) -> None:
        """Test that a policy needs an identifier."""
        with pytest.raises(ValueError):
            ClientPricingPolicy(client_id="")

    def test_negative_amount(self) -> None:
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError, match="minimum_customer_fee_cents"):
            _policy(minimum_customer_fee_cents=-1)

    def test_percentage_needs_threshold(self) -> None:
        """Test that a percentage rate without a tier threshold is rejected."""
        with pytest.raises(ValueError):
            _policy(percentage_rate=Decimal("0.10"))

    def test_default_rule_set(self) -> None:
        """Test the rules derived from the policy's rates."""
        rules = _policy().default_rule_set()
        assert [rule.id for rule in rules.for_type(RuleType.CUSTOMER_CHARGE)] == [
            "test-client-base-fee",
            "test-client-long-distance",
        ]
        assert [rule.id for rule in rules.for_type(RuleType.DRIVER_PAYMENT)] == [
            "test-client-base-pay",
            "test-client-mileage",
        ]

    def test_default_rule_set_optional_rules(self) -> None:
        """Test that percentage and extra-stop rules appear only when configured."""
        policy = _policy(
            percentage_tier_threshold=TierThreshold(headcount=100, food_cost_cents=120000),
            percentage_rate=Decimal("0.10"),
            customer_extra_stop_cents=500,
            driver_extra_stop_bonus_cents=250,
        )
        rules = policy.default_rule_set()
        assert [rule.id for rule in rules.for_type(RuleType.CUSTOMER_CHARGE)] == [
            "test-client-base-fee",
            "test-client-percentage-fee",
            "test-client-long-distance",
            "test-client-extra-stops",
        ]
        assert rules.get("test-client-extra-stops-bonus") is not None


class TestMinimumFee:
    """Test the minimum customer fee floor."""

    def test_floor_raises_total(self) -> None:
        """Test that delivery charges below the floor are topped up."""
        customer, _ = apply_policy(
            _policy(minimum_customer_fee_cents=5000),
            CalculationInput(),
            _customer_lines(base_fee=3000),
            _driver_lines(),
        )
        assert customer.minimum_fee_adjustment == 2000
        assert customer.total == 5000
        assert customer.subtotal == 3000

    def test_floor_not_needed(self) -> None:
        """Test that charges above the floor are untouched."""
        customer, _ = apply_policy(
            _policy(minimum_customer_fee_cents=4250),
            CalculationInput(),
            _customer_lines(base_fee=8500, long_distance_charge=600),
            _driver_lines(),
        )
        assert customer.minimum_fee_adjustment == 0
        assert customer.total == 9100

    def test_floor_excludes_bridge_toll(self) -> None:
        """Test that the toll is added after the floor is applied."""
        customer, _ = apply_policy(
            _policy(minimum_customer_fee_cents=5000),
            CalculationInput(requires_bridge=True),
            _customer_lines(base_fee=3000, bridge_toll=800),
            _driver_lines(),
        )
        assert customer.minimum_fee_adjustment == 2000
        assert customer.bridge_toll == 800
        assert customer.total == 5800


class TestBridgeToll:
    """Test bridge toll resolution."""

    def test_default_toll_for_both_sides(self) -> None:
        """Test that the policy default applies when no toll is given."""
        customer, driver = apply_policy(
            _policy(),
            CalculationInput(requires_bridge=True),
            _customer_lines(base_fee=6000),
            _driver_lines(base_pay=2300),
        )
        assert customer.bridge_toll == 800
        assert customer.total == 6800
        assert driver.bridge_toll == 800
        assert driver.total == 3100

    def test_toll_not_billed_to_customer(self) -> None:
        """Test that the driver is reimbursed even when the customer is not billed."""
        customer, driver = apply_policy(
            _policy(include_bridge_toll_in_customer_fee=False),
            CalculationInput(requires_bridge=True),
            _customer_lines(base_fee=6000),
            _driver_lines(base_pay=2300),
        )
        assert customer.bridge_toll == 0
        assert customer.total == 6000
        assert driver.bridge_toll == 800

    def test_explicit_toll_wins(self) -> None:
        """Test that a toll on the order overrides rule and policy amounts."""
        customer, driver = apply_policy(
            _policy(),
            CalculationInput(requires_bridge=True, bridge_toll_cents=1050),
            _customer_lines(base_fee=6000, bridge_toll=800),
            _driver_lines(bridge_toll=800),
        )
        assert customer.bridge_toll == 1050
        assert driver.bridge_toll == 1050

    def test_no_bridge(self) -> None:
        """Test that no toll applies without a bridge crossing."""
        customer, driver = apply_policy(
            _policy(), CalculationInput(bridge_toll_cents=1050), _customer_lines(base_fee=6000), _driver_lines()
        )
        assert customer.bridge_toll == 0
        assert driver.bridge_toll == 0


class TestTipsAndBonus:
    """Test direct tip and bonus handling."""

    def test_tip_suppresses_base_pay_and_bonus(self) -> None:
        """Test that a direct tip replaces base pay and bonus when configured."""
        _, driver = apply_policy(
            _policy(bonus_suppressed_by_direct_tip=True),
            CalculationInput(tips_cents=1500, bonus_qualified=True),
            _customer_lines(base_fee=4250),
            _driver_lines(base_pay=2300, mileage_pay=560),
        )
        assert driver.base_pay == 0
        assert driver.bonus == 0
        assert driver.tips == 1500
        assert driver.total == 2060

    def test_tip_with_bonus_allowed(self) -> None:
        """Test that without suppression tips and bonus coexist."""
        _, driver = apply_policy(
            _policy(),
            CalculationInput(tips_cents=1500, bonus_qualified=True),
            _customer_lines(base_fee=4250),
            _driver_lines(base_pay=2300, mileage_pay=560),
        )
        assert driver.base_pay == 2300
        assert driver.bonus == 1000
        assert driver.total == 4360

    def test_bonus_not_in_total(self) -> None:
        """Test that the bonus is reported but not paid through the total."""
        _, driver = apply_policy(
            _policy(bonus_flat_cents=1000),
            CalculationInput(bonus_qualified=True),
            _customer_lines(),
            _driver_lines(base_pay=2300),
        )
        assert driver.bonus == 1000
        assert driver.total == 2300

    def test_adjustments_are_added(self) -> None:
        """Test that manual adjustments, including negative ones, reach the total."""
        _, driver = apply_policy(
            _policy(),
            CalculationInput(adjustments_cents=-250),
            _customer_lines(),
            _driver_lines(base_pay=2300, extra_stops_bonus=500, custom_payments=100),
        )
        assert driver.adjustments == -250
        assert driver.total == 2650


def test_driver_mileage_minimum() -> None:
    """Test that driver mileage pay is raised to the configured minimum."""
    policy = _policy(driver_minimum_mileage_pay_cents=700)
    _, short = apply_policy(policy, CalculationInput(), _customer_lines(), _driver_lines(mileage_pay=350))
    _, long = apply_policy(policy, CalculationInput(), _customer_lines(), _driver_lines(mileage_pay=1400))
    assert short.mileage_pay == 700
    assert long.mileage_pay == 1400


class TestDailyDriveDiscount:
    """Test the multi-drive discount."""

    def test_discount_per_extra_drive(self) -> None:
        """Test that each drive after the first earns the discount."""
        customer, _ = apply_policy(
            _policy(daily_drive_discount_cents_per_extra_drive=500),
            CalculationInput(number_of_drives=3),
            _customer_lines(base_fee=3000),
            _driver_lines(),
        )
        assert customer.daily_drive_discount == 1000
        assert customer.total == 2000

    def test_single_drive_has_no_discount(self) -> None:
        """Test that one drive is never discounted."""
        customer, _ = apply_policy(
            _policy(daily_drive_discount_cents_per_extra_drive=500),
            CalculationInput(),
            _customer_lines(base_fee=3000),
            _driver_lines(),
        )
        assert customer.daily_drive_discount == 0
        assert customer.total == 3000

    def test_discount_never_goes_below_floor(self) -> None:
        """Test that the discount is capped at the minimum fee."""
        customer, _ = apply_policy(
            _policy(minimum_customer_fee_cents=2500, daily_drive_discount_cents_per_extra_drive=500),
            CalculationInput(number_of_drives=3),
            _customer_lines(base_fee=3000),
            _driver_lines(),
        )
        assert customer.daily_drive_discount == 500
        assert customer.total == 2500

    def test_discount_is_capped_before_the_toll(self) -> None:
        """Test that a large discount stops at the delivery charges and the toll is still billed."""
        customer, driver = apply_policy(
            _policy(daily_drive_discount_cents_per_extra_drive=500),
            CalculationInput(number_of_drives=20, requires_bridge=True),
            _customer_lines(base_fee=3000),
            _driver_lines(base_pay=2300),
        )
        assert customer.daily_drive_discount == 3000
        assert customer.bridge_toll == 800
        assert customer.total == 800
        assert driver.bridge_toll == 800


class TestReadySetFee:
    """Test the Ready Set platform fee lines."""

    def test_configured_fee(self) -> None:
        """Test the policy fee plus add-ons and the bridge toll."""
        _, driver = apply_policy(
            _policy(ready_set_fee_cents=7000),
            CalculationInput(requires_bridge=True, ready_set_addon_fee_cents=1500),
            _customer_lines(base_fee=3000),
            _driver_lines(base_pay=2300),
        )
        assert driver.ready_set_fee == 7000
        assert driver.ready_set_addon_fee == 1500
        assert driver.ready_set_total_fee == 9300
        assert driver.total == 3100

    def test_explicit_fee_wins(self) -> None:
        """Test that a fee on the order overrides the policy."""
        _, driver = apply_policy(
            _policy(ready_set_fee_cents=7000),
            CalculationInput(ready_set_fee_cents=4500),
            _customer_lines(base_fee=3000),
            _driver_lines(),
        )
        assert driver.ready_set_fee == 4500
        assert driver.ready_set_total_fee == 4500

    def test_fee_matches_delivery_cost(self) -> None:
        """Test that the matched fee includes the minimum fee top-up but not mileage."""
        _, driver = apply_policy(
            _policy(ready_set_fee_matches_delivery_fee=True, minimum_customer_fee_cents=4250),
            CalculationInput(),
            _customer_lines(base_fee=3000, long_distance_charge=600),
            _driver_lines(),
        )
        assert driver.ready_set_fee == 3650


class TestPolicyChecks:
    """Test per-order policy checks."""

    def test_bridge_toll_areas(self) -> None:
        """Test case-insensitive area matching."""
        policy = _policy(bridge_toll_areas=["San Francisco", "Oakland"])
        assert policy.bridge_toll_areas == ("San Francisco", "Oakland")
        assert policy.applies_bridge_toll_for_area("san francisco") is True
        assert policy.applies_bridge_toll_for_area("Berkeley") is False
        assert policy.applies_bridge_toll_for_area(None) is False
        assert _policy().applies_bridge_toll_for_area("Oakland") is False

    def test_manual_review_headcount(self) -> None:
        """Test the manual review threshold is inclusive."""
        policy = _policy(manual_review_headcount=100)
        assert policy.requires_manual_review(CalculationInput(headcount=100)) is True
        assert policy.requires_manual_review(CalculationInput(headcount=99)) is False
        assert _policy().requires_manual_review(CalculationInput(headcount=1000)) is False

    def test_negative_ready_set_fee_rejected(self) -> None:
        """Test that policy amounts are validated."""
        with pytest.raises(ValueError):
            _policy(ready_set_fee_cents=-1)
