"""Per-client pricing policy and post-evaluation adjustments.

Rules produce raw itemized lines. A client's policy then adjusts them in a
fixed order:

1. minimum customer fee floor
2. bridge toll (driver always, customer only when configured)
3. direct tip / bonus exclusivity
4. driver mileage minimum
5. multi-drive discount, never below the fee floor
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from .logging import LogEvent, log_debug
from .models import CalculationInput, CustomerCharges, DriverPayments
from .money import to_decimal
from .rules import (
    ItemizedLines,
    Measure,
    Percentage,
    PricingRule,
    RuleName,
    RuleSet,
    RuleType,
    ThresholdAbove,
    TierBase,
)


@dataclass(frozen=True)
class TierThreshold:
    """Lower bounds at which the percentage tier starts."""

    headcount: int
    food_cost_cents: int


@dataclass(frozen=True)
class ClientPricingPolicy:
    """Typed pricing policy for one client or vendor.

    Rates are cents per mile; all other amounts are cents.

    ``ready_set_fee_cents`` is the platform fee reported next to driver pay.
    With ``ready_set_fee_matches_delivery_fee`` the fee instead follows the
    customer's delivery cost for the order's tier. Deliveries to one of
    ``bridge_toll_areas`` are treated as crossing a bridge. Orders at or
    above ``manual_review_headcount`` are still priced but flagged.
    """

    client_id: str
    client_name: str = ""
    vendor_name: str = ""
    description: str = ""
    is_active: bool = True
    minimum_customer_fee_cents: int = 0
    mileage_threshold_miles: Decimal = Decimal("10")
    customer_mileage_rate_cents_per_mile: int = 300
    driver_mileage_rate_cents_per_mile: int = 70
    driver_minimum_mileage_pay_cents: Optional[int] = None
    include_bridge_toll_in_customer_fee: bool = True
    default_bridge_toll_cents: int = 800
    percentage_tier_threshold: Optional[TierThreshold] = None
    percentage_rate: Optional[Decimal] = None
    daily_drive_discount_cents_per_extra_drive: int = 0
    bonus_flat_cents: int = 1000
    bonus_suppressed_by_direct_tip: bool = False
    customer_extra_stop_cents: int = 0
    driver_extra_stop_bonus_cents: int = 0
    ready_set_fee_cents: int = 0
    ready_set_fee_matches_delivery_fee: bool = False
    bridge_toll_areas: Tuple[str, ...] = ()
    manual_review_headcount: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "bridge_toll_areas", tuple(self.bridge_toll_areas or ()))
        object.__setattr__(self, "mileage_threshold_miles", to_decimal(self.mileage_threshold_miles))
        if self.percentage_rate is not None:
            object.__setattr__(self, "percentage_rate", to_decimal(self.percentage_rate))
        if not self.client_id:
            raise ValueError("client_id must not be empty")
        for name in (
            "minimum_customer_fee_cents",
            "customer_mileage_rate_cents_per_mile",
            "driver_mileage_rate_cents_per_mile",
            "default_bridge_toll_cents",
            "daily_drive_discount_cents_per_extra_drive",
            "bonus_flat_cents",
            "customer_extra_stop_cents",
            "driver_extra_stop_bonus_cents",
            "ready_set_fee_cents",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.mileage_threshold_miles < 0:
            raise ValueError("mileage_threshold_miles must be non-negative")
        if self.driver_minimum_mileage_pay_cents is not None and self.driver_minimum_mileage_pay_cents < 0:
            raise ValueError("driver_minimum_mileage_pay_cents must be non-negative")
        if self.manual_review_headcount is not None and self.manual_review_headcount < 0:
            raise ValueError("manual_review_headcount must be non-negative")
        if (self.percentage_rate is None) != (self.percentage_tier_threshold is None):
            raise ValueError("percentage_rate and percentage_tier_threshold must be configured together")

    @property
    def display_name(self) -> str:
        return self.client_name or self.client_id

    def applies_bridge_toll_for_area(self, area: Optional[str]) -> bool:
        """Whether deliveries to ``area`` always cross a tolled bridge.

        Area names compare case-insensitively.
        """
        if not area:
            return False
        wanted = area.strip().casefold()
        return any(wanted == configured.casefold() for configured in self.bridge_toll_areas)

    def requires_manual_review(self, calculation_input: CalculationInput) -> bool:
        """Whether an order is too large to be priced without a person checking it."""
        return self.manual_review_headcount is not None and calculation_input.headcount >= self.manual_review_headcount

    def default_rule_set(self) -> RuleSet:
        """Derive the standard rule set implied by this policy's rates."""
        rules = [
            PricingRule(
                id=f"{self.client_id}-base-fee",
                rule_type=RuleType.CUSTOMER_CHARGE,
                rule_name=RuleName.BASE_FEE,
                formula=TierBase(radius_miles=self.mileage_threshold_miles),
                priority=100,
                description="Tier base fee, reduced within the mileage radius",
            ),
            PricingRule(
                id=f"{self.client_id}-long-distance",
                rule_type=RuleType.CUSTOMER_CHARGE,
                rule_name=RuleName.LONG_DISTANCE,
                formula=ThresholdAbove(
                    per_unit_amount_cents=self.customer_mileage_rate_cents_per_mile,
                    threshold_value=self.mileage_threshold_miles,
                ),
                priority=90,
                description="Per-mile charge beyond the mileage threshold",
            ),
            PricingRule(
                id=f"{self.client_id}-base-pay",
                rule_type=RuleType.DRIVER_PAYMENT,
                rule_name=RuleName.BASE_PAY,
                formula=TierBase(),
                priority=100,
                description="Tier driver base pay",
            ),
            PricingRule(
                id=f"{self.client_id}-mileage",
                rule_type=RuleType.DRIVER_PAYMENT,
                rule_name=RuleName.MILEAGE,
                formula=ThresholdAbove(per_unit_amount_cents=self.driver_mileage_rate_cents_per_mile),
                priority=90,
                description="Driver per-mile pay",
            ),
        ]
        if self.percentage_rate is not None:
            rules.append(
                PricingRule(
                    id=f"{self.client_id}-percentage-fee",
                    rule_type=RuleType.CUSTOMER_CHARGE,
                    rule_name=RuleName.BASE_FEE,
                    formula=Percentage(rate=self.percentage_rate),
                    priority=95,
                    description="Share of food cost on the percentage tier",
                )
            )
        if self.customer_extra_stop_cents:
            rules.append(
                PricingRule(
                    id=f"{self.client_id}-extra-stops",
                    rule_type=RuleType.CUSTOMER_CHARGE,
                    rule_name=RuleName.EXTRA_STOPS,
                    formula=ThresholdAbove(
                        per_unit_amount_cents=self.customer_extra_stop_cents,
                        threshold_value=Decimal("1"),
                        measure=Measure.STOPS,
                    ),
                    priority=70,
                    description="Charge per stop after the first",
                )
            )
        if self.driver_extra_stop_bonus_cents:
            rules.append(
                PricingRule(
                    id=f"{self.client_id}-extra-stops-bonus",
                    rule_type=RuleType.DRIVER_PAYMENT,
                    rule_name=RuleName.EXTRA_STOPS,
                    formula=ThresholdAbove(
                        per_unit_amount_cents=self.driver_extra_stop_bonus_cents,
                        threshold_value=Decimal("1"),
                        measure=Measure.STOPS,
                    ),
                    priority=70,
                    description="Driver bonus per stop after the first",
                )
            )
        return RuleSet(tuple(rules))


def _effective_bridge_toll(
    policy: ClientPricingPolicy,
    calculation_input: CalculationInput,
    customer_lines: ItemizedLines,
    driver_lines: ItemizedLines,
) -> int:
    if not calculation_input.requires_bridge:
        return 0
    if calculation_input.bridge_toll_cents is not None:
        return calculation_input.bridge_toll_cents
    configured = max(customer_lines.get("bridge_toll", 0), driver_lines.get("bridge_toll", 0))
    if configured > 0:
        return configured
    return policy.default_bridge_toll_cents


def apply_policy(
    policy: ClientPricingPolicy,
    calculation_input: CalculationInput,
    customer_lines: ItemizedLines,
    driver_lines: ItemizedLines,
) -> Tuple[CustomerCharges, DriverPayments]:
    """Turn raw rule lines into final customer charges and driver payments.

    The minimum fee floor applies to the delivery charges before the bridge
    toll is added, and the multi-drive discount is capped against those same
    delivery charges, so the customer toll always passes through in full.
    The bonus and the Ready Set fees are reported but never added to the
    driver total. Never raises.

    Args:
        policy: The client's policy
        calculation_input: The order being priced
        customer_lines: Raw customer lines from rule evaluation
        driver_lines: Raw driver lines from rule evaluation

    Returns:
        Tuple of (CustomerCharges, DriverPayments)
    """
    customer_subtotal = sum(customer_lines.values())
    driver_subtotal = sum(driver_lines.values())
    delivery_charges = customer_subtotal - customer_lines.get("bridge_toll", 0)

    # 1. minimum fee floor
    minimum_fee_adjustment = max(0, policy.minimum_customer_fee_cents - delivery_charges)
    if minimum_fee_adjustment:
        log_debug(
            LogEvent.POLICY_ADJUSTMENT,
            "Raised customer charges to the minimum fee",
            client_id=policy.client_id,
            adjustment=minimum_fee_adjustment,
        )

    # 2. bridge toll
    toll = _effective_bridge_toll(policy, calculation_input, customer_lines, driver_lines)
    customer_bridge_toll = toll if policy.include_bridge_toll_in_customer_fee else 0
    driver_bridge_toll = toll

    # 3. tip / bonus exclusivity
    tips = calculation_input.tips_cents
    base_pay = driver_lines.get("base_pay", 0)
    if tips > 0 and policy.bonus_suppressed_by_direct_tip:
        log_debug(
            LogEvent.POLICY_ADJUSTMENT,
            "Direct tip present; base pay and bonus suppressed",
            client_id=policy.client_id,
            tips=tips,
        )
        base_pay = 0
        bonus = 0
    else:
        bonus = policy.bonus_flat_cents if calculation_input.bonus_qualified else 0

    # 4. driver mileage minimum
    mileage_pay = driver_lines.get("mileage_pay", 0)
    if policy.driver_minimum_mileage_pay_cents is not None:
        mileage_pay = max(mileage_pay, policy.driver_minimum_mileage_pay_cents)

    # 5. multi-drive discount
    delivery_total = delivery_charges + minimum_fee_adjustment
    extra_drives = max(0, calculation_input.number_of_drives - 1)
    discount = policy.daily_drive_discount_cents_per_extra_drive * extra_drives
    discount = min(discount, max(0, delivery_total - policy.minimum_customer_fee_cents))

    customer = CustomerCharges(
        base_fee=customer_lines.get("base_fee", 0),
        long_distance_charge=customer_lines.get("long_distance_charge", 0),
        bridge_toll=customer_bridge_toll,
        extra_stops_charge=customer_lines.get("extra_stops_charge", 0),
        custom_charges=customer_lines.get("custom_charges", 0),
        minimum_fee_adjustment=minimum_fee_adjustment,
        daily_drive_discount=discount,
        subtotal=customer_subtotal,
        total=delivery_total - discount + customer_bridge_toll,
    )

    if calculation_input.ready_set_fee_cents is not None:
        ready_set_fee = calculation_input.ready_set_fee_cents
    elif policy.ready_set_fee_matches_delivery_fee:
        ready_set_fee = customer.base_fee + minimum_fee_adjustment
    else:
        ready_set_fee = policy.ready_set_fee_cents
    ready_set_addon_fee = calculation_input.ready_set_addon_fee_cents

    extra_stops_bonus = driver_lines.get("extra_stops_bonus", 0)
    custom_payments = driver_lines.get("custom_payments", 0)
    adjustments = calculation_input.adjustments_cents
    driver = DriverPayments(
        base_pay=base_pay,
        mileage_pay=mileage_pay,
        bridge_toll=driver_bridge_toll,
        extra_stops_bonus=extra_stops_bonus,
        tips=tips,
        bonus=bonus,
        adjustments=adjustments,
        custom_payments=custom_payments,
        ready_set_fee=ready_set_fee,
        ready_set_addon_fee=ready_set_addon_fee,
        ready_set_total_fee=ready_set_fee + ready_set_addon_fee + driver_bridge_toll,
        subtotal=driver_subtotal,
        total=base_pay + mileage_pay + driver_bridge_toll + extra_stops_bonus + custom_payments + tips + adjustments,
    )
    return customer, driver
