"""Aggregate calculation views.

These helpers resolve a client through the registry and summarize a full
calculation into the figures most callers display: the customer's delivery
fee breakdown and the driver's pay breakdown, in dollars.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from .config_loader import ClientConfiguration
from .logging import LogEvent, log_debug
from .models import CalculationInput, CalculationResult
from .money import Number, to_decimal, to_dollars
from .registry import PricingRegistry, get_registry
from .rules import RuleName, RuleType


@dataclass(frozen=True)
class DeliveryCostBreakdown:
    """Customer-facing delivery fee breakdown, in dollars.

    ``delivery_cost`` is the tier base fee (raised to the client minimum if
    needed); ``delivery_fee`` is the total the customer pays.
    """

    delivery_cost: Decimal
    total_mileage_pay: Decimal
    daily_drive_discount: Decimal
    extra_stops_charge: Decimal
    bridge_toll: Decimal
    delivery_fee: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DriverPayBreakdown:
    """Driver pay breakdown, in dollars.

    ``driver_bonus_pay`` is reported for payout but is not part of
    ``total_driver_pay``. The Ready Set fees are platform fees shown next to
    the driver's pay; ``ready_set_total_fee`` includes the bridge toll.
    """

    total_mileage_pay: Decimal
    mileage_rate: Decimal
    driver_total_base_pay: Decimal
    driver_bonus_pay: Decimal
    bonus_qualified: bool
    bonus_qualified_percent: int
    direct_tip: Decimal
    bridge_toll: Decimal
    extra_stops_bonus: Decimal
    total_driver_pay: Decimal
    ready_set_fee: Decimal
    ready_set_addon_fee: Decimal
    ready_set_total_fee: Decimal
    requires_manual_review: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _resolve(client_id: Optional[str], registry: Optional[PricingRegistry]) -> ClientConfiguration:
    return (registry or get_registry()).resolve(client_id)


def calculate(
    calculation_input: CalculationInput,
    client_id: Optional[str] = None,
    registry: Optional[PricingRegistry] = None,
) -> CalculationResult:
    """Price an order for a client and return the itemized result.

    Args:
        calculation_input: The order to price
        client_id: Client identifier; unknown or omitted ids use the default client
        registry: Registry to resolve the client from (defaults to the singleton)

    Returns:
        CalculationResult with itemized customer charges and driver payments
    """
    configuration = _resolve(client_id, registry)
    return configuration.engine.calculate(calculation_input, configuration.policy)


def calculate_delivery_cost(
    calculation_input: CalculationInput,
    client_id: Optional[str] = None,
    registry: Optional[PricingRegistry] = None,
) -> DeliveryCostBreakdown:
    """Summarize the customer side of a calculation.

    Examples:
        >>> order = CalculationInput.from_dollars(headcount=35, food_cost=450, total_mileage=12)
        >>> calculate_delivery_cost(order, "cater-valley").delivery_fee
        Decimal('96.00')
    """
    configuration = _resolve(client_id, registry)
    charges = configuration.engine.calculate_customer_charge(calculation_input, configuration.policy)
    log_debug(
        LogEvent.CALCULATION,
        "Calculated delivery cost",
        client_id=configuration.client_id,
        total=charges.total,
    )
    return DeliveryCostBreakdown(
        delivery_cost=to_dollars(charges.base_fee + charges.minimum_fee_adjustment),
        total_mileage_pay=to_dollars(charges.long_distance_charge),
        daily_drive_discount=to_dollars(charges.daily_drive_discount),
        extra_stops_charge=to_dollars(charges.extra_stops_charge),
        bridge_toll=to_dollars(charges.bridge_toll),
        delivery_fee=to_dollars(charges.total),
    )


def calculate_driver_pay(
    calculation_input: CalculationInput,
    client_id: Optional[str] = None,
    registry: Optional[PricingRegistry] = None,
) -> DriverPayBreakdown:
    """Summarize the driver side of a calculation."""
    configuration = _resolve(client_id, registry)
    payments = configuration.engine.calculate_driver_payment(calculation_input, configuration.policy)
    return DriverPayBreakdown(
        total_mileage_pay=to_dollars(payments.mileage_pay),
        mileage_rate=to_dollars(configuration.policy.driver_mileage_rate_cents_per_mile),
        driver_total_base_pay=to_dollars(payments.base_pay),
        driver_bonus_pay=to_dollars(payments.bonus),
        bonus_qualified=payments.bonus > 0,
        bonus_qualified_percent=100 if payments.bonus > 0 else 0,
        direct_tip=to_dollars(payments.tips),
        bridge_toll=to_dollars(payments.bridge_toll),
        extra_stops_bonus=to_dollars(payments.extra_stops_bonus),
        total_driver_pay=to_dollars(payments.total),
        ready_set_fee=to_dollars(payments.ready_set_fee),
        ready_set_addon_fee=to_dollars(payments.ready_set_addon_fee),
        ready_set_total_fee=to_dollars(payments.ready_set_total_fee),
        requires_manual_review=configuration.policy.requires_manual_review(calculation_input),
    )


def calculate_vendor_pay(
    calculation_input: CalculationInput,
    client_id: Optional[str] = None,
    registry: Optional[PricingRegistry] = None,
) -> Decimal:
    """What the vendor is billed for the delivery; equal to the delivery fee."""
    return calculate_delivery_cost(calculation_input, client_id, registry).delivery_fee


def calculate_mileage_pay(
    total_mileage: Number,
    client_id: Optional[str] = None,
    registry: Optional[PricingRegistry] = None,
) -> Decimal:
    """Customer mileage surcharge alone for a given distance.

    Sums the client's long-distance rules for an otherwise empty order.
    """
    configuration = _resolve(client_id, registry)
    calculation_input = CalculationInput(total_mileage=to_decimal(total_mileage))
    selection = configuration.engine.classify(calculation_input)
    evaluator = configuration.engine.evaluator
    rules = [
        rule
        for rule in configuration.rule_set.for_type(RuleType.CUSTOMER_CHARGE)
        if rule.rule_name is RuleName.LONG_DISTANCE
    ]
    lines = evaluator.evaluate(RuleType.CUSTOMER_CHARGE, rules, calculation_input, selection)
    return to_dollars(lines["long_distance_charge"])
