"""Input and result value types for delivery calculations.

Inputs are normalized on construction: out-of-range values are clamped and
logged instead of raising, so a calculation always produces a result.
Non-finite numbers (NaN, infinity) are treated the same way.
"""

import math
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from .logging import LogEvent, log_warning
from .money import Number, to_cents, to_decimal, to_dollars


def _is_finite(value: Any) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return True


def _clamp(obj: Any, name: str, minimum: Any) -> None:
    value = getattr(obj, name)
    if not _is_finite(value) or value < minimum:
        log_warning(
            LogEvent.INPUT_VALIDATION,
            f"Clamping {name} to {minimum}",
            field=name,
            value=str(value),
        )
        object.__setattr__(obj, name, minimum)


def _input_cents(dollars: Number, name: str) -> int:
    amount = to_decimal(dollars)
    if not amount.is_finite():
        log_warning(
            LogEvent.INPUT_VALIDATION,
            f"Replacing non-finite {name} with 0",
            field=name,
            value=str(amount),
        )
        return 0
    return to_cents(amount)


@dataclass(frozen=True)
class CalculationInput:
    """A single order's pricing inputs.

    Money fields are integer cents; mileage is a Decimal number of miles.

    Attributes:
        headcount: Number of people the order feeds
        food_cost_cents: Food subtotal in cents
        total_mileage: Miles driven for the delivery
        number_of_drives: Deliveries to the same location on the same day
        number_of_stops: Stops on this drive (1 for a single drop-off)
        requires_bridge: Whether the route crosses a tolled bridge
        bridge_toll_cents: Explicit toll; ``None`` uses the client's default
        tips_cents: Direct tip paid to the driver
        bonus_qualified: Whether the driver earned the performance bonus
        adjustments_cents: Manual driver pay adjustment (may be negative)
        delivery_area: Destination area, for clients that toll whole areas
        ready_set_fee_cents: Explicit Ready Set fee; ``None`` uses the client's fee
        ready_set_addon_fee_cents: Additional Ready Set fees for this order
    """

    headcount: int = 0
    food_cost_cents: int = 0
    total_mileage: Decimal = Decimal("0")
    number_of_drives: int = 1
    number_of_stops: int = 1
    requires_bridge: bool = False
    bridge_toll_cents: Optional[int] = None
    tips_cents: int = 0
    bonus_qualified: bool = False
    adjustments_cents: int = 0
    delivery_area: Optional[str] = None
    ready_set_fee_cents: Optional[int] = None
    ready_set_addon_fee_cents: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "total_mileage", to_decimal(self.total_mileage))
        _clamp(self, "headcount", 0)
        _clamp(self, "food_cost_cents", 0)
        _clamp(self, "total_mileage", Decimal("0"))
        _clamp(self, "number_of_drives", 1)
        _clamp(self, "number_of_stops", 1)
        _clamp(self, "tips_cents", 0)
        if self.bridge_toll_cents is not None:
            _clamp(self, "bridge_toll_cents", 0)
        if self.ready_set_fee_cents is not None:
            _clamp(self, "ready_set_fee_cents", 0)
        _clamp(self, "ready_set_addon_fee_cents", 0)

    @classmethod
    def from_dollars(
        cls,
        headcount: int = 0,
        food_cost: Number = 0,
        total_mileage: Number = 0,
        number_of_drives: int = 1,
        number_of_stops: int = 1,
        requires_bridge: bool = False,
        bridge_toll: Optional[Number] = None,
        tips: Number = 0,
        bonus_qualified: bool = False,
        adjustments: Number = 0,
        delivery_area: Optional[str] = None,
        ready_set_fee: Optional[Number] = None,
        ready_set_addon_fee: Number = 0,
    ) -> "CalculationInput":
        """Build an input from dollar amounts.

        Examples:
            >>> CalculationInput.from_dollars(headcount=20, food_cost="250", total_mileage="8").food_cost_cents
            25000
        """
        return cls(
            headcount=int(headcount),
            food_cost_cents=_input_cents(food_cost, "food_cost"),
            total_mileage=to_decimal(total_mileage),
            number_of_drives=int(number_of_drives),
            number_of_stops=int(number_of_stops),
            requires_bridge=bool(requires_bridge),
            bridge_toll_cents=None if bridge_toll is None else _input_cents(bridge_toll, "bridge_toll"),
            tips_cents=_input_cents(tips, "tips"),
            bonus_qualified=bool(bonus_qualified),
            adjustments_cents=_input_cents(adjustments, "adjustments"),
            delivery_area=delivery_area,
            ready_set_fee_cents=None if ready_set_fee is None else _input_cents(ready_set_fee, "ready_set_fee"),
            ready_set_addon_fee_cents=_input_cents(ready_set_addon_fee, "ready_set_addon_fee"),
        )


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate_delivery_input`."""

    valid: bool
    errors: List[str] = field(default_factory=list)


def validate_delivery_input(
    headcount: Number,
    food_cost: Number,
    total_mileage: Number,
    number_of_drives: Number = 1,
) -> ValidationResult:
    """Check raw order values without clamping them.

    Calculations accept these values anyway (clamping as needed); this is for
    callers that would rather reject an order than price it.

    Returns:
        ValidationResult listing every problem found
    """
    errors: List[str] = []
    checks = (
        ("Headcount", headcount, 0, "cannot be negative"),
        ("Food cost", food_cost, 0, "cannot be negative"),
        ("Total mileage", total_mileage, 0, "cannot be negative"),
        ("Number of drives", number_of_drives, 1, "must be at least 1"),
    )
    for label, raw, minimum, problem in checks:
        value = to_decimal(raw)
        if not value.is_finite():
            errors.append(f"{label} must be a finite number")
        elif value < minimum:
            errors.append(f"{label} {problem}")
    return ValidationResult(valid=not errors, errors=errors)


def _dollars_dict(obj: Any) -> Dict[str, Any]:
    return {key: to_dollars(value) for key, value in asdict(obj).items()}


@dataclass(frozen=True)
class CustomerCharges:
    """Itemized customer charges, in cents.

    ``subtotal`` is the sum of rule-evaluated lines before policy adjustments;
    ``total`` is what the customer pays.
    """

    base_fee: int = 0
    long_distance_charge: int = 0
    bridge_toll: int = 0
    extra_stops_charge: int = 0
    custom_charges: int = 0
    minimum_fee_adjustment: int = 0
    daily_drive_discount: int = 0
    subtotal: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, Decimal]:
        """Return the charges as dollar amounts."""
        return _dollars_dict(self)


@dataclass(frozen=True)
class DriverPayments:
    """Itemized driver payments, in cents.

    ``bonus`` is reported but never part of ``total``; it is paid out
    separately. The Ready Set fees are platform fees reported alongside the
    driver's pay; ``ready_set_total_fee`` adds the bridge toll to them.
    """

    base_pay: int = 0
    mileage_pay: int = 0
    bridge_toll: int = 0
    extra_stops_bonus: int = 0
    tips: int = 0
    bonus: int = 0
    adjustments: int = 0
    custom_payments: int = 0
    ready_set_fee: int = 0
    ready_set_addon_fee: int = 0
    ready_set_total_fee: int = 0
    subtotal: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, Decimal]:
        """Return the payments as dollar amounts."""
        return _dollars_dict(self)


@dataclass(frozen=True)
class CalculationResult:
    """Complete result of pricing one order for one client.

    ``requires_manual_review`` flags orders the client wants checked by a
    person before the quote is used; the amounts are still computed.
    """

    client_id: str
    tier_index: int
    customer_charges: CustomerCharges
    driver_payments: DriverPayments
    profit: int
    requires_manual_review: bool = False

    @property
    def profit_margin(self) -> Decimal:
        """Profit as a percentage of the customer total, rounded to 2 places."""
        if self.customer_charges.total == 0:
            return Decimal("0.00")
        margin = Decimal(self.profit) * 100 / Decimal(self.customer_charges.total)
        return margin.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly representation with dollar amounts."""
        return {
            "client_id": self.client_id,
            "tier_index": self.tier_index,
            "customer_charges": self.customer_charges.to_dict(),
            "driver_payments": self.driver_payments.to_dict(),
            "profit": to_dollars(self.profit),
            "profit_margin": self.profit_margin,
            "requires_manual_review": self.requires_manual_review,
        }
