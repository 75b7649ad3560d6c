"""Pricing rules and rule evaluation.

Each :class:`PricingRule` carries one formula variant. The evaluator walks a
client's rules in descending priority, computes each rule's contribution on
its own, and sums the contributions into named lines. Several rules that
share a name (say, two long-distance rules) add up to a single line.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import InvalidRuleError
from .logging import LogEvent, log_debug
from .models import CalculationInput
from .money import round_cents, to_decimal
from .tiers import TierSelection


class RuleType(str, Enum):
    """Which side of the ledger a rule contributes to."""

    CUSTOMER_CHARGE = "customer_charge"
    DRIVER_PAYMENT = "driver_payment"


class RuleName(str, Enum):
    """The line a rule contributes to."""

    BASE_FEE = "base_fee"
    BASE_PAY = "base_pay"
    LONG_DISTANCE = "long_distance"
    MILEAGE = "mileage"
    BRIDGE_TOLL = "bridge_toll"
    EXTRA_STOPS = "extra_stops"
    CUSTOM = "custom"


class ThresholdType(str, Enum):
    """How a rule's threshold is applied."""

    ABOVE = "above"
    BELOW = "below"
    NONE = "none"


class Measure(str, Enum):
    """Order quantity a threshold formula is measured against.

    ``FOOD_COST`` is measured in dollars, the same unit thresholds use in
    configuration files, so a ``per_unit`` amount is charged per dollar.
    """

    MILEAGE = "mileage"
    STOPS = "stops"
    DRIVES = "drives"
    HEADCOUNT = "headcount"
    FOOD_COST = "food_cost"


# (rule type, rule name) -> result line
LINE_NAMES: Dict[Tuple[RuleType, RuleName], str] = {
    (RuleType.CUSTOMER_CHARGE, RuleName.BASE_FEE): "base_fee",
    (RuleType.CUSTOMER_CHARGE, RuleName.LONG_DISTANCE): "long_distance_charge",
    (RuleType.CUSTOMER_CHARGE, RuleName.BRIDGE_TOLL): "bridge_toll",
    (RuleType.CUSTOMER_CHARGE, RuleName.EXTRA_STOPS): "extra_stops_charge",
    (RuleType.CUSTOMER_CHARGE, RuleName.CUSTOM): "custom_charges",
    (RuleType.DRIVER_PAYMENT, RuleName.BASE_PAY): "base_pay",
    (RuleType.DRIVER_PAYMENT, RuleName.MILEAGE): "mileage_pay",
    (RuleType.DRIVER_PAYMENT, RuleName.BRIDGE_TOLL): "bridge_toll",
    (RuleType.DRIVER_PAYMENT, RuleName.EXTRA_STOPS): "extra_stops_bonus",
    (RuleType.DRIVER_PAYMENT, RuleName.CUSTOM): "custom_payments",
}

ItemizedLines = Dict[str, int]


@dataclass(frozen=True)
class FlatAmount:
    """A fixed amount, in cents."""

    base_amount_cents: int

    def __post_init__(self) -> None:
        if self.base_amount_cents < 0:
            raise ValueError("base_amount_cents must be non-negative")


@dataclass(frozen=True)
class ThresholdAbove:
    """A per-unit amount for every unit of ``measure`` beyond ``threshold_value``.

    With ``threshold_value`` of zero this is a plain per-unit rate. Exactly at
    the threshold the contribution is zero.
    """

    per_unit_amount_cents: int
    threshold_value: Decimal = Decimal("0")
    measure: Measure = Measure.MILEAGE

    def __post_init__(self) -> None:
        object.__setattr__(self, "threshold_value", to_decimal(self.threshold_value))
        object.__setattr__(self, "measure", Measure(self.measure))
        if self.per_unit_amount_cents < 0:
            raise ValueError("per_unit_amount_cents must be non-negative")
        if self.threshold_value < 0:
            raise ValueError("threshold_value must be non-negative")


@dataclass(frozen=True)
class ThresholdBelow:
    """A fixed amount applied only while ``measure`` is strictly below the threshold."""

    base_amount_cents: int
    threshold_value: Decimal
    measure: Measure = Measure.MILEAGE

    def __post_init__(self) -> None:
        object.__setattr__(self, "threshold_value", to_decimal(self.threshold_value))
        object.__setattr__(self, "measure", Measure(self.measure))
        if self.base_amount_cents < 0:
            raise ValueError("base_amount_cents must be non-negative")


@dataclass(frozen=True)
class Percentage:
    """A share of the food cost, applied only on the top (percentage) tier."""

    rate: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", to_decimal(self.rate))
        if self.rate < 0:
            raise ValueError("rate must be non-negative")


@dataclass(frozen=True)
class TierBase:
    """The resolved tier's own amount.

    Customer rules read the tier's base fee. When ``radius_miles`` is set and
    the order's mileage is at or under it, the within-radius fee is used.
    Driver rules read the tier's driver base pay.
    """

    radius_miles: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if self.radius_miles is not None:
            object.__setattr__(self, "radius_miles", to_decimal(self.radius_miles))


Formula = Union[FlatAmount, ThresholdAbove, ThresholdBelow, Percentage, TierBase]


@dataclass(frozen=True)
class PricingRule:
    """A single configured pricing rule.

    Raises:
        InvalidRuleError: If the rule name is not valid for the rule type
    """

    id: str
    rule_type: RuleType
    rule_name: RuleName
    formula: Formula
    priority: int = 0
    description: str = ""

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "rule_type", RuleType(self.rule_type))
            object.__setattr__(self, "rule_name", RuleName(self.rule_name))
        except ValueError as e:
            raise InvalidRuleError(str(e), rule_id=self.id) from e
        if (self.rule_type, self.rule_name) not in LINE_NAMES:
            raise InvalidRuleError(
                f"Rule '{self.id}': {self.rule_name.value} is not valid for {self.rule_type.value} rules",
                rule_id=self.id,
            )

    @property
    def line_name(self) -> str:
        """Name of the result line this rule contributes to."""
        return LINE_NAMES[(self.rule_type, self.rule_name)]

    @property
    def base_amount_cents(self) -> Optional[int]:
        if isinstance(self.formula, (FlatAmount, ThresholdBelow)):
            return self.formula.base_amount_cents
        return None

    @property
    def per_unit_amount_cents(self) -> Optional[int]:
        if isinstance(self.formula, ThresholdAbove):
            return self.formula.per_unit_amount_cents
        return None

    @property
    def threshold_value(self) -> Optional[Decimal]:
        if isinstance(self.formula, (ThresholdAbove, ThresholdBelow)):
            return self.formula.threshold_value
        return None

    @property
    def threshold_type(self) -> ThresholdType:
        if isinstance(self.formula, ThresholdBelow):
            return ThresholdType.BELOW
        if isinstance(self.formula, ThresholdAbove) and self.formula.threshold_value > 0:
            return ThresholdType.ABOVE
        return ThresholdType.NONE


def _by_priority(rules: Iterable[PricingRule]) -> Tuple[PricingRule, ...]:
    # sorted() is stable, so equal priorities keep their configured order
    return tuple(sorted(rules, key=lambda rule: rule.priority, reverse=True))


@dataclass(frozen=True)
class RuleSet:
    """An immutable collection of rules, kept in descending priority order.

    Raises:
        InvalidRuleError: If two rules share an identifier
    """

    rules: Tuple[PricingRule, ...] = ()

    def __post_init__(self) -> None:
        seen = set()
        for rule in self.rules:
            if rule.id in seen:
                raise InvalidRuleError(f"Duplicate rule id '{rule.id}'", rule_id=rule.id)
            seen.add(rule.id)
        object.__setattr__(self, "rules", _by_priority(self.rules))

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[PricingRule]:
        return iter(self.rules)

    def for_type(self, rule_type: RuleType) -> Tuple[PricingRule, ...]:
        """Rules of one type, highest priority first."""
        return tuple(rule for rule in self.rules if rule.rule_type == rule_type)

    def rule_types(self) -> List[RuleType]:
        """Rule types present in this set."""
        return [rule_type for rule_type in RuleType if any(rule.rule_type == rule_type for rule in self.rules)]

    def get(self, rule_id: str) -> Optional[PricingRule]:
        """Look up a rule by identifier."""
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None


def _measure_value(measure: Measure, calculation_input: CalculationInput) -> Decimal:
    if measure is Measure.MILEAGE:
        return calculation_input.total_mileage
    if measure is Measure.STOPS:
        return Decimal(calculation_input.number_of_stops)
    if measure is Measure.DRIVES:
        return Decimal(calculation_input.number_of_drives)
    if measure is Measure.HEADCOUNT:
        return Decimal(calculation_input.headcount)
    if measure is Measure.FOOD_COST:
        return Decimal(calculation_input.food_cost_cents) / 100
    raise TypeError(f"Unknown measure: {measure}")


class RuleEvaluator:
    """Evaluate rules into itemized lines."""

    def evaluate(
        self,
        rule_type: RuleType,
        rules: Sequence[PricingRule],
        calculation_input: CalculationInput,
        selection: TierSelection,
    ) -> ItemizedLines:
        """Evaluate every rule of ``rule_type`` and sum contributions per line.

        Bridge toll rules only contribute when the order requires a bridge.

        Args:
            rule_type: Customer charges or driver payments
            rules: Candidate rules; rules of another type are ignored
            calculation_input: The order being priced
            selection: The order's resolved tier

        Returns:
            Mapping of line name to cents, with every line for the type present
        """
        lines: ItemizedLines = {name: 0 for (kind, _), name in LINE_NAMES.items() if kind == rule_type}
        for rule in _by_priority(rules):
            if rule.rule_type != rule_type:
                continue
            if rule.rule_name is RuleName.BRIDGE_TOLL and not calculation_input.requires_bridge:
                continue
            amount = self.evaluate_rule(rule, calculation_input, selection)
            log_debug(
                LogEvent.RULE_EVALUATION,
                f"Rule '{rule.id}' contributed {amount} cents to {rule.line_name}",
                rule_id=rule.id,
                priority=rule.priority,
            )
            lines[rule.line_name] += amount
        return lines

    def evaluate_rule(
        self,
        rule: PricingRule,
        calculation_input: CalculationInput,
        selection: TierSelection,
    ) -> int:
        """Compute a single rule's contribution in cents.

        Raises:
            TypeError: If the rule carries a formula type this evaluator does not know
        """
        formula = rule.formula
        if isinstance(formula, FlatAmount):
            return formula.base_amount_cents
        elif isinstance(formula, ThresholdAbove):
            excess = _measure_value(formula.measure, calculation_input) - formula.threshold_value
            if excess <= 0:
                return 0
            return round_cents(excess * formula.per_unit_amount_cents)
        elif isinstance(formula, ThresholdBelow):
            if _measure_value(formula.measure, calculation_input) < formula.threshold_value:
                return formula.base_amount_cents
            return 0
        elif isinstance(formula, Percentage):
            if not selection.is_top:
                return 0
            return round_cents(formula.rate * calculation_input.food_cost_cents)
        elif isinstance(formula, TierBase):
            tier = selection.tier
            if rule.rule_type is RuleType.DRIVER_PAYMENT:
                return tier.driver_base_pay_cents
            if formula.radius_miles is not None and calculation_input.total_mileage <= formula.radius_miles:
                return tier.customer_base_fee_within_radius_cents
            return tier.customer_base_fee_cents
        else:
            raise TypeError(f"Unknown formula type: {type(formula).__name__}")
