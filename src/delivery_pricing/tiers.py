"""Tier tables and tier classification.

A tier table is an ordered list of bands over two dimensions, headcount and
food cost. Bands must start at zero, follow one another without gaps or
overlaps, and end in an open-ended top tier. An order is classified into a
band per dimension, and the lower of the two indexes wins.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

from .errors import InvalidTierTableError
from .logging import LogEvent, log_debug
from .models import CalculationInput

HEADCOUNT = "headcount"
FOOD_COST = "food_cost"


@dataclass(frozen=True)
class Tier:
    """One pricing band.

    Upper bounds are inclusive; ``None`` means the band is open-ended. Food
    cost bounds and all amounts are in cents.
    """

    min_headcount: int
    max_headcount: Optional[int]
    min_food_cost_cents: int
    max_food_cost_cents: Optional[int]
    customer_base_fee_cents: int
    customer_base_fee_within_radius_cents: int
    driver_base_pay_cents: int = 0

    def __post_init__(self) -> None:
        for name in (
            "min_headcount",
            "min_food_cost_cents",
            "customer_base_fee_cents",
            "customer_base_fee_within_radius_cents",
            "driver_base_pay_cents",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.max_headcount is not None and self.max_headcount < self.min_headcount:
            raise ValueError("max_headcount must not be below min_headcount")
        if self.max_food_cost_cents is not None and self.max_food_cost_cents < self.min_food_cost_cents:
            raise ValueError("max_food_cost_cents must not be below min_food_cost_cents")

    def bounds(self, dimension: str) -> Tuple[int, Optional[int]]:
        """Return ``(minimum, maximum)`` for ``"headcount"`` or ``"food_cost"``."""
        if dimension == HEADCOUNT:
            return self.min_headcount, self.max_headcount
        if dimension == FOOD_COST:
            return self.min_food_cost_cents, self.max_food_cost_cents
        raise ValueError(f"Unknown tier dimension: {dimension}")

    def contains(self, dimension: str, value: int) -> bool:
        """Check whether ``value`` falls inside this band on one dimension."""
        minimum, maximum = self.bounds(dimension)
        return value >= minimum and (maximum is None or value <= maximum)


@dataclass(frozen=True)
class TierTable:
    """An ordered, validated sequence of tiers.

    Raises:
        InvalidTierTableError: If the bands are empty, do not start at zero,
            leave gaps, overlap, or if any tier but the last is open-ended
    """

    tiers: Tuple[Tier, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tiers", tuple(self.tiers))
        if not self.tiers:
            raise InvalidTierTableError("Tier table must contain at least one tier")
        for dimension in (HEADCOUNT, FOOD_COST):
            self._validate_dimension(dimension)

    def _validate_dimension(self, dimension: str) -> None:
        previous_max: Optional[int] = None
        last = len(self.tiers)
        for index, tier in enumerate(self.tiers, start=1):
            minimum, maximum = tier.bounds(dimension)
            expected = 0 if index == 1 else previous_max + 1  # type: ignore[operator]
            if minimum < expected:
                raise InvalidTierTableError(
                    f"Tier {index} overlaps the previous tier on {dimension} "
                    f"(starts at {minimum}, expected {expected})",
                    tier_index=index,
                    dimension=dimension,
                )
            if minimum > expected:
                raise InvalidTierTableError(
                    f"Tier {index} leaves a gap on {dimension} (starts at {minimum}, expected {expected})",
                    tier_index=index,
                    dimension=dimension,
                )
            if maximum is None and index != last:
                raise InvalidTierTableError(
                    f"Only the last tier may be open-ended; tier {index} has no {dimension} maximum",
                    tier_index=index,
                    dimension=dimension,
                )
            if maximum is not None and index == last:
                raise InvalidTierTableError(
                    f"The last tier must be open-ended on {dimension}",
                    tier_index=index,
                    dimension=dimension,
                )
            previous_max = maximum

    def __len__(self) -> int:
        return len(self.tiers)

    def __iter__(self) -> Iterator[Tier]:
        return iter(self.tiers)

    def __getitem__(self, index: int) -> Tier:
        return self.tiers[index]

    @property
    def top(self) -> Tier:
        """The open-ended top tier."""
        return self.tiers[-1]

    def index_for(self, dimension: str, value: int) -> int:
        """Return the 1-based tier index containing ``value`` on one dimension.

        Values above every band land in the top tier; negative values are
        treated as zero.
        """
        value = max(0, value)
        for index, tier in enumerate(self.tiers, start=1):
            if tier.contains(dimension, value):
                return index
        return len(self.tiers)

    @classmethod
    def from_tiers(cls, tiers: Sequence[Tier]) -> "TierTable":
        """Build a table from any sequence of tiers."""
        return cls(tuple(tiers))


@dataclass(frozen=True)
class TierSelection:
    """The tier an order was classified into.

    Attributes:
        tier: The selected tier, used for both customer and driver amounts
        index: 1-based index of the selected tier
        headcount_index: Tier index matched by headcount alone
        food_cost_index: Tier index matched by food cost alone
        is_top: Whether the selected tier is the table's top tier
    """

    tier: Tier
    index: int
    headcount_index: int
    food_cost_index: int
    is_top: bool

    @property
    def customer_tier(self) -> Tier:
        return self.tier

    @property
    def driver_tier(self) -> Tier:
        return self.tier


class TierClassifier:
    """Resolve an order to a tier using the lesser of its two dimension matches."""

    @staticmethod
    def classify(calculation_input: CalculationInput, tier_table: TierTable) -> TierSelection:
        """Classify an order.

        The selected index is ``min(headcount_index, food_cost_index)``, so a
        large headcount with a small food bill prices at the lower tier.

        Args:
            calculation_input: The order to classify
            tier_table: Validated tier table

        Returns:
            TierSelection describing the chosen tier
        """
        headcount_index = tier_table.index_for(HEADCOUNT, calculation_input.headcount)
        food_cost_index = tier_table.index_for(FOOD_COST, calculation_input.food_cost_cents)
        index = min(headcount_index, food_cost_index)
        log_debug(
            LogEvent.TIER_CLASSIFICATION,
            f"Classified order into tier {index}",
            headcount_index=headcount_index,
            food_cost_index=food_cost_index,
        )
        return TierSelection(
            tier=tier_table[index - 1],
            index=index,
            headcount_index=headcount_index,
            food_cost_index=food_cost_index,
            is_top=index == len(tier_table),
        )
