"""The calculation engine.

A :class:`CalculationEngine` binds one client's tier table and rule set.
Engines hold no mutable state, so one instance can serve any number of
threads, and the same input always gives the same result.
"""

from dataclasses import replace
from typing import Optional, Tuple

from .logging import LogEvent, log_debug, log_warning
from .models import CalculationInput, CalculationResult, CustomerCharges, DriverPayments
from .policy import ClientPricingPolicy, apply_policy
from .rules import RuleEvaluator, RuleSet, RuleType
from .tiers import TierClassifier, TierSelection, TierTable


class CalculationEngine:
    """Price orders against a tier table and rule set."""

    def __init__(
        self,
        tier_table: TierTable,
        rule_set: RuleSet,
        evaluator: Optional[RuleEvaluator] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            tier_table: Validated tier table
            rule_set: Rules for customer charges and driver payments
            evaluator: Rule evaluator; a default one is created if omitted
        """
        self.tier_table = tier_table
        self.rule_set = rule_set
        self.evaluator = evaluator or RuleEvaluator()

    def classify(self, calculation_input: CalculationInput) -> TierSelection:
        """Resolve the order's tier."""
        return TierClassifier.classify(calculation_input, self.tier_table)

    def _price(
        self, calculation_input: CalculationInput, policy: ClientPricingPolicy
    ) -> Tuple[TierSelection, CustomerCharges, DriverPayments]:
        if not calculation_input.requires_bridge and policy.applies_bridge_toll_for_area(calculation_input.delivery_area):
            log_debug(
                LogEvent.POLICY_ADJUSTMENT,
                f"Bridge toll applied for area '{calculation_input.delivery_area}'",
                client_id=policy.client_id,
            )
            calculation_input = replace(calculation_input, requires_bridge=True)
        selection = self.classify(calculation_input)
        customer_lines = self.evaluator.evaluate(
            RuleType.CUSTOMER_CHARGE,
            self.rule_set.for_type(RuleType.CUSTOMER_CHARGE),
            calculation_input,
            selection,
        )
        driver_lines = self.evaluator.evaluate(
            RuleType.DRIVER_PAYMENT,
            self.rule_set.for_type(RuleType.DRIVER_PAYMENT),
            calculation_input,
            selection,
        )
        customer, driver = apply_policy(policy, calculation_input, customer_lines, driver_lines)
        return selection, customer, driver

    def calculate_customer_charge(
        self, calculation_input: CalculationInput, policy: ClientPricingPolicy
    ) -> CustomerCharges:
        """Compute only the customer side."""
        return self._price(calculation_input, policy)[1]

    def calculate_driver_payment(
        self, calculation_input: CalculationInput, policy: ClientPricingPolicy
    ) -> DriverPayments:
        """Compute only the driver side."""
        return self._price(calculation_input, policy)[2]

    def calculate(self, calculation_input: CalculationInput, policy: ClientPricingPolicy) -> CalculationResult:
        """Compute the complete itemized result.

        Args:
            calculation_input: The order to price
            policy: The client's pricing policy

        Returns:
            CalculationResult with ``profit = customer total - driver total``
        """
        selection, customer, driver = self._price(calculation_input, policy)
        result = CalculationResult(
            client_id=policy.client_id,
            tier_index=selection.index,
            customer_charges=customer,
            driver_payments=driver,
            profit=customer.total - driver.total,
            requires_manual_review=policy.requires_manual_review(calculation_input),
        )
        if result.requires_manual_review:
            log_warning(
                LogEvent.CALCULATION,
                f"Order with headcount {calculation_input.headcount} requires manual review for {policy.client_id}",
                client_id=policy.client_id,
                headcount=calculation_input.headcount,
            )
        log_debug(
            LogEvent.CALCULATION,
            f"Priced order for {policy.client_id}",
            tier=selection.index,
            customer_total=customer.total,
            driver_total=driver.total,
        )
        return result
