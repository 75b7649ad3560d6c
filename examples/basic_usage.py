#!/usr/bin/env python3
"""Example of basic pricing engine usage."""

from delivery_pricing import (
    CalculationInput,
    PricingRegistry,
    calculate,
    calculate_delivery_cost,
    calculate_driver_pay,
)


def print_quote(client_id, headcount, food_cost, mileage, **options):
    """Print the customer and driver breakdown for one order.

    Args:
        client_id: Client to price the order for
        headcount: Number of people
        food_cost: Food cost in dollars
        mileage: Total miles driven
        **options: Extra CalculationInput.from_dollars arguments
    """
    order = CalculationInput.from_dollars(
        headcount=headcount, food_cost=food_cost, total_mileage=mileage, **options
    )
    delivery = calculate_delivery_cost(order, client_id)
    driver = calculate_driver_pay(order, client_id)

    print(f"{client_id}: {headcount} people, ${food_cost} food, {mileage} mi")
    print(f"  Delivery cost:     ${delivery.delivery_cost}")
    print(f"  Mileage charge:    ${delivery.total_mileage_pay}")
    print(f"  Bridge toll:       ${delivery.bridge_toll}")
    print(f"  Delivery fee:      ${delivery.delivery_fee}")
    print(f"  Driver base pay:   ${driver.driver_total_base_pay}")
    print(f"  Driver mileage:    ${driver.total_mileage_pay}")
    print(f"  Driver total:      ${driver.total_driver_pay}")
    if driver.bonus_qualified:
        print(f"  Bonus (paid separately): ${driver.driver_bonus_pay}")
    if driver.ready_set_total_fee:
        print(f"  Ready Set fee:     ${driver.ready_set_total_fee}")
    if driver.requires_manual_review:
        print("  Needs manual review before quoting")
    print()


def main():
    """Run the example."""
    registry = PricingRegistry.get_instance()
    print(f"Clients: {', '.join(registry.list_clients(active_only=True))}")
    print()

    print_quote("cater-valley", 20, 250, 8)
    print_quote("cater-valley", 35, 450, 12)
    print_quote("cater-valley", 150, 2000, 20)
    print_quote("cater-valley", 20, 250, 8, tips=15, requires_bridge=True)
    print_quote("ready-set-food-standard", 20, 250, 5, number_of_drives=3, bonus_qualified=True)
    print_quote("ready-set-food-standard", 20, 250, 5, delivery_area="Oakland")
    print_quote("try-hungry", 120, 1500, 5)

    result = calculate(CalculationInput.from_dollars(headcount=35, food_cost=450, total_mileage=12), "cater-valley")
    print(f"Profit on the 35-person order: ${result.to_dict()['profit']} ({result.profit_margin}%)")


if __name__ == "__main__":
    main()
