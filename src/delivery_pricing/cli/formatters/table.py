"""Rich table formatter for CLI output."""

import sys
from decimal import Decimal
from typing import Any, Dict, List, Optional, TextIO

from rich.console import Console
from rich.table import Table

from ...config_loader import ClientConfiguration
from ...models import CalculationResult
from ...money import to_dollars


def create_console(output: Optional[TextIO] = None, no_color: bool = False) -> Console:
    """Create a Rich console instance.

    Args:
        output: Output stream (defaults to stdout)
        no_color: Disable color output

    Returns:
        Console instance
    """
    if output is None:
        output = sys.stdout

    return Console(file=output, no_color=no_color)


def _money(cents: Optional[int]) -> str:
    if cents is None:
        return "N/A"
    return f"${to_dollars(cents)}"


def _range(minimum: str, maximum: Optional[str]) -> str:
    return f"{minimum}+" if maximum is None else f"{minimum} - {maximum}"


def format_clients_table(rows: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """Format the clients list as a Rich table.

    Args:
        rows: One mapping per client (id, name, vendor, active, default, tiers, rules)
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Configured Clients", show_header=True, header_style="bold magenta")

    table.add_column("Client", style="cyan")
    table.add_column("Name")
    table.add_column("Vendor")
    table.add_column("Tiers", justify="right")
    table.add_column("Rules", justify="right")
    table.add_column("Status", justify="center")

    for row in rows:
        status = "Active" if row["active"] else "Inactive"
        if row.get("default"):
            status += " (default)"
        style = "bold green" if row.get("default") else ("dim" if not row["active"] else "")
        table.add_row(
            row["id"],
            row["name"],
            row["vendor"],
            str(row["tiers"]),
            str(row["rules"]),
            status,
            style=style,
        )

    console.print(table)


def format_client_table(configuration: ClientConfiguration, console: Optional[Console] = None) -> None:
    """Show a client's tier table, policy and rules.

    Args:
        configuration: The client's configuration
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    policy = configuration.policy
    console.print(f"[bold]{policy.display_name}[/bold] ({policy.client_id})")
    if policy.description:
        console.print(policy.description)

    tiers = Table(title="Pricing Tiers", show_header=True, header_style="bold magenta")
    tiers.add_column("Tier", justify="right", style="cyan")
    tiers.add_column("Headcount")
    tiers.add_column("Food Cost")
    tiers.add_column("Base Fee", justify="right")
    tiers.add_column(f"Within {policy.mileage_threshold_miles} mi", justify="right")
    tiers.add_column("Driver Base Pay", justify="right")
    for index, tier in enumerate(configuration.tier_table, start=1):
        max_food = None if tier.max_food_cost_cents is None else _money(tier.max_food_cost_cents)
        is_percentage_tier = policy.percentage_rate is not None and index == len(configuration.tier_table)
        tiers.add_row(
            str(index),
            _range(str(tier.min_headcount), None if tier.max_headcount is None else str(tier.max_headcount)),
            _range(_money(tier.min_food_cost_cents), max_food),
            f"{policy.percentage_rate * 100:g}% of food" if is_percentage_tier else _money(tier.customer_base_fee_cents),
            "" if is_percentage_tier else _money(tier.customer_base_fee_within_radius_cents),
            _money(tier.driver_base_pay_cents),
        )
    console.print(tiers)

    settings = Table(title="Policy", show_header=True, header_style="bold magenta")
    settings.add_column("Setting", style="cyan")
    settings.add_column("Value")
    settings.add_row("Minimum customer fee", _money(policy.minimum_customer_fee_cents))
    settings.add_row("Customer mileage rate", f"{_money(policy.customer_mileage_rate_cents_per_mile)}/mi")
    settings.add_row("Driver mileage rate", f"{_money(policy.driver_mileage_rate_cents_per_mile)}/mi")
    settings.add_row("Driver minimum mileage pay", _money(policy.driver_minimum_mileage_pay_cents))
    settings.add_row("Bridge toll billed to customer", "yes" if policy.include_bridge_toll_in_customer_fee else "no")
    settings.add_row("Default bridge toll", _money(policy.default_bridge_toll_cents))
    settings.add_row("Discount per extra drive", _money(policy.daily_drive_discount_cents_per_extra_drive))
    settings.add_row("Bonus", _money(policy.bonus_flat_cents))
    settings.add_row("Direct tip replaces base pay", "yes" if policy.bonus_suppressed_by_direct_tip else "no")
    if policy.ready_set_fee_matches_delivery_fee:
        settings.add_row("Ready Set fee", "matches delivery cost")
    else:
        settings.add_row("Ready Set fee", _money(policy.ready_set_fee_cents))
    if policy.bridge_toll_areas:
        settings.add_row("Bridge toll areas", ", ".join(policy.bridge_toll_areas))
    if policy.manual_review_headcount is not None:
        settings.add_row("Manual review from headcount", str(policy.manual_review_headcount))
    console.print(settings)

    rules = Table(title="Rules (by priority)", show_header=True, header_style="bold magenta")
    rules.add_column("Rule", style="cyan")
    rules.add_column("Type")
    rules.add_column("Name")
    rules.add_column("Priority", justify="right")
    rules.add_column("Formula")
    for rule in configuration.rule_set:
        rules.add_row(
            rule.id,
            rule.rule_type.value,
            rule.rule_name.value,
            str(rule.priority),
            type(rule.formula).__name__,
        )
    console.print(rules)


def format_quote_table(result: CalculationResult, console: Optional[Console] = None) -> None:
    """Show an itemized calculation result.

    Args:
        result: Calculation result
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    for title, lines in (
        ("Customer Charges", result.customer_charges.to_dict()),
        ("Driver Payments", result.driver_payments.to_dict()),
    ):
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Line", style="cyan")
        table.add_column("Amount", justify="right")
        for name, amount in lines.items():
            if name == "subtotal":
                continue
            style = "bold" if name == "total" else ""
            table.add_row(name.replace("_", " "), f"${amount}", style=style)
        console.print(table)

    margin: Decimal = result.profit_margin
    console.print(f"[bold]Client:[/bold] {result.client_id}  [bold]Tier:[/bold] {result.tier_index}")
    console.print(f"[bold]Profit:[/bold] ${to_dollars(result.profit)} ({margin}%)")
    if result.requires_manual_review:
        console.print("[bold yellow]Requires manual review before use[/bold yellow]")


def format_paths_table(paths: Dict[str, Any], console: Optional[Console] = None) -> None:
    """Format configuration paths as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title="Configuration Paths", show_header=True, header_style="bold magenta")
    table.add_column("Source", style="cyan")
    table.add_column("Path", style="dim")
    table.add_column("Status", justify="center")

    for source, info in paths.items():
        status = "✓ Active" if info.get("active") else ("Found" if info.get("exists") else "Missing")
        table.add_row(source, info.get("path") or "(not set)", status)

    console.print(table)
