"""Quote command for the DPE CLI."""

from decimal import Decimal
from typing import Any, Dict, Optional

import click

from ...calculator import calculate_delivery_cost, calculate_driver_pay
from ...models import CalculationInput
from ..formatters import create_console, format_json, format_quote_table
from ..utils import exit_code_for, get_registry_for, handle_error


@click.command()
@click.option("--client", "client_id", required=True, help="Client identifier (see 'dpe clients list').")
@click.option("--headcount", type=click.IntRange(min=0), default=0, show_default=True, help="Number of people.")
@click.option("--food-cost", type=str, default="0", show_default=True, help="Food cost in dollars.")
@click.option("--mileage", type=str, default="0", show_default=True, help="Total miles driven.")
@click.option("--drives", type=click.IntRange(min=1), default=1, show_default=True, help="Drives to the same location today.")
@click.option("--stops", type=click.IntRange(min=1), default=1, show_default=True, help="Stops on this drive.")
@click.option("--bridge/--no-bridge", default=False, help="Route crosses a tolled bridge.")
@click.option("--bridge-toll", type=str, default=None, help="Bridge toll in dollars (defaults to the client's toll).")
@click.option("--tips", type=str, default="0", show_default=True, help="Direct tip in dollars.")
@click.option("--area", default=None, help="Delivery area; some clients toll whole areas.")
@click.option("--ready-set-addon-fee", type=str, default="0", show_default=True, help="Additional Ready Set fees in dollars.")
@click.option("--bonus-qualified", is_flag=True, help="Driver qualified for the bonus.")
@click.option("--itemized", is_flag=True, help="Show every customer and driver line instead of the summary.")
@click.pass_context
def quote(
    ctx: click.Context,
    client_id: str,
    headcount: int,
    food_cost: str,
    mileage: str,
    drives: int,
    stops: int,
    bridge: bool,
    bridge_toll: Optional[str],
    tips: str,
    area: Optional[str],
    ready_set_addon_fee: str,
    bonus_qualified: bool,
    itemized: bool,
) -> None:
    """Price a delivery for a client.

    Examples:
      dpe quote --client cater-valley --headcount 35 --food-cost 450 --mileage 12
    """
    calculation_input = CalculationInput.from_dollars(
        headcount=headcount,
        food_cost=_parse_money(food_cost, "--food-cost"),
        total_mileage=_parse_money(mileage, "--mileage"),
        number_of_drives=drives,
        number_of_stops=stops,
        requires_bridge=bridge,
        bridge_toll=None if bridge_toll is None else _parse_money(bridge_toll, "--bridge-toll"),
        tips=_parse_money(tips, "--tips"),
        bonus_qualified=bonus_qualified,
        delivery_area=area,
        ready_set_addon_fee=_parse_money(ready_set_addon_fee, "--ready-set-addon-fee"),
    )
    try:
        registry = get_registry_for(ctx.obj)
        # Unknown clients are an error here rather than a silent fallback
        configuration = registry.get_configuration(client_id)

        if itemized or ctx.obj["format"] != "json":
            result = configuration.engine.calculate(calculation_input, configuration.policy)
            if ctx.obj["format"] == "json":
                format_json(result.to_dict())
            else:
                format_quote_table(result, create_console(no_color=ctx.obj["no_color"]))
            return

        summary: Dict[str, Any] = {
            "client_id": client_id,
            "delivery": calculate_delivery_cost(calculation_input, client_id, registry).to_dict(),
            "driver": calculate_driver_pay(calculation_input, client_id, registry).to_dict(),
        }
        format_json(summary)

    except Exception as e:
        handle_error(e, exit_code_for(e))


def _parse_money(value: str, option: str) -> Decimal:
    try:
        return Decimal(value)
    except ArithmeticError:
        raise click.BadParameter(f"'{value}' is not a number", param_hint=option) from None
