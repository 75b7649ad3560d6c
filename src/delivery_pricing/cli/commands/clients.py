"""Client inspection commands for the DPE CLI."""

from typing import Any, Dict, List

import click

from ..formatters import (
    create_console,
    format_client_json,
    format_client_table,
    format_clients_list_json,
    format_clients_table,
    format_json,
)
from ..utils import exit_code_for, get_registry_for, handle_error


@click.group()
def clients() -> None:
    """List and inspect client pricing configurations."""
    pass


@clients.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include inactive clients.")
@click.pass_context
def list_clients(ctx: click.Context, show_all: bool) -> None:
    """List configured clients."""
    try:
        registry = get_registry_for(ctx.obj)
        rows: List[Dict[str, Any]] = []
        for client_id in registry.list_clients(active_only=not show_all):
            configuration = registry.get_configuration(client_id)
            policy = configuration.policy
            rows.append(
                {
                    "id": client_id,
                    "name": policy.display_name,
                    "vendor": policy.vendor_name,
                    "active": policy.is_active,
                    "default": client_id == registry.default_client,
                    "tiers": len(configuration.tier_table),
                    "rules": len(configuration.rule_set),
                }
            )

        if ctx.obj["format"] == "json":
            format_json(format_clients_list_json(rows, registry.default_client))
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_clients_table(rows, console)

    except Exception as e:
        handle_error(e, exit_code_for(e))


@clients.command()
@click.argument("client_id")
@click.pass_context
def show(ctx: click.Context, client_id: str) -> None:
    """Show a client's tiers, policy and rules."""
    try:
        registry = get_registry_for(ctx.obj)
        configuration = registry.get_configuration(client_id)

        if ctx.obj["format"] == "json":
            format_json(format_client_json(configuration))
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_client_table(configuration, console)

    except Exception as e:
        handle_error(e, exit_code_for(e))
