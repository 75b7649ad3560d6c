"""Main CLI application for the delivery pricing engine."""

import logging
from typing import Optional

import click
import rich_click as rich_click

from ..logging import LOGGER_NAME
from .utils import resolve_format

# Configure rich-click
rich_click.rich_click.USE_RICH_MARKUP = True
rich_click.rich_click.USE_MARKDOWN = True
rich_click.rich_click.SHOW_ARGUMENTS = True
rich_click.rich_click.GROUP_ARGUMENTS_OPTIONS = True


def _configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False


@click.group()
@click.option(
    "--format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    help="Output format. Defaults to 'table' for TTY, 'json' for non-TTY.",
)
@click.option(
    "--clients-path",
    type=click.Path(dir_okay=False),
    help="Client configuration file. Takes precedence over DPE_CLIENTS_PATH.",
)
@click.option("--verbose", "-v", count=True, help="Increase verbosity (can be used multiple times).")
@click.option("--quiet", "-q", count=True, help="Decrease verbosity (can be used multiple times).")
@click.option("--debug", is_flag=True, help="Enable debug-level logging.")
@click.option("--no-color", is_flag=True, help="Disable color output.")
@click.version_option(package_name="delivery-pricing-engine", prog_name="dpe")
@click.pass_context
def app(
    ctx: click.Context,
    format: Optional[str] = None,
    clients_path: Optional[str] = None,
    verbose: int = 0,
    quiet: int = 0,
    debug: bool = False,
    no_color: bool = False,
) -> None:
    """Delivery pricing engine CLI - quote deliveries and inspect client pricing.

    Examples:
      # List active clients
      dpe clients list

      # Show a client's tiers, policy and rules
      dpe clients show cater-valley

      # Price a delivery
      dpe quote --client cater-valley --headcount 35 --food-cost 450 --mileage 12

      # Validate a configuration file
      dpe config validate ./clients.yaml
    """
    ctx.ensure_object(dict)

    # Configure logging level based on verbosity
    log_level = "WARNING"
    if debug:
        log_level = "DEBUG"
    elif verbose > quiet:
        log_level = "DEBUG" if verbose >= 2 else "INFO"
    elif quiet > verbose:
        log_level = "ERROR"
    _configure_logging(log_level)

    ctx.obj.update(
        {
            "format": resolve_format(format),
            "format_explicit": format is not None,
            "clients_path": clients_path,
            "verbose": verbose,
            "quiet": quiet,
            "debug": debug,
            "no_color": no_color,
            "log_level": log_level,
        }
    )


# Import and register subcommands after the group is defined
from .commands import clients, config, quote  # noqa: E402

app.add_command(clients.clients)
app.add_command(config.config)
app.add_command(quote.quote)


if __name__ == "__main__":
    app()
