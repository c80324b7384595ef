"""Main entry point for the randcli application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import logging
from typing import Any, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from randcli.core.command_handler import CommandHandler
from randcli.core.services.blocking_service import BlockingRandomService
from randcli.core.services.random_service import create_random_service

# --- Infrastructure Layer ---
from randcli.infrastructure.config.settings import (
    load_configuration, get_config, get_api_key, get_endpoint,
    get_max_blocking_time_ms, get_request_timeout_s, get_poll_interval_ms,
)
from randcli.infrastructure.cli.display import ConsoleDisplay
from randcli.infrastructure.monitoring.logger_setup import setup_logging, parse_log_level, DEFAULT_LOG_FORMAT
from randcli.infrastructure.rpc.transport import HttpxTransport

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(
    api_key: Optional[str] = None,
    max_blocking_ms: Optional[float] = None,
    plain: bool = False,
    log_level: Optional[str] = None,
) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one CLI invocation.

    This acts as the Composition Root. Explicit arguments win over
    configuration files and environment variables.
    """
    dependencies: Dict[str, Any] = {}

    # 1. Load Configuration First
    load_configuration()
    level = parse_log_level(log_level or get_config('logging.level'))
    setup_logging(
        log_level=level,
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
    )
    logger.debug("Configuration and logging initialized.")

    # 2. Infrastructure adapters
    dependencies['ui'] = ConsoleDisplay(plain=plain)
    effective_key = api_key or get_api_key()
    if not effective_key:
        raise ValueError("No API key configured. Pass --api-key or set RANDCLI_API_KEY.")
    dependencies['transport'] = HttpxTransport(endpoint=get_endpoint(), timeout_s=get_request_timeout_s())

    # 3. Services
    service = create_random_service(
        api_key=effective_key,
        max_blocking_time_ms=max_blocking_ms if max_blocking_ms is not None else get_max_blocking_time_ms(),
        transport=dependencies['transport'],
    )
    dependencies['random_service'] = BlockingRandomService(service, poll_interval_ms=get_poll_interval_ms())

    # 4. Command Handler
    dependencies['command_handler'] = CommandHandler(
        service=dependencies['random_service'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="randcli",
    help="randcli: true random numbers, strings and UUIDs from random.org, with advisory-delay throttling.",
    add_completion=False,
)


def _handler(ctx: typer.Context) -> CommandHandler:
    """Builds the dependencies on first use so --help never needs an API key."""
    if 'command_handler' not in ctx.obj:
        options = ctx.obj['options']
        try:
            ctx.obj.update(create_dependencies(**options))
        except ValueError as e:
            logger.error(f"Initialization failed: {e}")
            ConsoleDisplay().display_error(f"Application Initialization Failed: {e}")
            raise typer.Exit(code=2)
        ctx.call_on_close(ctx.obj['random_service'].close)
    return ctx.obj['command_handler']


def _finish(succeeded: bool) -> None:
    if not succeeded:
        raise typer.Exit(code=1)

# --- CLI Commands ---

ReplacementOption = Annotated[
    bool,
    typer.Option("--replacement/--no-replacement", help="Allow duplicates (default) or draw unique values."),
]

@app.callback()
def main_callback(
    ctx: typer.Context,
    api_key: Annotated[Optional[str], typer.Option("--api-key", "-k", help="random.org API key (overrides RANDCLI_API_KEY).")] = None,
    max_blocking_ms: Annotated[Optional[float], typer.Option("--max-blocking-ms", min=0, help="Longest advisory wait to accept, in ms.")] = None,
    plain: Annotated[bool, typer.Option("--plain", help="Print bare values, one per line.")] = False,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Logging level (debug, info, warning, error).")] = None,
):
    """Collects global options; the client itself is built by the command."""
    ctx.obj = {
        'options': {
            'api_key': api_key,
            'max_blocking_ms': max_blocking_ms,
            'plain': plain,
            'log_level': log_level,
        }
    }


@app.command()
def integers(
    ctx: typer.Context,
    n: Annotated[int, typer.Argument(help="How many integers, 1-10000.")],
    min_value: Annotated[int, typer.Option("--min", help="Lower bound, -1e9 to 1e9.")] = 1,
    max_value: Annotated[int, typer.Option("--max", help="Upper bound, -1e9 to 1e9.")] = 100,
    replacement: ReplacementOption = True,
):
    """Generate random integers within [--min, --max]."""
    _finish(_handler(ctx).handle_integers(n, min_value, max_value, replacement))


@app.command()
def decimals(
    ctx: typer.Context,
    n: Annotated[int, typer.Argument(help="How many fractions, 1-10000.")],
    decimal_places: Annotated[int, typer.Option("--places", "-d", help="Decimal places, 1-20.")] = 10,
    replacement: ReplacementOption = True,
):
    """Generate decimal fractions uniformly distributed over [0, 1]."""
    _finish(_handler(ctx).handle_decimals(n, decimal_places, replacement))


@app.command()
def gaussians(
    ctx: typer.Context,
    n: Annotated[int, typer.Argument(help="How many numbers, 1-10000.")],
    mean: Annotated[float, typer.Option("--mean", help="Distribution mean, -1e6 to 1e6.")] = 0.0,
    standard_deviation: Annotated[float, typer.Option("--sd", help="Standard deviation, -1e6 to 1e6.")] = 1.0,
    significant_digits: Annotated[int, typer.Option("--digits", help="Significant digits, 2-20.")] = 8,
):
    """Generate numbers from a Gaussian distribution."""
    _finish(_handler(ctx).handle_gaussians(n, mean, standard_deviation, significant_digits))


@app.command()
def strings(
    ctx: typer.Context,
    n: Annotated[int, typer.Argument(help="How many strings, 1-10000.")],
    length: Annotated[int, typer.Option("--length", "-l", help="Length of each string, 1-20.")] = 8,
    characters: Annotated[str, typer.Option("--characters", "-c", help="Allowed characters, at most 80.")] = "abcdefghijklmnopqrstuvwxyz",
    replacement: ReplacementOption = True,
):
    """Generate random strings from a character set."""
    _finish(_handler(ctx).handle_strings(n, length, characters, replacement))


@app.command()
def uuids(
    ctx: typer.Context,
    n: Annotated[int, typer.Argument(help="How many UUIDs, 1-1000.")] = 1,
):
    """Generate version 4 UUIDs."""
    _finish(_handler(ctx).handle_uuids(n))


@app.command()
def usage(ctx: typer.Context):
    """Show the requests and bits left on the API key's quota."""
    _finish(_handler(ctx).handle_usage())

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
