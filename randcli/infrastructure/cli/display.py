import logging
from typing import Any, Optional, Sequence

from rich.box import HEAVY, ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from randcli.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None, plain: bool = False):
        """Initializes the rich Console.

        Args:
            console: Console to print to; a default stdout console if None.
            plain: Print one bare value per line instead of a table, for piping.
        """
        self._console = console or Console()
        self.plain = plain

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_values(self, title: str, values: Sequence[Any]) -> None:
        """Displays generated values as a numbered table (or bare lines in plain mode)."""
        logger.debug(f"display_values called: title={title}, count={len(values)}")
        if self.plain:
            for value in values:
                self.console.print(str(value), markup=False, highlight=False)
            return

        table = Table(title=title, show_header=True, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Value", style="white")
        for index, value in enumerate(values, start=1):
            table.add_row(str(index), str(value))
        self.console.print(table)

    def display_usage(self, requests_left: int, bits_left: int) -> None:
        """Displays the remaining quota for the API key."""
        if self.plain:
            self.console.print(f"requestsLeft={requests_left} bitsLeft={bits_left}", markup=False, highlight=False)
            return

        table = Table(show_header=False, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Counter", style="bold")
        table.add_column("Remaining", style="cyan", justify="right")
        table.add_row("Requests left", f"{requests_left:,}")
        table.add_row("Bits left", f"{bits_left:,}")
        self.console.print(Panel(table, title="[bold cyan]Quota[/bold cyan]", border_style="cyan", box=ROUNDED))

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)
