import json
import logging
from datetime import datetime
from typing import Any

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from apiqueue.domain.interfaces.user_interface import UserInterface
from apiqueue.domain.models.quota import QuotaSnapshot

logger = logging.getLogger(__name__)

class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self):
        """Initializes the rich Console."""
        self.console = Console()

    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Displays an API payload as highlighted JSON inside a panel.

        Args:
            output: The decoded response payload.
            **kwargs: Additional arguments including:
                - title: Panel title (default: "Result")
        """
        title = kwargs.get("title", "Result")
        try:
            body = JSON(json.dumps(output, default=str))
        except (TypeError, ValueError) as e:
            logger.debug(f"Payload is not JSON-serializable ({e}); printing as text")
            body = Text(str(output))
        self.console.print(Panel(body, title=f"[bold white]{title}[/bold white]", title_align="left", box=ROUNDED, padding=(0, 1)))

    def display_quota(self, snapshot: QuotaSnapshot) -> None:
        """Displays the quota snapshot as a two-column table."""
        table = Table(title="API quota", box=SIMPLE)
        table.add_column("Remaining", justify="right", style="bold")
        table.add_column("Resets at")
        table.add_column("Resets in", justify="right")
        reset_at = datetime.fromtimestamp(snapshot.reset_at).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(str(snapshot.remaining), reset_at, f"{snapshot.seconds_until_reset():.0f}s")
        self.console.print(table)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)
