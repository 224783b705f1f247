"""Console output for the CLI.

Provides a Console class that wraps rich for consistent output. All CLI
output should go through this module.
"""

from datetime import UTC, datetime
from typing import Any

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table


def relative_time(iso_timestamp: str) -> str:
    """Convert ISO timestamp to relative time string (e.g., '2 hours ago')."""
    try:
        dt = datetime.fromisoformat(iso_timestamp)
    except (ValueError, TypeError):
        return iso_timestamp

    seconds = (datetime.now(UTC) - dt).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        mins = int(seconds // 60)
        return f"{mins} minute{'s' if mins != 1 else ''} ago"
    if seconds < 86400:
        hours = int(seconds // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    if seconds < 604800:
        days = int(seconds // 86400)
        return f"{days} day{'s' if days != 1 else ''} ago"
    return dt.strftime("%Y-%m-%d %H:%M")


class Console:
    """CLI output manager wrapping rich.

    Results go to stdout, errors to stderr.
    """

    def __init__(self, *, force_terminal: bool | None = None, quiet: bool = False) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    # -------------------------------------------------------------------------
    # Structured output
    # -------------------------------------------------------------------------

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
    ) -> None:
        table = Table(title=title, show_header=True, header_style="bold")
        for _, header in columns:
            table.add_column(header)
        for row in rows:
            table.add_row(*(str(row.get(key, "")) for key, _ in columns))
        self._console.print(table)

    def dataset_detail(self, dataset: dict[str, Any]) -> None:
        """Print one dataset as a panel."""
        visibility = "[green]public[/green]" if dataset["is_public"] else "[yellow]private[/yellow]"
        lines = [
            f"[cyan]Dataset:[/cyan]  {dataset['dataset_ref']}",
            f"[cyan]Analysis:[/cyan] {dataset['analysis_ref'] or '[dim]none[/dim]'}",
            f"[cyan]Owner:[/cyan]    {dataset['owner']}    {visibility}",
            "",
            f"{dataset['views']} views · {dataset['downloads']} downloads"
            f" · {dataset['citations']} citations",
        ]
        self._console.print(
            Panel(
                "\n".join(lines),
                title=f"[bold]#{dataset['id']}[/bold]",
                subtitle=f"[dim]registered {relative_time(dataset['created_at'])}[/dim]",
                border_style="blue",
                padding=(1, 2),
            )
        )


_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
