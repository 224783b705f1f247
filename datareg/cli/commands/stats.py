"""Stats command - registry totals."""

import cyclopts

from datareg.cli.console import get_console
from datareg.cli.util.http import api_request

app = cyclopts.App(name="stats", help="Show registry statistics")


@app.default
def stats() -> None:
    """Show how many datasets are registered (public and private)."""
    data = api_request("GET", "/stats")
    get_console().print(f"[bold]{data['datasets']}[/bold] datasets registered")
