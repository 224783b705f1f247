"""Events command - view the notification log."""

import cyclopts

from datareg.cli.console import get_console, relative_time
from datareg.cli.util.http import api_request

app = cyclopts.App(name="events", help="View the notification log")


@app.default
def events(limit: int = 20, types: list[str] | None = None) -> None:
    """Show recent notifications (newest first).

    Args:
        limit: Number of events to show.
        types: Filter by event types (e.g., DatasetUploaded).
    """
    console = get_console()
    params: dict[str, str | int | list[str]] = {"limit": limit, "order": "desc"}
    if types:
        params["types"] = types

    data = api_request("GET", "/events", params=params)
    events_list = data.get("events", [])
    if not events_list:
        console.info("No events found")
        return

    more = " [dim](more available)[/dim]" if data.get("has_more") else ""
    console.print(f"[bold]Events[/bold] [dim]({data.get('total', len(events_list))})[/dim]{more}\n")

    for event in events_list:
        dataset_id = event.get("data", {}).get("dataset_id")
        target = f"  #{dataset_id}" if dataset_id is not None else ""
        console.print(
            f"[cyan]{event['type']}[/cyan]{target}  [dim]{relative_time(event['created_at'])}[/dim]"
        )
