"""Main CLI application using Cyclopts.

The CLI is a thin HTTP client - it talks to the server via REST API.
No internal DI needed since all business logic lives in the server.
"""

import cyclopts

from datareg.cli.commands import datasets, events, server, stats

app = cyclopts.App(
    name="datareg",
    help="Dataset registry - CLI",
)

app.command(server.app, name="server")
app.command(datasets.app, name="datasets")
app.command(stats.app, name="stats")
app.command(events.app, name="events")
