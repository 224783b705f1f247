"""Dataset commands - register, inspect, and count datasets."""

from typing import Annotated

import cyclopts
from cyclopts import Parameter

from datareg.cli.console import get_console
from datareg.cli.util.http import api_request, get_actor

app = cyclopts.App(name="datasets", help="Register and inspect datasets")

Actor = Annotated[str | None, Parameter(help="Acting identity (default: $DATAREG_ACTOR)")]

_LIST_COLUMNS = [
    ("id", "ID"),
    ("dataset_ref", "Dataset"),
    ("analysis_ref", "Analysis"),
    ("owner", "Owner"),
    ("is_public", "Public"),
    ("views", "Views"),
    ("downloads", "Downloads"),
    ("citations", "Citations"),
]


@app.command
def upload(
    dataset_ref: str,
    /,
    analysis: str = "",
    public: bool = False,
    actor: Actor = None,
) -> None:
    """Register a dataset reference.

    Args:
        dataset_ref: Content identifier of the dataset.
        analysis: Content identifier of the derived analysis.
        public: Make the dataset visible to everyone.
    """
    data = api_request(
        "POST",
        "/datasets",
        actor=get_actor(actor),
        json={"dataset_ref": dataset_ref, "analysis_ref": analysis, "is_public": public},
    )
    get_console().success(f"Registered dataset #{data['id']}")


@app.command
def show(dataset_id: int, /, actor: Actor = None) -> None:
    """Show one dataset."""
    data = api_request("GET", f"/datasets/{dataset_id}", actor=get_actor(actor))
    get_console().dataset_detail(data)


@app.command
def set_analysis(dataset_id: int, analysis_ref: str, /, actor: Actor = None) -> None:
    """Replace a dataset's analysis reference (owner only)."""
    api_request(
        "PUT",
        f"/datasets/{dataset_id}/analysis",
        actor=get_actor(actor),
        json={"analysis_ref": analysis_ref},
    )
    get_console().success(f"Dataset #{dataset_id} analysis updated")


def _set_visibility(dataset_id: int, is_public: bool, actor: str | None) -> None:
    api_request(
        "PUT",
        f"/datasets/{dataset_id}/visibility",
        actor=get_actor(actor),
        json={"is_public": is_public},
    )
    get_console().success(f"Dataset #{dataset_id} is now {'public' if is_public else 'private'}")


@app.command
def publish(dataset_id: int, /, actor: Actor = None) -> None:
    """Make a dataset public (owner only)."""
    _set_visibility(dataset_id, True, actor)


@app.command
def unpublish(dataset_id: int, /, actor: Actor = None) -> None:
    """Make a dataset private (owner only)."""
    _set_visibility(dataset_id, False, actor)


def _record(dataset_id: int, counter: str, actor: str | None) -> None:
    data = api_request("POST", f"/datasets/{dataset_id}/{counter}", actor=get_actor(actor))
    console = get_console()
    if data["counted"]:
        console.success(f"Recorded one {counter[:-1]} of dataset #{dataset_id}")
    else:
        console.warning(f"Dataset #{dataset_id} is private; nothing was recorded")


@app.command
def view(dataset_id: int, /, actor: Actor = None) -> None:
    """Record a view."""
    _record(dataset_id, "views", actor)


@app.command
def download(dataset_id: int, /, actor: Actor = None) -> None:
    """Record a download."""
    _record(dataset_id, "downloads", actor)


@app.command
def cite(dataset_id: int, /, actor: Actor = None) -> None:
    """Record a citation."""
    _record(dataset_id, "citations", actor)


@app.command(name="list")
def list_public(limit: int | None = None, offset: int | None = None) -> None:
    """List public datasets.

    Args:
        limit: Maximum number of datasets to show.
        offset: Number of datasets to skip.
    """
    params = {k: v for k, v in (("limit", limit), ("offset", offset)) if v is not None}
    data = api_request("GET", "/datasets", params=params)
    _print_list(data["items"], "Public datasets")


@app.command
def mine(limit: int | None = None, offset: int | None = None, actor: Actor = None) -> None:
    """List your own datasets, private ones included."""
    params = {k: v for k, v in (("limit", limit), ("offset", offset)) if v is not None}
    data = api_request("GET", "/datasets/mine", actor=get_actor(actor), params=params)
    _print_list(data["items"], "Your datasets")


def _print_list(items: list[dict], title: str) -> None:
    console = get_console()
    if not items:
        console.info("No datasets found")
        return
    console.table(items, _LIST_COLUMNS, title=title)
