"""Thin HTTP client helpers shared by the CLI commands."""

import os
import sys
import time
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from datareg.cli.console import get_console

ACTOR_HEADER = "X-Actor-Id"

T = TypeVar("T")


def get_server_url() -> str:
    """Get server URL from the environment."""
    return os.environ.get("DATAREG_SERVER", "http://localhost:8000")


def get_actor(actor: str | None = None) -> str | None:
    """The --actor option if given, else DATAREG_ACTOR."""
    return actor or os.environ.get("DATAREG_ACTOR") or None


def with_retry(
    fn: Callable[[], T],
    retries: int = 3,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> T:
    """Retry a function on transient errors with linear backoff.

    Raises:
        The last exception if all retries fail.
    """
    last_error: Exception | None = None
    for attempt in range(retries + 1):
        try:
            return fn()
        except exceptions as e:
            last_error = e
            if attempt < retries:
                time.sleep(0.2 * (attempt + 1))  # Backoff: 0.2, 0.4, 0.6s
    raise last_error  # type: ignore[misc]


def api_request(
    method: str,
    path: str,
    *,
    actor: str | None = None,
    **kwargs: Any,
) -> Any:
    """Call the registry API and return the decoded JSON body.

    Connection problems and error responses are reported on stderr and end
    the process with exit code 1.
    """
    console = get_console()
    server_url = get_server_url()
    headers = {ACTOR_HEADER: actor} if actor else {}

    try:
        response = with_retry(
            lambda: httpx.request(
                method, f"{server_url}/api/v1{path}", headers=headers, **kwargs
            ),
            exceptions=(httpx.ReadError, httpx.ConnectError),
        )
    except httpx.ConnectError:
        console.error(
            f"Could not connect to server at {server_url}",
            hint="Is the server running? Start it with: datareg server start",
        )
        sys.exit(1)
    except httpx.ReadError:
        console.error("Connection lost while reading response")
        sys.exit(1)

    if response.is_success:
        return response.json()

    try:
        body = response.json()
        message = body.get("message") or body.get("detail") or response.text
    except ValueError:
        message = response.text

    hint = None
    if response.status_code == 401:
        hint = "Pass --actor or set DATAREG_ACTOR"
    console.error(f"{response.status_code}: {message}", hint=hint)
    sys.exit(1)
