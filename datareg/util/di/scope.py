"""Custom Dishka scopes for datareg."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """datareg dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (engine, registry lock, worker pool)
    - UOW: Unit of Work (HTTP requests and background event handling)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
