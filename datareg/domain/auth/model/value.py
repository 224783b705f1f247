from typing import NewType

ActorId = NewType("ActorId", str)
"""Opaque, already-authenticated caller identifier. Compared by equality only."""
