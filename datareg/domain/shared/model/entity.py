from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Base for identity-bearing domain objects (aggregates, events)."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Aggregate(Entity):
    """Consistency boundary. Only the owning service persists it."""
