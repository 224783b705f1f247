"""Domain events, event handlers, and worker infrastructure."""

from abc import ABCMeta
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import UnionType
from typing import (
    Any,
    ClassVar,
    Generic,
    Iterator,
    NewType,
    TypeVar,
    Union,
    dataclass_transform,
    get_args,
    get_origin,
)
from uuid import UUID, uuid4

from pydantic import Field

from datareg.domain.shared.model.entity import Entity

EventId = NewType("EventId", UUID)

E = TypeVar("E", bound="Event")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def new_event_id() -> EventId:
    return EventId(uuid4())


class Event(Entity):
    """Base class for domain events.

    Subclasses are automatically registered by name in Event._registry, which
    is how stored payloads are turned back into typed events.
    """

    id: EventId = Field(default_factory=new_event_id)
    created_at: datetime = Field(default_factory=_utc_now)

    _registry: ClassVar[dict[str, type["Event"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry[cls.__name__] = cls


# --- Worker Infrastructure ---


@dataclass(frozen=True)
class WorkerConfig:
    """Configuration for a single worker instance.

    Attributes:
        name: Unique worker identifier (also the consumer group).
        event_types: Event types to claim.
        batch_size: Max events per batch (default: 1).
        poll_interval: Seconds between polls when idle (default: 0.5).
        max_retries: Max retry attempts before marking failed (default: 3).
        claim_timeout: Seconds before claim considered stale (default: 300.0).
    """

    name: str
    event_types: tuple[type["Event"], ...]
    batch_size: int = 1
    poll_interval: float = 0.5
    max_retries: int = 3
    claim_timeout: float = 300.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.event_types:
            raise ValueError("event_types must not be empty")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.claim_timeout <= 0:
            raise ValueError("claim_timeout must be > 0")


class WorkerStatus(Enum):
    """Status of a running worker."""

    IDLE = "idle"
    CLAIMING = "claiming"
    PROCESSING = "processing"
    STOPPING = "stopping"


@dataclass
class WorkerState:
    """Runtime state for a running worker (not persisted)."""

    config: WorkerConfig
    status: WorkerStatus = WorkerStatus.IDLE
    current_batch: list["Event"] = field(default_factory=list)
    last_claim_at: datetime | None = None
    processed_count: int = 0
    failed_count: int = 0
    error: Exception | None = None


@dataclass(frozen=True)
class ClaimResult:
    """Result of a claim operation.

    Attributes:
        events: Claimed events (locked for this consumer group).
        claimed_at: Timestamp of claim.
    """

    events: list["Event"]
    claimed_at: datetime

    def __bool__(self) -> bool:
        return len(self.events) > 0

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator["Event"]:
        return iter(self.events)


# --- EventHandler ---


def _event_types_of(arg: Any) -> tuple[type["Event"], ...]:
    if isinstance(arg, type) and issubclass(arg, Event):
        return (arg,)
    if get_origin(arg) in (Union, UnionType):
        members = get_args(arg)
        if all(isinstance(m, type) and issubclass(m, Event) for m in members):
            return members
    return ()


def _extract_event_types(cls: type) -> tuple[type["Event"], ...]:
    """Find the concrete event types E bound anywhere in the EventHandler[E] chain.

    E may be a single event class or a union of them
    (``EventHandler[DatasetUploaded | DatasetViewed]``).
    """
    for base in getattr(cls, "__orig_bases__", []):
        origin = get_origin(base)
        if not isinstance(origin, type) or not issubclass(origin, EventHandler):
            continue
        args = get_args(base)
        if args:
            event_types = _event_types_of(args[0])
            if event_types:
                return event_types
    return ()


@dataclass_transform()
class _EventHandlerMeta(ABCMeta):
    """Metaclass that applies @dataclass and extracts __event_types__ from EventHandler[E]."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]) -> type:
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)
            event_types = _extract_event_types(cls)
            if event_types:
                cls.__event_types__ = event_types
        return cls


class EventHandler(Generic[E], metaclass=_EventHandlerMeta):
    """Base class for pull-based event handlers.

    Workers claim events from the outbox and delegate to handlers for processing.
    Subclasses are automatically dataclasses with DI-injected dependencies.
    The __event_types__ are extracted from the generic parameter, which may be
    a union. Events of all those types share one consumer group and are
    claimed in commit order.

    Configuration is via class variables:
        __batch_size__: Max events to claim at once (default: 1)
        __poll_interval__: Seconds between polls when idle (default: 0.5)
        __max_retries__: Max retry attempts before marking failed (default: 3)
        __claim_timeout__: Seconds before claim considered stale (default: 300.0)

    Example:
        class ForwardRegistryNotifications(EventHandler[RegistryEvent]):
            _sink: NotificationSink

            async def handle(self, event: RegistryEvent) -> None:
                await self._sink.deliver(event)
    """

    __event_types__: ClassVar[tuple[type[Event], ...]]
    __batch_size__: ClassVar[int] = 1
    __poll_interval__: ClassVar[float] = 0.5
    __max_retries__: ClassVar[int] = 3
    __claim_timeout__: ClassVar[float] = 300.0

    async def handle(self, event: E) -> None:
        """Handle a single event. Override for single-event processing.

        Raises:
            NotImplementedError: If neither handle() nor handle_batch() is overridden.
        """
        raise NotImplementedError(
            f"{type(self).__name__} must implement handle() or handle_batch()"
        )

    async def handle_batch(self, events: list[E]) -> None:
        """Handle a batch of events. Default implementation loops over handle()."""
        for event in events:
            await self.handle(event)
