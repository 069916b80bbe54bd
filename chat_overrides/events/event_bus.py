"""
Event bus for host hooks.

Handlers are awaited one after another, highest priority first and then in
registration order, so a handled flag set by one subscriber is visible to the
next. subscribe() returns a Subscription whose dispose() removes the handler;
the plugin keeps these and releases them on shutdown.
"""

import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from itertools import count
from typing import Any, TypeVar

from ..structured_logging.enhanced_logging_config import get_logger
from .event_types import BaseEvent

# Type variable for generic event handling
T = TypeVar("T", bound=BaseEvent)

EventHandler = Callable[[Any], Awaitable[None] | None]

logger = get_logger(__name__)


@dataclass(order=True)
class _Registration:
    sort_key: tuple[int, int]
    handler: EventHandler = field(compare=False)


class Subscription:
    """Handle returned by EventBus.subscribe(); dispose() is idempotent."""

    def __init__(self, bus: "EventBus", event_type: type[BaseEvent], registration: _Registration) -> None:
        self._bus = bus
        self.event_type = event_type
        self._registration = registration
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self._bus._remove(self.event_type, self._registration)  # pylint: disable=protected-access  # Reason: Subscription is the bus's own handle
        self.disposed = True

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class EventBus:
    """In-process, sequential async pub/sub for host events."""

    def __init__(self) -> None:
        self._subscribers: dict[type[BaseEvent], list[_Registration]] = defaultdict(list)
        self._sequence = count()

    def subscribe(self, event_type: type[T], handler: Callable[[T], Any], priority: int = 0) -> Subscription:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: The type of event to subscribe to
            handler: Sync or async callable invoked with the event
            priority: Higher priorities run first

        Returns:
            Subscription used to remove the handler again
        """
        if not isinstance(event_type, type) or not issubclass(event_type, BaseEvent):
            raise ValueError("Event type must inherit from BaseEvent")

        if not callable(handler):
            raise ValueError("Handler must be callable")

        registration = _Registration((-priority, next(self._sequence)), handler)
        registrations = self._subscribers[event_type]
        registrations.append(registration)
        registrations.sort()
        logger.debug("Added subscriber for event type", event_type=event_type.__name__, priority=priority)
        return Subscription(self, event_type, registration)

    def _remove(self, event_type: type[BaseEvent], registration: _Registration) -> None:
        registrations = self._subscribers.get(event_type, [])
        for i, existing in enumerate(registrations):
            if existing is registration:
                del registrations[i]
                logger.debug("Removed subscriber for event type", event_type=event_type.__name__)
                return

    async def dispatch(self, event: BaseEvent) -> None:
        """
        Deliver an event to its subscribers in order.

        An exception in one subscriber is logged and does not prevent the
        remaining subscribers from running.
        """
        if not isinstance(event, BaseEvent):
            raise ValueError("Event must inherit from BaseEvent")

        event_type = type(event)
        for registration in list(self._subscribers.get(event_type, [])):
            handler = registration.handler
            subscriber_name = getattr(handler, "__qualname__", getattr(handler, "__name__", "unknown"))
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: One failing subscriber must not starve the others
                logger.error(
                    "Error in event subscriber",
                    subscriber_name=subscriber_name,
                    event_type=event_type.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )

    def get_subscriber_count(self, event_type: type[BaseEvent]) -> int:
        """Get the number of subscribers for a specific event type."""
        return len(self._subscribers.get(event_type, []))
