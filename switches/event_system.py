"""
Event system for play sessions.

This module provides an event bus for the things that happen while a player
walks a field. A GameSession emits events and handlers subscribe to respond to
them, for example to play a sound when a switch flips or to show the floor
number when the player takes the stairs.
"""

from enum import Enum, auto
from typing import Callable, Any, Dict, List, Optional
from dataclasses import dataclass, field


class Event(Enum):
    """Event types that can occur during play."""

    SESSION_START = auto()  # kwargs: x, y, z

    PLAYER_MOVED = auto()  # kwargs: x, y, z, direction
    FLOOR_CHANGED = auto()  # kwargs: z

    SWITCH_TOGGLED = auto()  # kwargs: index, state

    GOAL_REACHED = auto()


@dataclass
class EventData:
    """Container for event data passed to handlers."""

    event: Event
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        if self.kwargs:
            kwargs_str = ", ".join(f"{k}={v}" for k, v in self.kwargs.items())
            return f"EventData({self.event.name}, {kwargs_str})"
        return f"EventData({self.event.name})"


# Event handler signature: takes event data, returns nothing
EventHandler = Callable[[EventData], None]


class EventBus:
    """
    Publish/subscribe hub between a session and whatever presents it.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Event, List[EventHandler]] = {}
        self._debug: bool = False

    def set_debug(self, debug: bool) -> None:
        """Enable or disable debug logging of events."""
        self._debug = debug

    def subscribe(self, event: Event, handler: EventHandler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: Event, handler: EventHandler) -> None:
        """
        Unsubscribe a handler from an event type.

        Raises:
            ValueError: If handler was not subscribed to this event
        """
        if handler not in self._handlers.get(event, []):
            raise ValueError(f"Handler not subscribed to event {event}")
        self._handlers[event].remove(handler)

    def emit(self, event: Event, **kwargs: Any) -> None:
        """
        Emit an event, calling every handler subscribed to it in order.

        A handler that raises is reported and skipped so the others still run;
        in debug mode the error propagates instead.
        """
        event_data = EventData(event=event, kwargs=kwargs)

        if self._debug:
            print(f"[EventBus] Emitting: {event_data}")

        for handler in list(self._handlers.get(event, [])):
            try:
                handler(event_data)
            except Exception as e:
                print(f"[EventBus] Handler error for {event.name}: {e}")
                if self._debug:
                    raise

    def clear(self) -> None:
        """Remove all event handlers."""
        self._handlers.clear()

    def handler_count(self, event: Optional[Event] = None) -> int:
        """Number of handlers for `event`, or across all events if None."""
        if event is not None:
            return len(self._handlers.get(event, []))
        return sum(len(handlers) for handlers in self._handlers.values())
