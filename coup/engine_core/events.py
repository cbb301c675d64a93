"""
Game Events - Structured records of what happened, for presentation.

Events are produced by the reducer, stored on GameState.event_log and
fanned out through an EventBus. They are output only: nothing in the
engine reads them back to decide control flow.

Usage:
    bus = EventBus()
    bus.on(EventType.PLAYER_ELIMINATED, lambda e: print(e.data["name"]))
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable
import logging

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events the engine can publish."""
    TURN_STARTED = "turn.started"
    ACTION_DECLARED = "action.declared"
    CHALLENGE_ISSUED = "challenge.issued"
    CHALLENGE_RESOLVED = "challenge.resolved"
    BLOCK_DECLARED = "block.declared"
    BLOCK_RESOLVED = "block.resolved"
    EFFECT_APPLIED = "effect.applied"
    CARD_REPLACED = "card.replaced"
    INFLUENCE_LOST = "influence.lost"
    PLAYER_ELIMINATED = "player.eliminated"
    GAME_OVER = "game.over"


@dataclass
class GameEvent:
    """
    Event payload.

    Attributes:
        type: The event type
        data: Event-specific fields (ids, names, roles as strings)
        turn_number: Turn during which the event happened
        message: One-line human-readable summary
    """
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    turn_number: int = 0
    message: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.message or self.data}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "turn_number": self.turn_number,
            "message": self.message,
            "data": dict(self.data),
        }


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous event fan-out.

    Handlers run immediately on publish(). A failing handler is logged
    and the remaining handlers still run.
    """

    def __init__(self):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._any_listeners: list[EventHandler] = []

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to one event type."""
        handlers = self._listeners.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def on_any(self, handler: EventHandler) -> None:
        """Subscribe to every event."""
        if handler not in self._any_listeners:
            self._any_listeners.append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(
        self,
        event_type: EventType,
        message: str = "",
        turn_number: int = 0,
        **data: Any,
    ) -> GameEvent:
        """
        Build an event and publish it.

        Returns:
            The emitted GameEvent (for chaining/testing)
        """
        event = GameEvent(type=event_type, data=data, turn_number=turn_number, message=message)
        self.publish(event)
        return event

    def publish(self, event: GameEvent) -> None:
        """Deliver an already-built event to subscribers."""
        logger.debug("event %s", event)
        for handler in self._listeners.get(event.type, []) + self._any_listeners:
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler failed for %s", event.type.value)

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, [])) + len(self._any_listeners)

    def clear(self) -> None:
        """Drop all subscriptions. Useful for testing."""
        self._listeners.clear()
        self._any_listeners.clear()
