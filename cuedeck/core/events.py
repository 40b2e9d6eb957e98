"""Deck change notifications.

Transports and decks publish DeckEvents to subscribers (renderers, the
GUI bridge, persistence) instead of relying on a UI redraw loop to
notice state changes.  Delivery is synchronous on the publishing
thread, in subscription order.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class DeckEventType:
    """Event type constants for deck subscriptions."""
    ATTACHED = "attached"
    DETACHED = "detached"
    STATE_CHANGED = "state_changed"
    POSITION_CHANGED = "position_changed"
    SETTINGS_CHANGED = "settings_changed"
    VIDEO_LOADED = "video_loaded"
    CUES_CHANGED = "cues_changed"
    SLOT_CHANGED = "slot_changed"
    GATE_MODE_CHANGED = "gate_mode_changed"
    GATE_STATE_CHANGED = "gate_state_changed"


class DeckEvent:
    """Payload for a deck change event.

    Attributes:
        event_type: One of the DeckEventType constants.
        deck_id: Identifier of the deck that changed.
        data: Optional extra data (e.g. the cue index that changed).
    """

    __slots__ = ("event_type", "deck_id", "data")

    def __init__(self, event_type: str, deck_id: str = "", data: Optional[dict] = None) -> None:
        self.event_type = event_type
        self.deck_id = deck_id
        self.data = data or {}

    def __repr__(self) -> str:
        return f"DeckEvent({self.event_type!r}, {self.deck_id!r}, {self.data!r})"


Subscriber = Callable[[DeckEvent], None]


class EventHub:
    """Subscriber lists keyed by event type."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def subscribe(self, callback: Subscriber, event_type: Optional[str] = None) -> None:
        """Subscribe to deck events.

        If ``event_type`` is None, the callback receives all events.
        """
        key = event_type or "__all__"
        listeners = self._subscribers.setdefault(key, [])
        if callback not in listeners:
            listeners.append(callback)

    def unsubscribe(self, callback: Subscriber, event_type: Optional[str] = None) -> None:
        """Remove a previously registered callback."""
        key = event_type or "__all__"
        listeners = self._subscribers.get(key, [])
        if callback in listeners:
            listeners.remove(callback)

    def fire(self, event: DeckEvent) -> None:
        """Dispatch an event to all matching subscribers."""
        for cb in list(self._subscribers.get(event.event_type, [])):
            try:
                cb(event)
            except Exception:
                logger.exception("Error in deck subscriber for %s", event.event_type)
        for cb in list(self._subscribers.get("__all__", [])):
            try:
                cb(event)
            except Exception:
                logger.exception("Error in deck subscriber (__all__)")
