"""Crossfader Mixer (dual-deck).

One bipolar control value x in [-1, 1] ducks the inactive deck:

    x = -1   A 100, B   0
    x =  0   A 100, B 100
    x = +1   A   0, B 100

The centre is not a quiet point; this is not a constant-power pan.
"""

from __future__ import annotations

import logging
import math
from typing import Tuple

import numpy as np

from .deck import Deck
from .events import DeckEvent, DeckEventType

logger = logging.getLogger(__name__)


def _position(x: float) -> float:
    x = float(x)
    if not math.isfinite(x):
        raise ValueError(f"crossfader position must be finite, got {x}")
    return float(np.clip(x, -1.0, 1.0))


def crossfade_volumes(x: float) -> Tuple[float, float]:
    """Volumes (A, B) on the 0-100 scale for crossfader position ``x``.

    Raises ValueError for a NaN or infinite position.
    """
    x = _position(x)
    volume_a = (1.0 - x) * 100.0 if x > 0 else 100.0
    volume_b = (1.0 + x) * 100.0 if x < 0 else 100.0
    return volume_a, volume_b


class Crossfader:
    """Pushes crossfaded volumes into two decks' transports.

    Re-pushes whenever either deck's adapter attaches, so a late deck
    comes up at the right level.
    """

    def __init__(self, deck_a: Deck, deck_b: Deck, position: float = 0.0) -> None:
        self.deck_a = deck_a
        self.deck_b = deck_b
        self.position = _position(position)
        deck_a.events.subscribe(self._on_attached, DeckEventType.ATTACHED)
        deck_b.events.subscribe(self._on_attached, DeckEventType.ATTACHED)

    @property
    def volumes(self) -> Tuple[float, float]:
        return crossfade_volumes(self.position)

    def set_position(self, x: float) -> Tuple[float, float]:
        self.position = _position(x)
        logger.debug("Crossfader at %+.2f", self.position)
        return self.push()

    def push(self) -> Tuple[float, float]:
        volume_a, volume_b = self.volumes
        self.deck_a.transport.set_volume(volume_a)
        self.deck_b.transport.set_volume(volume_b)
        return volume_a, volume_b

    def _on_attached(self, event: DeckEvent) -> None:
        self.push()

    def close(self) -> None:
        self.deck_a.events.unsubscribe(self._on_attached, DeckEventType.ATTACHED)
        self.deck_b.events.unsubscribe(self._on_attached, DeckEventType.ATTACHED)
