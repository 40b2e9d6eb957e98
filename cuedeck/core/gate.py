"""Gate Controller.

Routes hot-cue key gestures for one deck.  The gate-mode flag is read
once, at key-down, and the decision is kept for the whole gesture so a
key-down/key-up pair always agrees on its semantics.

Gate gesture (gate mode on at key-down):
    set cue     RELEASED -> HELD, jump to the cue and force play
    unset cue   the cue is stamped with the current time; nothing plays
    key repeat  ignored while the gesture is open
    key-up      if this key is HELD: pause at once, HELD -> RELEASED

Toggle gesture (gate mode off at key-down):
    unset cue   stamp the cue with the current time
    set cue     jump to the cue and resume play
    key repeat  another toggle, even if gate mode was switched on meanwhile
    key-up      nothing
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .cues import CueStore
from .events import DeckEvent, DeckEventType
from .transport import Transport

logger = logging.getLogger(__name__)


class GateState:
    RELEASED = "released"
    HELD = "held"


class GestureMode:
    GATE = "gate"
    TOGGLE = "toggle"


class CueAction:
    """What a key-down did."""
    NONE = "none"
    SET = "set"
    JUMP = "jump"
    GATE = "gate"
    REPEAT = "repeat"


class GateController:
    """Released/Held state machine for one deck."""

    def __init__(self, deck_id: str, cues: CueStore, transport: Transport) -> None:
        self.deck_id = deck_id
        self.cues = cues
        self.transport = transport
        self._held_key: Optional[str] = None
        self._gestures: Dict[str, str] = {}

    @property
    def state(self) -> str:
        return GateState.HELD if self._held_key is not None else GateState.RELEASED

    @property
    def held_key(self) -> Optional[str]:
        return self._held_key

    # ---- Plain toggle -------------------------------------------------------

    def toggle(self, index: int) -> str:
        """Set the cue if absent, else jump to it and resume play."""
        if not self.transport.is_ready:
            logger.debug("Deck %s: cue %d ignored, no adapter attached", self.deck_id, index)
            return CueAction.NONE
        cue = self.cues.get(index)
        if cue is None:
            self._stamp(index)
            return CueAction.SET
        self.transport.jump(cue)
        return CueAction.JUMP

    def _stamp(self, index: int) -> None:
        now = self.transport.read_time()
        self.cues.set(index, now)
        logger.info("Deck %s: cue %d set at %.3fs", self.deck_id, index, now)
        self.transport.events.fire(DeckEvent(
            DeckEventType.CUES_CHANGED, self.deck_id, {"index": index, "time": now},
        ))

    # ---- Key gestures -------------------------------------------------------

    def key_down(self, key: str, index: int, gate_mode: bool) -> str:
        key = key.lower()
        mode = self._gestures.get(key)
        if mode == GestureMode.GATE:
            return CueAction.REPEAT
        if mode == GestureMode.TOGGLE:
            return self.toggle(index)

        if not gate_mode:
            self._gestures[key] = GestureMode.TOGGLE
            return self.toggle(index)

        self._gestures[key] = GestureMode.GATE
        if not self.transport.is_ready:
            return self.toggle(index)
        cue = self.cues.get(index)
        if cue is None:
            self._stamp(index)
            return CueAction.SET

        self._held_key = key
        self.transport.jump(cue, force_play=True)
        logger.info("Deck %s: gate held on %r (cue %d at %.3fs)", self.deck_id, key, index, cue)
        self._fire_gate()
        return CueAction.GATE

    def key_up(self, key: str) -> bool:
        """Finish a gesture.  Returns True if a gate was released."""
        key = key.lower()
        mode = self._gestures.pop(key, None)
        if mode != GestureMode.GATE or key != self._held_key:
            return False
        self.release()
        return True

    def release(self) -> None:
        """HELD -> RELEASED with an immediate local pause."""
        if self._held_key is None:
            return
        key, self._held_key = self._held_key, None
        self.transport.pause(force_local=True)
        logger.info("Deck %s: gate released on %r", self.deck_id, key)
        self._fire_gate()

    def cancel(self) -> None:
        """Drop every open gesture without touching playback."""
        had_hold = self._held_key is not None
        self._held_key = None
        self._gestures.clear()
        if had_hold:
            self._fire_gate()

    def _fire_gate(self) -> None:
        self.transport.events.fire(DeckEvent(
            DeckEventType.GATE_STATE_CHANGED, self.deck_id,
            {"state": self.state, "key": self._held_key},
        ))
