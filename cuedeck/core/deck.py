"""CueDeck Deck.

One deck = cue store + key layout + transport + gate controller, plus
the active slot and the gate-mode flag.  Keyboard events enter here:

    key_down(key) -> slot key?   select slot
                  -> cue key?    gate controller (gate or toggle gesture)
    key_up(key)   -> gate controller

Every mutation of cues, video id, rate, volume or gate mode is written
to the profile store before the call returns.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Tuple

from ..players.base import PlaybackAdapter
from .cues import CueStore
from .events import DeckEvent, DeckEventType, EventHub
from .gate import CueAction, GateController
from .keymap import KeyLayout
from .profile import PersistedProfile, ProfileStore
from .transport import DEFAULT_SEEK_DEBOUNCE, MAX_RATE, MIN_RATE, Transport
from .video_id import extract_video_id

logger = logging.getLogger(__name__)

_DURABLE_EVENTS = (
    DeckEventType.CUES_CHANGED,
    DeckEventType.SETTINGS_CHANGED,
    DeckEventType.VIDEO_LOADED,
    DeckEventType.GATE_MODE_CHANGED,
)


class Deck:
    """A hot-cue deck.

    Parameters:
        deck_id: Short identifier ("main", "A", "B").
        layout: Keyboard layout; fixes the cue store capacity.
        store: Profile store for persistence; None disables saving.
        clock: Monotonic seconds source shared with the transport.
    """

    def __init__(
        self,
        deck_id: str,
        layout: KeyLayout,
        store: Optional[ProfileStore] = None,
        clock: Callable[[], float] = time.monotonic,
        seek_debounce: float = DEFAULT_SEEK_DEBOUNCE,
        min_rate: float = MIN_RATE,
        max_rate: float = MAX_RATE,
        video_id: str = "",
    ) -> None:
        self.deck_id = deck_id
        self.layout = layout
        self.store = store
        self.events = EventHub()
        self.cues = CueStore(layout.capacity)
        self.transport = Transport(
            deck_id, self.cues, self.events, clock=clock,
            seek_debounce=seek_debounce, min_rate=min_rate, max_rate=max_rate,
        )
        self.transport.video_id = video_id
        self.gate = GateController(deck_id, self.cues, self.transport)
        self.active_slot = 0
        self.is_gate_mode = False
        for event_type in _DURABLE_EVENTS:
            self.events.subscribe(self._on_durable_change, event_type)

    # ---- Adapter ------------------------------------------------------------

    def attach(self, adapter: PlaybackAdapter, cue_video: bool = True) -> None:
        self.transport.attach(adapter, cue_video=cue_video)

    def detach(self) -> None:
        self.gate.cancel()
        self.transport.detach()

    # ---- Keyboard -----------------------------------------------------------

    def key_down(self, key: str) -> str:
        """Handle a key press.  Returns a CueAction, or "slot" / "none"."""
        slot = self.layout.slot_for_key(key)
        if slot is not None:
            self.select_slot(slot)
            return "slot"
        index = self.layout.resolve(key, self.active_slot)
        if index is None:
            return CueAction.NONE
        return self.gate.key_down(key, index, self.is_gate_mode)

    def key_up(self, key: str) -> bool:
        return self.gate.key_up(key)

    def handles_key(self, key: str) -> bool:
        return (self.layout.offset_of(key) is not None
                or self.layout.slot_for_key(key) is not None)

    # ---- Slots and cues -----------------------------------------------------

    def select_slot(self, slot: int) -> None:
        if not 0 <= slot < self.layout.slot_count:
            raise IndexError(f"slot {slot} out of range [0, {self.layout.slot_count})")
        if slot != self.active_slot:
            self.active_slot = slot
            self._fire(DeckEventType.SLOT_CHANGED, slot=slot)

    def activate(self, index: int) -> str:
        """Toggle law: set an absent cue, or jump to a set one."""
        return self.gate.toggle(index)

    def set_cue(self, index: int, seconds: float) -> None:
        self.cues.set(index, seconds)
        self._fire(DeckEventType.CUES_CHANGED, index=index, time=float(seconds))

    def clear_cue(self, index: int) -> None:
        """Unset a cue.  Playback already started from it is unaffected."""
        was_set = self.cues.is_set(index)
        self.cues.clear(index)
        if was_set:
            self._fire(DeckEventType.CUES_CHANGED, index=index, time=None)

    def visible_cues(self) -> List[Tuple[str, int, Optional[float]]]:
        """(key, index, time) for every key in the active slot."""
        return [
            (key, index, self.cues.get(index))
            for key, index in zip(self.layout.flat_keys, self.layout.slot_range(self.active_slot))
        ]

    # ---- Gate mode ----------------------------------------------------------

    def set_gate_mode(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled == self.is_gate_mode:
            return
        self.is_gate_mode = enabled
        if not enabled:
            self.gate.release()
        logger.info("Deck %s: gate mode %s", self.deck_id, "ON" if enabled else "OFF")
        self._fire(DeckEventType.GATE_MODE_CHANGED, enabled=enabled)

    # ---- Video --------------------------------------------------------------

    def load_video(self, text: str) -> bool:
        if not self.transport.is_ready:
            return False
        if extract_video_id(text) is None:
            return False
        self.gate.cancel()
        return self.transport.load_video(text)

    # ---- Persistence --------------------------------------------------------

    def snapshot(self) -> PersistedProfile:
        t = self.transport
        return PersistedProfile(
            video_id=t.video_id,
            cue_points=self.cues.to_list(),
            playback_rate=t.playback_rate,
            volume=t.volume,
            is_gate_mode=self.is_gate_mode,
        )

    def restore(self, profile: PersistedProfile) -> None:
        """Rehydrate from a profile.  Never starts playback."""
        self.cues.load(profile.cue_points)
        t = self.transport
        t.video_id = profile.video_id
        t.playback_rate = min(t.max_rate, max(t.min_rate, profile.playback_rate))
        t.volume = min(100.0, max(0.0, profile.volume))
        t.is_playing = False
        self.is_gate_mode = profile.is_gate_mode
        logger.info("Deck %s: restored profile (%s, %d cues)",
                    self.deck_id, profile.video_id, self.cues.count_set())

    def save(self) -> bool:
        if self.store is None:
            return False
        return self.store.save(self.snapshot())

    def _on_durable_change(self, event: DeckEvent) -> None:
        self.save()

    def _fire(self, event_type: str, **data) -> None:
        self.events.fire(DeckEvent(event_type, self.deck_id, data))

    def __repr__(self) -> str:
        return (f"Deck({self.deck_id!r}, video={self.transport.video_id!r}, "
                f"slot={self.active_slot}, cues={self.cues.count_set()})")
