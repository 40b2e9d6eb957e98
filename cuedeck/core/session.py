"""CueDeck Session.

Owns the decks of one variant, the crossfader (dual-deck only), the
preferences and the profile stores.  Front ends hold one Session and
call ``tick()`` from their poll timer (~100 ms).

Single variant: one deck "main" on the 10 x 30 layout.
Dual variant:   decks "A" and "B" on the 3 x 15 layouts, crossfaded.

Each deck gets its own adapter from the player factory.  The adapter is
attached when it reports ready, never before.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..players import create_player
from ..players.base import PlaybackAdapter
from .deck import Deck
from .keymap import layouts_for_variant
from .mixer import Crossfader
from .profile import ProfileStore
from .user_data import DEFAULT_PREFERENCES, load_preferences
from .video_id import format_time

logger = logging.getLogger(__name__)

SINGLE_DECK_IDS = ("main",)
DUAL_DECK_IDS = ("A", "B")

PlayerFactory = Callable[[], PlaybackAdapter]


class Session:
    """Decks, mixer and persistence for one running controller.

    Parameters:
        variant: 'single' or 'dual'; defaults to the preference.
        prefs: Preferences dict; loaded from disk when None.
        player_factory: Builds one adapter per deck; defaults to the
            preference's player kind.
        clock: Monotonic seconds source shared by every deck.
        profile_dir: Directory for profiles; the user profiles dir when None.
        persist: Save and restore profiles.
    """

    def __init__(
        self,
        variant: Optional[str] = None,
        prefs: Optional[Dict[str, Any]] = None,
        player_factory: Optional[PlayerFactory] = None,
        clock: Callable[[], float] = time.monotonic,
        profile_dir: Optional[Path] = None,
        persist: bool = True,
    ) -> None:
        self.prefs = dict(DEFAULT_PREFERENCES)
        self.prefs.update(prefs if prefs is not None else load_preferences())
        self.variant = variant or self.prefs['variant']
        self.clock = clock
        if player_factory is None:
            kind = self.prefs['player']
            player_factory = lambda: create_player(kind, clock=clock)
        self._player_factory = player_factory
        self.adapters: Dict[str, PlaybackAdapter] = {}

        layouts = layouts_for_variant(self.variant)
        deck_ids = SINGLE_DECK_IDS if self.variant == 'single' else DUAL_DECK_IDS
        profile_id = self.prefs['profile_id']

        self.decks: Dict[str, Deck] = {}
        for deck_id, layout in zip(deck_ids, layouts):
            store = None
            if persist:
                store_id = profile_id if self.variant == 'single' else f"{profile_id}.deck_{deck_id.lower()}"
                store = ProfileStore(store_id, layout.capacity, directory=profile_dir)
            deck = Deck(
                deck_id, layout, store=store, clock=clock,
                seek_debounce=self.prefs['seek_debounce_ms'] / 1000.0,
                min_rate=self.prefs['min_rate'],
                max_rate=self.prefs['max_rate'],
                video_id=self.prefs['default_video_id'],
            )
            if store is not None:
                profile = store.load()
                if profile is not None:
                    deck.restore(profile)
            self.decks[deck_id] = deck

        self.active_deck_id = deck_ids[0]
        self.crossfader: Optional[Crossfader] = None
        if self.variant == 'dual':
            self.crossfader = Crossfader(self.decks["A"], self.decks["B"])

        logger.info("Session started: %s variant, decks %s", self.variant, ", ".join(self.decks))

    # ---- Decks --------------------------------------------------------------

    @property
    def active_deck(self) -> Deck:
        return self.decks[self.active_deck_id]

    def deck(self, deck_id: Optional[str] = None) -> Deck:
        """Look up a deck by id (case-insensitive); the active deck if None."""
        if deck_id is None:
            return self.active_deck
        for key, deck in self.decks.items():
            if key.lower() == str(deck_id).lower():
                return deck
        raise KeyError(deck_id)

    def select_deck(self, deck_id: str) -> Deck:
        deck = self.deck(deck_id)
        self.active_deck_id = deck.deck_id
        return deck

    def deck_for_key(self, key: str) -> Optional[Deck]:
        """The deck whose layout binds ``key``.

        In the single variant that is the only deck.  In the dual variant
        each deck owns half of the keyboard.
        """
        for deck in self.decks.values():
            if deck.handles_key(key):
                return deck
        return None

    # ---- Keyboard -----------------------------------------------------------

    def key_down(self, key: str) -> Optional[str]:
        deck = self.deck_for_key(key)
        if deck is None:
            return None
        return deck.key_down(key)

    def key_up(self, key: str) -> bool:
        deck = self.deck_for_key(key)
        if deck is None:
            return False
        return deck.key_up(key)

    # ---- Adapters -----------------------------------------------------------

    def connect(self) -> None:
        """Create an adapter for each deck and wait for it to report ready."""
        for deck_id, deck in self.decks.items():
            if deck_id in self.adapters:
                continue
            adapter = self._player_factory()
            self.adapters[deck_id] = adapter
            adapter.set_listeners(
                on_ready=lambda handle, d=deck: d.attach(handle),
                on_state_change=deck.transport.on_state_change,
            )
            logger.debug("Deck %s: adapter created, waiting for ready", deck_id)

    def tick(self) -> None:
        """One poll cycle: deliver adapter notifications, then poll every deck."""
        for adapter in list(self.adapters.values()):
            adapter.pump()
        for deck in self.decks.values():
            deck.transport.poll()

    def close(self) -> None:
        """Detach and close every adapter."""
        for deck_id, adapter in list(self.adapters.items()):
            self.decks[deck_id].detach()
            adapter.close()
        self.adapters.clear()
        if self.crossfader is not None:
            self.crossfader.close()
        logger.info("Session closed")

    def status_lines(self) -> List[str]:
        lines = []
        for deck_id, deck in self.decks.items():
            t = deck.transport
            marker = "*" if deck_id == self.active_deck_id else " "
            state = "PLAYING" if t.is_playing else "PAUSED"
            if not t.is_ready:
                state = "NOT READY"
            gate = " GATE" if deck.is_gate_mode else ""
            lines.append(
                f"{marker} Deck {deck_id}: {state} {format_time(t.current_time)}/{format_time(t.duration)} "
                f"video={t.video_id or '-'} slot={deck.active_slot + 1} "
                f"tempo={t.playback_rate:.2f}x vol={t.volume:.0f}%{gate} "
                f"cues={deck.cues.count_set()}/{len(deck.cues)}"
            )
        if self.crossfader is not None:
            a, b = self.crossfader.volumes
            lines.append(f"  Crossfader: {self.crossfader.position:+.2f} (A {a:.0f}% / B {b:.0f}%)")
        return lines
