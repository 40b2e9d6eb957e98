"""Simulated player.

An in-process stand-in for the streaming player, driven by a clock.
Used by the REPL and TUI when no real player is configured, and by the
tests with a fake clock.

Behaviour follows the real service closely enough for the deck:
- Commands take effect immediately on the position model.
- State notifications are queued and delivered by ``pump()``.
- Duration reads 0 after a load until the next ``pump()`` (metadata).
- A freshly loaded video is cued, not playing.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from .base import PlayerState, ReadyCallback, StateCallback

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 212.0


class SimulatedPlayer:
    """Clock-driven fake player.

    Parameters:
        clock: Monotonic seconds source.
        durations: Optional per-video durations; others use ``default_duration``.
        auto_ready: Queue on_ready as soon as listeners are set.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        durations: Optional[Dict[str, float]] = None,
        default_duration: float = DEFAULT_DURATION,
        auto_ready: bool = True,
    ) -> None:
        self._clock = clock
        self._durations = dict(durations or {})
        self._default_duration = default_duration
        self._auto_ready = auto_ready
        self._on_ready: Optional[ReadyCallback] = None
        self._on_state_change: Optional[StateCallback] = None
        self._pending: Deque[Callable[[], None]] = deque()

        self.state = PlayerState.UNSTARTED
        self.video_id = ""
        self.volume = 100.0
        self.rate = 1.0
        self._duration = 0.0
        self._metadata_pending = False
        self._position = 0.0
        self._anchor = self._clock()

        # Command log, handy for inspecting what the deck sent
        self.calls: list = []

    # ---- Notifications ------------------------------------------------------

    def set_listeners(
        self,
        on_ready: Optional[ReadyCallback] = None,
        on_state_change: Optional[StateCallback] = None,
    ) -> None:
        self._on_ready = on_ready
        self._on_state_change = on_state_change
        if self._auto_ready:
            self.announce_ready()

    def announce_ready(self) -> None:
        self._pending.append(lambda: self._on_ready and self._on_ready(self))

    def _notify(self, code: int) -> None:
        self.state = code
        self._pending.append(lambda: self._on_state_change and self._on_state_change(code))

    def pump(self) -> int:
        """Deliver queued notifications.  Returns how many were delivered."""
        if self._metadata_pending:
            self._metadata_pending = False
            self._duration = self._durations.get(self.video_id, self._default_duration)
        if (self.state == PlayerState.PLAYING and self._duration > 0
                and self.get_current_time() >= self._duration):
            self._position = self._duration
            self._notify(PlayerState.ENDED)

        delivered = 0
        while self._pending:
            callback = self._pending.popleft()
            callback()
            delivered += 1
        return delivered

    # ---- Queries ------------------------------------------------------------

    def get_current_time(self) -> float:
        if self.state != PlayerState.PLAYING:
            return self._position
        elapsed = (self._clock() - self._anchor) * self.rate
        position = self._position + elapsed
        if self._duration > 0:
            position = min(position, self._duration)
        return position

    def get_duration(self) -> float:
        return self._duration

    # ---- Commands -----------------------------------------------------------

    def _freeze(self) -> None:
        self._position = self.get_current_time()
        self._anchor = self._clock()

    def seek_to(self, seconds: float, allow_seek_ahead: bool = True) -> None:
        self.calls.append(("seek_to", seconds))
        seconds = max(0.0, float(seconds))
        if self._duration > 0:
            seconds = min(seconds, self._duration)
        self._position = seconds
        self._anchor = self._clock()

    def play_video(self) -> None:
        self.calls.append(("play_video",))
        if self.state == PlayerState.PLAYING:
            return
        self._anchor = self._clock()
        self._notify(PlayerState.PLAYING)

    def pause_video(self) -> None:
        self.calls.append(("pause_video",))
        if self.state != PlayerState.PLAYING:
            return
        self._freeze()
        self._notify(PlayerState.PAUSED)

    def set_volume(self, volume: float) -> None:
        self.calls.append(("set_volume", volume))
        self.volume = max(0.0, min(100.0, float(volume)))

    def set_playback_rate(self, rate: float) -> None:
        self.calls.append(("set_playback_rate", rate))
        self._freeze()
        self.rate = float(rate)

    def load_video_by_id(self, video_id: str) -> None:
        self.calls.append(("load_video_by_id", video_id))
        self.video_id = video_id
        self._position = 0.0
        self._anchor = self._clock()
        self._duration = 0.0
        self._metadata_pending = True
        self._notify(PlayerState.CUED)
        logger.debug("Simulated player cued %s", video_id)

    def close(self) -> None:
        self._pending.clear()
        self._on_ready = None
        self._on_state_change = None

    def count(self, name: str) -> int:
        """Number of times command ``name`` was issued."""
        return sum(1 for call in self.calls if call[0] == name)
