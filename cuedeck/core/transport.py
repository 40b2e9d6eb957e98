"""Transport State Machine.

Owns one deck's adapter handle and the locally held transport state:
is_playing, playback rate, volume, video id and the current time
estimate.

States:
    IDLE   no adapter attached; every command is a silent no-op
    READY  adapter attached; commands are forwarded

``is_playing`` mirrors the adapter.  It only changes when the adapter
reports a state change, except for ``pause(force_local=True)`` which the
gate uses to stop visibly on key release.

Rate and volume are local-authoritative: the adapter has no
confirmation event for them, so they are updated as soon as the call is
issued.

Seek debounce
-------------
A seek opens a window (default 1 s) during which ``poll()`` does not
read the position from the adapter, so a read that predates the seek
cannot snap the scrubber back.  While the user is dragging, polling is
suspended entirely.  The window is a timestamp comparison; nothing needs
to be cancelled when it elapses.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

from ..players.base import PlaybackAdapter, PlayerState
from .cues import CueStore
from .events import DeckEvent, DeckEventType, EventHub
from .video_id import extract_video_id

logger = logging.getLogger(__name__)

DEFAULT_SEEK_DEBOUNCE = 1.0
MIN_RATE = 0.25
MAX_RATE = 2.0


class TransportStatus:
    IDLE = "idle"
    READY = "ready"


class Transport:
    """Transport state for one deck.

    Parameters:
        deck_id: Identifier used in published events.
        cues: The deck's cue store; reset when a new video loads.
        events: Hub that receives this transport's DeckEvents.
        clock: Monotonic seconds source.
        seek_debounce: Seconds of poll suppression after a seek.
    """

    def __init__(
        self,
        deck_id: str,
        cues: CueStore,
        events: Optional[EventHub] = None,
        clock: Callable[[], float] = time.monotonic,
        seek_debounce: float = DEFAULT_SEEK_DEBOUNCE,
        min_rate: float = MIN_RATE,
        max_rate: float = MAX_RATE,
    ) -> None:
        if not 0 < min_rate <= max_rate:
            raise ValueError(f"invalid rate range [{min_rate}, {max_rate}]")
        self.deck_id = deck_id
        self.cues = cues
        self.events = events or EventHub()
        self._clock = clock
        self.seek_debounce = seek_debounce
        self.min_rate = min_rate
        self.max_rate = max_rate

        self._adapter: Optional[PlaybackAdapter] = None
        self.is_playing = False
        self.playback_rate = 1.0
        self.volume = 100.0
        self.video_id = ""
        self.current_time = 0.0
        self.duration = 0.0
        self.is_dragging = False
        self._seek_until = 0.0

    # ---- Lifecycle ----------------------------------------------------------

    @property
    def status(self) -> str:
        return TransportStatus.READY if self._adapter is not None else TransportStatus.IDLE

    @property
    def is_ready(self) -> bool:
        return self._adapter is not None

    @property
    def adapter(self) -> Optional[PlaybackAdapter]:
        return self._adapter

    def attach(self, adapter: PlaybackAdapter, cue_video: bool = True) -> None:
        """IDLE -> READY.  Applies the last-known volume and rate.

        With ``cue_video`` the current video id is cued on the adapter
        without touching the cue store (a restored profile keeps its cues).
        """
        self._adapter = adapter
        if cue_video and self.video_id:
            adapter.load_video_by_id(self.video_id)
        adapter.set_volume(self.volume)
        adapter.set_playback_rate(self.playback_rate)
        logger.info("Deck %s: adapter attached (volume %.0f, rate %.2fx)",
                    self.deck_id, self.volume, self.playback_rate)
        self._fire(DeckEventType.ATTACHED)

    def detach(self) -> None:
        """READY -> IDLE.  Polling stops with the adapter."""
        if self._adapter is None:
            return
        self._adapter = None
        self.is_dragging = False
        self._seek_until = 0.0
        if self.is_playing:
            self.is_playing = False
            self._fire(DeckEventType.STATE_CHANGED, is_playing=False)
        logger.info("Deck %s: adapter detached", self.deck_id)
        self._fire(DeckEventType.DETACHED)

    # ---- Adapter notifications ---------------------------------------------

    def on_state_change(self, code: int) -> None:
        """Mirror the adapter's playback state.  Always authoritative."""
        playing = code == PlayerState.PLAYING
        logger.debug("Deck %s: player state %s", self.deck_id, PlayerState.name(code))
        if playing != self.is_playing:
            self.is_playing = playing
            self._fire(DeckEventType.STATE_CHANGED, is_playing=playing, code=code)

    # ---- Commands -----------------------------------------------------------

    def _ignored(self, command: str) -> bool:
        logger.debug("Deck %s: %s ignored, no adapter attached", self.deck_id, command)
        return False

    def play(self) -> bool:
        if self._adapter is None:
            return self._ignored("play")
        self._adapter.play_video()
        return True

    def pause(self, force_local: bool = False) -> bool:
        """Pause the adapter.

        With ``force_local`` the local mirror is cleared at once instead of
        waiting for the adapter's notification.
        """
        if self._adapter is None:
            return self._ignored("pause")
        self._adapter.pause_video()
        if force_local and self.is_playing:
            self.is_playing = False
            self._fire(DeckEventType.STATE_CHANGED, is_playing=False, forced=True)
        return True

    def toggle_play(self) -> bool:
        if self.is_playing:
            return self.pause()
        return self.play()

    def seek(self, seconds: float) -> bool:
        """Seek and open the debounce window."""
        if self._adapter is None:
            return self._ignored("seek")
        seconds = self._clamp_time(seconds)
        self._adapter.seek_to(seconds, True)
        self.current_time = seconds
        self._seek_until = self._clock() + self.seek_debounce
        self._fire(DeckEventType.POSITION_CHANGED, time=seconds, seek=True)
        return True

    def jump(self, seconds: float, force_play: bool = False) -> bool:
        """Seek to ``seconds`` and make sure playback runs."""
        if not self.seek(seconds):
            return False
        if force_play or not self.is_playing:
            self._adapter.play_video()
        return True

    def set_rate(self, rate: float) -> bool:
        if self._adapter is None:
            return self._ignored("set_rate")
        rate = min(self.max_rate, max(self.min_rate, float(rate)))
        self._adapter.set_playback_rate(rate)
        if rate != self.playback_rate:
            self.playback_rate = rate
            self._fire(DeckEventType.SETTINGS_CHANGED, playback_rate=rate)
        return True

    def set_volume(self, volume: float) -> bool:
        if self._adapter is None:
            return self._ignored("set_volume")
        volume = min(100.0, max(0.0, float(volume)))
        self._adapter.set_volume(volume)
        if volume != self.volume:
            self.volume = volume
            self._fire(DeckEventType.SETTINGS_CHANGED, volume=volume)
        return True

    def load_video(self, text: str) -> bool:
        """Load a video from an id or URL.

        An unresolvable identifier leaves every piece of state untouched.
        """
        video_id = extract_video_id(text)
        if video_id is None:
            logger.debug("Deck %s: no video id in %r", self.deck_id, text)
            return False
        if self._adapter is None:
            return self._ignored("load_video")
        self._adapter.load_video_by_id(video_id)
        self.is_playing = False
        self.cues.reset_all()
        self.video_id = video_id
        self.current_time = 0.0
        self.duration = 0.0
        self._seek_until = 0.0
        logger.info("Deck %s: loaded video %s", self.deck_id, video_id)
        self._fire(DeckEventType.VIDEO_LOADED, video_id=video_id)
        return True

    # ---- Scrubbing ----------------------------------------------------------

    def begin_scrub(self) -> None:
        self.is_dragging = True

    def scrub_to(self, seconds: float) -> bool:
        return self.seek(seconds)

    def end_scrub(self, seconds: Optional[float] = None) -> bool:
        moved = self.seek(seconds) if seconds is not None else False
        self.is_dragging = False
        return moved

    # ---- Polling ------------------------------------------------------------

    @property
    def polling_suspended(self) -> bool:
        return self.is_dragging or self._clock() < self._seek_until

    def poll(self) -> bool:
        """Refresh duration and, unless suspended, position from the adapter.

        Returns True if the position was read.
        """
        if self._adapter is None:
            return False
        duration = _finite(self._adapter.get_duration())
        if duration != self.duration:
            self.duration = duration
        if self.polling_suspended:
            return False
        position = _finite(self._adapter.get_current_time())
        if position != self.current_time:
            self.current_time = position
            self._fire(DeckEventType.POSITION_CHANGED, time=position)
        return True

    def read_time(self) -> float:
        """Current time for stamping a cue.

        Inside the debounce window the seeked-to time is used, since the
        adapter may still report the pre-seek position.
        """
        if self._adapter is not None and not self.polling_suspended:
            self.current_time = _finite(self._adapter.get_current_time())
        return self.current_time

    # ---- Helpers ------------------------------------------------------------

    def _clamp_time(self, seconds: float) -> float:
        seconds = max(0.0, _finite(seconds))
        if self.duration > 0:
            seconds = min(seconds, self.duration)
        return seconds

    def _fire(self, event_type: str, **data) -> None:
        self.events.fire(DeckEvent(event_type, self.deck_id, data))


def _finite(value) -> float:
    """Coerce an adapter reading to a non-negative float (None/NaN -> 0)."""
    try:
        value = float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value
