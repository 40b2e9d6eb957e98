"""Playback Adapter contract.

The core never talks to a video service directly.  It drives an object
satisfying ``PlaybackAdapter`` and listens for two notifications:

- on_ready(adapter): the player can accept commands
- on_state_change(code): playback state changed; ``code`` is a
  PlayerState value

Commands are fire-and-forget.  Notifications are queued by the adapter
and delivered from ``pump()`` on the host's thread, so a command never
re-enters the caller with a notification.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol


class PlayerState:
    """Player state codes reported through on_state_change."""
    UNSTARTED = -1
    ENDED = 0
    PLAYING = 1
    PAUSED = 2
    BUFFERING = 3
    CUED = 5

    _NAMES = {
        -1: "unstarted",
        0: "ended",
        1: "playing",
        2: "paused",
        3: "buffering",
        5: "cued",
    }

    @classmethod
    def name(cls, code: int) -> str:
        return cls._NAMES.get(code, f"unknown({code})")


ReadyCallback = Callable[["PlaybackAdapter"], None]
StateCallback = Callable[[int], None]


class PlaybackAdapter(Protocol):
    """Transport primitives of a streaming video player."""

    def set_listeners(
        self,
        on_ready: Optional[ReadyCallback] = None,
        on_state_change: Optional[StateCallback] = None,
    ) -> None: ...

    def pump(self) -> int: ...

    def get_current_time(self) -> float: ...

    def get_duration(self) -> float: ...

    def seek_to(self, seconds: float, allow_seek_ahead: bool = True) -> None: ...

    def play_video(self) -> None: ...

    def pause_video(self) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def set_playback_rate(self, rate: float) -> None: ...

    def load_video_by_id(self, video_id: str) -> None: ...

    def close(self) -> None: ...
