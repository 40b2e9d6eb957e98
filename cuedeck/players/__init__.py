"""Playback adapters.

- base: the PlaybackAdapter contract and PlayerState codes
- simulated: clock-driven in-process player
- mpv: external mpv process over JSON IPC
"""

from __future__ import annotations

import time
from typing import Callable

from .base import PlaybackAdapter, PlayerState
from .simulated import SimulatedPlayer

__all__ = ['PlaybackAdapter', 'PlayerState', 'SimulatedPlayer', 'create_player']


def create_player(kind: str, clock: Callable[[], float] = time.monotonic) -> PlaybackAdapter:
    """Build a player adapter by name ('simulated' or 'mpv')."""
    kind = (kind or 'simulated').lower()
    if kind == 'simulated':
        return SimulatedPlayer(clock=clock)
    if kind == 'mpv':
        from .mpv import MpvPlayer
        return MpvPlayer()
    raise ValueError(f"unknown player '{kind}'")
