"""Persistence Gateway.

Stores the durable projection of one deck as a single JSON record:

    {
      "videoId": "dQw4w9WgXcQ",
      "cuePoints": [12.5, null, ...],   # fixed length = slots x keys
      "playbackRate": 1.0,
      "volume": 100.0,
      "isGateMode": false
    }

``isPlaying`` and transient UI selection (active slot, drag flag) are
never written.  A loaded profile always comes back paused.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .cues import as_cue_time
from .user_data import get_profiles_dir

logger = logging.getLogger(__name__)


@dataclass
class PersistedProfile:
    """Durable state of one deck.

    Attributes:
        video_id: Identifier of the loaded video.
        cue_points: Cue times in flat index order, None where unset.
        playback_rate: Tempo multiplier.
        volume: 0-100.
        is_gate_mode: Gate mode flag.
        is_playing: Always False once loaded.
    """
    video_id: str
    cue_points: List[Optional[float]] = field(default_factory=list)
    playback_rate: float = 1.0
    volume: float = 100.0
    is_gate_mode: bool = False
    is_playing: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'videoId': self.video_id,
            'cuePoints': list(self.cue_points),
            'playbackRate': self.playback_rate,
            'volume': self.volume,
            'isGateMode': self.is_gate_mode,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], capacity: int) -> "PersistedProfile":
        """Build a profile sized to ``capacity`` cues.

        Raises ValueError on a record that cannot describe a deck.
        """
        if not isinstance(data, dict):
            raise ValueError("profile record must be an object")
        video_id = data.get('videoId')
        if not isinstance(video_id, str):
            raise ValueError("profile has no videoId")
        raw_cues = data.get('cuePoints', [])
        if not isinstance(raw_cues, list):
            raise ValueError("cuePoints must be a list")

        cues: List[Optional[float]] = [None] * capacity
        for i, value in enumerate(raw_cues[:capacity]):
            cues[i] = as_cue_time(value)

        rate = _number(data.get('playbackRate'), 1.0)
        if rate <= 0:
            rate = 1.0

        return cls(
            video_id=video_id,
            cue_points=cues,
            playback_rate=rate,
            volume=min(100.0, max(0.0, _number(data.get('volume'), 100.0))),
            is_gate_mode=bool(data.get('isGateMode', False)),
            is_playing=False,
        )


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    try:
        value = float(value)
    except OverflowError:
        return default
    if not math.isfinite(value):
        return default
    return value


class ProfileStore:
    """Reads and writes one deck's profile under a fixed identifier.

    Parameters:
        profile_id: Key of the record (file stem).
        capacity: Cue count the deck expects.
        directory: Where records live; defaults to the user profiles dir.
    """

    def __init__(self, profile_id: str, capacity: int, directory: Optional[Path] = None) -> None:
        self.profile_id = profile_id
        self.capacity = capacity
        self._directory = Path(directory) if directory is not None else None

    @property
    def path(self) -> Path:
        directory = self._directory if self._directory is not None else get_profiles_dir()
        return directory / f'{self.profile_id}.json'

    def save(self, profile: PersistedProfile) -> bool:
        """Write the profile.  Returns True on success."""
        path = self.path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(profile.to_dict(), f, indent=2)
            return True
        except (IOError, OSError, TypeError, ValueError):
            logger.exception("Could not save profile %s", self.profile_id)
            return False

    def load(self) -> Optional[PersistedProfile]:
        """Read the profile, or None if absent or unreadable."""
        path = self.path
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return PersistedProfile.from_dict(data, self.capacity)
        except (json.JSONDecodeError, OSError, ValueError, UnicodeDecodeError,
                OverflowError, RecursionError, TypeError) as exc:
            logger.warning("Ignoring corrupt profile %s: %s", path, exc)
            return None
