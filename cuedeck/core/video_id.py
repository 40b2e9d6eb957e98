"""Video identifier helpers.

Free text from the load field is either a bare identifier of the
player's fixed length or a URL carrying one.
"""

from __future__ import annotations

import math
import re
from typing import Optional

VIDEO_ID_LENGTH = 11

_URL_PATTERN = re.compile(
    r'(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)'
    r'([^"&?/\s]{11})'
)


def extract_video_id(text: str) -> Optional[str]:
    """Return the video identifier in ``text`` or None.

    >>> extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=3")
    'dQw4w9WgXcQ'
    >>> extract_video_id("https://youtu.be/dQw4w9WgXcQ")
    'dQw4w9WgXcQ'
    >>> extract_video_id("dQw4w9WgXcQ")
    'dQw4w9WgXcQ'
    >>> extract_video_id("not a video") is None
    True
    """
    if not text:
        return None
    text = text.strip()
    match = _URL_PATTERN.search(text)
    if match:
        return match.group(1)
    if len(text) == VIDEO_ID_LENGTH and not any(c.isspace() for c in text):
        return text
    return None


def format_time(seconds: float) -> str:
    """Format seconds as m:ss."""
    if not seconds or not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins}:{secs:02d}"
