"""CueDeck User Data Management.

Handles persistent user data:
- Preferences (session defaults)
- Profiles (per-deck cue points, tempo, volume and gate mode)

User Data Structure:
    ~/Documents/CueDeck/
    ├── preferences.json     # Session defaults
    └── profiles/            # One JSON record per profile id
        ├── default.json
        ├── default.deck_a.json
        └── default.deck_b.json

The root can be redirected with the CUEDECK_HOME environment variable.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


# ============================================================================
# PATH CONFIGURATION
# ============================================================================

def get_cuedeck_root() -> Path:
    """Get the root CueDeck user data directory.

    Windows: C:\\Users\\<user>\\Documents\\CueDeck
    Linux/Mac: ~/Documents/CueDeck

    Creates the directory if it doesn't exist.
    """
    override = os.environ.get('CUEDECK_HOME')
    if override:
        root = Path(override)
    else:
        if os.name == 'nt':
            docs = Path(os.environ.get('USERPROFILE', str(Path.home()))) / 'Documents'
        else:
            docs = Path.home() / 'Documents'
        root = docs / 'CueDeck'
    root.mkdir(parents=True, exist_ok=True)
    return root


def get_preferences_path() -> Path:
    """Get path to preferences.json file."""
    return get_cuedeck_root() / 'preferences.json'


def get_profiles_dir() -> Path:
    """Get path to the profiles directory."""
    path = get_cuedeck_root() / 'profiles'
    path.mkdir(parents=True, exist_ok=True)
    return path


# ============================================================================
# PREFERENCES
# ============================================================================

DEFAULT_PREFERENCES: Dict[str, Any] = {
    'variant': 'single',
    'profile_id': 'default',
    'default_video_id': 'dQw4w9WgXcQ',
    'player': 'simulated',
    'poll_interval_ms': 100,
    'seek_debounce_ms': 1000,
    'min_rate': 0.25,
    'max_rate': 2.0,
    'rate_step': 0.05,
    'log_level': 'INFO',
}


def load_preferences() -> Dict[str, Any]:
    """Load user preferences from disk.

    Returns
    -------
    dict
        Preferences dictionary with defaults filled in
    """
    prefs = DEFAULT_PREFERENCES.copy()
    path = get_preferences_path()
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                saved = json.load(f)
            if isinstance(saved, dict):
                prefs.update(saved)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError, RecursionError):
            logger.warning("Ignoring unreadable preferences file %s", path)
    return prefs


def save_preferences(prefs: Dict[str, Any]) -> bool:
    """Save user preferences to disk.

    Parameters
    ----------
    prefs : dict
        Preferences dictionary

    Returns
    -------
    bool
        True if saved successfully
    """
    path = get_preferences_path()
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(prefs, f, indent=2)
        return True
    except (IOError, TypeError, ValueError):
        logger.exception("Could not save preferences to %s", path)
        return False
