"""Core functionality for CueDeck.

This subpackage contains the Session class, which owns the decks of one
variant and their crossfader.  Each Deck combines a cue store, a key
layout, a transport state machine and a gate controller.  Profiles
persist the durable part of a deck as JSON under the user data root.
"""

from .session import Session  # noqa: F401

# Deck building blocks
from .cues import CueStore  # noqa: F401
from .keymap import KeyLayout, SINGLE_DECK_LAYOUT, DECK_A_LAYOUT, DECK_B_LAYOUT  # noqa: F401
from .transport import Transport, TransportStatus  # noqa: F401
from .gate import GateController, GateState, CueAction  # noqa: F401
from .deck import Deck  # noqa: F401
from .mixer import Crossfader, crossfade_volumes  # noqa: F401
from .profile import PersistedProfile, ProfileStore  # noqa: F401
from .video_id import extract_video_id, format_time  # noqa: F401
