"""Deck and mixer panels.

Panels:
- DeckPanel: per-deck load/play/scrub/tempo/volume/slot/gate/cue controls
- CrossfaderPanel: crossfader slider between decks A and B
"""

from .deck_panel import DeckPanel
from .crossfader_panel import CrossfaderPanel

__all__ = [
    'DeckPanel',
    'CrossfaderPanel',
]
