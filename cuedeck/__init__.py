"""CueDeck package.

Hot-cue deck controller for a streaming video player.  Marks playback
positions on a timeline, recalls them from the keyboard, organises them
into slots and drives transport on one deck or two crossfaded decks.

FEATURES:
- 10 slots x 30 keys of cue points on a single deck
- Dual-deck variant with 3 slots x 15 keys per deck and a crossfader
- Gate mode: hold a key to play from its cue, release to stop
- Debounced seeking so stale position reads never snap the scrubber back
- Per-profile persistence of cues, tempo, volume and gate mode

COMMANDS:
- /load <url|id>   - Load a video on the active deck
- /pp              - Toggle play/pause
- /key <k>         - Press a hot-cue key
- /gate on|off     - Gate mode
- /xfade <-1..1>   - Crossfader (dual-deck)
"""

__version__ = "1.3.0"
__build__ = "cuedeck_v1.3.0"

__all__ = ["core", "players", "commands"]
