"""CueDeck Deck Commands.

Commands are organized into:
- Video & Transport
- Tempo & Volume
- Slots & Cues
- Gate Mode
- Decks & Crossfader
- Preferences
- Status & Polling

Commands act on the active deck, except /key which picks its deck from
the key itself.
Transport commands on a deck whose player is not ready yet are ignored
and say so.
"""

from __future__ import annotations

import math
from typing import List, Optional, TYPE_CHECKING

from ..core.cues import as_cue_time
from ..core.gate import CueAction
from ..core.user_data import (
    DEFAULT_PREFERENCES,
    get_preferences_path,
    load_preferences,
    save_preferences,
)
from ..core.video_id import format_time

if TYPE_CHECKING:
    from ..core.deck import Deck
    from ..core.session import Session


def _parse_time(text: str) -> float:
    """Parse '75', '75.5' or '1:15.5' into seconds."""
    if ':' in text:
        minutes, _, seconds = text.partition(':')
        return int(minutes) * 60 + float(seconds)
    return float(text)


def _not_ready(deck: "Deck") -> Optional[str]:
    if not deck.transport.is_ready:
        return f"Deck {deck.deck_id}: player not ready (command ignored)"
    return None


def _resolve_cue(deck: "Deck", token: str) -> int:
    """A cue reference is a layout key (active slot) or a flat index."""
    index = deck.layout.resolve(token, deck.active_slot)
    if index is not None:
        return index
    index = int(token)
    if not 0 <= index < len(deck.cues):
        raise IndexError(f"cue index {index} out of range [0, {len(deck.cues)})")
    return index


# ============================================================================
# VIDEO & TRANSPORT
# ============================================================================

def cmd_load(session: "Session", args: List[str]) -> str:
    """Load a video on the active deck.

    Usage:
      /load <url|id>     YouTube URL or 11-character video id

    Loading a new video clears every cue on the deck.

    Short alias: /l
    """
    deck = session.active_deck
    if not args:
        return f"Deck {deck.deck_id}: video {deck.transport.video_id or '-'}"
    err = _not_ready(deck)
    if err:
        return err
    text = ' '.join(args)
    if not deck.load_video(text):
        return f"ERROR: no video id in '{text}'"
    return f"OK: Deck {deck.deck_id} loaded {deck.transport.video_id} (cues cleared)"


def cmd_play(session: "Session", args: List[str]) -> str:
    """Start playback on the active deck."""
    deck = session.active_deck
    err = _not_ready(deck)
    if err:
        return err
    deck.transport.play()
    return f"OK: Deck {deck.deck_id} play"


def cmd_pause(session: "Session", args: List[str]) -> str:
    """Pause the active deck."""
    deck = session.active_deck
    err = _not_ready(deck)
    if err:
        return err
    deck.transport.pause()
    return f"OK: Deck {deck.deck_id} pause"


def cmd_pp(session: "Session", args: List[str]) -> str:
    """Toggle play/pause on the active deck.

    Short alias: /p
    """
    deck = session.active_deck
    err = _not_ready(deck)
    if err:
        return err
    action = "pause" if deck.transport.is_playing else "play"
    deck.transport.toggle_play()
    return f"OK: Deck {deck.deck_id} {action}"


def cmd_seek(session: "Session", args: List[str]) -> str:
    """Seek the active deck.

    Usage:
      /seek <t>      Absolute position (seconds or m:ss)
      /seek +<s>     Forward by s seconds
      /seek -<s>     Back by s seconds
    """
    deck = session.active_deck
    if not args:
        return f"Deck {deck.deck_id}: {format_time(deck.transport.current_time)}"
    err = _not_ready(deck)
    if err:
        return err
    token = args[0]
    try:
        if token[0] in '+-':
            target = deck.transport.current_time + float(token)
        else:
            target = _parse_time(token)
    except ValueError:
        return f"ERROR: invalid time '{token}'"
    deck.transport.seek(target)
    return f"OK: Deck {deck.deck_id} at {format_time(deck.transport.current_time)}"


# ============================================================================
# TEMPO & VOLUME
# ============================================================================

def cmd_tempo(session: "Session", args: List[str]) -> str:
    """Get or set playback rate.

    Usage:
      /tempo             Show rate
      /tempo <r>         Set rate (clamped to 0.25-2.0)
      /tempo + | -       Nudge by one step
      /tempo reset       Back to 1.0

    Short alias: /t
    """
    deck = session.active_deck
    t = deck.transport
    if not args:
        return f"Deck {deck.deck_id}: tempo {t.playback_rate:.2f}x"
    err = _not_ready(deck)
    if err:
        return err
    token = args[0].lower()
    step = float(session.prefs.get('rate_step', 0.05))
    if token == '+':
        rate = t.playback_rate + step
    elif token == '-':
        rate = t.playback_rate - step
    elif token in ('reset', 'r', '1x'):
        rate = 1.0
    else:
        try:
            rate = float(token.rstrip('x'))
        except ValueError:
            return f"ERROR: invalid tempo '{args[0]}'"
    t.set_rate(rate)
    return f"OK: Deck {deck.deck_id} tempo {t.playback_rate:.2f}x"


def cmd_vol(session: "Session", args: List[str]) -> str:
    """Get or set volume (0-100).

    In the dual-deck variant the crossfader overrides this on its next move.

    Short alias: /v
    """
    deck = session.active_deck
    if not args:
        return f"Deck {deck.deck_id}: volume {deck.transport.volume:.0f}%"
    err = _not_ready(deck)
    if err:
        return err
    try:
        volume = float(args[0].rstrip('%'))
    except ValueError:
        return f"ERROR: invalid volume '{args[0]}'"
    deck.transport.set_volume(volume)
    return f"OK: Deck {deck.deck_id} volume {deck.transport.volume:.0f}%"


# ============================================================================
# SLOTS & CUES
# ============================================================================

def cmd_slot(session: "Session", args: List[str]) -> str:
    """Get or select the active slot (1-based)."""
    deck = session.active_deck
    count = deck.layout.slot_count
    if not args:
        return f"Deck {deck.deck_id}: slot {deck.active_slot + 1}/{count}"
    try:
        slot = int(args[0]) - 1
        deck.select_slot(slot)
    except (ValueError, IndexError):
        return f"ERROR: slot must be 1-{count}"
    return f"OK: Deck {deck.deck_id} slot {slot + 1}"


def _cue_listing(deck: "Deck") -> str:
    lines = [f"Deck {deck.deck_id} slot {deck.active_slot + 1}:"]
    cues = deck.visible_cues()
    per_row = len(deck.layout.rows[0]) if deck.layout.rows else len(cues)
    for start in range(0, len(cues), per_row):
        row = cues[start:start + per_row]
        lines.append("  " + "  ".join(
            f"{key.upper()}:{format_time(t) if t is not None else '--:--'}"
            for key, _, t in row
        ))
    lines.append(f"  {deck.cues.count_set()} of {len(deck.cues)} cues set")
    return '\n'.join(lines)


def cmd_cue(session: "Session", args: List[str]) -> str:
    """Hot-cue management.

    Usage:
      /cue                     List cues in the active slot
      /cue set <key|i> [t]     Set a cue (current time if t omitted)
      /cue clear <key|i>       Clear a cue
      /cue clear all           Clear every cue on the deck
      /cue hit <key|i>         Toggle law: set if empty, else jump

    <key> is a hot-cue key in the active slot; <i> is a flat cue index.
    """
    deck = session.active_deck
    if not args or args[0].lower() in ('list', 'ls'):
        return _cue_listing(deck)

    sub = args[0].lower()
    if len(args) < 2:
        return f"ERROR: /cue {sub} needs a key or index"

    if sub == 'clear' and args[1].lower() == 'all':
        cleared = 0
        for index in range(len(deck.cues)):
            if deck.cues.is_set(index):
                deck.clear_cue(index)
                cleared += 1
        return f"OK: Deck {deck.deck_id} cleared {cleared} cues"

    try:
        index = _resolve_cue(deck, args[1])
    except (ValueError, IndexError) as exc:
        return f"ERROR: {exc}"

    if sub == 'set':
        if len(args) > 2:
            try:
                seconds = _parse_time(args[2])
            except ValueError:
                return f"ERROR: invalid time '{args[2]}'"
        else:
            seconds = deck.transport.read_time()
        if as_cue_time(seconds) is None:
            return "ERROR: cue time must be a finite, non-negative number"
        deck.set_cue(index, seconds)
        return f"OK: cue {index} = {format_time(seconds)}"
    if sub in ('clear', 'del', 'rm'):
        deck.clear_cue(index)
        return f"OK: cue {index} cleared"
    if sub == 'hit':
        err = _not_ready(deck)
        if err:
            return err
        action = deck.activate(index)
        return _describe_action(deck, index, action)
    return f"ERROR: unknown /cue action '{sub}'"


def _describe_action(deck: "Deck", index: Optional[int], action: str) -> str:
    if action == CueAction.SET:
        return f"OK: cue {index} set at {format_time(deck.cues.get(index))}"
    if action in (CueAction.JUMP, CueAction.GATE):
        verb = "gate" if action == CueAction.GATE else "jump"
        return f"OK: {verb} to cue {index} ({format_time(deck.cues.get(index))})"
    if action == CueAction.REPEAT:
        return "OK: key repeat ignored (gate held)"
    return f"Deck {deck.deck_id}: no action"


def cmd_key(session: "Session", args: List[str]) -> str:
    """Simulate a hot-cue or slot key.

    Usage:
      /key <k>          Press and release
      /key <k> down     Key-down only (hold a gate)
      /key <k> up       Key-up only

    In the dual-deck variant the key picks its deck.

    Short alias: /k
    """
    if not args:
        return "ERROR: /key needs a key"
    key = args[0].lower()
    phase = args[1].lower() if len(args) > 1 else 'tap'
    deck = session.deck_for_key(key)
    if deck is None:
        return f"ERROR: '{key}' is not bound"

    if phase == 'up':
        released = session.key_up(key)
        return f"OK: {key.upper()} up" + (" (gate released)" if released else "")

    action = session.key_down(key)
    if phase == 'tap':
        session.key_up(key)
    if action == "slot":
        return f"OK: Deck {deck.deck_id} slot {deck.active_slot + 1}"
    index = deck.layout.resolve(key, deck.active_slot)
    return _describe_action(deck, index, action)


# ============================================================================
# GATE MODE
# ============================================================================

def cmd_gate(session: "Session", args: List[str]) -> str:
    """Gate mode: play while a hot-cue key is held, stop on release.

    Usage:
      /gate            Toggle
      /gate on|off     Set
    """
    deck = session.active_deck
    if not args:
        enabled = not deck.is_gate_mode
    else:
        token = args[0].lower()
        if token in ('on', '1', 'true', 'yes'):
            enabled = True
        elif token in ('off', '0', 'false', 'no'):
            enabled = False
        else:
            return f"ERROR: expected on|off, got '{args[0]}'"
    deck.set_gate_mode(enabled)
    return f"OK: Deck {deck.deck_id} gate mode {'ON' if enabled else 'OFF'}"


# ============================================================================
# DECKS & CROSSFADER
# ============================================================================

def cmd_deck(session: "Session", args: List[str]) -> str:
    """Show decks or select the active deck.

    Usage:
      /deck          List decks
      /deck <id>     Select deck (A, B or main)
    """
    if not args:
        return '\n'.join(session.status_lines())
    try:
        deck = session.select_deck(args[0])
    except KeyError:
        return f"ERROR: no deck '{args[0]}' (have {', '.join(session.decks)})"
    return f"OK: active deck {deck.deck_id}"


def cmd_xfade(session: "Session", args: List[str]) -> str:
    """Crossfader control (dual-deck).

    Usage:
      /xfade            Show position
      /xfade <x>        Set position (-1 = A only, 0 = both, 1 = B only)
      /xfade a|center|b Presets

    Short alias: /xf
    """
    xf = session.crossfader
    if xf is None:
        return "ERROR: crossfader needs the dual-deck variant"
    if args:
        token = args[0].lower()
        presets = {'a': -1.0, 'left': -1.0, 'center': 0.0, 'c': 0.0, 'b': 1.0, 'right': 1.0}
        if token in presets:
            x = presets[token]
        else:
            try:
                x = float(token)
            except ValueError:
                return f"ERROR: invalid crossfader value '{args[0]}'"
        try:
            xf.set_position(x)
        except ValueError:
            return f"ERROR: invalid crossfader value '{args[0]}'"
    a, b = xf.volumes
    bar_pos = int(round((xf.position + 1.0) * 10))
    bar = '░' * bar_pos + '█' + '░' * (20 - bar_pos)
    prefix = "OK: " if args else ""
    return f"{prefix}Crossfader {xf.position:+.2f}  A {a:.0f}%  B {b:.0f}%\n  A {bar} B"


# ============================================================================
# PREFERENCES
# ============================================================================

def _coerce_pref(key: str, text: str):
    default = DEFAULT_PREFERENCES[key]
    if isinstance(default, int):
        return int(text)
    if isinstance(default, float):
        value = float(text)
        if not math.isfinite(value):
            raise ValueError(f"{key} must be finite")
        return value
    return text


def cmd_prefs(session: "Session", args: List[str]) -> str:
    """Show or edit saved preferences.

    Usage:
      /prefs                 Show preferences and where they are stored
      /prefs <key> <value>   Change one preference and save it
      /prefs reset           Write the defaults back

    Variant, player and profile changes take effect on the next start.
    """
    if not args:
        lines = [f"Preferences ({get_preferences_path()}):"]
        lines.extend(f"  {key:18s} {session.prefs.get(key)}" for key in DEFAULT_PREFERENCES)
        return '\n'.join(lines)

    key = args[0].lower()
    if key == 'reset':
        if not save_preferences(DEFAULT_PREFERENCES):
            return "ERROR: failed to reset preferences"
        session.prefs.update(DEFAULT_PREFERENCES)
        return "OK: preferences reset to defaults"
    if key not in DEFAULT_PREFERENCES:
        return f"ERROR: unknown preference '{args[0]}'"
    if len(args) < 2:
        return f"{key} = {session.prefs.get(key)}"
    try:
        value = _coerce_pref(key, args[1])
    except ValueError as exc:
        return f"ERROR: {exc}"

    saved = load_preferences()
    saved[key] = value
    if not save_preferences(saved):
        return "ERROR: failed to save preferences"
    session.prefs[key] = value
    return f"OK: {key} = {value}"


# ============================================================================
# STATUS & POLLING
# ============================================================================

def cmd_status(session: "Session", args: List[str]) -> str:
    """Show every deck.

    Short alias: /st
    """
    return '\n'.join(session.status_lines())


def cmd_tick(session: "Session", args: List[str]) -> str:
    """Run poll cycles by hand.

    Usage:
      /tick [n]     Pump players and poll decks n times (default 1)
    """
    try:
        count = int(args[0]) if args else 1
    except ValueError:
        return f"ERROR: invalid count '{args[0]}'"
    for _ in range(max(1, count)):
        session.tick()
    deck = session.active_deck
    return f"OK: Deck {deck.deck_id} at {format_time(deck.transport.current_time)}"
