#!/usr/bin/env python
"""CueDeck REPL.

This REPL binds command names starting with '/' to functions in the
cuedeck.commands package.  A poll cycle runs before every command so
player notifications and position reads are current.

Keybindings (readline):
  Ctrl+R   Run last command again
  Ctrl+K   Clear current input line
  Ctrl+C   Quit
  Tab      Autocomplete command names
"""

from __future__ import annotations

import atexit
import logging
import os
import readline
import sys
from typing import Callable, Dict, List, Optional

# Ensure package is importable
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.insert(0, current_dir)

from cuedeck import __version__
from cuedeck.commands import build_command_table
from cuedeck.core.session import Session

logger = logging.getLogger(__name__)


def help_text() -> str:
    """Command summary shown by /h."""
    lines = [
        f"\n=== CueDeck v{__version__} - COMMANDS ===\n",
        "VIDEO & TRANSPORT:",
        "  /load <url|id>     Load a video (clears cues)",
        "  /play  /pause      Transport",
        "  /pp                Toggle play/pause",
        "  /seek <t|+s|-s>    Seek (seconds or m:ss)",
        "",
        "TEMPO & VOLUME:",
        "  /tempo [r|+|-]     Playback rate 0.25-2.0",
        "  /vol [0-100]       Volume",
        "",
        "HOT CUES:",
        "  /slot [n]          Active slot",
        "  /cue               List cues in the active slot",
        "  /cue set <k> [t]   Set cue (key or index)",
        "  /cue clear <k|all> Clear cue(s)",
        "  /cue hit <k>       Set if empty, else jump",
        "  /key <k> [down|up] Press a hot-cue or slot key",
        "  /gate [on|off]     Gate mode (hold to play)",
        "",
        "DECKS:",
        "  /deck [id]         List or select deck",
        "  /xfade [x]         Crossfader -1..1 (dual)",
        "  /status            Show all decks",
        "  /tick [n]          Run poll cycles",
        "  /prefs [key val]   Show or save preferences",
        "",
        "  /h  help    /q  quit",
    ]
    return '\n'.join(lines)


def execute_command(session: Session, commands: Dict[str, Callable], cmd_line: str) -> str:
    """Execute a single command line against ``session``.

    Returns the command's message, "EXIT" for quit, or an "ERROR: ..."
    line.  Command exceptions never propagate.
    """
    cmd_line = cmd_line.strip()
    if not cmd_line.startswith('/'):
        return "ERROR: Commands must start with /"

    parts = cmd_line[1:].split()
    if not parts:
        return ""

    cmd = parts[0].lower()
    args: List[str] = parts[1:]

    if cmd in ('q', 'quit', 'exit'):
        return "EXIT"
    if cmd in ('h', 'help', '?'):
        return help_text()

    func = commands.get(cmd)
    if func is None:
        similar = [c for c in commands.keys() if cmd in c or c.startswith(cmd[:2])][:5]
        if similar:
            return f"ERROR: Unknown command /{cmd}. Did you mean: {', '.join('/' + s for s in similar)}?"
        return f"ERROR: Unknown command /{cmd}"

    try:
        session.tick()
        return func(session, args) or ""
    except Exception as exc:
        logger.exception("Command /%s failed", cmd)
        return f"ERROR: {exc}"


def main(session: Optional[Session] = None) -> None:
    if session is None:
        session = Session()
    commands = build_command_table()
    session.connect()
    session.tick()

    # ===================================================================
    # READLINE SETUP
    # ===================================================================
    _history_path = os.path.expanduser('~/.cuedeck_history')
    try:
        readline.read_history_file(_history_path)
        readline.set_history_length(2000)
    except FileNotFoundError:
        pass
    atexit.register(readline.write_history_file, _history_path)

    _cmd_names = sorted('/' + k for k in commands.keys())

    def _completer(text, state):
        if text.startswith('/'):
            matches = [c for c in _cmd_names if c.startswith(text)]
        else:
            matches = [c for c in _cmd_names if c.startswith('/' + text)]
        if state < len(matches):
            return matches[state]
        return None

    readline.set_completer(_completer)
    readline.set_completer_delims(' \t\n')
    readline.parse_and_bind('tab: complete')

    _is_libedit = 'libedit' in readline.__doc__ if readline.__doc__ else False
    if _is_libedit:
        readline.parse_and_bind('bind ^K ed-kill-line')
        readline.parse_and_bind('bind ^R "\\x12"')
    else:
        readline.parse_and_bind('"\\C-k": kill-line')
        readline.parse_and_bind('"\\C-u": unix-line-discard')
        readline.parse_and_bind('"\\C-r": "\\x12"')

    print("╔══════════════════════════════════════════════╗")
    print(f"║  CueDeck v{__version__:<8} {session.variant:>6} deck           ║")
    print("║  /h help   ^R rerun   Tab complete   /q quit  ║")
    print("╚══════════════════════════════════════════════╝")
    for line in session.status_lines():
        print(line)
    print()

    # ===================================================================
    # MAIN INPUT LOOP
    # ===================================================================
    last_command = None
    try:
        while True:
            try:
                line = input(f'[{session.active_deck_id}]> ').strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            if not line:
                continue

            # Ctrl+R -> \x12 (repeat last command)
            if line.startswith('\x12'):
                if last_command is None:
                    continue
                line = last_command
                print(f"> {line}")

            result = execute_command(session, commands, line)
            if result == "EXIT":
                break
            last_command = line
            if result:
                print(result)
    finally:
        session.close()


if __name__ == '__main__':
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    main()
