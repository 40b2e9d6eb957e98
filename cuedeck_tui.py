#!/usr/bin/env python
"""CueDeck Textual TUI.

- Cue grid for the active slot of every deck
- Status line per deck
- Output log
- Command input (same slash commands as the REPL)

Hot-cue keys work while the command input is not focused (Escape leaves
the input, Tab returns to it).  Terminals report key presses only, never
releases, so every hot-cue key uses the plain toggle: set if empty,
jump if set.  Gate mode needs the GUI.

Run:
    python run_cuedeck.py --tui

Or directly:
    python cuedeck_tui.py
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Dict, Optional

HERE = os.path.dirname(os.path.abspath(__file__))
if HERE not in sys.path:
    sys.path.insert(0, HERE)

from cuedeck.commands import build_command_table
from cuedeck.core.gate import CueAction
from cuedeck.core.session import Session
from cuedeck.core.video_id import format_time
from bcuedeck import execute_command

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Input, Log, Static

logger = logging.getLogger(__name__)


def render_grid(session: Session) -> str:
    """Text grid of the active slot's cues, one block per deck."""
    blocks = []
    for deck in session.decks.values():
        lines = [f"Deck {deck.deck_id}  slot {deck.active_slot + 1}/{deck.layout.slot_count}"]
        cues = deck.visible_cues()
        width = len(deck.layout.rows[0])
        for start in range(0, len(cues), width):
            lines.append(" ".join(
                f"{key.upper()} {format_time(t) if t is not None else ' -- '}"
                for key, _, t in cues[start:start + width]
            ))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


class CueDeckTUI(App):
    CSS = """
    Screen { layout: vertical; }
    #top { height: 1fr; }
    #grid { width: 1fr; height: 1fr; padding: 0 1; }
    #right { width: 30; min-width: 30; }
    #status { height: auto; padding: 0 1; }
    #out { height: 12; }
    #cmd { height: 3; }
    """

    BINDINGS = [
        ("escape", "leave_input", "Hot cues"),
        ("f5", "play_pause", "Play/Pause"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, session: Optional[Session] = None) -> None:
        super().__init__()
        self.session = session or Session()
        self.commands: Dict[str, Callable[..., str]] = build_command_table()

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Horizontal(id="top"):
            yield Static("", id="grid", markup=False)
            yield Static(
                "Keys:\n"
                "- Esc : hot-cue keys\n"
                "- Tab : command input\n"
                "- F5 : play/pause\n"
                "- Ctrl+Q : quit\n\n"
                "Hot cues:\n"
                "empty key sets a cue,\n"
                "set key jumps to it.\n"
                "Number keys pick the slot.\n",
                id="right",
            )
        yield Static("", id="status", markup=False)
        yield Log(id="out", highlight=True)
        yield Input(placeholder="CueDeck command, e.g. /load <url>. Esc for hot-cue keys.", id="cmd")
        yield Footer()

    def on_mount(self) -> None:
        self.session.connect()
        interval = self.session.prefs.get('poll_interval_ms', 100) / 1000.0
        self.set_interval(interval, self._tick)
        self.query_one("#cmd", Input).focus()
        self._log(f"CueDeck TUI ready ({self.session.variant} deck). /h for commands.\n")
        self._refresh()

    def on_unmount(self) -> None:
        self.session.close()

    # ---- Display ------------------------------------------------------------

    def _log(self, text: str) -> None:
        self.query_one("#out", Log).write(text)

    def _refresh(self) -> None:
        self.query_one("#grid", Static).update(render_grid(self.session))
        self.query_one("#status", Static).update("\n".join(self.session.status_lines()))

    def _tick(self) -> None:
        try:
            self.session.tick()
        except Exception:
            logger.exception("Poll cycle failed")
        self._refresh()

    # ---- Hot-cue keys -------------------------------------------------------

    def on_key(self, event: events.Key) -> None:
        if isinstance(self.focused, Input):
            return
        key = (event.character or "").lower()
        if not key:
            return
        deck = self.session.deck_for_key(key)
        if deck is None:
            return
        event.stop()

        slot = deck.layout.slot_for_key(key)
        if slot is not None:
            deck.select_slot(slot)
        else:
            index = deck.layout.resolve(key, deck.active_slot)
            action = deck.activate(index)
            if action == CueAction.SET:
                self._log(f"Deck {deck.deck_id}: cue {key.upper()} set at {format_time(deck.cues.get(index))}\n")
            elif action == CueAction.NONE:
                self._log(f"Deck {deck.deck_id}: player not ready\n")
        self._refresh()

    # ---- Commands -----------------------------------------------------------

    def on_input_submitted(self, event: Input.Submitted) -> None:
        line = (event.value or "").strip()
        event.input.value = ""
        if not line:
            return
        self._log(f"> {line}\n")
        out = execute_command(self.session, self.commands, line)
        if out == "EXIT":
            self.exit()
            return
        if out:
            self._log(out + "\n")
        self._refresh()

    def action_leave_input(self) -> None:
        self.set_focus(None)

    def action_play_pause(self) -> None:
        self._log(execute_command(self.session, self.commands, "/pp") + "\n")
        self._refresh()


def main() -> None:
    CueDeckTUI().run()


if __name__ == "__main__":
    main()
