"""CueDeck GUI Bridge: Session Adapter.

The Bridge is the single adapter object that all GUI panels call for
deck operations.  It translates GUI actions into slash commands or
direct deck calls and publishes results as wx events.

Design rules:
- No panel holds a reference to another panel.
- Panels read deck state through the Bridge, never mutate it directly.
- Every deck's EventHub is relayed as DeckUpdateEvents to the shell.
- Everything runs on the wx main thread; ``tick()`` is driven by the
  shell's wx.Timer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from cuedeck.commands import build_command_table
from cuedeck.core.deck import Deck
from cuedeck.core.events import DeckEvent

logger = logging.getLogger(__name__)

# Try to import wx for event posting; the Bridge can also run headless
# for testing and CLI integration.
try:
    import wx
    from .events import (
        CommandExecutedEvent,
        DeckUpdateEvent,
        StatusMessageEvent,
    )
    _WX_AVAILABLE = True
except ImportError:
    _WX_AVAILABLE = False


class Bridge:
    """Adapter between GUI panels and the CueDeck core.

    Parameters:
        session: The CueDeck Session instance (from cuedeck.core).
        event_target: A wx.EvtHandler to post events to (usually the
            shell frame).  Can be None for headless/test usage.
    """

    def __init__(self, session: Any, event_target: Any = None) -> None:
        self.session = session
        self._event_target = event_target
        self._commands: Dict[str, Callable] = build_command_table()
        self._listeners: List[Callable[[DeckEvent], None]] = []
        logger.info("Bridge command table loaded: %d commands", len(self._commands))

        for deck in session.decks.values():
            deck.events.subscribe(self._on_deck_event)

    # ---- Deck access --------------------------------------------------------

    def deck(self, deck_id: Optional[str] = None) -> Deck:
        return self.session.deck(deck_id)

    @property
    def deck_ids(self) -> List[str]:
        return list(self.session.decks)

    # ---- Keyboard -----------------------------------------------------------

    def key_down(self, key: str) -> Optional[str]:
        """Route a key-down; returns the action, or None if unbound."""
        return self.session.key_down(key)

    def key_up(self, key: str) -> bool:
        return self.session.key_up(key)

    def handles_key(self, key: str) -> bool:
        return self.session.deck_for_key(key) is not None

    # ---- Poll loop ----------------------------------------------------------

    def tick(self) -> None:
        try:
            self.session.tick()
        except Exception:
            logger.exception("Poll cycle failed")

    # ---- Command execution --------------------------------------------------

    def execute_command(self, command: str, args: Optional[List[str]] = None) -> str:
        """Execute a slash command against the session.

        Each button press or slider move translates into a command string
        that the Bridge dispatches to the same command table the REPL uses.

        Returns the command output string.
        """
        full_cmd = f"{command} {' '.join(args)}" if args else command
        raw = full_cmd.strip().lstrip('/')
        if not raw:
            return ""

        parts = raw.split()
        cmd_name = parts[0].lower()
        cmd_args = parts[1:]

        logger.debug("Bridge executing: /%s %s", cmd_name, ' '.join(cmd_args))

        func = self._commands.get(cmd_name)
        if func is None:
            output = f"ERROR: Unknown command /{cmd_name}"
        else:
            try:
                output = func(self.session, cmd_args) or ""
            except Exception as exc:
                logger.exception("Command /%s raised", cmd_name)
                output = f"ERROR: {exc}"

        level = "error" if output.startswith("ERROR") else "info"
        self._post_status(output.splitlines()[0] if output else "", level)

        if _WX_AVAILABLE and self._event_target is not None:
            evt = CommandExecutedEvent(
                command=f"/{cmd_name} {' '.join(cmd_args)}".strip(),
                output=output,
                status="error" if level == "error" else "ok",
            )
            wx.PostEvent(self._event_target, evt)

        return output

    # ---- Status / feedback --------------------------------------------------

    def post_status(self, message: str, level: str = "info") -> None:
        """Post a status message to the GUI."""
        self._post_status(message, level)

    # ---- Event relay --------------------------------------------------------

    def add_listener(self, callback: Callable[[DeckEvent], None]) -> None:
        """Receive every DeckEvent synchronously (headless use)."""
        self._listeners.append(callback)

    def _on_deck_event(self, event: DeckEvent) -> None:
        """Translate a DeckEvent into a wx event and post it."""
        for callback in list(self._listeners):
            callback(event)
        if not _WX_AVAILABLE or self._event_target is None:
            return
        wx.PostEvent(self._event_target, DeckUpdateEvent(
            deck_id=event.deck_id,
            event_type=event.event_type,
            data=dict(event.data),
        ))

    def _post_status(self, message: str, level: str = "info") -> None:
        """Post a StatusMessageEvent to the GUI event target."""
        logger.log(
            logging.WARNING if level == "warning"
            else logging.ERROR if level == "error"
            else logging.DEBUG,
            message,
        )
        if _WX_AVAILABLE and self._event_target is not None:
            wx.PostEvent(self._event_target, StatusMessageEvent(message=message, level=level))

    # ---- Lifecycle ----------------------------------------------------------

    def close(self) -> None:
        for deck in self.session.decks.values():
            deck.events.unsubscribe(self._on_deck_event)
        self._listeners.clear()
        self._event_target = None
