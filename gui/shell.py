"""CueDeck GUI Shell: Top-Level Frame.

The Shell is the top-level wx.Frame that owns the menu bar, the deck
panels, the console and the Bridge instance.  It is the event target
for all Bridge-posted events.

Keyboard routing
----------------
Hot-cue and slot keys are taken from EVT_CHAR_HOOK (key-down, including
auto-repeat) and EVT_KEY_UP, except while a text field has focus.  Key
releases are what end a gate, so every non-text control forwards its
EVT_KEY_UP to the shell.

A wx.Timer drives ``Bridge.tick()`` at the preferred poll interval.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import wx

from .bridge import Bridge
from .events import EVT_COMMAND_EXECUTED, EVT_DECK_UPDATE, EVT_STATUS_MESSAGE
from .panels.mixing import CrossfaderPanel, DeckPanel

logger = logging.getLogger(__name__)


# ============================================================================
# THEME
# ============================================================================

THEME = {
    "BG_DARK": (30, 30, 35),
    "BG_MID": (42, 42, 48),
    "BG_LIGHT": (55, 55, 62),
    "TEXT": (220, 220, 225),
    "TEXT_DIM": (140, 140, 150),
    "ACCENT": (100, 180, 255),
}


def key_from_event(event: wx.KeyEvent) -> Optional[str]:
    """Lower-case character for a key event, or None for non-character keys."""
    code = event.GetUnicodeKey()
    if code == wx.WXK_NONE or code < 32:
        return None
    if event.ControlDown() or event.AltDown() or event.CmdDown():
        return None
    return chr(code).lower()


class CueDeckShell(wx.Frame):
    """Top-level frame for the CueDeck GUI.

    Responsibilities:
    - Create and own the Bridge instance
    - Lay out one DeckPanel per deck, plus the crossfader in dual mode
    - Route hot-cue key-down/key-up to the session
    - Drive the poll loop from a wx.Timer
    - Mirror slash commands in a console
    """

    def __init__(
        self,
        session: Any,
        parent: Optional[wx.Window] = None,
        title: str = "CueDeck",
        size: tuple = (1100, 760),
    ) -> None:
        super().__init__(parent, title=title, size=size)
        self.SetBackgroundColour(wx.Colour(*THEME["BG_DARK"]))

        self.session = session
        self.bridge = Bridge(session=session, event_target=self)
        self._deck_panels: Dict[str, DeckPanel] = {}
        self._crossfader_panel: Optional[CrossfaderPanel] = None

        self._build_menu_bar()
        self._build_status_bar()
        self._build_body()

        # Bridge events
        self.Bind(EVT_DECK_UPDATE, self._on_deck_update)
        self.Bind(EVT_STATUS_MESSAGE, self._on_status_message)
        self.Bind(EVT_COMMAND_EXECUTED, self._on_command_executed)

        # Keyboard
        self.Bind(wx.EVT_CHAR_HOOK, self._on_char_hook)
        self._bind_key_up(self)

        # Poll loop
        self._timer = wx.Timer(self)
        self.Bind(wx.EVT_TIMER, self._on_timer, self._timer)
        self.Bind(wx.EVT_CLOSE, self._on_close)

        session.connect()
        self._timer.Start(int(session.prefs.get('poll_interval_ms', 100)))
        logger.info("CueDeckShell initialised (%s variant)", session.variant)

    # ---- Layout -------------------------------------------------------------

    def _build_menu_bar(self) -> None:
        menu_bar = wx.MenuBar()
        file_menu = wx.Menu()
        file_menu.Append(wx.ID_EXIT, "E&xit\tCtrl+Q", "Close CueDeck")
        self.Bind(wx.EVT_MENU, self._on_exit, id=wx.ID_EXIT)
        menu_bar.Append(file_menu, "&File")
        self.SetMenuBar(menu_bar)

    def _build_status_bar(self) -> None:
        self._status_bar = self.CreateStatusBar(2)
        self._status_bar.SetStatusWidths([-3, -1])
        self._status_bar.SetStatusText("Ready", 0)
        self._status_bar.SetStatusText(self.session.variant, 1)

    def _build_body(self) -> None:
        body = wx.BoxSizer(wx.VERTICAL)

        decks_sizer = wx.BoxSizer(wx.HORIZONTAL)
        for deck_id in self.bridge.deck_ids:
            panel = DeckPanel(self, self.bridge, deck_id)
            panel.SetBackgroundColour(wx.Colour(*THEME["BG_MID"]))
            panel.SetForegroundColour(wx.Colour(*THEME["TEXT"]))
            self._deck_panels[deck_id] = panel
            decks_sizer.Add(panel, 1, wx.EXPAND | wx.ALL, 4)
        body.Add(decks_sizer, 1, wx.EXPAND)

        if self.session.crossfader is not None:
            self._crossfader_panel = CrossfaderPanel(self, self.bridge)
            self._crossfader_panel.SetBackgroundColour(wx.Colour(*THEME["BG_MID"]))
            body.Add(self._crossfader_panel, 0, wx.EXPAND | wx.ALL, 4)

        # ---- Console ----
        self._console_output = wx.TextCtrl(
            self, style=wx.TE_MULTILINE | wx.TE_READONLY | wx.TE_RICH2,
            size=(-1, 120), name="Console Output",
        )
        self._console_output.SetBackgroundColour(wx.Colour(*THEME["BG_DARK"]))
        self._console_output.SetForegroundColour(wx.Colour(*THEME["TEXT"]))
        body.Add(self._console_output, 0, wx.EXPAND | wx.LEFT | wx.RIGHT, 4)

        input_sizer = wx.BoxSizer(wx.HORIZONTAL)
        cmd_label = wx.StaticText(self, label="/")
        cmd_label.SetForegroundColour(wx.Colour(*THEME["ACCENT"]))
        input_sizer.Add(cmd_label, 0, wx.ALIGN_CENTER_VERTICAL | wx.LEFT, 5)
        self._cmd_input = wx.TextCtrl(self, style=wx.TE_PROCESS_ENTER, name="Command Input")
        self._cmd_input.SetBackgroundColour(wx.Colour(*THEME["BG_LIGHT"]))
        self._cmd_input.SetForegroundColour(wx.Colour(*THEME["TEXT"]))
        self._cmd_input.SetHint("Type a command and press Enter (Esc returns to hot-cue keys)")
        self._cmd_input.Bind(wx.EVT_TEXT_ENTER, self._on_console_command)
        input_sizer.Add(self._cmd_input, 1, wx.EXPAND | wx.ALL, 2)
        body.Add(input_sizer, 0, wx.EXPAND | wx.BOTTOM, 4)

        self.SetSizer(body)

    def _bind_key_up(self, window: wx.Window) -> None:
        """Forward EVT_KEY_UP from ``window`` and every non-text descendant."""
        if not isinstance(window, wx.TextCtrl):
            window.Bind(wx.EVT_KEY_UP, self._on_key_up)
        for child in window.GetChildren():
            self._bind_key_up(child)

    # ---- Keyboard -----------------------------------------------------------

    def _typing(self) -> bool:
        return isinstance(wx.Window.FindFocus(), wx.TextCtrl)

    def _on_char_hook(self, event: wx.KeyEvent) -> None:
        if event.GetKeyCode() == wx.WXK_ESCAPE and self._typing():
            self.SetFocus()
            return
        key = key_from_event(event)
        if key is None or self._typing() or not self.bridge.handles_key(key):
            event.Skip()
            return
        self.bridge.key_down(key)

    def _on_key_up(self, event: wx.KeyEvent) -> None:
        key = key_from_event(event)
        if key is not None and not self._typing() and self.bridge.handles_key(key):
            self.bridge.key_up(key)
            return
        event.Skip()

    # ---- Event handlers -----------------------------------------------------

    def _on_timer(self, event: wx.TimerEvent) -> None:
        self.bridge.tick()
        for panel in self._deck_panels.values():
            panel.refresh_transport()

    def _on_deck_update(self, event: Any) -> None:
        panel = self._deck_panels.get(getattr(event, "deck_id", ""))
        if panel is not None:
            panel.on_deck_event(getattr(event, "event_type", ""))
        if self._crossfader_panel is not None:
            self._crossfader_panel.refresh()

    def _on_status_message(self, event: Any) -> None:
        self._status_bar.SetStatusText(getattr(event, "message", ""), 0)

    def _on_command_executed(self, event: Any) -> None:
        self._console_output.AppendText(f"> {event.command}\n{event.output}\n")

    def _on_console_command(self, event: wx.CommandEvent) -> None:
        command = self._cmd_input.GetValue().strip()
        if not command:
            return
        self._cmd_input.Clear()
        if not command.startswith('/'):
            command = '/' + command
        self.bridge.execute_command(command)

    def _on_exit(self, event: wx.CommandEvent) -> None:
        self.Close()

    def _on_close(self, event: wx.CloseEvent) -> None:
        self._timer.Stop()
        self.bridge.close()
        self.session.close()
        event.Skip()


def launch_shell(session: Any) -> None:
    """Launch the GUI shell.

    Parameters:
        session: The CueDeck Session instance.
    """
    app = wx.App()
    shell = CueDeckShell(session=session)
    shell.Show()
    app.MainLoop()
