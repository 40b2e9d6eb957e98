"""Deck Panel.

Controls for one hot-cue deck: video load, play/pause, a position
slider that scrubs, tempo and volume sliders, slot selector, gate mode
and the cue list of the active slot.

The position slider suspends polling while its thumb is dragged and
seeks on release.  The panel redraws from deck state on every
DeckUpdateEvent the shell forwards and on every poll tick.
"""

from __future__ import annotations

import logging
from typing import Any

import wx

from cuedeck.core.events import DeckEventType
from cuedeck.core.video_id import format_time

logger = logging.getLogger(__name__)

# Slider resolutions
POSITION_STEPS = 1000
RATE_SCALE = 100


class DeckPanel(wx.Panel):
    """Per-deck hot-cue controls.

    Controls:
    - Video id / URL field and Load button
    - Play/Pause button and position readout
    - Position slider (drag to scrub)
    - Tempo slider (25-200 %), volume slider (0-100)
    - Slot selector, gate mode checkbox
    - Cue list for the active slot (Key, Index, Time)

    Load, play and cue edits dispatch through the Bridge command table;
    scrubbing talks to the transport through the Bridge's deck handle.
    """

    def __init__(self, parent: wx.Window, bridge: Any, deck_id: str, **kwargs: Any) -> None:
        super().__init__(parent, **kwargs)
        self.bridge = bridge
        self.deck_id = deck_id
        self._build_ui()
        self.refresh_all()

    @property
    def deck(self):
        return self.bridge.deck(self.deck_id)

    def _build_ui(self) -> None:
        deck = self.deck
        t = deck.transport
        sizer = wx.BoxSizer(wx.VERTICAL)

        title = wx.StaticText(self, label=f"Deck {self.deck_id}")
        title.SetFont(title.GetFont().Bold())
        sizer.Add(title, 0, wx.ALL, 8)

        # ---- Load video ----
        load_sizer = wx.BoxSizer(wx.HORIZONTAL)
        video_label = wx.StaticText(self, label="Video:")
        load_sizer.Add(video_label, 0, wx.ALIGN_CENTER_VERTICAL | wx.LEFT, 8)
        self._video_field = wx.TextCtrl(
            self, style=wx.TE_PROCESS_ENTER, name=f"Deck {self.deck_id} Video",
        )
        self._video_field.SetHint("YouTube URL or video id")
        self._video_field.Bind(wx.EVT_TEXT_ENTER, self._on_load)
        load_sizer.Add(self._video_field, 1, wx.EXPAND | wx.LEFT | wx.RIGHT, 4)
        self._load_btn = wx.Button(self, label="Load", name=f"Load Deck {self.deck_id}")
        self._load_btn.Bind(wx.EVT_BUTTON, self._on_load)
        load_sizer.Add(self._load_btn, 0, wx.RIGHT, 4)
        sizer.Add(load_sizer, 0, wx.EXPAND | wx.TOP, 4)

        # ---- Transport ----
        transport_sizer = wx.BoxSizer(wx.HORIZONTAL)
        self._play_btn = wx.Button(self, label="Play", name=f"Play Deck {self.deck_id}")
        self._play_btn.Bind(wx.EVT_BUTTON, self._on_play_pause)
        transport_sizer.Add(self._play_btn, 0, wx.ALL, 4)
        self._time_label = wx.StaticText(self, label="0:00 / 0:00", name="Position")
        transport_sizer.Add(self._time_label, 0, wx.ALIGN_CENTER_VERTICAL | wx.LEFT, 8)
        sizer.Add(transport_sizer, 0, wx.LEFT, 4)

        self._position_slider = wx.Slider(
            self, value=0, minValue=0, maxValue=POSITION_STEPS,
            style=wx.SL_HORIZONTAL, name=f"Deck {self.deck_id} Position",
        )
        self._position_slider.Bind(wx.EVT_SCROLL_THUMBTRACK, self._on_scrub)
        self._position_slider.Bind(wx.EVT_SCROLL_THUMBRELEASE, self._on_scrub_end)
        self._position_slider.Bind(wx.EVT_SCROLL_CHANGED, self._on_scrub_end)
        sizer.Add(self._position_slider, 0, wx.EXPAND | wx.LEFT | wx.RIGHT, 8)

        # ---- Tempo ----
        tempo_sizer = wx.BoxSizer(wx.HORIZONTAL)
        tempo_label = wx.StaticText(self, label="Tempo %:")
        tempo_sizer.Add(tempo_label, 0, wx.ALIGN_CENTER_VERTICAL | wx.LEFT, 8)
        self._tempo_slider = wx.Slider(
            self, value=int(round(t.playback_rate * RATE_SCALE)),
            minValue=int(round(t.min_rate * RATE_SCALE)),
            maxValue=int(round(t.max_rate * RATE_SCALE)),
            style=wx.SL_HORIZONTAL | wx.SL_LABELS,
            name=f"Deck {self.deck_id} Tempo",
        )
        self._tempo_slider.Bind(wx.EVT_SLIDER, self._on_tempo)
        tempo_sizer.Add(self._tempo_slider, 1, wx.EXPAND | wx.LEFT | wx.RIGHT, 4)
        sizer.Add(tempo_sizer, 0, wx.EXPAND | wx.TOP, 4)

        # ---- Volume ----
        vol_sizer = wx.BoxSizer(wx.HORIZONTAL)
        vol_label = wx.StaticText(self, label="Volume:")
        vol_sizer.Add(vol_label, 0, wx.ALIGN_CENTER_VERTICAL | wx.LEFT, 8)
        self._volume_slider = wx.Slider(
            self, value=int(round(t.volume)), minValue=0, maxValue=100,
            style=wx.SL_HORIZONTAL | wx.SL_LABELS,
            name=f"Deck {self.deck_id} Volume",
        )
        self._volume_slider.Bind(wx.EVT_SLIDER, self._on_volume)
        vol_sizer.Add(self._volume_slider, 1, wx.EXPAND | wx.LEFT | wx.RIGHT, 4)
        sizer.Add(vol_sizer, 0, wx.EXPAND | wx.TOP, 4)

        # ---- Slot and gate ----
        slot_sizer = wx.BoxSizer(wx.HORIZONTAL)
        slot_label = wx.StaticText(self, label="Slot:")
        slot_sizer.Add(slot_label, 0, wx.ALIGN_CENTER_VERTICAL | wx.LEFT, 8)
        self._slot_choice = wx.Choice(
            self,
            choices=[f"{i + 1} ({key})" for i, key in enumerate(deck.layout.slot_keys)],
            name=f"Deck {self.deck_id} Slot",
        )
        self._slot_choice.Bind(wx.EVT_CHOICE, self._on_slot)
        slot_sizer.Add(self._slot_choice, 0, wx.LEFT | wx.RIGHT, 4)
        self._gate_check = wx.CheckBox(self, label="Gate mode", name=f"Deck {self.deck_id} Gate Mode")
        self._gate_check.Bind(wx.EVT_CHECKBOX, self._on_gate)
        slot_sizer.Add(self._gate_check, 0, wx.ALIGN_CENTER_VERTICAL | wx.LEFT, 12)
        sizer.Add(slot_sizer, 0, wx.EXPAND | wx.TOP, 4)

        # ---- Cue list ----
        self._cue_list = wx.ListCtrl(
            self, style=wx.LC_REPORT | wx.LC_SINGLE_SEL,
            name=f"Deck {self.deck_id} Cues",
        )
        self._cue_list.InsertColumn(0, "Key", width=50)
        self._cue_list.InsertColumn(1, "Index", width=60)
        self._cue_list.InsertColumn(2, "Time", width=80)
        self._cue_list.Bind(wx.EVT_LIST_ITEM_ACTIVATED, self._on_cue_activated)
        sizer.Add(self._cue_list, 1, wx.EXPAND | wx.ALL, 8)

        clear_btn = wx.Button(self, label="Clear Cue", name=f"Clear Deck {self.deck_id} Cue")
        clear_btn.Bind(wx.EVT_BUTTON, self._on_clear_cue)
        sizer.Add(clear_btn, 0, wx.LEFT | wx.BOTTOM, 8)

        # ---- Status ----
        self._status = wx.StaticText(self, label="", name=f"Deck {self.deck_id} Status")
        sizer.Add(self._status, 0, wx.ALL | wx.EXPAND, 8)

        self.SetSizer(sizer)

    # ---- Helpers ----

    def _set_status(self, text: str) -> None:
        display = text[:160] if len(text) > 160 else text
        self._status.SetLabel(display)
        self._status.Wrap(max(50, self.GetSize().width - 16))

    def _command(self, command: str, *args: str) -> None:
        self.bridge.session.select_deck(self.deck_id)
        self._set_status(self.bridge.execute_command(command, list(args)))

    def _selected_index(self) -> int:
        row = self._cue_list.GetFirstSelected()
        if row < 0:
            return -1
        return int(self._cue_list.GetItemText(row, 1))

    # ---- Refresh ----

    def refresh_all(self) -> None:
        self.refresh_transport()
        self.refresh_settings()
        self.refresh_cues()

    def refresh_transport(self) -> None:
        t = self.deck.transport
        self._play_btn.SetLabel("Pause" if t.is_playing else "Play")
        self._play_btn.Enable(t.is_ready)
        self._load_btn.Enable(t.is_ready)
        self._time_label.SetLabel(f"{format_time(t.current_time)} / {format_time(t.duration)}")
        if not t.is_dragging:
            value = int(t.current_time / t.duration * POSITION_STEPS) if t.duration > 0 else 0
            self._position_slider.SetValue(min(POSITION_STEPS, value))

    def refresh_settings(self) -> None:
        deck = self.deck
        self._tempo_slider.SetValue(int(round(deck.transport.playback_rate * RATE_SCALE)))
        self._volume_slider.SetValue(int(round(deck.transport.volume)))
        self._slot_choice.SetSelection(deck.active_slot)
        self._gate_check.SetValue(deck.is_gate_mode)

    def refresh_cues(self) -> None:
        self._cue_list.DeleteAllItems()
        for row, (key, index, seconds) in enumerate(self.deck.visible_cues()):
            self._cue_list.InsertItem(row, key.upper())
            self._cue_list.SetItem(row, 1, str(index))
            self._cue_list.SetItem(row, 2, format_time(seconds) if seconds is not None else "--")

    def on_deck_event(self, event_type: str) -> None:
        """Redraw the part of the panel a deck event touched."""
        if event_type in (DeckEventType.CUES_CHANGED, DeckEventType.SLOT_CHANGED,
                          DeckEventType.VIDEO_LOADED):
            self.refresh_cues()
        if event_type in (DeckEventType.SETTINGS_CHANGED, DeckEventType.SLOT_CHANGED,
                          DeckEventType.GATE_MODE_CHANGED, DeckEventType.ATTACHED):
            self.refresh_settings()
        self.refresh_transport()

    # ---- Event handlers ----

    def _on_load(self, event: wx.CommandEvent) -> None:
        text = self._video_field.GetValue().strip()
        if not text:
            self._set_status("Enter a YouTube URL or video id")
            return
        self._command('/load', text)

    def _on_play_pause(self, event: wx.CommandEvent) -> None:
        self._command('/pp')

    def _on_scrub(self, event: wx.ScrollEvent) -> None:
        t = self.deck.transport
        if t.duration <= 0:
            return
        if not t.is_dragging:
            t.begin_scrub()
        t.scrub_to(event.GetPosition() / POSITION_STEPS * t.duration)
        self._time_label.SetLabel(f"{format_time(t.current_time)} / {format_time(t.duration)}")

    def _on_scrub_end(self, event: wx.ScrollEvent) -> None:
        t = self.deck.transport
        if t.duration > 0:
            t.end_scrub(event.GetPosition() / POSITION_STEPS * t.duration)
        else:
            t.end_scrub()

    def _on_tempo(self, event: wx.CommandEvent) -> None:
        self._command('/tempo', f"{self._tempo_slider.GetValue() / RATE_SCALE:.2f}")

    def _on_volume(self, event: wx.CommandEvent) -> None:
        self._command('/vol', str(self._volume_slider.GetValue()))

    def _on_slot(self, event: wx.CommandEvent) -> None:
        self._command('/slot', str(self._slot_choice.GetSelection() + 1))

    def _on_gate(self, event: wx.CommandEvent) -> None:
        self._command('/gate', 'on' if self._gate_check.GetValue() else 'off')

    def _on_cue_activated(self, event: wx.ListEvent) -> None:
        self._command('/cue', 'hit', self._cue_list.GetItemText(event.GetIndex(), 1))

    def _on_clear_cue(self, event: wx.CommandEvent) -> None:
        index = self._selected_index()
        if index < 0:
            self._set_status("Select a cue to clear")
            return
        self._command('/cue', 'clear', str(index))
