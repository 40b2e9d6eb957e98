"""Crossfader Panel.

Crossfader slider for ducking between decks A and B.  Fully keyboard
operable for accessibility.
"""

from __future__ import annotations

import logging
from typing import Any

import wx

logger = logging.getLogger(__name__)


class CrossfaderPanel(wx.Panel):
    """Crossfader between Deck A and Deck B.

    Controls:
    - Crossfader slider (-100 = A only, 0 = both full, 100 = B only)
    - Volume readout for both decks
    - Quick buttons: Full A, Center, Full B

    Keyboard operable: arrow keys adjust the slider by 1 unit,
    Page Up/Down by 10 units.

    All actions dispatch through the Bridge.
    """

    def __init__(self, parent: wx.Window, bridge: Any, **kwargs: Any) -> None:
        super().__init__(parent, **kwargs)
        self.bridge = bridge
        self._build_ui()
        self.refresh()

    def _build_ui(self) -> None:
        sizer = wx.BoxSizer(wx.VERTICAL)

        title = wx.StaticText(self, label="Crossfader")
        title.SetFont(title.GetFont().Bold())
        sizer.Add(title, 0, wx.ALL, 8)

        # ---- Labels for deck sides ----
        label_sizer = wx.BoxSizer(wx.HORIZONTAL)
        label_sizer.Add(wx.StaticText(self, label="Deck A"), 0, wx.LEFT, 8)
        label_sizer.AddStretchSpacer()
        label_sizer.Add(wx.StaticText(self, label="Both"), 0)
        label_sizer.AddStretchSpacer()
        label_sizer.Add(wx.StaticText(self, label="Deck B"), 0, wx.RIGHT, 8)
        sizer.Add(label_sizer, 0, wx.EXPAND | wx.TOP, 4)

        # ---- Crossfader slider ----
        self._xfade_slider = wx.Slider(
            self, value=0, minValue=-100, maxValue=100,
            style=wx.SL_HORIZONTAL | wx.SL_LABELS,
            name="Crossfader",
        )
        self._xfade_slider.SetPageSize(10)
        self._xfade_slider.Bind(wx.EVT_SLIDER, self._on_xfade)
        sizer.Add(self._xfade_slider, 0, wx.EXPAND | wx.LEFT | wx.RIGHT, 8)

        # ---- Volume readout ----
        self._pos_display = wx.StaticText(self, label="", name="Crossfader Volumes")
        sizer.Add(self._pos_display, 0, wx.LEFT | wx.TOP, 8)

        # ---- Quick buttons ----
        btn_sizer = wx.BoxSizer(wx.HORIZONTAL)
        for label, value in (("Full A", -100), ("Center", 0), ("Full B", 100)):
            btn = wx.Button(self, label=label, name=label)
            btn.Bind(wx.EVT_BUTTON, lambda evt, v=value: self._dispatch_xfade(v))
            btn_sizer.Add(btn, 0, wx.ALL, 4)
        sizer.Add(btn_sizer, 0, wx.LEFT, 4)

        self.SetSizer(sizer)

    # ---- Helpers ----

    def refresh(self) -> None:
        xf = self.bridge.session.crossfader
        if xf is None:
            return
        a, b = xf.volumes
        self._xfade_slider.SetValue(int(round(xf.position * 100)))
        self._pos_display.SetLabel(f"A {a:.0f}%   B {b:.0f}%")

    def _dispatch_xfade(self, value: int) -> None:
        """Send crossfader value through the bridge."""
        self._xfade_slider.SetValue(value)
        self.bridge.execute_command('/xfade', [f"{value / 100:.2f}"])
        self.refresh()

    # ---- Event handlers ----

    def _on_xfade(self, event: wx.CommandEvent) -> None:
        self._dispatch_xfade(self._xfade_slider.GetValue())
