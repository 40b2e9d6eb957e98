"""CueDeck GUI Panels.

Panels are the building blocks of the shell frame.  Each panel is a
self-contained wx.Panel subclass that owns a specific set of controls
and communicates with the core exclusively through the Bridge.

- mixing/   Deck and crossfader panels
"""
