"""CueDeck wxPython GUI Package.

One shell frame holds a deck panel per deck, the crossfader panel in the
dual-deck variant, and a console mirror of the slash commands.  Panels
talk to the core only through the Bridge, which also relays deck events
as wx events.

Entry point: gui.shell.CueDeckShell (wx.Frame)
"""
