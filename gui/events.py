"""CueDeck GUI Custom Event Types.

Defines wx event types used for inter-component communication within
the GUI layer.  Panels never call each other directly.

The Bridge subscribes to every deck's EventHub and re-posts each
DeckEvent as a DeckUpdateEvent.  Command results and status messages
travel the same way.
"""

from __future__ import annotations

import wx
import wx.lib.newevent


# ------------------------------------------------------------------
# Deck events relayed from cuedeck.core.events
# ------------------------------------------------------------------

# A deck changed (transport state, position, cues, slot, gate...).
# attrs: deck_id (str), event_type (str, a DeckEventType), data (dict)
DeckUpdateEvent, EVT_DECK_UPDATE = wx.lib.newevent.NewEvent()

# ------------------------------------------------------------------
# Console / status events
# ------------------------------------------------------------------

# A status message should be displayed in the console/status bar.
# attrs: message (str), level (str: 'info', 'warning', 'error')
StatusMessageEvent, EVT_STATUS_MESSAGE = wx.lib.newevent.NewEvent()

# A slash command was executed (for the console mirror).
# attrs: command (str), output (str), status (str: 'ok', 'error')
CommandExecutedEvent, EVT_COMMAND_EXECUTED = wx.lib.newevent.NewEvent()
