"""Command entry points for CueDeck.

Each module in this package defines functions named ``cmd_<n>``.
These are discovered by ``build_command_table()`` and bound to the
corresponding command names invoked via the REPL and the TUI.  Commands
take a session object and a list of strings (arguments) and return a
string message.
"""

from __future__ import annotations

from typing import Callable, Dict

from . import deck_cmds

__all__ = [
    "deck_cmds",
    "build_command_table",
]

# Short forms resolved to their full command
ALIASES = {
    'p': 'pp',
    'l': 'load',
    'k': 'key',
    'xf': 'xfade',
    'st': 'status',
    't': 'tempo',
    'v': 'vol',
}


def build_command_table() -> Dict[str, Callable]:
    """Collect all command functions from the commands modules."""
    commands: Dict[str, Callable] = {}
    for module in (deck_cmds,):
        for attr_name in dir(module):
            if attr_name.startswith('cmd_'):
                func = getattr(module, attr_name)
                if callable(func):
                    commands[attr_name[4:].lower()] = func
    for alias, target in ALIASES.items():
        if target in commands:
            commands.setdefault(alias, commands[target])
    return commands
