"""Shared pytest fixtures for the CueDeck tests."""

import os
import sys

import pytest

HERE = os.path.dirname(os.path.abspath(__file__))
if HERE not in sys.path:
    sys.path.insert(0, HERE)

from cuedeck.core.deck import Deck
from cuedeck.core.keymap import SINGLE_DECK_LAYOUT
from cuedeck.players.simulated import SimulatedPlayer

VIDEO_ID = "dQw4w9WgXcQ"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture(autouse=True)
def cuedeck_home(tmp_path, monkeypatch):
    """Keep preferences and profiles out of the real Documents folder."""
    home = tmp_path / "cuedeck_home"
    monkeypatch.setenv("CUEDECK_HOME", str(home))
    return home


@pytest.fixture
def clock():
    return FakeClock()


def attach(deck, clock, **player_kwargs):
    """Wire a SimulatedPlayer to ``deck`` and deliver ready + metadata."""
    player = SimulatedPlayer(clock=clock, **player_kwargs)
    player.set_listeners(on_ready=deck.attach, on_state_change=deck.transport.on_state_change)
    player.pump()
    player.pump()
    deck.transport.poll()
    return player


@pytest.fixture
def deck(clock):
    return Deck("main", SINGLE_DECK_LAYOUT, clock=clock, video_id=VIDEO_ID)


@pytest.fixture
def player(deck, clock):
    return attach(deck, clock)
