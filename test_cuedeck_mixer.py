"""Crossfader volume law and how it drives the decks."""

import pytest

from conftest import VIDEO_ID, attach
from cuedeck.core.deck import Deck
from cuedeck.core.keymap import DECK_A_LAYOUT, DECK_B_LAYOUT
from cuedeck.core.mixer import Crossfader, crossfade_volumes


@pytest.mark.parametrize("x, expected", [
    (-1.0, (100.0, 0.0)),
    (0.0, (100.0, 100.0)),
    (1.0, (0.0, 100.0)),
    (0.5, (50.0, 100.0)),
    (-0.25, (100.0, 75.0)),
])
def test_crossfade_volumes(x, expected):
    assert crossfade_volumes(x) == pytest.approx(expected)


def test_centre_is_full_volume_on_both():
    # ducking law, not a constant-power pan
    a, b = crossfade_volumes(0.0)
    assert a + b == 200.0


def test_out_of_range_position_is_clipped():
    assert crossfade_volumes(2.0) == (0.0, 100.0)
    assert crossfade_volumes(-7.0) == (100.0, 0.0)


@pytest.fixture
def decks(clock):
    deck_a = Deck("A", DECK_A_LAYOUT, clock=clock, video_id=VIDEO_ID)
    deck_b = Deck("B", DECK_B_LAYOUT, clock=clock, video_id=VIDEO_ID)
    return deck_a, deck_b


def test_set_position_pushes_to_players(decks, clock):
    deck_a, deck_b = decks
    fader = Crossfader(deck_a, deck_b)
    player_a = attach(deck_a, clock)
    player_b = attach(deck_b, clock)

    assert fader.set_position(0.5) == (50.0, 100.0)
    assert player_a.volume == 50.0
    assert player_b.volume == 100.0
    assert deck_a.transport.volume == 50.0

    fader.set_position(-1.0)
    assert player_a.volume == 100.0
    assert player_b.volume == 0.0


def test_late_attach_gets_the_current_level(decks, clock):
    deck_a, deck_b = decks
    fader = Crossfader(deck_a, deck_b)
    fader.set_position(-1.0)
    assert deck_b.transport.volume == 100.0

    player_b = attach(deck_b, clock)
    assert player_b.volume == 0.0
    assert deck_b.transport.volume == 0.0


def test_close_stops_repushing(decks, clock):
    deck_a, deck_b = decks
    fader = Crossfader(deck_a, deck_b, position=1.0)
    fader.close()
    player_a = attach(deck_a, clock)
    assert player_a.volume == 100.0


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_position_is_rejected(decks, bad):
    deck_a, deck_b = decks
    fader = Crossfader(deck_a, deck_b, position=0.5)
    with pytest.raises(ValueError):
        fader.set_position(bad)
    assert fader.position == 0.5
    with pytest.raises(ValueError):
        crossfade_volumes(bad)
