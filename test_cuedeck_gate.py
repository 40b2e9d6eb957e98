"""Gate controller and deck keyboard routing."""

from conftest import attach
from cuedeck.core.events import DeckEventType
from cuedeck.core.gate import CueAction, GateState


# ---- Toggle law ---------------------------------------------------------

def test_unset_key_stamps_current_time(deck, player, clock):
    deck.transport.seek(12.5)
    assert deck.key_down("q") == CueAction.SET
    deck.key_up("q")
    assert deck.cues.get(0) == 12.5
    assert player.count("play_video") == 0


def test_set_key_jumps_and_resumes(deck, player):
    deck.set_cue(5, 40.0)
    assert deck.key_down("y") == CueAction.JUMP
    player.pump()
    assert deck.transport.is_playing
    assert deck.transport.current_time == 40.0
    assert player.get_current_time() == 40.0


def test_toggle_repeat_is_not_suppressed(deck, player):
    # a held key in toggle mode repeats like fresh presses
    assert deck.key_down("e") == CueAction.SET
    assert deck.key_down("e") == CueAction.JUMP
    assert deck.key_down("e") == CueAction.JUMP
    deck.key_up("e")


def test_slot_keys_switch_the_addressed_range(deck, player, clock):
    deck.transport.seek(10.0)
    deck.key_down("q")
    deck.key_down("2")
    assert deck.active_slot == 1
    clock.advance(2.0)
    deck.transport.seek(20.0)
    assert deck.key_down("q") == CueAction.SET
    assert deck.cues.get(0) == 10.0
    assert deck.cues.get(30) == 20.0


def test_keys_ignored_before_ready(deck):
    assert deck.key_down("q") == CueAction.NONE
    assert deck.cues.count_set() == 0


def test_unbound_key(deck, player):
    assert deck.key_down("=") == CueAction.NONE


# ---- Gate mode ----------------------------------------------------------

def test_gate_holds_and_releases(deck, player):
    deck.set_cue(0, 30.0)
    deck.set_gate_mode(True)

    assert deck.key_down("q") == CueAction.GATE
    assert deck.gate.state == GateState.HELD
    player.pump()
    assert deck.transport.is_playing

    assert deck.key_up("q") is True
    assert deck.gate.state == GateState.RELEASED
    assert deck.transport.is_playing is False
    assert player.count("pause_video") == 1


def test_gate_suppresses_key_repeat(deck, player):
    deck.set_cue(0, 30.0)
    deck.set_gate_mode(True)
    deck.key_down("q")
    seeks = player.count("seek_to")
    assert deck.key_down("q") == CueAction.REPEAT
    assert deck.key_down("q") == CueAction.REPEAT
    assert player.count("seek_to") == seeks


def test_gate_on_unset_cue_only_stamps(deck, player):
    deck.set_gate_mode(True)
    deck.transport.seek(8.0)
    assert deck.key_down("w") == CueAction.SET
    assert deck.cues.get(1) == 8.0
    assert deck.gate.state == GateState.RELEASED
    assert deck.key_up("w") is False
    assert player.count("pause_video") == 0


def test_gate_forces_play_even_when_playing(deck, player):
    deck.set_cue(0, 30.0)
    deck.transport.play()
    player.pump()
    plays = player.count("play_video")
    deck.set_gate_mode(True)
    deck.key_down("q")
    assert player.count("play_video") == plays + 1


def test_disabling_gate_mode_while_held_releases(deck, player):
    deck.set_cue(0, 30.0)
    deck.set_gate_mode(True)
    deck.key_down("q")
    player.pump()

    deck.set_gate_mode(False)
    assert deck.gate.state == GateState.RELEASED
    assert deck.transport.is_playing is False
    assert player.count("pause_video") == 1

    # the late key-up must not pause a second time
    assert deck.key_up("q") is False
    assert player.count("pause_video") == 1


def test_mode_is_fixed_at_key_down(deck, player):
    deck.set_cue(0, 30.0)
    assert deck.key_down("q") == CueAction.JUMP
    player.pump()
    deck.set_gate_mode(True)
    assert deck.key_up("q") is False
    assert deck.transport.is_playing


def test_toggle_repeat_stays_toggle_after_gate_mode_turns_on(deck, player):
    deck.set_cue(0, 30.0)
    assert deck.key_down("q") == CueAction.JUMP
    deck.set_gate_mode(True)
    assert deck.key_down("q") == CueAction.JUMP
    assert deck.gate.state == GateState.RELEASED
    assert deck.key_up("q") is False
    # the next fresh press picks up gate mode
    assert deck.key_down("q") == CueAction.GATE


def test_second_gate_key_takes_over_the_hold(deck, player):
    deck.set_cue(0, 30.0)
    deck.set_cue(1, 60.0)
    deck.set_gate_mode(True)
    deck.key_down("q")
    deck.key_down("w")
    assert deck.gate.held_key == "w"
    assert deck.key_up("q") is False
    assert deck.key_up("w") is True


def test_gate_state_events_report_hold_and_release(deck, player):
    seen = []
    deck.events.subscribe(seen.append, DeckEventType.GATE_STATE_CHANGED)
    deck.set_cue(0, 30.0)
    deck.set_gate_mode(True)
    deck.key_down("q")
    deck.key_up("q")
    assert [e.data["state"] for e in seen] == [GateState.HELD, GateState.RELEASED]


def test_load_drops_open_gestures(deck, player):
    deck.set_cue(0, 30.0)
    deck.set_gate_mode(True)
    deck.key_down("q")
    assert deck.load_video("abcdefghijk") is True
    assert deck.gate.state == GateState.RELEASED
    assert deck.cues.count_set() == 0
    assert deck.key_up("q") is False


def test_detach_then_reattach(deck, player, clock):
    deck.detach()
    assert deck.key_down("q") == CueAction.NONE
    attach(deck, clock)
    assert deck.key_down("q") == CueAction.SET
