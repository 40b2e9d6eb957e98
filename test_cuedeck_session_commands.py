"""Session wiring and the slash-command surface shared by the REPL, TUI and GUI."""

import pytest

from bcuedeck import execute_command
from cuedeck.commands import build_command_table
from cuedeck.core.events import DeckEventType
from cuedeck.core.session import Session
from cuedeck.core.user_data import DEFAULT_PREFERENCES, get_preferences_path, load_preferences
from cuedeck.players.simulated import SimulatedPlayer
from gui.bridge import Bridge


@pytest.fixture
def commands():
    return build_command_table()


def _session(clock, variant="single", connect=True):
    session = Session(
        variant=variant,
        prefs={},
        player_factory=lambda: SimulatedPlayer(clock=clock),
        clock=clock,
        persist=False,
    )
    if connect:
        session.connect()
        session.tick()
    return session


@pytest.fixture
def single(clock):
    session = _session(clock)
    yield session
    session.close()


@pytest.fixture
def dual(clock):
    session = _session(clock, variant="dual")
    yield session
    session.close()


# ---- Command table ------------------------------------------------------

def test_command_table_has_aliases(commands):
    for name in ("load", "play", "pause", "pp", "seek", "tempo", "vol", "slot",
                 "cue", "key", "gate", "deck", "xfade", "status", "tick", "prefs"):
        assert name in commands
    assert commands["p"] is commands["pp"]
    assert commands["xf"] is commands["xfade"]


def test_unknown_command_suggests(single, commands):
    out = execute_command(single, commands, "/tem")
    assert out.startswith("ERROR: Unknown command /tem")
    assert "/tempo" in out


def test_input_without_slash(single, commands):
    assert execute_command(single, commands, "play").startswith("ERROR")


def test_quit_and_help(single, commands):
    assert execute_command(single, commands, "/q") == "EXIT"
    assert "COMMANDS" in execute_command(single, commands, "/help")


# ---- Readiness ----------------------------------------------------------

def test_transport_commands_before_ready(clock, commands):
    session = _session(clock, connect=False)
    out = execute_command(session, commands, "/play")
    assert out == "Deck main: player not ready (command ignored)"
    assert session.active_deck.transport.is_playing is False


def test_session_attaches_on_first_tick(clock):
    session = _session(clock, connect=False)
    session.connect()
    assert not session.active_deck.transport.is_ready
    session.tick()
    assert session.active_deck.transport.is_ready
    session.close()
    assert not session.active_deck.transport.is_ready


# ---- Set, slot switch, jump ---------------------------------------------

def test_set_then_jump_scenario(single, commands, clock):
    deck = single.active_deck

    assert execute_command(single, commands, "/seek 12.5") == "OK: Deck main at 0:12"
    execute_command(single, commands, "/play")
    execute_command(single, commands, "/tick")
    assert deck.transport.is_playing

    assert execute_command(single, commands, "/key q") == "OK: cue 0 set at 0:12"
    assert deck.cues.get(0) == 12.5

    clock.advance(5.0)
    assert execute_command(single, commands, "/key 2") == "OK: Deck main slot 2"
    assert execute_command(single, commands, "/key q") == "OK: cue 30 set at 0:17"
    assert deck.cues.get(30) == pytest.approx(17.5)

    execute_command(single, commands, "/pause")
    execute_command(single, commands, "/key 1")
    assert execute_command(single, commands, "/key q") == "OK: jump to cue 0 (0:12)"
    execute_command(single, commands, "/tick")
    assert deck.transport.is_playing
    assert deck.transport.current_time == 12.5


def test_cue_set_clear_and_list(single, commands):
    assert execute_command(single, commands, "/cue set w 1:15") == "OK: cue 1 = 1:15"
    assert single.active_deck.cues.get(1) == 75.0
    listing = execute_command(single, commands, "/cue")
    assert "W:1:15" in listing
    assert "1 of 300 cues set" in listing
    assert execute_command(single, commands, "/cue clear 1") == "OK: cue 1 cleared"
    assert execute_command(single, commands, "/cue clear 999").startswith("ERROR")


@pytest.mark.parametrize("value", ["inf", "nan", "-3"])
def test_cue_set_rejects_invalid_times(single, commands, value):
    out = execute_command(single, commands, f"/cue set q {value}")
    assert out.startswith("ERROR")
    assert single.active_deck.cues.get(0) is None


def test_load_clears_cues(single, commands):
    execute_command(single, commands, "/cue set q 3")
    out = execute_command(single, commands, "/load https://youtu.be/abcdefghijk")
    assert out == "OK: Deck main loaded abcdefghijk (cues cleared)"
    assert single.active_deck.cues.count_set() == 0
    assert execute_command(single, commands, "/load nope").startswith("ERROR")


def test_tempo_and_volume(single, commands):
    assert execute_command(single, commands, "/tempo 3") == "OK: Deck main tempo 2.00x"
    assert execute_command(single, commands, "/tempo -") == "OK: Deck main tempo 1.95x"
    assert execute_command(single, commands, "/tempo reset") == "OK: Deck main tempo 1.00x"
    assert execute_command(single, commands, "/vol 150") == "OK: Deck main volume 100%"
    assert execute_command(single, commands, "/v 30") == "OK: Deck main volume 30%"


def test_gate_hold_through_key_phases(single, commands):
    execute_command(single, commands, "/cue set q 30")
    assert execute_command(single, commands, "/gate") == "OK: Deck main gate mode ON"
    assert execute_command(single, commands, "/key q down") == "OK: gate to cue 0 (0:30)"
    execute_command(single, commands, "/tick")
    assert single.active_deck.transport.is_playing
    assert execute_command(single, commands, "/key q up") == "OK: Q up (gate released)"
    assert not single.active_deck.transport.is_playing


def test_xfade_needs_dual(single, commands):
    assert execute_command(single, commands, "/xfade 0.5") == \
        "ERROR: crossfader needs the dual-deck variant"


# ---- Dual variant -------------------------------------------------------

def test_dual_keys_pick_their_deck(dual, commands):
    assert execute_command(dual, commands, "/key q") == "OK: cue 0 set at 0:00"
    assert execute_command(dual, commands, "/key y") == "OK: cue 0 set at 0:00"
    assert dual.deck("A").cues.count_set() == 1
    assert dual.deck("B").cues.count_set() == 1

    assert execute_command(dual, commands, "/key 9") == "OK: Deck B slot 2"
    assert dual.deck("B").active_slot == 1
    assert dual.deck("A").active_slot == 0


def test_dual_crossfader_command(dual, commands):
    out = execute_command(dual, commands, "/xf 0.5")
    assert out.startswith("OK: Crossfader +0.50  A 50%  B 100%")
    assert dual.deck("A").transport.volume == 50.0
    assert dual.adapters["A"].volume == 50.0


@pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
def test_xfade_rejects_non_finite(dual, commands, value):
    execute_command(dual, commands, "/xfade 0.5")
    out = execute_command(dual, commands, f"/xfade {value}")
    assert out == f"ERROR: invalid crossfader value '{value}'"
    assert dual.crossfader.position == 0.5
    assert execute_command(dual, commands, "/xfade").startswith("Crossfader +0.50")


def test_deck_selection(dual, commands):
    assert execute_command(dual, commands, "/deck b") == "OK: active deck B"
    assert dual.active_deck_id == "B"
    assert execute_command(dual, commands, "/deck z").startswith("ERROR: no deck 'z'")
    status = execute_command(dual, commands, "/status")
    assert "* Deck B" in status
    assert "Crossfader" in status


# ---- Preferences --------------------------------------------------------

def test_prefs_set_saves_and_applies(single, commands):
    assert execute_command(single, commands, "/prefs rate_step 0.1") == "OK: rate_step = 0.1"
    assert load_preferences()["rate_step"] == 0.1
    assert execute_command(single, commands, "/tempo +") == "OK: Deck main tempo 1.10x"
    assert "rate_step" in execute_command(single, commands, "/prefs")


def test_prefs_rejects_bad_input(single, commands):
    assert execute_command(single, commands, "/prefs colour red").startswith("ERROR: unknown preference")
    assert execute_command(single, commands, "/prefs min_rate inf").startswith("ERROR")
    assert execute_command(single, commands, "/prefs poll_interval_ms fast").startswith("ERROR")
    assert not get_preferences_path().exists()


def test_prefs_reset_writes_defaults(single, commands):
    execute_command(single, commands, "/prefs seek_debounce_ms 500")
    assert execute_command(single, commands, "/prefs reset") == "OK: preferences reset to defaults"
    assert load_preferences() == DEFAULT_PREFERENCES
    assert single.prefs["seek_debounce_ms"] == 1000


def test_undecodable_preferences_fall_back_to_defaults():
    get_preferences_path().write_bytes(b"\xff\xfe{\"variant\": \"dual\"}")
    assert load_preferences() == DEFAULT_PREFERENCES


# ---- GUI bridge (headless) ----------------------------------------------

def test_bridge_runs_commands_and_relays_events(single):
    bridge = Bridge(single)
    seen = []
    bridge.add_listener(seen.append)

    assert bridge.execute_command("/gate", ["on"]) == "OK: Deck main gate mode ON"
    assert DeckEventType.GATE_MODE_CHANGED in [e.event_type for e in seen]
    assert bridge.handles_key("q")
    assert not bridge.handles_key("=")
    assert bridge.execute_command("/nothing").startswith("ERROR")

    bridge.close()
    single.active_deck.set_gate_mode(False)
    assert [e.event_type for e in seen].count(DeckEventType.GATE_MODE_CHANGED) == 1
