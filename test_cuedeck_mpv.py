"""mpv adapter: state sampling, command mapping and the IPC ready handshake."""

from pathlib import Path

import pytest

from cuedeck.players import mpv as mpv_module
from cuedeck.players.base import PlayerState
from cuedeck.players.mpv import MpvPlayer


class ScriptedMpv(MpvPlayer):
    """MpvPlayer with the IPC socket replaced by a property table."""

    def __init__(self, **kwargs):
        kwargs.setdefault("resolver", lambda video_id: f"stream://{video_id}")
        super().__init__(**kwargs)
        self.props = {}
        self.sent = []

    def is_running(self):
        return True

    def _send_command(self, command):
        self.sent.append(command)
        if command[0] == "get_property":
            if command[1] in self.props:
                return {"error": "success", "data": self.props[command[1]]}
            return {"error": "property unavailable"}
        return {"error": "success"}


@pytest.fixture
def loaded():
    player = ScriptedMpv()
    player.load_video_by_id("dQw4w9WgXcQ")
    player.sent.clear()
    return player


def test_default_socket_paths_are_unique():
    first, second = MpvPlayer(), MpvPlayer()
    assert first.socket_path != second.socket_path


def test_explicit_socket_path_is_kept(tmp_path):
    path = str(tmp_path / "deck.sock")
    assert MpvPlayer(socket_path=path).socket_path == path


# ---- State sampling -----------------------------------------------------

def test_unstarted_until_a_video_is_loaded():
    player = ScriptedMpv()
    player.props["pause"] = False
    assert player._observe_state() == PlayerState.UNSTARTED


@pytest.mark.parametrize("props, expected", [
    ({"eof-reached": True, "pause": False}, PlayerState.ENDED),
    ({"idle-active": True}, PlayerState.CUED),
    ({"paused-for-cache": True, "pause": False}, PlayerState.BUFFERING),
    ({"pause": True}, PlayerState.PAUSED),
    ({"pause": False}, PlayerState.PLAYING),
])
def test_observe_state(loaded, props, expected):
    loaded.props.update(props)
    assert loaded._observe_state() == expected


def test_unreadable_pause_keeps_last_state(loaded):
    loaded._state = PlayerState.PLAYING
    assert loaded._observe_state() == PlayerState.PLAYING


def test_pump_notifies_only_on_change(loaded):
    seen = []
    loaded.set_listeners(on_state_change=seen.append)
    loaded.props["pause"] = True
    assert loaded.pump() == 1
    assert loaded.pump() == 0
    loaded.props["pause"] = False
    loaded.pump()
    assert seen == [PlayerState.PAUSED, PlayerState.PLAYING]


# ---- Commands -----------------------------------------------------------

def test_seek_mode_follows_allow_seek_ahead(loaded):
    loaded.seek_to(12.5)
    loaded.seek_to(30, allow_seek_ahead=False)
    assert loaded.sent == [["seek", 12.5, "absolute"], ["seek", 30.0, "absolute+keyframes"]]


def test_transport_properties(loaded):
    loaded.play_video()
    loaded.pause_video()
    loaded.set_volume(150)
    loaded.set_playback_rate(1.5)
    assert loaded.sent == [
        ["set_property", "pause", False],
        ["set_property", "pause", True],
        ["set_property", "volume", 100.0],
        ["set_property", "speed", 1.5],
    ]


def test_load_resolves_and_stays_paused():
    player = ScriptedMpv()
    player.load_video_by_id("abcdefghijk")
    assert player.sent == [
        ["set_property", "pause", True],
        ["loadfile", "stream://abcdefghijk", "replace"],
    ]


def test_unresolvable_video_sends_nothing():
    def fail(video_id):
        raise RuntimeError("no stream")

    player = ScriptedMpv(resolver=fail)
    player.load_video_by_id("abcdefghijk")
    assert player.sent == []
    assert player._observe_state() == PlayerState.UNSTARTED


def test_time_queries(loaded):
    assert loaded.get_current_time() == 0.0
    loaded.props["time-pos"] = 42.25
    loaded.props["duration"] = "212.0"
    assert loaded.get_current_time() == 42.25
    assert loaded.get_duration() == 212.0
    loaded.props["duration"] = "n/a"
    assert loaded.get_duration() == 0.0


# ---- Process and handshake ----------------------------------------------

class FakeProcess:
    """Stands in for the mpv process: creates the IPC socket on launch."""

    def __init__(self, args, **kwargs):
        self.args = args
        ipc = next(a for a in args if a.startswith("--input-ipc-server="))
        self.socket_path = ipc.split("=", 1)[1]
        Path(self.socket_path).write_text("")
        self.returncode = None

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        self.returncode = 0
        return 0

    def kill(self):
        self.returncode = -9


def test_ready_is_delivered_from_pump(tmp_path, monkeypatch):
    monkeypatch.setattr(mpv_module.subprocess, "Popen", FakeProcess)
    ready = []
    player = MpvPlayer(socket_path=str(tmp_path / "a.sock"))
    player.set_listeners(on_ready=ready.append)
    assert player.is_running()
    assert ready == []
    player.pump()
    assert ready == [player]

    player.close()
    assert not Path(player.socket_path).exists()


def test_stale_socket_is_removed_before_launch(tmp_path, monkeypatch):
    launched = []

    def popen(args, **kwargs):
        # the old socket must already be gone when mpv starts
        assert not (tmp_path / "a.sock").exists()
        process = FakeProcess(args, **kwargs)
        launched.append(process)
        return process

    (tmp_path / "a.sock").write_text("")
    monkeypatch.setattr(mpv_module.subprocess, "Popen", popen)
    player = MpvPlayer(socket_path=str(tmp_path / "a.sock"))
    assert player.start(timeout=1.0) is True
    assert len(launched) == 1
