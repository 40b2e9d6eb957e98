"""Transport state machine: readiness, clamping, seek debounce, loading."""

import pytest

from conftest import VIDEO_ID, FakeClock
from cuedeck.core.cues import CueStore
from cuedeck.core.events import DeckEventType, EventHub
from cuedeck.core.transport import Transport, TransportStatus
from cuedeck.players.base import PlayerState
from cuedeck.players.simulated import SimulatedPlayer


@pytest.fixture
def transport(clock):
    return Transport("main", CueStore(300), clock=clock)


@pytest.fixture
def ready(transport, clock):
    transport.video_id = VIDEO_ID
    player = SimulatedPlayer(clock=clock)
    player.set_listeners(on_ready=transport.attach, on_state_change=transport.on_state_change)
    player.pump()
    player.pump()
    transport.poll()
    return player


# ---- Idle ---------------------------------------------------------------

def test_commands_are_silent_noops_while_idle(transport):
    assert transport.status == TransportStatus.IDLE
    assert transport.play() is False
    assert transport.pause() is False
    assert transport.seek(10) is False
    assert transport.set_rate(1.5) is False
    assert transport.set_volume(20) is False
    assert transport.load_video(VIDEO_ID) is False
    assert transport.poll() is False
    assert transport.playback_rate == 1.0
    assert transport.volume == 100.0
    assert transport.video_id == ""


def test_attach_applies_last_known_volume_and_rate(clock):
    transport = Transport("main", CueStore(10), clock=clock)
    transport.volume = 40.0
    transport.playback_rate = 1.25
    transport.video_id = VIDEO_ID
    player = SimulatedPlayer(clock=clock)
    transport.attach(player)
    assert transport.status == TransportStatus.READY
    assert player.volume == 40.0
    assert player.rate == 1.25
    assert ("load_video_by_id", VIDEO_ID) in player.calls


def test_detach_returns_to_idle(transport, ready):
    transport.play()
    ready.pump()
    assert transport.is_playing
    transport.detach()
    assert transport.status == TransportStatus.IDLE
    assert not transport.is_playing
    assert transport.play() is False


# ---- is_playing mirrors the adapter ------------------------------------

def test_play_waits_for_adapter_notification(transport, ready):
    transport.play()
    assert transport.is_playing is False
    ready.pump()
    assert transport.is_playing is True
    transport.pause()
    assert transport.is_playing is True
    ready.pump()
    assert transport.is_playing is False


def test_external_state_changes_are_authoritative(transport, ready):
    transport.on_state_change(PlayerState.PLAYING)
    assert transport.is_playing
    transport.on_state_change(PlayerState.BUFFERING)
    assert not transport.is_playing


def test_forced_local_pause_clears_at_once(transport, ready):
    transport.play()
    ready.pump()
    transport.pause(force_local=True)
    assert transport.is_playing is False
    ready.pump()
    assert transport.is_playing is False


def test_toggle_play(transport, ready):
    transport.toggle_play()
    ready.pump()
    assert transport.is_playing
    transport.toggle_play()
    ready.pump()
    assert not transport.is_playing


# ---- Rate and volume ----------------------------------------------------

@pytest.mark.parametrize("requested, expected", [(5.0, 2.0), (0.1, 0.25), (1.5, 1.5)])
def test_rate_is_clamped(transport, ready, requested, expected):
    transport.set_rate(requested)
    assert transport.playback_rate == expected
    assert ready.rate == expected


@pytest.mark.parametrize("requested, expected", [(150, 100.0), (-5, 0.0), (42, 42.0)])
def test_volume_is_clamped(transport, ready, requested, expected):
    transport.set_volume(requested)
    assert transport.volume == expected
    assert ready.volume == expected


def test_settings_event_only_on_change(transport, ready):
    seen = []
    transport.events.subscribe(seen.append, DeckEventType.SETTINGS_CHANGED)
    transport.set_volume(50)
    transport.set_volume(50)
    assert len(seen) == 1


# ---- Seek debounce ------------------------------------------------------

def test_poll_skips_position_inside_debounce_window(transport, ready, clock):
    transport.seek(50.0)
    assert transport.current_time == 50.0
    # adapter still reporting a stale position
    ready.seek_to(10.0)

    clock.advance(0.5)
    assert transport.poll() is False
    assert transport.current_time == 50.0

    clock.advance(0.6)
    assert transport.poll() is True
    assert transport.current_time == 10.0


def test_poll_refreshes_duration_even_when_suspended(transport, ready):
    transport.duration = 0.0
    transport.seek(5.0)
    transport.poll()
    assert transport.duration == ready.get_duration() > 0


def test_dragging_suspends_polling(transport, ready, clock):
    transport.begin_scrub()
    transport.scrub_to(30.0)
    clock.advance(5.0)
    assert transport.polling_suspended
    assert transport.poll() is False

    transport.end_scrub(40.0)
    assert not transport.is_dragging
    assert transport.current_time == 40.0
    clock.advance(1.5)
    assert transport.poll() is True


def test_seek_is_clamped_to_duration(transport, ready):
    transport.seek(10_000)
    assert transport.current_time == transport.duration
    transport.seek(-3)
    assert transport.current_time == 0.0


def test_read_time_uses_seek_target_inside_window(transport, ready, clock):
    transport.play()
    ready.pump()
    transport.seek(20.0)
    clock.advance(0.5)
    assert transport.read_time() == 20.0
    clock.advance(1.0)
    assert transport.read_time() == pytest.approx(21.5)


def test_jump_does_not_reissue_play_while_playing(transport, ready):
    transport.play()
    ready.pump()
    plays = ready.count("play_video")
    transport.jump(30.0)
    assert ready.count("play_video") == plays
    transport.jump(30.0, force_play=True)
    assert ready.count("play_video") == plays + 1


# ---- Loading ------------------------------------------------------------

def test_load_video_resets_cues(transport, ready):
    transport.cues.set(0, 12.5)
    transport.cues.set(299, 80.0)
    transport.play()
    ready.pump()

    assert transport.load_video("https://youtu.be/abcdefghijk") is True
    assert transport.video_id == "abcdefghijk"
    assert transport.cues.count_set() == 0
    assert transport.is_playing is False
    assert transport.current_time == 0.0


def test_unresolvable_load_changes_nothing(transport, ready):
    transport.cues.set(4, 3.0)
    video_id = transport.video_id
    loads = ready.count("load_video_by_id")

    assert transport.load_video("https://example.com/nothing") is False
    assert transport.cues.get(4) == 3.0
    assert transport.video_id == video_id
    assert ready.count("load_video_by_id") == loads


def test_events_reach_shared_hub(clock):
    hub = EventHub()
    seen = []
    hub.subscribe(seen.append)
    transport = Transport("x", CueStore(5), events=hub, clock=clock)
    transport.attach(SimulatedPlayer(clock=FakeClock()), cue_video=False)
    assert [e.event_type for e in seen] == [DeckEventType.ATTACHED]


def test_invalid_rate_range():
    with pytest.raises(ValueError):
        Transport("x", CueStore(5), min_rate=2.0, max_rate=1.0)
