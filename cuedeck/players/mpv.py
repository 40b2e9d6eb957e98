"""mpv player adapter.

Drives an external ``mpv`` process through its JSON IPC socket.  Video
identifiers are resolved to a playable stream with yt-dlp.

mpv has no push channel here: ``pump()`` reads the pause/idle/eof
properties on each host tick, derives a PlayerState code and queues a
notification when it changes.  Notifications are delivered from
``pump()`` on the caller's thread.
"""

from __future__ import annotations

import itertools
import json
import logging
import os
import socket
import subprocess
import tempfile
import time
from collections import deque
from pathlib import Path
from typing import Any, Callable, Deque, List, Optional

from .base import PlayerState, ReadyCallback, StateCallback

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={}"

# Per-player suffix for the default IPC socket path
_instance_ids = itertools.count(1)


def resolve_stream_url(video_id: str) -> str:
    """Resolve a video id to a direct stream URL with yt-dlp."""
    import yt_dlp

    ydl_opts = {
        'format': 'best[height<=720]/best',
        'quiet': True,
        'no_warnings': True,
        'noplaylist': True,
        'cachedir': False,
    }
    with yt_dlp.YoutubeDL(ydl_opts) as ydl:
        info = ydl.extract_info(WATCH_URL.format(video_id), download=False)
    url = info.get('url') if info else None
    if not url:
        raise RuntimeError(f"no playable stream for video {video_id}")
    return url


class MpvPlayer:
    """mpv process controlled over IPC.

    Parameters:
        socket_path: IPC socket path; a temp path is used by default.
        mpv_binary: Executable to launch.
        extra_args: Additional mpv command-line arguments.
        resolver: Maps a video id to something mpv can open.
    """

    def __init__(
        self,
        socket_path: Optional[str] = None,
        mpv_binary: str = "mpv",
        extra_args: Optional[List[str]] = None,
        resolver: Callable[[str], str] = resolve_stream_url,
    ) -> None:
        if socket_path is None:
            socket_path = os.path.join(
                tempfile.gettempdir(), f"cuedeck_mpv_{os.getpid()}_{next(_instance_ids)}.sock",
            )
        self.socket_path = socket_path
        self.mpv_binary = mpv_binary
        self.extra_args = list(extra_args or [])
        self._resolver = resolver
        self.process: Optional[subprocess.Popen] = None
        self._on_ready: Optional[ReadyCallback] = None
        self._on_state_change: Optional[StateCallback] = None
        self._pending: Deque[Callable[[], None]] = deque()
        self._state = PlayerState.UNSTARTED
        self._loaded = False

    # ---- Process ------------------------------------------------------------

    def is_running(self) -> bool:
        if not self.process:
            return False
        return self.process.poll() is None

    def start(self, timeout: float = 5.0) -> bool:
        """Launch mpv and wait for the IPC socket.  Returns True when ready."""
        if self.is_running():
            return True

        args = [
            self.mpv_binary,
            '--idle=yes',
            '--keep-open=yes',
            '--force-window=yes',
            '--pause',
            f'--input-ipc-server={self.socket_path}',
            '--no-terminal',
            '--no-input-default-bindings',
            '--really-quiet',
        ] + self.extra_args

        # readiness is the socket appearing, so drop any stale one first
        try:
            Path(self.socket_path).unlink()
        except FileNotFoundError:
            pass

        self.process = subprocess.Popen(
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if Path(self.socket_path).exists():
                logger.info("mpv IPC ready at %s", self.socket_path)
                self._pending.append(lambda: self._on_ready and self._on_ready(self))
                return True
            time.sleep(0.1)
        logger.error("mpv did not open its IPC socket within %.1fs", timeout)
        return False

    def _send_command(self, command: List[Any]) -> Optional[dict]:
        """Send one IPC command and return mpv's reply, or None on error."""
        if not self.is_running():
            return None
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.settimeout(1.0)
                sock.connect(self.socket_path)
                sock.sendall((json.dumps({"command": command}) + '\n').encode('utf-8'))
                buf = b''
                while not buf.endswith(b'\n'):
                    chunk = sock.recv(4096)
                    if not chunk:
                        break
                    buf += chunk
        except OSError as exc:
            logger.debug("mpv IPC %s failed: %s", command[0], exc)
            return None

        # mpv may interleave event lines with the reply
        for line in buf.decode('utf-8', errors='replace').splitlines():
            try:
                message = json.loads(line)
            except json.JSONDecodeError:
                continue
            if 'error' in message:
                return message
        return None

    def _get_property(self, name: str) -> Any:
        reply = self._send_command(["get_property", name])
        if reply and reply.get('error') == 'success':
            return reply.get('data')
        return None

    def _set_property(self, name: str, value: Any) -> None:
        self._send_command(["set_property", name, value])

    # ---- Notifications ------------------------------------------------------

    def set_listeners(
        self,
        on_ready: Optional[ReadyCallback] = None,
        on_state_change: Optional[StateCallback] = None,
    ) -> None:
        self._on_ready = on_ready
        self._on_state_change = on_state_change
        if not self.is_running():
            self.start()

    def _observe_state(self) -> int:
        if not self._loaded:
            return PlayerState.UNSTARTED
        if self._get_property('eof-reached'):
            return PlayerState.ENDED
        if self._get_property('idle-active'):
            return PlayerState.CUED
        if self._get_property('paused-for-cache'):
            return PlayerState.BUFFERING
        paused = self._get_property('pause')
        if paused is None:
            return self._state
        return PlayerState.PAUSED if paused else PlayerState.PLAYING

    def pump(self) -> int:
        """Sample mpv's state and deliver queued notifications."""
        if self.is_running():
            code = self._observe_state()
            if code != self._state:
                self._state = code
                self._pending.append(lambda: self._on_state_change and self._on_state_change(code))

        delivered = 0
        while self._pending:
            callback = self._pending.popleft()
            callback()
            delivered += 1
        return delivered

    # ---- Queries ------------------------------------------------------------

    def get_current_time(self) -> float:
        value = self._get_property('time-pos')
        try:
            return float(value) if value is not None else 0.0
        except (TypeError, ValueError):
            return 0.0

    def get_duration(self) -> float:
        value = self._get_property('duration')
        try:
            return float(value) if value is not None else 0.0
        except (TypeError, ValueError):
            return 0.0

    # ---- Commands -----------------------------------------------------------

    def seek_to(self, seconds: float, allow_seek_ahead: bool = True) -> None:
        mode = "absolute" if allow_seek_ahead else "absolute+keyframes"
        self._send_command(["seek", float(seconds), mode])

    def play_video(self) -> None:
        self._set_property("pause", False)

    def pause_video(self) -> None:
        self._set_property("pause", True)

    def set_volume(self, volume: float) -> None:
        self._set_property("volume", max(0.0, min(100.0, float(volume))))

    def set_playback_rate(self, rate: float) -> None:
        self._set_property("speed", float(rate))

    def load_video_by_id(self, video_id: str) -> None:
        try:
            target = self._resolver(video_id)
        except Exception:
            logger.exception("Could not resolve video %s", video_id)
            return
        self._set_property("pause", True)
        self._send_command(["loadfile", target, "replace"])
        self._loaded = True
        logger.info("mpv loading %s", video_id)

    def close(self) -> None:
        """Quit mpv and remove the socket."""
        if self.is_running():
            self._send_command(["quit"])
            try:
                self.process.wait(timeout=2.0)
            except subprocess.TimeoutExpired:
                self.process.kill()
        self.process = None
        self._pending.clear()
        try:
            Path(self.socket_path).unlink()
        except FileNotFoundError:
            pass
