"""
mpv backend over JSON IPC.

mpv runs as a child process in idle mode. A reader thread turns mpv's
events into tagged MediaEvents on the channel; commands are written from
the control thread.
"""

import itertools
import json
import os
import socket
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from mp3_player.core.config import PlayerConfig
from mp3_player.core.exceptions import PlaybackError

from .events import EventChannel, Ended, Failed, MetadataReady, PositionAdvanced

# Observer ids passed to observe_property
_OBSERVE_DURATION = 1
_OBSERVE_TIME_POS = 2

# Minimum change in time-pos worth reporting (seconds)
POSITION_REPORT_STEP = 0.25


def check_mpv_available(mpv_path: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            [mpv_path, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


class MpvMediaPlayer:
    """MediaPlayer backed by an mpv child process."""

    def __init__(self, channel: EventChannel, config: Optional[PlayerConfig] = None):
        self.channel = channel
        self.config = config or PlayerConfig()
        self.mpv_path = self.config.mpv_path or "mpv"
        if self.config.mpv_socket_path:
            self.socket_path = self.config.mpv_socket_path
        else:
            self.socket_path = str(
                Path(tempfile.gettempdir()) / f"mp3-player-mpv-{os.getpid()}.sock"
            )

        self._process: Optional[subprocess.Popen] = None
        self._sock: Optional[socket.socket] = None
        self._reader: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._tx_lock = threading.Lock()

        # Generation bookkeeping, shared with the reader thread
        self._lock = threading.Lock()
        self._request_ids = itertools.count(1)
        self._pending_requests: Dict[int, int] = {}
        self._entry_generations: Dict[int, int] = {}
        self._latest_generation: Optional[int] = None
        self._active_generation: Optional[int] = None
        self._metadata_sent = False
        self._last_position: Optional[float] = None

    # ---- lifecycle ----

    def start(self, timeout: float = 5.0) -> None:
        """Start mpv with JSON IPC and connect to it.

        Raises:
            PlaybackError: If mpv is missing or its socket never appears
        """
        if self._process is not None:
            return

        if not check_mpv_available(self.mpv_path):
            raise PlaybackError(f"mpv not found: {self.mpv_path}")

        logger.info(f"Starting MPV player with socket: {self.socket_path}")

        if os.path.exists(self.socket_path):
            logger.debug(f"Removing existing socket: {self.socket_path}")
            os.unlink(self.socket_path)

        cmd = [
            self.mpv_path,
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={self.socket_path}",
            "--keep-open=no",
            "--pause=yes",
            "--load-scripts=no",
        ]

        try:
            self._process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise PlaybackError(f"Failed to start mpv: {e}") from e

        deadline = time.time() + timeout
        while True:
            try:
                sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
                sock.connect(self.socket_path)
                break
            except OSError:
                sock.close()
                if time.time() > deadline or self._process.poll() is not None:
                    logger.error(f"MPV socket connection timeout after {timeout}s")
                    self._kill_process()
                    raise PlaybackError("mpv IPC socket did not become available")
                time.sleep(0.1)

        self._sock = sock
        self._stop.clear()
        self._reader = threading.Thread(target=self._read_loop, name="mpv-ipc-rx", daemon=True)
        self._reader.start()

        self._send(["observe_property", _OBSERVE_DURATION, "duration"])
        self._send(["observe_property", _OBSERVE_TIME_POS, "time-pos"])
        logger.info("MPV started successfully")

    def close(self) -> None:
        """Stop mpv and clean up the socket."""
        if self._sock is not None:
            try:
                self._send(["quit"])
            except PlaybackError:
                pass  # mpv already gone
        self._stop.set()

        if self._sock is not None:
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self._sock.close()
            self._sock = None

        if self._reader is not None and self._reader is not threading.current_thread():
            self._reader.join(timeout=1.0)
            if self._reader.is_alive():
                logger.warning("MPV reader thread did not stop")
        self._reader = None

        self._kill_process()

        if os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                pass
        logger.info("MPV stopped")

    def _kill_process(self) -> None:
        if self._process is None:
            return
        try:
            self._process.terminate()
            self._process.wait(timeout=2.0)
        except subprocess.TimeoutExpired:
            self._process.kill()
        except OSError as e:
            logger.warning(f"Unexpected error during MPV cleanup: {e}")
        self._process = None

    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    # ---- commands ----

    def _send(self, command: list, request_id: Optional[int] = None) -> None:
        if self._sock is None or not self.is_running():
            raise PlaybackError("mpv is not running")
        payload: Dict[str, Any] = {"command": command}
        if request_id is not None:
            payload["request_id"] = request_id
        line = (json.dumps(payload) + "\n").encode("utf-8")
        try:
            with self._tx_lock:
                self._sock.sendall(line)
        except OSError as e:
            raise PlaybackError(f"Failed to send command to mpv: {e}") from e

    def load(self, source: Path, generation: int) -> None:
        """Replace the current file.

        mpv answers loadfile with the playlist entry id it assigned, which
        is how later events for that entry find their generation. A burst of
        loads can replace entries before mpv starts them, so an entry whose
        reply has not arrived yet is credited to the newest load.
        """
        with self._lock:
            request_id = next(self._request_ids)
            self._pending_requests[request_id] = generation
            self._latest_generation = generation
        try:
            self._send(["set_property", "pause", True])
            self._send(["loadfile", str(source), "replace"], request_id=request_id)
        except PlaybackError:
            with self._lock:
                self._pending_requests.pop(request_id, None)
            raise
        logger.debug(f"loadfile {source} (generation {generation})")

    def play(self) -> None:
        self._send(["set_property", "pause", False])

    def pause(self) -> None:
        self._send(["set_property", "pause", True])

    def set_position(self, seconds: float) -> None:
        self._send(["seek", float(seconds), "absolute"])

    def set_volume(self, level: float) -> None:
        level = max(0.0, min(1.0, float(level)))
        # mpv volume is 0..100
        self._send(["set_property", "volume", level * 100.0])

    def poll(self) -> None:
        pass  # the reader thread pushes events

    def stop(self) -> None:
        self._send(["stop"])

    # ---- events ----

    def _read_loop(self) -> None:
        buf = b""
        while not self._stop.is_set() and self._sock is not None:
            try:
                chunk = self._sock.recv(4096)
            except OSError:
                break
            if not chunk:
                break

            buf += chunk
            while b"\n" in buf:
                line, buf = buf.split(b"\n", 1)
                line = line.strip()
                if not line:
                    continue
                try:
                    message = json.loads(line.decode("utf-8", errors="replace"))
                except json.JSONDecodeError:
                    logger.debug(f"Ignoring malformed mpv message: {line!r}")
                    continue
                if isinstance(message, dict):
                    self._handle_message(message)

        if not self._stop.is_set():
            logger.warning("MPV IPC connection closed unexpectedly")
            with self._lock:
                generation = self._latest_generation
            if generation is not None:
                self.channel.post(generation, Failed("Media backend exited"))

    def _handle_message(self, message: Dict[str, Any]) -> None:
        event = message.get("event")
        if event is None:
            self._handle_reply(message)
            return

        with self._lock:
            if event == "start-file":
                entry_id = message.get("playlist_entry_id")
                generation = self._entry_generations.get(entry_id)
                if generation is None:
                    generation = self._latest_generation
                    if entry_id is not None and generation is not None:
                        self._entry_generations[entry_id] = generation
                self._active_generation = generation
                self._metadata_sent = False
                self._last_position = None
                return

            active = self._active_generation
            if active is None:
                return

            if event == "property-change":
                self._on_property_change(message, active)
            elif event == "end-file":
                entry_id = message.get("playlist_entry_id")
                generation = self._entry_generations.pop(entry_id, active)
                reason = message.get("reason")
                if reason == "eof":
                    self.channel.post(generation, Ended())
                elif reason == "error":
                    detail = message.get("file_error") or "unknown error"
                    self.channel.post(generation, Failed(f"Failed to load audio file: {detail}"))

    def _handle_reply(self, message: Dict[str, Any]) -> None:
        with self._lock:
            generation = self._pending_requests.pop(message.get("request_id"), None)
            if generation is None:
                return
            data = message.get("data")
            entry_id = data.get("playlist_entry_id") if isinstance(data, dict) else None
            if message.get("error") == "success" and entry_id is not None:
                self._entry_generations[entry_id] = generation

        error = message.get("error")
        if error != "success":
            self.channel.post(generation, Failed(f"mpv rejected the file: {error}"))

    def _on_property_change(self, message: Dict[str, Any], generation: int) -> None:
        name = message.get("name")
        data = message.get("data")
        if data is None:
            return

        if name == "duration" and not self._metadata_sent:
            self._metadata_sent = True
            self.channel.post(generation, MetadataReady(float(data)))
        elif name == "time-pos":
            position = float(data)
            if (
                self._last_position is None
                or abs(position - self._last_position) >= POSITION_REPORT_STEP
            ):
                self._last_position = position
                self.channel.post(generation, PositionAdvanced(position))
