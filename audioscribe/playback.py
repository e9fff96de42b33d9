"""
audioscribe.playback - Chunk timestamp to seek position mapping.

Converts a chunk's display timestamp to a seek offset and drives a player.
The shipped player wraps ``ffplay``; anything with ``seek`` and ``play``
methods can stand in for it.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from audioscribe.exceptions import DependencyError
from audioscribe.logging import get_logger
from audioscribe.models import TranscriptChunk

log = get_logger("playback")

DIGITS = re.compile(r"[0-9]+")


def time_to_seconds(time: str) -> int:
    """Convert ``HH:MM:SS`` or ``MM:SS`` to seconds.

    Any other shape, or a non-numeric part, maps to 0.
    """
    parts = time.strip().split(":")
    if not all(DIGITS.fullmatch(part) for part in parts):
        return 0
    values = [int(part) for part in parts]
    if len(values) == 3:
        return values[0] * 3600 + values[1] * 60 + values[2]
    if len(values) == 2:
        return values[0] * 60 + values[1]
    return 0


class Player(Protocol):
    def seek(self, seconds: float) -> None: ...

    def play(self) -> None: ...


class FFplayPlayer:
    """Headless audio player backed by an ffplay subprocess.

    ffplay cannot be repositioned from outside, so seeking restarts the
    process at the new offset.
    """

    def __init__(self, path: Path, ffplay_path: str | None = None) -> None:
        self.path = path
        self.ffplay_path = ffplay_path or shutil.which("ffplay")
        self.position = 0.0
        self._proc: subprocess.Popen | None = None

    @property
    def is_playing(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def seek(self, seconds: float) -> None:
        self.position = max(0.0, float(seconds))
        if self.is_playing:
            self.play()

    def play(self) -> None:
        if not self.ffplay_path:
            raise DependencyError(
                "ffplay",
                "FFplay not found in PATH",
                "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)",
            )
        self.stop()
        cmd = [
            self.ffplay_path,
            "-nodisp",
            "-autoexit",
            "-loglevel",
            "quiet",
            "-ss",
            f"{self.position:g}",
            str(self.path),
        ]
        log.debug("Starting playback: %s", " ".join(cmd))
        self._proc = subprocess.Popen(cmd, stdin=subprocess.DEVNULL)

    def wait(self) -> None:
        if self._proc is not None:
            self._proc.wait()

    def stop(self) -> None:
        if self.is_playing:
            self._proc.terminate()
            self._proc.wait()
        self._proc = None


class PlaybackController:
    """Seeks a player to transcript chunks."""

    def __init__(self, player: Player) -> None:
        self.player = player

    def seek_to(self, target: TranscriptChunk | str) -> int:
        """Move playback to a chunk (or raw timestamp) and resume playing.

        Returns:
            The seek offset in seconds
        """
        time = target.time if isinstance(target, TranscriptChunk) else target
        offset = time_to_seconds(time)
        self.player.seek(offset)
        self.player.play()
        return offset
