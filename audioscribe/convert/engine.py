"""
audioscribe.convert.engine - Lazily loaded FFmpeg engine.

The engine locates and probes the ffmpeg/ffprobe binaries once, on first
use, and is then shared by every conversion that is handed the same
ConverterEngine instance.
"""

from __future__ import annotations

import shutil
import subprocess
import threading
from dataclasses import dataclass

from audioscribe.exceptions import DependencyError
from audioscribe.logging import get_logger

log = get_logger("convert")

INSTALL_HINT = "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)"


@dataclass(frozen=True)
class FFmpegBinaries:
    ffmpeg: str
    ffprobe: str | None
    version: str


def _probe_version(binary: str) -> str:
    try:
        proc = subprocess.run(
            [binary, "-version"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        version_line = proc.stdout.split("\n")[0]
        return version_line.split()[2] if version_line else "unknown"
    except (subprocess.TimeoutExpired, IndexError, OSError):
        return "unknown"


def locate_ffmpeg(ffmpeg_path: str | None = None) -> FFmpegBinaries:
    """Find the ffmpeg binary (and ffprobe beside it, if any).

    Raises:
        DependencyError: If ffmpeg cannot be found
    """
    ffmpeg = shutil.which(ffmpeg_path) if ffmpeg_path else shutil.which("ffmpeg")
    if not ffmpeg:
        raise DependencyError("ffmpeg", "FFmpeg not found in PATH", INSTALL_HINT)
    return FFmpegBinaries(
        ffmpeg=ffmpeg,
        ffprobe=shutil.which("ffprobe"),
        version=_probe_version(ffmpeg),
    )


class ConverterEngine:
    """Shared, lazily initialized handle on the FFmpeg binaries.

    ``load`` runs the locator at most once per instance, even when called
    from several threads; later calls return the cached result.
    """

    def __init__(self, ffmpeg_path: str | None = None, locator=locate_ffmpeg) -> None:
        self.ffmpeg_path = ffmpeg_path
        self._locator = locator
        self._binaries: FFmpegBinaries | None = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._binaries is not None

    def load(self) -> FFmpegBinaries:
        if self._binaries is not None:
            return self._binaries
        with self._lock:
            if self._binaries is None:
                self._binaries = self._locator(self.ffmpeg_path)
                log.debug("Loaded ffmpeg %s from %s", self._binaries.version, self._binaries.ffmpeg)
        return self._binaries

    def reset(self) -> None:
        """Forget the loaded binaries so the next load probes again."""
        with self._lock:
            self._binaries = None
