"""
audioscribe.convert.ffmpeg - FFmpeg audio conversion.

Writes the source to a scratch directory, runs ffmpeg with machine-readable
progress on stdout, and reads the re-encoded file back into memory.
"""

from __future__ import annotations

import json
import subprocess
import tempfile
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path

from audioscribe.convert.engine import ConverterEngine
from audioscribe.exceptions import ConversionError
from audioscribe.logging import get_logger
from audioscribe.models import AudioSource

log = get_logger("convert")

ProgressCallback = Callable[[float], None]


class TargetFormat(str, Enum):
    MP3 = "mp3"
    M4A = "m4a"
    AAC = "aac"

    @property
    def mime_type(self) -> str:
        return f"audio/{self.value}"


def probe_duration(ffprobe: str | None, path: Path) -> float | None:
    """Return the duration of a media file in seconds, or None if unknown."""
    if not ffprobe:
        return None
    cmd = [
        ffprobe,
        "-v",
        "quiet",
        "-print_format",
        "json",
        "-show_format",
        str(path),
    ]
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        return None
    try:
        duration = float(json.loads(result.stdout).get("format", {}).get("duration", 0))
    except (ValueError, TypeError):
        return None
    return duration if duration > 0 else None


def parse_progress(lines: Iterable[str], duration: float | None) -> Iterable[float]:
    """Turn ffmpeg ``-progress`` key=value lines into percentages.

    ``out_time_us`` (``out_time_ms`` in older builds, also microseconds) is
    divided by the input duration; ``progress=end`` yields 100.
    """
    for line in lines:
        key, _, value = line.strip().partition("=")
        if key in ("out_time_us", "out_time_ms") and duration:
            try:
                seconds = int(value) / 1_000_000
            except ValueError:
                continue
            yield max(0.0, min(100.0, seconds / duration * 100))
        elif key == "progress" and value == "end":
            yield 100.0


def build_command(ffmpeg: str, input_path: Path, output_path: Path) -> list[str]:
    return [
        ffmpeg,
        "-y",
        "-nostats",
        "-loglevel",
        "error",
        "-i",
        str(input_path),
        "-progress",
        "pipe:1",
        str(output_path),
    ]


def convert_audio(
    source: AudioSource,
    target_format: TargetFormat | str,
    on_progress: ProgressCallback | None = None,
    engine: ConverterEngine | None = None,
) -> AudioSource:
    """Re-encode audio to the target format.

    Args:
        source: Audio to convert
        target_format: One of TargetFormat (or its string value)
        on_progress: Optional callback receiving percent complete (0-100)
        engine: Shared engine; a fresh one is created when omitted

    Returns:
        AudioSource holding the converted bytes

    Raises:
        ConversionError: If the format is unknown or FFmpeg fails
        DependencyError: If FFmpeg is not installed
    """
    try:
        target = TargetFormat(target_format)
    except ValueError as e:
        valid = ", ".join(f.value for f in TargetFormat)
        raise ConversionError(f"Unsupported target format '{target_format}' (use {valid})") from e

    if not source.data:
        raise ConversionError("Audio source is empty")

    binaries = (engine or ConverterEngine()).load()

    with tempfile.TemporaryDirectory(prefix="audioscribe-convert-") as scratch:
        scratch_dir = Path(scratch)
        input_path = scratch_dir / f"input.{source.extension}"
        output_path = scratch_dir / f"output.{target.value}"
        input_path.write_bytes(source.data)

        duration = probe_duration(binaries.ffprobe, input_path)
        cmd = build_command(binaries.ffmpeg, input_path, output_path)
        log.debug("Running %s", " ".join(cmd))

        # stderr goes to a file: only stdout is drained while ffmpeg runs
        log_path = scratch_dir / "ffmpeg.log"
        try:
            with open(log_path, "w", encoding="utf-8") as log_file:
                proc = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=log_file,
                    text=True,
                )
                try:
                    for percent in parse_progress(proc.stdout, duration):
                        if on_progress:
                            on_progress(percent)
                    returncode = proc.wait()
                finally:
                    if proc.poll() is None:
                        proc.kill()
                        proc.wait()
                    proc.stdout.close()
        except OSError as e:
            raise ConversionError(f"Could not run ffmpeg: {e}") from e

        stderr = log_path.read_text(encoding="utf-8", errors="replace")
        if returncode != 0 or not output_path.exists():
            raise ConversionError(f"FFmpeg conversion to {target.value} failed: {stderr.strip()}")

        data = output_path.read_bytes()

    stem = Path(source.name).stem or "converted"
    return AudioSource(
        data=data,
        mime_type=target.mime_type,
        name=f"{stem}.{target.value}",
        origin=source.origin,
    )
