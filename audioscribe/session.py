"""
audioscribe.session - Per-session state and action gating.

A Session owns the current audio source, its transcript, the search query
and the last converted output. Loading, transcribing and converting each
pass through an ActionGate, so an action cannot be started again while it
is still running, and a failure always leaves the gate idle for a retry.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from audioscribe.convert.engine import ConverterEngine
from audioscribe.convert.ffmpeg import TargetFormat, convert_audio
from audioscribe.exceptions import BusyError, ConversionError, SourceError, TranscriptionError
from audioscribe.logging import get_logger
from audioscribe.models import AudioSource, Transcript, TranscriptChunk
from audioscribe.search import filter_chunks
from audioscribe.source import (
    create_playback_file,
    fetch_url,
    load_file,
    release_playback_file,
)
from audioscribe.transcribe.client import TranscriptionClient
from audioscribe.transcribe.progress import SimulatedProgress

log = get_logger("session")


class ActionState(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


class ActionGate:
    """Idle/busy guard for one kind of user action."""

    def __init__(self, action: str) -> None:
        self.action = action
        self.state = ActionState.IDLE
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self.state is ActionState.BUSY

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Mark the action busy for the duration of the block.

        Raises:
            BusyError: If the action is already running
        """
        with self._lock:
            if self.state is ActionState.BUSY:
                raise BusyError(self.action)
            self.state = ActionState.BUSY
        try:
            yield
        finally:
            with self._lock:
                self.state = ActionState.IDLE


class Session:
    """State for one interactive transcription session."""

    def __init__(
        self,
        client: TranscriptionClient | None = None,
        engine: ConverterEngine | None = None,
        proxy_base: str | None = None,
        progress_interval: float = 1.0,
    ) -> None:
        self.client = client or TranscriptionClient()
        self.engine = engine or ConverterEngine()
        self.proxy_base = proxy_base
        self.progress_interval = progress_interval

        self.source: AudioSource | None = None
        self.transcript: Transcript = Transcript()
        self.search_query = ""
        self.converted: AudioSource | None = None
        self.transcription_progress = 0.0
        self.conversion_progress = 0.0

        self.load_gate = ActionGate("load")
        self.transcribe_gate = ActionGate("transcription")
        self.convert_gate = ActionGate("conversion")

    @property
    def chunks(self) -> list[TranscriptChunk]:
        return self.transcript.chunks

    @property
    def visible_chunks(self) -> list[TranscriptChunk]:
        """Chunks matching the current search query."""
        return filter_chunks(self.transcript.chunks, self.search_query)

    @property
    def playback_path(self) -> Path | None:
        if self.source is None or not self.source.playback_path:
            return None
        return Path(self.source.playback_path)

    def _replace_source(self, source: AudioSource) -> AudioSource:
        release_playback_file(self.source)
        create_playback_file(source)
        self.source = source
        self.transcript = Transcript(source=source.origin or source.name)
        self.converted = None
        log.debug("Loaded %s (%d bytes, %s)", source.name, source.size, source.mime_type)
        return source

    def load_file(self, path: Path) -> AudioSource:
        with self.load_gate.hold():
            return self._replace_source(load_file(path))

    def load_url(self, url: str) -> AudioSource:
        with self.load_gate.hold():
            return self._replace_source(fetch_url(url, proxy_base=self.proxy_base))

    def search(self, query: str) -> list[TranscriptChunk]:
        self.search_query = query
        return self.visible_chunks

    def transcribe(self, on_progress: Callable[[float], None] | None = None) -> Transcript:
        """Transcribe the loaded source, replacing any previous transcript.

        Raises:
            SourceError: If no audio is loaded
            BusyError: If a transcription is already running
            TranscriptionError: If the model request fails
        """
        if self.source is None:
            raise SourceError("No audio loaded")

        def report(value: float) -> None:
            self.transcription_progress = value
            if on_progress:
                on_progress(value)

        with self.transcribe_gate.hold():
            progress = SimulatedProgress(report, interval=self.progress_interval)
            try:
                with progress:
                    result = self.client.transcribe(self.source)
            except TranscriptionError as e:
                log.error("Transcription of %s failed: %s", self.source.name, e)
                raise

        self.transcript = result.to_transcript(self.source.origin or self.source.name)
        return self.transcript

    def convert(
        self,
        target_format: TargetFormat | str,
        on_progress: Callable[[float], None] | None = None,
    ) -> AudioSource:
        """Convert the loaded source to another format.

        Raises:
            SourceError: If no audio is loaded
            BusyError: If a conversion is already running
            ConversionError: If FFmpeg fails
        """
        if self.source is None:
            raise SourceError("No audio loaded")

        def report(value: float) -> None:
            self.conversion_progress = value
            if on_progress:
                on_progress(value)

        with self.convert_gate.hold():
            self.conversion_progress = 0.0
            try:
                self.converted = convert_audio(
                    self.source, target_format, on_progress=report, engine=self.engine
                )
            except ConversionError as e:
                log.error("Conversion of %s to %s failed: %s", self.source.name, target_format, e)
                raise
        return self.converted

    def close(self) -> None:
        """Release the playback file of the current source."""
        release_playback_file(self.source)

    def __enter__(self) -> Session:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
