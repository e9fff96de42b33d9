"""
audioscribe.models - Transcript and audio data types.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, Field


class TranscriptChunk(BaseModel):
    """One timestamped transcript segment.

    ``time`` is the display timestamp as emitted by the model, either
    ``MM:SS`` or ``HH:MM:SS``.
    """

    time: str
    text: str


class Transcript(BaseModel):
    """A parsed transcript as persisted between CLI invocations."""

    source: str = ""
    model: str = ""
    transcribed_at: str = ""
    chunks: list[TranscriptChunk] = Field(default_factory=list)


@dataclass
class AudioSource:
    """Raw audio bytes held in memory for the duration of a session."""

    data: bytes
    mime_type: str
    name: str = "audio"
    origin: str | None = None
    playback_path: str | None = field(default=None, repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """File extension derived from the MIME subtype, ``mp3`` if unknown."""
        subtype = self.mime_type.split("/", 1)[1] if "/" in self.mime_type else ""
        subtype = subtype.split(";", 1)[0].strip()
        if not subtype or subtype == "octet-stream":
            return "mp3"
        return {"mpeg": "mp3", "x-wav": "wav", "x-m4a": "m4a", "mp4": "m4a"}.get(subtype, subtype)
