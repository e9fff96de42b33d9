"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from audioscribe.io import save_transcript
from audioscribe.models import AudioSource, Transcript, TranscriptChunk


@pytest.fixture
def model_output() -> str:
    """Return a typical timestamped model reply."""
    return (
        "[00:00] Welcome back to the show.\n"
        "[00:04] Today we are talking about rivers\n"
        "and how they shape cities.\n"
        "\n"
        "[01:15] Let's start with the Thames.\n"
        "[1:02:03] That's all for today.\n"
    )


@pytest.fixture
def sample_chunks() -> list[TranscriptChunk]:
    return [
        TranscriptChunk(time="00:00", text="Welcome back to the show."),
        TranscriptChunk(time="00:04", text="Today we are talking about rivers and how they shape cities."),
        TranscriptChunk(time="01:15", text="Let's start with the Thames."),
        TranscriptChunk(time="1:02:03", text="That's all for today."),
    ]


@pytest.fixture
def sample_transcript(sample_chunks: list[TranscriptChunk]) -> Transcript:
    return Transcript(
        source="episode.mp3",
        model="gemini/gemini-3-flash-preview",
        transcribed_at="2026-02-15T12:00:00",
        chunks=sample_chunks,
    )


@pytest.fixture
def transcript_file(tmp_path: Path, sample_transcript: Transcript) -> Path:
    path = tmp_path / "transcript.json"
    save_transcript(path, sample_transcript)
    return path


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    path = tmp_path / "episode.mp3"
    path.write_bytes(b"ID3fake mp3 payload")
    return path


@pytest.fixture
def audio_source() -> AudioSource:
    return AudioSource(data=b"ID3fake mp3 payload", mime_type="audio/mpeg", name="episode.mp3")


def make_completion(content: str | None) -> SimpleNamespace:
    """Build an object shaped like a litellm completion response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )


class FakeClient:
    """Stands in for TranscriptionClient without calling a model."""

    model = "fake-model"

    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls = 0

    def transcribe(self, source: AudioSource):
        from audioscribe.transcribe.client import TranscriptionResult
        from audioscribe.transcribe.parser import parse_transcript

        self.calls += 1
        if self.error is not None:
            raise self.error
        return TranscriptionResult(model=self.model, text=self.text, chunks=parse_transcript(self.text))


@pytest.fixture
def fake_client_cls() -> type[FakeClient]:
    return FakeClient


@pytest.fixture
def completion_factory():
    return make_completion
