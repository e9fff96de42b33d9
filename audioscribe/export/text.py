"""
audioscribe.export.text - Plain text export.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from audioscribe.io import write_text
from audioscribe.models import TranscriptChunk


def format_chunks(chunks: Sequence[TranscriptChunk]) -> str:
    """Format chunks as ``[time] text`` lines."""
    return "".join(f"[{chunk.time}] {chunk.text}\n" for chunk in chunks)


def export_text(chunks: Sequence[TranscriptChunk], output_path: Path) -> Path:
    write_text(output_path, format_chunks(chunks))
    return output_path
