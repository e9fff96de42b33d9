"""
audioscribe.transcribe.parser - Timestamped transcript text parsing.

Turns the model's free-form reply into an ordered list of TranscriptChunk.
Lines starting with ``[MM:SS]`` or ``[HH:MM:SS]`` open a new chunk; any
other non-blank line continues the previous chunk. Text that appears before
the first timestamp is kept under ``00:00``. Timestamps are not validated
or reordered.
"""

from __future__ import annotations

import re

from audioscribe.models import TranscriptChunk

DEFAULT_TIME = "00:00"

TIMESTAMP_LINE = re.compile(r"^\s*\[(\d{1,2}:\d{2}(?::\d{2})?)\]\s*(.*)$")


def parse_transcript(text: str) -> list[TranscriptChunk]:
    """Parse model output into transcript chunks.

    Args:
        text: Multi-line model reply

    Returns:
        Chunks in the order they appear; empty if the text has no content
    """
    chunks: list[TranscriptChunk] = []

    for line in text.split("\n"):
        match = TIMESTAMP_LINE.match(line)
        if match:
            chunks.append(TranscriptChunk(time=match.group(1), text=match.group(2).strip()))
            continue

        stripped = line.strip()
        if not stripped:
            continue

        if chunks:
            chunks[-1].text += " " + stripped
        else:
            chunks.append(TranscriptChunk(time=DEFAULT_TIME, text=stripped))

    return chunks
