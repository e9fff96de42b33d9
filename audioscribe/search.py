"""
audioscribe.search - Transcript text search.
"""

from __future__ import annotations

from collections.abc import Sequence

from audioscribe.models import TranscriptChunk


def filter_chunks(chunks: Sequence[TranscriptChunk], query: str) -> list[TranscriptChunk]:
    """Return the chunks whose text contains ``query``, ignoring case.

    An empty query matches every chunk. Order is preserved.
    """
    needle = query.lower()
    return [chunk for chunk in chunks if needle in chunk.text.lower()]
