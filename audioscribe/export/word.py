"""
audioscribe.export.word - Word document export.

Each chunk becomes one paragraph: a bold, coloured ``[time]`` prefix
followed by the chunk text.
"""

from __future__ import annotations

import io
from collections.abc import Sequence
from pathlib import Path

from docx import Document
from docx.shared import Pt, RGBColor

from audioscribe.exceptions import ExportError
from audioscribe.io import write_bytes
from audioscribe.models import TranscriptChunk

DEFAULT_FILENAME = "transcription.docx"
TIMESTAMP_COLOR = RGBColor(0x05, 0x96, 0x69)
PARAGRAPH_SPACING = Pt(10)


def build_document(chunks: Sequence[TranscriptChunk]):
    """Build a python-docx Document for the chunks."""
    document = Document()
    for chunk in chunks:
        paragraph = document.add_paragraph()
        paragraph.paragraph_format.space_after = PARAGRAPH_SPACING

        stamp = paragraph.add_run(f"[{chunk.time}] ")
        stamp.bold = True
        stamp.font.color.rgb = TIMESTAMP_COLOR

        paragraph.add_run(chunk.text)
    return document


def render_docx(chunks: Sequence[TranscriptChunk]) -> bytes:
    """Render the chunks to .docx bytes."""
    if not chunks:
        raise ExportError("Transcript is empty, nothing to export")
    buffer = io.BytesIO()
    try:
        build_document(chunks).save(buffer)
    except Exception as e:
        raise ExportError(f"Failed to build Word document: {e}") from e
    return buffer.getvalue()


def export_docx(chunks: Sequence[TranscriptChunk], output_path: Path) -> Path:
    """Write the chunks to a Word document."""
    write_bytes(output_path, render_docx(chunks))
    return output_path
