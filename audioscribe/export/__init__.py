"""
audioscribe.export - Transcript document export.

Serializes transcript chunks to Word, HTML, plain text or JSON, picking the
writer from the output file extension.
"""

from __future__ import annotations

from pathlib import Path

from audioscribe.exceptions import ExportError
from audioscribe.models import Transcript

EXPORT_FORMATS = ("docx", "html", "txt", "json")


def export_transcript(transcript: Transcript, output_path: Path) -> Path:
    """Export a transcript, choosing the format from the file extension.

    Raises:
        ExportError: If the transcript is empty or the extension unknown
    """
    fmt = output_path.suffix.lstrip(".").lower()
    if fmt not in EXPORT_FORMATS:
        raise ExportError(
            f"Unknown export format '{output_path.suffix}' (use {', '.join(EXPORT_FORMATS)})"
        )
    if not transcript.chunks:
        raise ExportError("Transcript is empty, nothing to export")

    if fmt == "docx":
        from audioscribe.export.word import export_docx

        return export_docx(transcript.chunks, output_path)
    if fmt == "html":
        from audioscribe.export.html import export_html

        return export_html(transcript, output_path)
    if fmt == "txt":
        from audioscribe.export.text import export_text

        return export_text(transcript.chunks, output_path)

    from audioscribe.io import save_transcript

    save_transcript(output_path, transcript)
    return output_path
