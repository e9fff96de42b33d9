"""
audioscribe.export.html - Jinja2-based HTML transcript export.

Produces a self-contained HTML page with one paragraph per chunk.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from audioscribe.io import write_text
from audioscribe.models import Transcript
from audioscribe.playback import time_to_seconds

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class HTMLExporter:
    """Renders transcripts with the bundled Jinja2 template."""

    def __init__(self, template_dir: Path | None = None):
        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(self, transcript: Transcript, template_name: str = "transcript.html") -> str:
        template = self.env.get_template(template_name)
        chunks = [
            {"time": chunk.time, "text": chunk.text, "seconds": time_to_seconds(chunk.time)}
            for chunk in transcript.chunks
        ]
        return template.render(transcript=transcript, chunks=chunks)


def export_html(transcript: Transcript, output_path: Path) -> Path:
    write_text(output_path, HTMLExporter().render(transcript))
    return output_path
