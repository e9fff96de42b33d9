"""
audioscribe.io - Transcript persistence and atomic file writes.

Every writer goes through a sibling temp file that is moved into place,
so an interrupted export never leaves a half-written document behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from audioscribe.models import Transcript


def _atomic_write(path: Path, payload: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_json(path: Path) -> dict[str, Any]:
    """Read a UTF-8 JSON document.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    return json.loads(path.read_text(encoding="utf-8"))


def write_json(path: Path, data: dict[str, Any], indent: int = 2) -> None:
    """Write pretty-printed JSON atomically, keeping non-ASCII text readable."""
    _atomic_write(path, json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8"))


def write_text(path: Path, content: str) -> None:
    _atomic_write(path, content.encode("utf-8"))


def write_bytes(path: Path, data: bytes) -> None:
    _atomic_write(path, data)


def load_transcript(path: Path) -> Transcript:
    """Load a transcript written by save_transcript.

    Raises:
        FileNotFoundError: If file doesn't exist
        pydantic.ValidationError: If the document is not a transcript
    """
    return Transcript.model_validate(read_json(path))


def save_transcript(path: Path, transcript: Transcript) -> None:
    write_json(path, transcript.model_dump())
