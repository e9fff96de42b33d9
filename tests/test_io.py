"""Tests for audioscribe.io and audioscribe.utils modules."""

from __future__ import annotations

import json
from pathlib import Path

from audioscribe.io import load_transcript, read_json, save_transcript, write_bytes, write_json
from audioscribe.models import AudioSource, Transcript
from audioscribe.utils import format_duration, format_size


class TestJson:
    def test_write_then_read(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "data.json"
        write_json(path, {"text": "café"})
        assert read_json(path) == {"text": "café"}
        assert "café" in path.read_text(encoding="utf-8")

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        write_json(tmp_path / "data.json", {"a": 1})
        write_bytes(tmp_path / "blob.bin", b"\x00\x01")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["blob.bin", "data.json"]

    def test_overwrite(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        write_json(path, {"a": 1})
        write_json(path, {"a": 2})
        assert json.loads(path.read_text())["a"] == 2


class TestTranscriptFiles:
    def test_save_and_load(self, tmp_path: Path, sample_transcript: Transcript) -> None:
        path = tmp_path / "transcript.json"
        save_transcript(path, sample_transcript)
        assert load_transcript(path) == sample_transcript

    def test_load_minimal_file(self, tmp_path: Path) -> None:
        path = tmp_path / "t.json"
        path.write_text('{"chunks": [{"time": "00:01", "text": "hi"}]}')
        transcript = load_transcript(path)
        assert transcript.chunks[0].text == "hi"
        assert transcript.source == ""


class TestAudioSource:
    def test_extension_from_mime(self) -> None:
        assert AudioSource(b"", "audio/mpeg").extension == "mp3"
        assert AudioSource(b"", "audio/wav").extension == "wav"
        assert AudioSource(b"", "audio/x-m4a").extension == "m4a"
        assert AudioSource(b"", "audio/ogg; codecs=opus").extension == "ogg"

    def test_unknown_mime_defaults_to_mp3(self) -> None:
        assert AudioSource(b"", "").extension == "mp3"
        assert AudioSource(b"", "application/octet-stream").extension == "mp3"

    def test_size(self) -> None:
        assert AudioSource(b"abc", "audio/mpeg").size == 3


class TestFormatting:
    def test_format_size(self) -> None:
        assert format_size(500) == "500.0 B"
        assert format_size(1536) == "1.5 KB"
        assert format_size(1572864) == "1.5 MB"

    def test_format_duration(self) -> None:
        assert format_duration(45) == "00:45"
        assert format_duration(125) == "02:05"
        assert format_duration(3723) == "01:02:03"
