"""Tests for audioscribe.transcribe.client module."""

from __future__ import annotations

import base64

import pytest

from audioscribe.exceptions import TranscriptionError
from audioscribe.models import AudioSource
from audioscribe.transcribe.client import (
    TRANSCRIPTION_PROMPT,
    TranscriptionClient,
    build_messages,
    create_client_from_config,
)


class TestBuildMessages:
    def test_audio_part_then_prompt(self, audio_source: AudioSource) -> None:
        messages = build_messages(audio_source)

        assert len(messages) == 1
        content = messages[0]["content"]
        assert content[0]["type"] == "file"
        assert content[1] == {"type": "text", "text": TRANSCRIPTION_PROMPT}

    def test_audio_is_base64_data_url(self, audio_source: AudioSource) -> None:
        data_url = build_messages(audio_source)[0]["content"][0]["file"]["file_data"]
        header, payload = data_url.split(",", 1)
        assert header == "data:audio/mpeg;base64"
        assert base64.b64decode(payload) == audio_source.data

    @pytest.mark.parametrize("mime_type", ["", "application/octet-stream"])
    def test_unknown_mime_falls_back_to_mp3(self, mime_type: str) -> None:
        source = AudioSource(data=b"x", mime_type=mime_type)
        data_url = build_messages(source)[0]["content"][0]["file"]["file_data"]
        assert data_url.startswith("data:audio/mp3;base64,")

    def test_prompt_demands_timestamps(self) -> None:
        assert "[MM:SS]" in TRANSCRIPTION_PROMPT
        assert "[HH:MM:SS]" in TRANSCRIPTION_PROMPT


class TestTranscriptionClient:
    def test_transcribe_parses_reply(
        self, monkeypatch, audio_source, completion_factory, model_output, sample_chunks
    ) -> None:
        client = TranscriptionClient(model="gemini/test-model")
        monkeypatch.setattr(client, "_request", lambda messages: completion_factory(model_output))

        result = client.transcribe(audio_source)

        assert result.model == "gemini/test-model"
        assert result.text == model_output
        assert result.chunks == sample_chunks

    def test_request_passes_model_key_and_timeout(
        self, monkeypatch, audio_source, completion_factory
    ) -> None:
        import litellm

        captured: dict = {}

        def fake_completion(**kwargs):
            captured.update(kwargs)
            return completion_factory("[00:01] hi")

        monkeypatch.setattr(litellm, "completion", fake_completion)
        client = TranscriptionClient(model="gemini/m", api_key="secret", timeout=42)

        client.transcribe_text(audio_source)

        assert captured["model"] == "gemini/m"
        assert captured["api_key"] == "secret"
        assert captured["timeout"] == 42
        assert captured["messages"][0]["role"] == "user"

    def test_request_failure_wrapped(self, monkeypatch, audio_source) -> None:
        client = TranscriptionClient()

        def boom(messages):
            raise ConnectionError("refused")

        monkeypatch.setattr(client, "_request", boom)

        with pytest.raises(TranscriptionError, match="refused"):
            client.transcribe(audio_source)

    def test_failure_is_not_retried(self, monkeypatch, audio_source) -> None:
        client = TranscriptionClient()
        calls = []

        def boom(messages):
            calls.append(1)
            raise TimeoutError("timeout")

        monkeypatch.setattr(client, "_request", boom)

        with pytest.raises(TranscriptionError):
            client.transcribe(audio_source)
        assert len(calls) == 1

    @pytest.mark.parametrize("content", [None, ""])
    def test_empty_reply_raises(self, monkeypatch, audio_source, completion_factory, content) -> None:
        client = TranscriptionClient()
        monkeypatch.setattr(client, "_request", lambda messages: completion_factory(content))

        with pytest.raises(TranscriptionError):
            client.transcribe(audio_source)

    def test_no_choices_raises(self, monkeypatch, audio_source) -> None:
        from types import SimpleNamespace

        client = TranscriptionClient()
        monkeypatch.setattr(client, "_request", lambda messages: SimpleNamespace(choices=[]))

        with pytest.raises(TranscriptionError, match="Empty response"):
            client.transcribe(audio_source)

    def test_empty_audio_rejected_before_request(self, monkeypatch) -> None:
        client = TranscriptionClient()
        monkeypatch.setattr(client, "_request", lambda messages: pytest.fail("should not request"))

        with pytest.raises(TranscriptionError):
            client.transcribe(AudioSource(data=b"", mime_type="audio/mpeg"))

    def test_token_usage_accumulates(self, monkeypatch, audio_source, completion_factory) -> None:
        client = TranscriptionClient()
        monkeypatch.setattr(client, "_request", lambda messages: completion_factory("[00:01] a"))

        client.transcribe(audio_source)
        client.transcribe(audio_source)

        assert client.get_token_usage()["total_tokens"] == 30
        client.reset_token_usage()
        assert client.get_token_usage()["total_tokens"] == 0


class TestCreateClientFromConfig:
    def test_uses_config_values(self) -> None:
        from audioscribe.config import AudioscribeConfig

        config = AudioscribeConfig(llm_model="gemini/x", api_key="k", request_timeout=30)
        client = create_client_from_config(config)

        assert client.model == "gemini/x"
        assert client.api_key == "k"
        assert client.timeout == 30

    def test_result_converts_to_transcript(self, monkeypatch, audio_source, completion_factory) -> None:
        client = TranscriptionClient(model="m")
        monkeypatch.setattr(client, "_request", lambda messages: completion_factory("[00:01] a"))

        transcript = client.transcribe(audio_source).to_transcript("episode.mp3")

        assert transcript.source == "episode.mp3"
        assert transcript.model == "m"
        assert transcript.chunks[0].text == "a"
        assert transcript.transcribed_at
