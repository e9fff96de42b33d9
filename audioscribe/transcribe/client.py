"""
audioscribe.transcribe.client - Generative-model transcription via litellm.

Sends the audio inline (base64) together with a fixed verbatim-transcription
prompt and parses the reply into transcript chunks.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from audioscribe.logging import get_logger
from audioscribe.models import AudioSource, Transcript, TranscriptChunk
from audioscribe.transcribe.parser import parse_transcript

log = get_logger("transcribe")

DEFAULT_MODEL = "gemini/gemini-3-flash-preview"
DEFAULT_MIME_TYPE = "audio/mp3"

TRANSCRIPTION_PROMPT = (
    "Please provide a complete, verbatim transcription of the entire audio file. "
    "You must transcribe every single word without any omissions, summaries, or "
    "abbreviations. Include accurate timestamps for every sentence or phrase in the "
    "exact format [MM:SS] or [HH:MM:SS]. Ensure the timestamps precisely match the "
    "audio playback time. Do not include any other text besides the timestamps and "
    "the transcription."
)


@dataclass
class TranscriptionResult:
    """Raw model reply plus the chunks parsed from it."""

    model: str
    text: str
    chunks: list[TranscriptChunk] = field(default_factory=list)
    transcribed_at: str = field(
        default_factory=lambda: datetime.now().isoformat(timespec="seconds")
    )

    def to_transcript(self, source: str = "") -> Transcript:
        return Transcript(
            source=source,
            model=self.model,
            transcribed_at=self.transcribed_at,
            chunks=self.chunks,
        )


def build_messages(source: AudioSource, prompt: str = TRANSCRIPTION_PROMPT) -> list[dict[str, Any]]:
    """Build the chat payload: the audio as an inline file part, then the prompt."""
    mime_type = source.mime_type or DEFAULT_MIME_TYPE
    if mime_type == "application/octet-stream":
        mime_type = DEFAULT_MIME_TYPE
    payload = base64.b64encode(source.data).decode("ascii")
    return [
        {
            "role": "user",
            "content": [
                {
                    "type": "file",
                    "file": {"file_data": f"data:{mime_type};base64,{payload}"},
                },
                {"type": "text", "text": prompt},
            ],
        }
    ]


class TranscriptionClient:
    """Transcription client wrapper around litellm.

    A failed request is not retried; the caller decides whether to try again.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        timeout: int = 600,
        prompt: str = TRANSCRIPTION_PROMPT,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self.prompt = prompt
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def _request(self, messages: list[dict[str, Any]]) -> Any:
        try:
            import litellm
        except ImportError as e:
            from audioscribe.exceptions import DependencyError

            raise DependencyError(
                "litellm", "litellm not installed", "Install with: pip install litellm"
            ) from e

        litellm.telemetry = False

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "timeout": self.timeout,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        return litellm.completion(**kwargs)

    def _record_usage(self, response: Any) -> None:
        usage = getattr(response, "usage", None)
        if usage:
            self._token_usage["prompt_tokens"] += getattr(usage, "prompt_tokens", 0) or 0
            self._token_usage["completion_tokens"] += getattr(usage, "completion_tokens", 0) or 0
            self._token_usage["total_tokens"] += getattr(usage, "total_tokens", 0) or 0

    def transcribe_text(self, source: AudioSource) -> str:
        """Send audio to the model and return its raw reply.

        Raises:
            TranscriptionError: If the request fails or the reply is empty
        """
        from audioscribe.exceptions import DependencyError, TranscriptionError

        if not source.data:
            raise TranscriptionError("Audio source is empty")

        log.debug(
            "Transcribing %s (%d bytes, %s) with %s",
            source.name,
            source.size,
            source.mime_type,
            self.model,
        )

        try:
            response = self._request(build_messages(source, self.prompt))
        except DependencyError:
            raise
        except Exception as e:
            raise TranscriptionError(f"Transcription request failed: {e}") from e

        self._record_usage(response)

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise TranscriptionError("Empty response from transcription model")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None) if message is not None else None
        if not content:
            raise TranscriptionError("No text in transcription model response")

        return content

    def transcribe(self, source: AudioSource) -> TranscriptionResult:
        """Transcribe audio and parse the reply into chunks."""
        text = self.transcribe_text(source)
        chunks = parse_transcript(text)
        log.debug("Parsed %d chunks from %d characters", len(chunks), len(text))
        return TranscriptionResult(model=self.model, text=text, chunks=chunks)

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage."""
        return self._token_usage.copy()

    def reset_token_usage(self) -> None:
        """Reset token usage counters."""
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}


def create_client_from_config(config: Any) -> TranscriptionClient:
    """Create a transcription client from AudioscribeConfig."""
    return TranscriptionClient(
        model=config.llm_model,
        api_key=config.api_key,
        timeout=config.request_timeout,
    )
