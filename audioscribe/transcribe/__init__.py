"""
audioscribe.transcribe - Generative-model transcription.

Sends audio to an external model with a verbatim-transcription prompt and
parses the timestamped free-form reply into ordered transcript chunks.
"""

from __future__ import annotations
