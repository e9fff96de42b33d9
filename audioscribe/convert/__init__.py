"""
audioscribe.convert - Audio format conversion.

Re-encodes an in-memory audio source to one of a fixed set of target
containers using FFmpeg, reporting progress through a callback.
"""

from __future__ import annotations
