"""
audioscribe - Audio transcription, search, export and conversion toolkit.

Loads audio from a file or URL, transcribes it through a generative model
into timestamped chunks, and exports or re-encodes the result:
source acquisition → transcription → chunk parsing → search/playback →
document export and format conversion.
"""

__version__ = "0.1.0"
