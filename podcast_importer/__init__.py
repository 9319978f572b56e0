"""Podcast episode importer.

Downloads episode audio, normalizes it with ffmpeg, transcribes it through an
external speech-to-text service and stores the resulting transcripts.
"""

__version__ = "0.1.0"
