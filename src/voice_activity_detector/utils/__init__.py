"""
Utility modules for the voice activity detector library.
"""

from .audio import AudioUtils, WAVTrackReader

__all__ = [
    "AudioUtils",
    "WAVTrackReader",
]
