"""
ffsplit - Audio segmentation and lossless range extraction on top of FFmpeg.

Plans overlapping time segments for an audio file and copies sub-ranges of
it without re-encoding: duration probe → segment planning → stream-copy
extraction, with temporary files cleaned up on every path.
"""

__version__ = "0.1.0"
