"""Client-side media preparation — audio extraction before upload.

WHY: Video uploads are shrunk to speech-only WAV audio before transcription.
This package holds the file container, the ffmpeg engine handle, and the
extractor that ties them together.

RULES:
- The engine is an owned object, never a module-level singleton
- Only extract.py decides what counts as video
"""

from media_localizer.media.engine import EngineInitError, TranscodingEngine, TranscodingError
from media_localizer.media.extract import AudioExtractor, is_likely_video
from media_localizer.media.files import MediaFile

__all__ = [
    "AudioExtractor",
    "EngineInitError",
    "MediaFile",
    "TranscodingEngine",
    "TranscodingError",
    "is_likely_video",
]
