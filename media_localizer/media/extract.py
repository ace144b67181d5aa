"""Audio extraction from video files before upload.

WHY: Video containers are mostly picture data. The transcription endpoint
only needs speech, so video-like uploads are shrunk to a mono 16 kHz
16-bit PCM WAV before anything is sent over the network. Audio files are
forwarded untouched.

HOW: is_likely_video() decides by declared MIME type or extension.
AudioExtractor.extract_audio() writes the input into the engine's scratch
directory under a collision-resistant name, runs ffmpeg with
``-vn -ac 1 -ar 16000 -acodec pcm_s16le``, reads the WAV back and wraps
it as a MediaFile named ``<stem>.wav``.

RULES:
- Video-like: MIME type video/* OR extension in VIDEO_EXTENSIONS
- Input name: input_<token>_<sanitized original name>
- Sanitized names keep only letters, digits, dot, dash and underscore
- Scratch files are removed in a finally block; removal failures are
  logged at WARNING and never raised
- Any failure (engine load, ffmpeg, read, out of memory) surfaces as
  TranscodingError; there is no fallback to the raw video
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from media_localizer.config import (
    EXTRACT_CHANNELS,
    EXTRACT_CODEC,
    EXTRACT_SAMPLE_RATE,
    VIDEO_EXTENSIONS,
)
from media_localizer.media.engine import TranscodingEngine, TranscodingError
from media_localizer.media.files import MediaFile

logger = logging.getLogger(__name__)

WAV_MIME_TYPE = "audio/wav"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")
_LAST_EXTENSION = re.compile(r"\.[^/.]+$")


def is_likely_video(file: MediaFile) -> bool:
    """Return True if the file should have its audio track extracted."""
    if file.mime_type.lower().startswith("video/"):
        return True
    return file.extension in VIDEO_EXTENSIONS


def sanitize_filename(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_.-]`` with ``_``."""
    return _UNSAFE_NAME_CHARS.sub("_", name)


def wav_name_for(name: str) -> str:
    """Derive the output display name: strip the last extension, add .wav."""
    base = _LAST_EXTENSION.sub("", name) or "audio"
    return "{}.wav".format(base)


class AudioExtractor:
    """Turns video uploads into normalized WAV audio via the shared engine.

    RULES:
    - One extractor per engine; the engine's lifetime belongs to the caller
    - extract_audio() always returns audio/wav or raises TranscodingError
    """

    def __init__(self, engine: TranscodingEngine | None = None) -> None:
        self.engine = engine or TranscodingEngine()

    async def prepare_for_upload(
        self,
        file: MediaFile,
        on_status: Callable[[str], None] | None = None,
    ) -> MediaFile:
        """Return the file to upload: extracted WAV for video, else the original."""
        if not is_likely_video(file):
            return file
        if on_status:
            on_status("Extracting audio from video...")
        audio = await self.extract_audio(file)
        if on_status:
            on_status(
                "  Extracted {} ({:,} bytes, was {:,})".format(audio.name, audio.size, file.size)
            )
        return audio

    async def extract_audio(self, video: MediaFile) -> MediaFile:
        """Transcode ``video`` into a mono 16 kHz 16-bit PCM WAV MediaFile.

        WHY: Uploading the audio track alone dramatically shrinks typical
        video files; 16 kHz mono is what speech models expect anyway.

        HOW: Ensures the engine is loaded, writes the input, runs ffmpeg,
        reads the output back. Scratch files are removed whether or not
        the transcode succeeded.

        RULES:
        - Output MIME type is always audio/wav
        - MemoryError and OSError while moving bytes become TranscodingError
        - Cleanup never masks the real error and never raises on its own

        Args:
            video: The video-like file selected by the user.

        Returns:
            A new MediaFile named ``<stem>.wav`` with the WAV bytes.
        """
        engine = self.engine
        await engine.ensure_initialized()

        token = engine.next_token()
        input_name = "input_{}_{}".format(token, sanitize_filename(video.name))
        output_name = "output_{}.wav".format(token)

        try:
            try:
                await engine.write_file(input_name, video.content)
            except (OSError, MemoryError) as exc:
                raise TranscodingError(
                    "Could not stage {} for transcoding: {}".format(video.name, exc)
                ) from exc

            await engine.exec([
                "-i", input_name,
                "-vn",
                "-ac", str(EXTRACT_CHANNELS),
                "-ar", str(EXTRACT_SAMPLE_RATE),
                "-acodec", EXTRACT_CODEC,
                output_name,
            ])

            try:
                wav_bytes = await engine.read_file(output_name)
            except (OSError, MemoryError) as exc:
                raise TranscodingError(
                    "Could not read extracted audio for {}: {}".format(video.name, exc)
                ) from exc
        finally:
            await self._cleanup(input_name, output_name)

        logger.info(
            "Extracted audio from %s: %d -> %d bytes", video.name, video.size, len(wav_bytes)
        )
        return MediaFile(name=wav_name_for(video.name), content=wav_bytes, mime_type=WAV_MIME_TYPE)

    async def _cleanup(self, *names: str) -> None:
        """Delete scratch files; failures are logged, never escalated."""
        for name in names:
            try:
                await self.engine.delete_file(name)
            except FileNotFoundError:
                continue
            except Exception:
                logger.warning("Failed to delete engine scratch file %s", name, exc_info=True)


def output_path_for(source: Path) -> Path:
    """Path next to ``source`` where a CLI run saves the extracted WAV."""
    return source.with_name(wav_name_for(source.name))
