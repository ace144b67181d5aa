"""Upload session data model and the file acceptance gate.

WHY: Everything the pipeline learns about one file selection (the file,
the chosen translation target and emotion, the processing state, the
transcript, the voice-over script) lives in one object so that a reset
or a new selection can discard it in a single step, and so in-flight work
can tell whether the session it started for is still the active one.

HOW: UploadSession is a dataclass with a random ``id``. TranscriptDocument
wraps the transcript text and splits out the ORIGINAL / TRANSLATION
sections the transcription endpoint emits when a target language is
requested. validate_upload() is the acceptance gate run before a file
ever becomes a session.

RULES:
- A file passes the gate if size <= MAX_UPLOAD_BYTES AND (declared MIME
  type in ACCEPTED_MIME_TYPES OR extension in ACCEPTED_EXTENSIONS)
- Gate failures raise FileRejectedError with a user-visible message
- TranscriptDocument.lines() yields stripped non-blank lines only
- VoiceoverScript records the emotion and language it was generated with
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from media_localizer.config import (
    ACCEPTED_EXTENSIONS,
    ACCEPTED_MIME_TYPES,
    DEFAULT_EMOTION,
    EMOTIONS,
    MAX_UPLOAD_BYTES,
    TARGET_LANGUAGES,
)
from media_localizer.core.state import ProcessingState
from media_localizer.media.files import MediaFile

ORIGINAL_MARKER = re.compile(r"^-{3}\s*ORIGINAL TRANSCRIPTION\s*-{3}\s*$", re.MULTILINE)
TRANSLATION_MARKER = re.compile(r"^-{3}\s*TRANSLATION(?:\s*\(([^)]*)\))?\s*-{3}\s*$", re.MULTILINE)


class FileRejectedError(ValueError):
    """Raised by the acceptance gate; the message is shown to the user."""


class EmptyTranscriptError(ValueError):
    """Raised when a voice-over is requested without transcript text."""


def check_upload_size(size: int, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    """Size half of the gate, usable before the file is read into memory."""
    if size > max_bytes:
        raise FileRejectedError(
            "File is too large ({:.1f} MB). Maximum size is {} MB.".format(
                size / (1024 * 1024), max_bytes // (1024 * 1024)
            )
        )


def validate_upload(file: MediaFile, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    """Reject files that are too large or of an unsupported type.

    RULES:
    - Runs before any network activity or state change
    - Size is checked first so huge files are refused without inspection

    Raises:
        FileRejectedError: with a message suitable for the user.
    """
    check_upload_size(file.size, max_bytes)

    type_ok = file.mime_type.lower() in ACCEPTED_MIME_TYPES
    extension_ok = file.extension in ACCEPTED_EXTENSIONS
    if not (type_ok or extension_ok):
        raise FileRejectedError(
            "Unsupported file type '{}'. Supported formats: {}".format(
                file.mime_type or file.extension or file.name,
                ", ".join(ext.lstrip(".").upper() for ext in sorted(ACCEPTED_EXTENSIONS)),
            )
        )


def check_emotion(emotion: str) -> str:
    if emotion not in EMOTIONS:
        raise ValueError(
            "Unknown emotion '{}'. Available: {}".format(emotion, ", ".join(EMOTIONS))
        )
    return emotion


def check_target_language(language: Optional[str]) -> Optional[str]:
    if language is None:
        return None
    if language not in TARGET_LANGUAGES:
        raise ValueError(
            "Unsupported target language '{}'. Available: {}".format(
                language, ", ".join(TARGET_LANGUAGES)
            )
        )
    return language


@dataclass
class TranscriptDocument:
    """Transcript text as returned by the transcription endpoint.

    RULES:
    - text is always the full response, untouched
    - original / translation are only set when both markers were found;
      otherwise original is the full text and translation is None
    """

    text: str
    original: str = ""
    translation: Optional[str] = None
    target_language: Optional[str] = None

    @classmethod
    def parse(cls, text: str, target_language: Optional[str] = None) -> TranscriptDocument:
        """Split a transcript into its original and translated sections."""
        original_match = ORIGINAL_MARKER.search(text)
        translation_match = TRANSLATION_MARKER.search(text)

        if translation_match is None:
            return cls(text=text, original=text.strip(), target_language=target_language)

        start = 0
        if original_match and original_match.start() < translation_match.start():
            start = original_match.end()
        original = text[start:translation_match.start()].strip()
        translation = text[translation_match.end():].strip()
        language = (translation_match.group(1) or "").strip() or target_language

        return cls(
            text=text,
            original=original,
            translation=translation or None,
            target_language=language,
        )

    @property
    def has_translation(self) -> bool:
        return bool(self.translation)

    def lines(self) -> List[str]:
        """Non-blank lines of the full text, stripped, for caption timing."""
        return [line.strip() for line in self.text.splitlines() if line.strip()]

    def voiceover_source(self) -> str:
        """Text to voice: the translation when there is one, else the original."""
        if self.translation:
            return self.translation
        return self.original or self.text


@dataclass
class VoiceoverScript:
    """An annotated voice-over script and what it was generated from."""

    script: str
    emotion: str
    language: str
    original_text: str = ""
    emotion_description: str = ""


@dataclass
class UploadSession:
    """State of one file selection through the pipeline.

    RULES:
    - id is unique per selection and tags all in-flight work
    - upload_file is what was actually sent (extracted WAV for video)
    - transcript / voiceover are None until their stage succeeds
    """

    file: MediaFile
    target_language: Optional[str] = None
    emotion: str = DEFAULT_EMOTION
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: ProcessingState = field(default_factory=ProcessingState)
    upload_file: Optional[MediaFile] = None
    transcript: Optional[TranscriptDocument] = None
    voiceover: Optional[VoiceoverScript] = None

    @property
    def transcript_text(self) -> str:
        return self.transcript.text if self.transcript else ""
