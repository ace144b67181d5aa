"""Response dataclasses for the transcribe and voice-over endpoints.

WHY: Both endpoints return flat JSON objects. Typed dataclasses make the
fields explicit and let the client reject malformed success bodies in
one place instead of scattering ``.get()`` calls through the pipeline.

HOW: Each dataclass maps 1:1 to a success response. from_dict() parses
the raw JSON and raises KeyError/TypeError when a required field is
missing, which the client turns into MalformedResponseError.

RULES:
- transcription / voiceover_script are required and must be strings
- target_language is None when no translation was requested
- Echoed fields (file_name, emotion, ...) fall back to request values
"""

from __future__ import annotations

from dataclasses import dataclass


def _require_text(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise TypeError("Field {!r} must be a non-empty string".format(key))
    return value


@dataclass
class TranscriptionResult:
    """Success body of POST /transcribe."""

    transcription: str
    file_name: str
    file_size: int
    target_language: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptionResult:
        return cls(
            transcription=_require_text(data, "transcription"),
            file_name=data.get("fileName", ""),
            file_size=int(data.get("fileSize") or 0),
            target_language=data.get("targetLanguage") or None,
        )


@dataclass
class VoiceoverResult:
    """Success body of POST /generate-voiceover.

    RULES:
    - voiceover_script carries [PAUSE], *emphasis*, (cue) and // pacing //
      markers exactly as the model produced them
    - emotion_description is the style direction the model was given
    """

    voiceover_script: str
    original_text: str
    emotion: str
    language: str
    emotion_description: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> VoiceoverResult:
        return cls(
            voiceover_script=_require_text(data, "voiceoverScript"),
            original_text=data.get("originalText", ""),
            emotion=data.get("emotion", ""),
            language=data.get("language", ""),
            emotion_description=data.get("emotionDescription", ""),
        )
