"""Pydantic request/response models for the gateway API.

WHY: The endpoints need typed schemas for request validation, response
serialization, and automatic OpenAPI documentation. The field names are
camelCase because the client contract is camelCase JSON.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Error bodies are always {"error": str, "details": str}
- VoiceoverRequest.text is optional at the schema level so a missing or
  blank text is reported as 400 "No text provided" by the handler
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class VoiceoverRequest(BaseModel):
    """Body of POST /generate-voiceover."""

    text: Optional[str] = Field(default=None, description="Transcript text to adapt.")
    emotion: str = Field(
        default="neutral",
        description="Voice emotion: neutral, happy, sad, excited, serious, friendly, dramatic, calm.",
    )
    language: str = Field(default="English", description="Language of the voice-over.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TranscribeResponse(BaseModel):
    """Success body of POST /transcribe."""

    success: bool = Field(default=True, description="Always true on success.")
    transcription: str = Field(description="Transcript, with a translated section if requested.")
    fileName: str = Field(description="Name of the uploaded file.")
    fileSize: int = Field(description="Size of the uploaded file in bytes.")
    targetLanguage: Optional[str] = Field(
        default=None,
        description="Translation target that was requested, or null.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "success": True,
                "transcription": "[00:00:00] Speaker 1: Welcome to the show.",
                "fileName": "episode.wav",
                "fileSize": 1048576,
                "targetLanguage": None,
            }
        ]
    }}


class VoiceoverResponse(BaseModel):
    """Success body of POST /generate-voiceover."""

    success: bool = Field(default=True, description="Always true on success.")
    originalText: str = Field(description="The text that was adapted.")
    voiceoverScript: str = Field(description="Script annotated with pause, emphasis and cue markers.")
    emotion: str = Field(description="Emotion used.")
    language: str = Field(description="Language used.")
    emotionDescription: str = Field(description="Voice direction given to the model.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str = Field(description="Human-readable error message.")
    details: Optional[str] = Field(default=None, description="Underlying error, if any.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
