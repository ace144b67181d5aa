"""Localizer API client package — async HTTP interface to the two endpoints.

WHY: The orchestrator uploads files for transcription and requests
voice-over scripts. This package encapsulates that communication behind
one async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response bodies are
parsed into typed dataclasses defined in models.py.

RULES:
- All HTTP calls from the client side go through LocalizerClient
- Endpoint error messages are surfaced verbatim to the user
"""

from media_localizer.api.client import (
    LocalizerAPIError,
    LocalizerClient,
    MalformedResponseError,
)
from media_localizer.api.models import TranscriptionResult, VoiceoverResult

__all__ = [
    "LocalizerAPIError",
    "LocalizerClient",
    "MalformedResponseError",
    "TranscriptionResult",
    "VoiceoverResult",
]
