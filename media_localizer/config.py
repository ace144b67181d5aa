"""Configuration constants, accepted media types, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. The acceptance gate, the emotion and language
sets, and the endpoint defaults are plain data structures, not buried
in logic, so the orchestrator, the CLI and the gateway server all read
the same source of truth.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level sets, tuples, and strings. The load_*_key() functions
provide a clear error when a credential is missing.

RULES:
- MAX_UPLOAD_BYTES defaults to 500 MiB (override with MAX_UPLOAD_MB)
- ACCEPTED_MIME_TYPES / ACCEPTED_EXTENSIONS form the upload gate;
  a file passes if EITHER its declared type OR its extension matches
- VIDEO_EXTENSIONS lists containers that get their audio extracted
- EMOTIONS is the fixed voice-over emotion set, "neutral" is the default
- Credentials come from the environment, never hardcoded
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Upload acceptance gate
# ---------------------------------------------------------------------------

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_MB", "500")) * 1024 * 1024
"""Largest file the orchestrator will accept (bytes)."""

ACCEPTED_MIME_TYPES: set[str] = {
    "audio/mpeg", "audio/mp3", "audio/wav", "audio/m4a", "audio/aac",
    "audio/ogg", "video/mp4", "video/webm", "video/quicktime", "video/ogg",
}

ACCEPTED_EXTENSIONS: set[str] = {
    ".mp3", ".mp4", ".wav", ".m4a", ".aac", ".webm", ".mov", ".ogg",
}
"""Accepted filename extensions (lowercase, with dot)."""

VIDEO_EXTENSIONS: set[str] = {".mp4", ".mov", ".mkv", ".webm", ".ogg"}
"""Container extensions treated as video (audio is extracted before upload)."""

# ---------------------------------------------------------------------------
# Audio extraction parameters
# ---------------------------------------------------------------------------

FFMPEG_BINARY = os.getenv("FFMPEG_BINARY", "ffmpeg")
EXTRACT_SAMPLE_RATE = 16000
EXTRACT_CHANNELS = 1
EXTRACT_CODEC = "pcm_s16le"

# ---------------------------------------------------------------------------
# Voice-over emotions and translation languages
# ---------------------------------------------------------------------------

DEFAULT_EMOTION = "neutral"

EMOTIONS: tuple[str, ...] = (
    "neutral", "happy", "sad", "excited",
    "serious", "friendly", "dramatic", "calm",
)

DEFAULT_VOICEOVER_LANGUAGE = "English"

TARGET_LANGUAGES: tuple[str, ...] = (
    "English", "Spanish", "French", "German", "Italian", "Portuguese",
    "Dutch", "Swedish", "Polish", "Russian", "Turkish", "Arabic",
    "Hindi", "Japanese", "Korean", "Chinese",
)
"""Languages offered as translation targets (display names, sent verbatim)."""

# ---------------------------------------------------------------------------
# Client-side API configuration (the transcribe / voice-over endpoints)
# ---------------------------------------------------------------------------

LOCALIZER_API_URL = os.getenv("LOCALIZER_API_URL", "http://localhost:8000")
LOCALIZER_TIMEOUT_S = float(os.getenv("LOCALIZER_TIMEOUT_S", "600"))

# ---------------------------------------------------------------------------
# Gateway server configuration (upstream chat-completions model)
# ---------------------------------------------------------------------------

AI_GATEWAY_URL = os.getenv(
    "AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions"
)
TRANSCRIBE_MODEL = os.getenv("TRANSCRIBE_MODEL", "google/gemini-2.5-flash")
VOICEOVER_MODEL = os.getenv("VOICEOVER_MODEL", "google/gemini-3-flash-preview")


def load_client_api_key() -> str | None:
    """Return the opaque credential sent to the localizer endpoints, if any.

    The endpoints may run without auth (local gateway), so a missing key
    is not an error on the client side.
    """
    key = os.getenv("LOCALIZER_API_KEY", "").strip()
    return key or None


def load_ai_api_key() -> str:
    """Load the upstream AI gateway key from the environment.

    WHY: The gateway server cannot forward anything without it, and the
    handlers must report "AI service not configured" rather than send an
    unauthenticated request.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("AI_API_KEY", "").strip()
    if not key:
        raise ValueError("AI service not configured")
    return key
