"""Async HTTP client for the transcribe and voice-over endpoints.

WHY: The orchestrator needs exactly two remote calls: upload a file for
transcription (optionally with a translation target) and turn transcript
text into an annotated voice-over script. This module hides the HTTP
details behind a single client class so the orchestrator, the CLI and
the tests never touch httpx directly.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. LocalizerClient is an
async context manager; enter it to open the connection pool, exit to
close it. transcribe() sends multipart/form-data, generate_voiceover()
sends JSON. Error bodies are parsed for their ``error`` field.

RULES:
- Always use the async context manager (async with LocalizerClient() as c:)
- Non-2xx responses raise LocalizerAPIError with the server's message,
  or a generic fallback when the body carries none
- 2xx responses without the expected content raise MalformedResponseError
- Nothing is retried here; retry is a user action
- Auth headers are opaque: whatever LOCALIZER_API_KEY holds is forwarded
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from media_localizer.api.models import TranscriptionResult, VoiceoverResult
from media_localizer.config import (
    LOCALIZER_API_URL,
    LOCALIZER_TIMEOUT_S,
    load_client_api_key,
)
from media_localizer.media.files import MediaFile

logger = logging.getLogger(__name__)

TRANSCRIBE_FALLBACK_MESSAGE = "Failed to process file"
VOICEOVER_FALLBACK_MESSAGE = "Failed to generate voiceover"


class LocalizerAPIError(Exception):
    """Raised when an endpoint returns a non-success status.

    RULES:
    - status_code is the HTTP status
    - message is the user-facing text (server ``error`` field or fallback)
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class MalformedResponseError(LocalizerAPIError):
    """Raised when a success response lacks the fields the caller needs."""


class LocalizerClient:
    """Async client for the media localization endpoints.

    RULES:
    - Use as: async with LocalizerClient() as client: ...
    - base_url defaults to LOCALIZER_API_URL from config
    - api_key defaults to load_client_api_key(); None sends no auth headers
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or LOCALIZER_API_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else load_client_api_key()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> LocalizerClient:
        headers = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=httpx.Timeout(LOCALIZER_TIMEOUT_S, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "LocalizerClient must be used as an async context manager: "
                "async with LocalizerClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Transcribe
    # ------------------------------------------------------------------

    async def transcribe(
        self,
        file: MediaFile,
        target_language: str | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> TranscriptionResult:
        """Upload a file and return its transcript (and translation, if asked).

        WHY: Transcription and translation happen in one round trip: when
        a target language is given, the endpoint appends a translated
        section to the same transcript.

        HOW: Sends a multipart POST with field ``file`` and, when set,
        field ``targetLanguage``.

        RULES:
        - Raises LocalizerAPIError on non-2xx responses
        - Raises MalformedResponseError if ``transcription`` is missing

        Args:
            file: The (possibly extracted) media file to upload.
            target_language: Optional translation target, e.g. "Spanish".
            on_status: Optional callback for status updates.

        Returns:
            TranscriptionResult parsed from the response.
        """
        client = self._ensure_client()
        if on_status:
            on_status("Uploading {} ({:,} bytes)...".format(file.name, file.size))

        data = {}
        if target_language:
            data["targetLanguage"] = target_language

        resp = await client.post(
            "/transcribe",
            files={"file": (file.name, file.content, file.mime_type or "application/octet-stream")},
            data=data,
        )
        body = _parse_response(resp, TRANSCRIBE_FALLBACK_MESSAGE)

        try:
            return TranscriptionResult.from_dict(body)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Transcribe response missing transcription: %s", body)
            raise MalformedResponseError(resp.status_code, TRANSCRIBE_FALLBACK_MESSAGE) from exc

    # ------------------------------------------------------------------
    # Voice-over
    # ------------------------------------------------------------------

    async def generate_voiceover(
        self,
        text: str,
        emotion: str,
        language: str,
        on_status: Callable[[str], None] | None = None,
    ) -> VoiceoverResult:
        """Turn transcript text into an emotion-annotated voice-over script.

        RULES:
        - Sends JSON {text, emotion, language}
        - Raises LocalizerAPIError on non-2xx responses
        - Raises MalformedResponseError if ``voiceoverScript`` is missing
        """
        client = self._ensure_client()
        if on_status:
            on_status("Generating {} voice-over script ({})...".format(emotion, language))

        resp = await client.post(
            "/generate-voiceover",
            json={"text": text, "emotion": emotion, "language": language},
        )
        body = _parse_response(resp, VOICEOVER_FALLBACK_MESSAGE)

        try:
            return VoiceoverResult.from_dict(body)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Voice-over response missing script: %s", body)
            raise MalformedResponseError(resp.status_code, VOICEOVER_FALLBACK_MESSAGE) from exc


# ---------------------------------------------------------------------------
# Response helpers (module-private)
# ---------------------------------------------------------------------------


def _parse_response(resp: httpx.Response, fallback: str) -> dict:
    """Return the JSON body of a success response, or raise with a message.

    RULES:
    - Non-2xx: message is body["error"] when it is a non-empty string,
      otherwise ``fallback``
    - 2xx with a non-object or unparseable body: MalformedResponseError
    """
    try:
        body = resp.json()
    except ValueError:
        body = None

    if not resp.is_success:
        message = fallback
        if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"].strip():
            message = body["error"]
        logger.warning("Request to %s failed: %s %s", resp.request.url, resp.status_code, message)
        raise LocalizerAPIError(resp.status_code, message)

    if not isinstance(body, dict):
        raise MalformedResponseError(resp.status_code, fallback)
    return body
