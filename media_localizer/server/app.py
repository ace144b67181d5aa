"""FastAPI gateway exposing the transcribe and voice-over endpoints.

WHY: The client pipeline talks to two endpoints that forward work to a
hosted multimodal model. Serving them from this package gives the CLI
(and any other client) a local counterpart with the exact request and
response contract it expects.

HOW: POST /transcribe accepts a multipart upload, inlines the bytes as a
base64 data URL, and asks the model for a transcript (plus a translated
section when ``targetLanguage`` is set). POST /generate-voiceover sends
text with an emotion-specific voice direction and returns the annotated
script. Both go through CompletionClient; every failure becomes a JSON
``{"error", "details"}`` body.

RULES:
- Missing AI_API_KEY → 500 "AI service not configured"
- Missing file / blank text → 400 before any upstream call
- Upstream non-2xx → 500 "AI processing failed: <status>"
- Unknown emotions use the neutral voice direction
- Malformed request bodies → 400 with the same error shape
- The completion client is a FastAPI dependency so tests can override it
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from media_localizer import __version__
from media_localizer.config import TRANSCRIBE_MODEL, VOICEOVER_MODEL, load_ai_api_key
from media_localizer.server.gateway import CompletionClient, GatewayError, media_data_url
from media_localizer.server.models import (
    ErrorResponse,
    HealthResponse,
    TranscribeResponse,
    VoiceoverRequest,
    VoiceoverResponse,
)
from media_localizer.server.prompts import (
    TRANSCRIBE_USER_TEXT,
    emotion_direction,
    transcription_prompt,
    voiceover_prompt,
    voiceover_user_message,
)

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_MIME_TYPE = "audio/mpeg"

app = FastAPI(
    title="Media Localizer Gateway",
    description=(
        "Transcribe (and optionally translate) audio/video uploads and turn "
        "transcripts into emotion-annotated voice-over scripts, using a hosted "
        "multimodal model."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


@app.exception_handler(GatewayError)
async def _gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": str(exc.errors())},
    )


def get_completion_client() -> CompletionClient:
    """Build the upstream client, refusing to run without a key."""
    try:
        api_key = load_ai_api_key()
    except ValueError as exc:
        logger.error("AI_API_KEY is not configured")
        raise GatewayError(str(exc)) from exc
    return CompletionClient(api_key=api_key)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.post(
    "/transcribe",
    response_model=TranscribeResponse,
    tags=["transcription"],
    summary="Transcribe an audio/video file",
    description=(
        "Upload a file as multipart field 'file'. When 'targetLanguage' is set, "
        "the transcript ends with a translated section."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "No file provided"},
        500: {"model": ErrorResponse, "description": "Upstream or configuration failure"},
    },
)
async def transcribe(
    completion: Annotated[CompletionClient, Depends(get_completion_client)],
    file: Annotated[
        Optional[UploadFile],
        File(description="Audio or video file to transcribe"),
    ] = None,
    targetLanguage: Annotated[
        Optional[str],
        Form(description="Optional translation target language, e.g. 'Spanish'."),
    ] = None,
) -> TranscribeResponse:
    if file is None:
        logger.error("No file provided in request")
        raise GatewayError("No file provided", status_code=400)

    target_language = targetLanguage or None
    file_name = file.filename or "upload"

    try:
        content = await file.read()
        mime_type = file.content_type or DEFAULT_UPLOAD_MIME_TYPE
        logger.info(
            "Processing file: %s, size: %d bytes, type: %s", file_name, len(content), mime_type
        )

        transcription = await completion.complete(
            model=TRANSCRIBE_MODEL,
            system_prompt=transcription_prompt(target_language),
            user_content=[
                {"type": "text", "text": TRANSCRIBE_USER_TEXT},
                {"type": "image_url", "image_url": {"url": media_data_url(content, mime_type)}},
            ],
            max_tokens=16000,
            temperature=0.1,
            empty_message="No transcription generated",
        )
    except GatewayError:
        raise
    except Exception as exc:
        logger.exception("Transcription error")
        raise GatewayError("Failed to process file", details=str(exc)) from exc

    logger.info("Transcription completed, length: %d characters", len(transcription))
    return TranscribeResponse(
        transcription=transcription,
        fileName=file_name,
        fileSize=len(content),
        targetLanguage=target_language,
    )


@app.post(
    "/generate-voiceover",
    response_model=VoiceoverResponse,
    tags=["voiceover"],
    summary="Generate an emotion-annotated voice-over script",
    description=(
        "Adapt transcript text into a voice-over script with [PAUSE] markers, "
        "*emphasis*, (emotional cues) and // pacing notes // for the chosen emotion."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "No text provided"},
        500: {"model": ErrorResponse, "description": "Upstream or configuration failure"},
    },
)
async def generate_voiceover(
    body: VoiceoverRequest,
    completion: Annotated[CompletionClient, Depends(get_completion_client)],
) -> VoiceoverResponse:
    if not body.text or not body.text.strip():
        logger.error("No text provided for voiceover")
        raise GatewayError("No text provided", status_code=400)

    logger.info(
        "Generating voiceover: emotion=%s, language=%s, text length=%d",
        body.emotion, body.language, len(body.text),
    )
    direction = emotion_direction(body.emotion)

    try:
        script = await completion.complete(
            model=VOICEOVER_MODEL,
            system_prompt=voiceover_prompt(body.emotion, body.language),
            user_content=voiceover_user_message(body.text, body.emotion, body.language),
            max_tokens=8000,
            temperature=0.7,
            empty_message="No voiceover script generated",
        )
    except GatewayError:
        raise
    except Exception as exc:
        logger.exception("Voiceover generation error")
        raise GatewayError("Failed to generate voiceover", details=str(exc)) from exc

    logger.info("Voiceover script generated, length: %d characters", len(script))
    return VoiceoverResponse(
        originalText=body.text,
        voiceoverScript=script,
        emotion=body.emotion,
        language=body.language,
        emotionDescription=direction,
    )


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the media-localizer-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
