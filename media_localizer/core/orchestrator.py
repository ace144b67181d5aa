"""Upload → transcribe → translate → voice-over orchestration.

WHY: The pipeline has four dependent stages, each backed by a transcode
or a network call, and each able to fail on its own. The orchestrator
sequences them for the single active upload session, moves the session
through the state table in core/state.py, and turns every failure into a
user-visible error state without losing what the user already has.

HOW: UploadOrchestrator holds at most one UploadSession. select_file()
runs the acceptance gate and replaces the session. submit() extracts
audio for video files, uploads, and stores the transcript; when a target
language was requested the translated section is split out of that same
response (no second round trip). generate_voiceover() sends the
transcript (the translation, when there is one) for script annotation.
clear_file() drops the session from any state.

RULES:
- Every stage runs strictly after the previous one; nothing overlaps
- After each await the session is re-checked: if it is no longer the
  active one (reset or replaced), the result is discarded and logged
- Failures land in ERROR with a message; the selected file is kept so
  the user can retry by submitting again
- A failed voice-over keeps the transcript
- Voice-over without transcript text raises EmptyTranscriptError before
  any network call and without a state change
- Nothing is retried automatically
- Target language and emotion are fixed while a stage is in flight
  (SessionBusyError); each run uses the values captured at its start
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx

from media_localizer.api.client import (
    TRANSCRIBE_FALLBACK_MESSAGE,
    VOICEOVER_FALLBACK_MESSAGE,
    LocalizerAPIError,
    LocalizerClient,
)
from media_localizer.config import DEFAULT_EMOTION, DEFAULT_VOICEOVER_LANGUAGE
from media_localizer.core.session import (
    EmptyTranscriptError,
    TranscriptDocument,
    UploadSession,
    VoiceoverScript,
    check_emotion,
    check_target_language,
    validate_upload,
)
from media_localizer.core.state import PipelineEvent, ProcessingState
from media_localizer.media.engine import TranscodingError
from media_localizer.media.extract import AudioExtractor
from media_localizer.media.files import MediaFile

logger = logging.getLogger(__name__)

StateCallback = Callable[[UploadSession, ProcessingState], None]


class NoFileSelectedError(RuntimeError):
    """Raised when an operation needs a selected file and there is none."""


class SessionBusyError(RuntimeError):
    """Raised when a choice is changed while a stage is in flight."""


class UploadOrchestrator:
    """Drives the single active upload session through the pipeline.

    RULES:
    - client must already be open (inside its async context manager)
    - extractor defaults to an AudioExtractor with its own engine
    - on_status receives human-readable progress strings
    - on_state_change receives (session, new_state) after every transition
    """

    def __init__(
        self,
        client: LocalizerClient,
        extractor: Optional[AudioExtractor] = None,
        on_status: Optional[Callable[[str], None]] = None,
        on_state_change: Optional[StateCallback] = None,
    ) -> None:
        self._client = client
        self._extractor = extractor or AudioExtractor()
        self._on_status = on_status
        self._on_state_change = on_state_change
        self._session: Optional[UploadSession] = None

    # ------------------------------------------------------------------
    # Session access
    # ------------------------------------------------------------------

    @property
    def session(self) -> Optional[UploadSession]:
        return self._session

    @property
    def state(self) -> ProcessingState:
        """Current state; IDLE when no file is selected."""
        if self._session is None:
            return ProcessingState()
        return self._session.state

    def _require_session(self) -> UploadSession:
        if self._session is None:
            raise NoFileSelectedError("No file selected")
        return self._session

    def _is_current(self, session: UploadSession) -> bool:
        return self._session is not None and self._session.id == session.id

    def _status(self, msg: str) -> None:
        if self._on_status:
            self._on_status(msg)

    def _advance(
        self,
        session: UploadSession,
        event: PipelineEvent,
        error: Optional[str] = None,
    ) -> None:
        session.state = session.state.apply(event, error)
        logger.debug("Session %s: %s -> %s", session.id, event.value, session.state.status.value)
        if self._on_state_change:
            self._on_state_change(session, session.state)

    def _fail(self, session: UploadSession, message: str) -> None:
        if not self._is_current(session):
            logger.info("Dropping failure for stale session %s: %s", session.id, message)
            return
        self._advance(session, PipelineEvent.FAIL, message)
        self._status("Error: {}".format(message))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_file(
        self,
        file: MediaFile,
        target_language: Optional[str] = None,
        emotion: str = DEFAULT_EMOTION,
    ) -> UploadSession:
        """Validate ``file`` and make it the active session.

        RULES:
        - Raises FileRejectedError / ValueError without touching the
          current session
        - On success the previous session (transcript, voice-over) is gone
        """
        validate_upload(file)
        target_language = check_target_language(target_language)
        emotion = check_emotion(emotion)

        if self._session is not None:
            logger.info("Replacing session %s with a new selection", self._session.id)

        session = UploadSession(file=file, target_language=target_language, emotion=emotion)
        self._session = session
        logger.info("Selected %s (%d bytes, type %r)", file.name, file.size, file.mime_type)
        return session

    def _require_idle_session(self) -> UploadSession:
        session = self._require_session()
        if session.state.is_busy:
            raise SessionBusyError(
                "Cannot change settings while {}".format(session.state.status.value)
            )
        return session

    def set_target_language(self, language: Optional[str]) -> None:
        """Change the translation target; refused while a stage is running."""
        session = self._require_idle_session()
        session.target_language = check_target_language(language)

    def set_emotion(self, emotion: str) -> None:
        session = self._require_idle_session()
        session.emotion = check_emotion(emotion)

    def clear_file(self) -> None:
        """Drop the selected file and everything derived from it."""
        session = self._session
        self._session = None
        if session is None:
            return
        session.state = session.state.apply(PipelineEvent.RESET)
        logger.info("Cleared session %s", session.id)
        if self._on_state_change:
            self._on_state_change(session, session.state)

    # ------------------------------------------------------------------
    # Upload + transcribe (+ translate)
    # ------------------------------------------------------------------

    async def submit(self) -> UploadSession:
        """Run extraction, upload and transcription for the active session.

        HOW: SUBMIT → (extract audio) → DISPATCHED → (remote call) →
        TRANSCRIBED, or TRANSCRIBED_WITH_TRANSLATION → TRANSLATED when a
        target language was set.

        RULES:
        - Raises InvalidTransitionError if a stage is already in flight
        - Expected failures end in ERROR and are not raised
        - Unexpected exceptions end in ERROR and are re-raised

        Returns:
            The session the run belonged to (may no longer be active).
        """
        session = self._require_session()
        self._advance(session, PipelineEvent.SUBMIT)
        session.transcript = None
        session.voiceover = None
        target_language = session.target_language

        try:
            upload = await self._extractor.prepare_for_upload(session.file, on_status=self._on_status)
            if not self._is_current(session):
                logger.info("Discarding extracted audio for stale session %s", session.id)
                return session
            session.upload_file = upload

            self._advance(session, PipelineEvent.DISPATCHED)
            result = await self._client.transcribe(
                upload,
                target_language=target_language,
                on_status=self._on_status,
            )
        except TranscodingError as exc:
            logger.warning("Audio extraction failed for %s: %s", session.file.name, exc)
            self._fail(session, "Could not extract audio from video: {}".format(exc))
            return session
        except LocalizerAPIError as exc:
            self._fail(session, exc.message)
            return session
        except httpx.HTTPError as exc:
            logger.warning("Transcribe request failed: %s", exc)
            self._fail(session, TRANSCRIBE_FALLBACK_MESSAGE)
            return session
        except Exception:
            logger.exception("Transcription pipeline failed for session %s", session.id)
            self._fail(session, TRANSCRIBE_FALLBACK_MESSAGE)
            raise

        if not self._is_current(session):
            logger.info("Discarding transcription for stale session %s", session.id)
            return session

        if target_language:
            self._advance(session, PipelineEvent.TRANSCRIBED_WITH_TRANSLATION)
            self._status("Extracting {} translation...".format(target_language))
            session.transcript = TranscriptDocument.parse(result.transcription, target_language)
            if not session.transcript.has_translation:
                logger.warning(
                    "Transcript for %s has no %s translation section",
                    session.file.name,
                    target_language,
                )
            self._advance(session, PipelineEvent.TRANSLATED)
        else:
            session.transcript = TranscriptDocument.parse(result.transcription)
            self._advance(session, PipelineEvent.TRANSCRIBED)

        self._status("Transcription complete ({:,} characters).".format(len(result.transcription)))
        return session

    # ------------------------------------------------------------------
    # Voice-over
    # ------------------------------------------------------------------

    async def generate_voiceover(self, emotion: Optional[str] = None) -> Optional[VoiceoverScript]:
        """Request an annotated voice-over script for the current transcript.

        RULES:
        - EmptyTranscriptError (no state change, no request) without text
        - The translation is voiced in the target language when present;
          otherwise the original in DEFAULT_VOICEOVER_LANGUAGE
        - On failure: ERROR, transcript kept, returns None

        Args:
            emotion: Optional override; must be one of EMOTIONS.

        Returns:
            The new VoiceoverScript, or None on failure / stale session.
        """
        session = self._require_session()
        emotion = session.emotion if emotion is None else check_emotion(emotion)

        transcript = session.transcript
        if transcript is None or not transcript.text.strip():
            raise EmptyTranscriptError("Transcribe a file before generating a voice-over")

        if transcript.has_translation and transcript.target_language:
            language = transcript.target_language
        else:
            language = DEFAULT_VOICEOVER_LANGUAGE
        text = transcript.voiceover_source()

        self._advance(session, PipelineEvent.REQUEST_VOICEOVER)
        session.emotion = emotion
        try:
            result = await self._client.generate_voiceover(
                text, emotion, language, on_status=self._on_status
            )
        except LocalizerAPIError as exc:
            self._fail(session, exc.message)
            return None
        except httpx.HTTPError as exc:
            logger.warning("Voice-over request failed: %s", exc)
            self._fail(session, VOICEOVER_FALLBACK_MESSAGE)
            return None
        except Exception:
            logger.exception("Voice-over generation failed for session %s", session.id)
            self._fail(session, VOICEOVER_FALLBACK_MESSAGE)
            raise

        if not self._is_current(session):
            logger.info("Discarding voice-over for stale session %s", session.id)
            return None

        voiceover = VoiceoverScript(
            script=result.voiceover_script,
            emotion=result.emotion or emotion,
            language=result.language or language,
            original_text=result.original_text or text,
            emotion_description=result.emotion_description,
        )
        session.voiceover = voiceover
        self._advance(session, PipelineEvent.VOICEOVER_READY)
        self._status("Voice-over script ready ({} emotion).".format(voiceover.emotion))
        return voiceover
