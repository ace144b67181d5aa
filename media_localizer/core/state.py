"""Processing states, pipeline events, and the transition function.

WHY: An upload session moves through a fixed pipeline (upload →
transcribe → optional translate → optional voice-over) with one failure
state. Encoding every legal move in a single table makes the pipeline
testable one transition at a time and turns an illegal move into an
immediate, typed error instead of a silently inconsistent UI.

HOW: ProcessingStatus and PipelineEvent are str enums. TRANSITIONS maps
each status to the events it accepts and the status each one leads to.
transition() looks the pair up. ProcessingState is the tagged state the
session carries: a status plus the error message that only the ERROR
status may hold.

RULES:
- Every status has an entry in TRANSITIONS (checked at import)
- RESET is accepted from every status and always leads to IDLE
- FAIL is accepted only while a stage is in flight
- SUBMIT and REQUEST_VOICEOVER are accepted from COMPLETE and ERROR so
  the user can retry by hand; nothing retries automatically
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Optional


class ProcessingStatus(str, enum.Enum):
    """Where an upload session currently is in the pipeline.

    RULES:
    - idle: file selected (or nothing selected), nothing in flight
    - uploading: preparing the request body (audio extraction runs here)
    - transcribing: transcribe request dispatched, awaiting response
    - translating: splitting the translated section out of the response
    - generating-voiceover: voice-over request in flight
    - complete: transcript (and maybe voice-over) available
    - error: the last stage failed; see ProcessingState.error
    """

    IDLE = "idle"
    UPLOADING = "uploading"
    TRANSCRIBING = "transcribing"
    TRANSLATING = "translating"
    GENERATING_VOICEOVER = "generating-voiceover"
    COMPLETE = "complete"
    ERROR = "error"


class PipelineEvent(str, enum.Enum):
    """Things that happen to a session and may move it to a new status."""

    SUBMIT = "submit"
    DISPATCHED = "dispatched"
    TRANSCRIBED = "transcribed"
    TRANSCRIBED_WITH_TRANSLATION = "transcribed_with_translation"
    TRANSLATED = "translated"
    REQUEST_VOICEOVER = "request_voiceover"
    VOICEOVER_READY = "voiceover_ready"
    FAIL = "fail"
    RESET = "reset"


S = ProcessingStatus
E = PipelineEvent

TRANSITIONS: Dict[ProcessingStatus, Dict[PipelineEvent, ProcessingStatus]] = {
    S.IDLE: {
        E.SUBMIT: S.UPLOADING,
        E.RESET: S.IDLE,
    },
    S.UPLOADING: {
        E.DISPATCHED: S.TRANSCRIBING,
        E.FAIL: S.ERROR,
        E.RESET: S.IDLE,
    },
    S.TRANSCRIBING: {
        E.TRANSCRIBED: S.COMPLETE,
        E.TRANSCRIBED_WITH_TRANSLATION: S.TRANSLATING,
        E.FAIL: S.ERROR,
        E.RESET: S.IDLE,
    },
    S.TRANSLATING: {
        E.TRANSLATED: S.COMPLETE,
        E.FAIL: S.ERROR,
        E.RESET: S.IDLE,
    },
    S.GENERATING_VOICEOVER: {
        E.VOICEOVER_READY: S.COMPLETE,
        E.FAIL: S.ERROR,
        E.RESET: S.IDLE,
    },
    S.COMPLETE: {
        E.SUBMIT: S.UPLOADING,
        E.REQUEST_VOICEOVER: S.GENERATING_VOICEOVER,
        E.RESET: S.IDLE,
    },
    S.ERROR: {
        E.SUBMIT: S.UPLOADING,
        E.REQUEST_VOICEOVER: S.GENERATING_VOICEOVER,
        E.RESET: S.IDLE,
    },
}

_missing = set(ProcessingStatus) - set(TRANSITIONS)
if _missing:
    raise RuntimeError("TRANSITIONS has no entry for: {}".format(sorted(m.value for m in _missing)))

del S, E, _missing

BUSY_STATUSES = frozenset({
    ProcessingStatus.UPLOADING,
    ProcessingStatus.TRANSCRIBING,
    ProcessingStatus.TRANSLATING,
    ProcessingStatus.GENERATING_VOICEOVER,
})
"""Statuses during which a network call or transcode is in flight."""


class InvalidTransitionError(RuntimeError):
    """Raised when an event is not allowed in the current status."""

    def __init__(self, status: ProcessingStatus, event: PipelineEvent) -> None:
        self.status = status
        self.event = event
        super().__init__(
            "Cannot {} while {}".format(event.value.replace("_", " "), status.value)
        )


def transition(status: ProcessingStatus, event: PipelineEvent) -> ProcessingStatus:
    """Return the status ``event`` leads to from ``status``.

    Raises:
        InvalidTransitionError: if the table has no such move.
    """
    try:
        return TRANSITIONS[status][event]
    except KeyError:
        raise InvalidTransitionError(status, event) from None


@dataclass(frozen=True)
class ProcessingState:
    """Tagged processing state: a status and, for ERROR only, a message."""

    status: ProcessingStatus = ProcessingStatus.IDLE
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status is ProcessingStatus.ERROR and not self.error:
            raise ValueError("ERROR state requires a message")
        if self.status is not ProcessingStatus.ERROR and self.error is not None:
            raise ValueError("Only the ERROR state carries a message")

    @property
    def is_busy(self) -> bool:
        return self.status in BUSY_STATUSES

    def apply(self, event: PipelineEvent, error: Optional[str] = None) -> ProcessingState:
        """Return the state after ``event``; ``error`` is required for FAIL."""
        status = transition(self.status, event)
        if status is ProcessingStatus.ERROR:
            return ProcessingState(status, error or "Something went wrong")
        return ProcessingState(status)
