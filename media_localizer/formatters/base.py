"""Export formatter interface.

WHY: A finished session can be downloaded in more than one shape
(captions, the voice-over script). The CLI exports whichever formats the
user picked without knowing how each one is built.

HOW: Each format is a BaseFormatter subclass with a display ``name`` and
a ``format(session)`` method returning FormatterOutput objects: a file
suffix, the text content, and its MIME type.

RULES:
- ``format()`` raises ExportUnavailableError when the session lacks what
  the format needs (no transcript, no voice-over yet)
- ``suffix`` is appended to the source file's stem, e.g. ``".srt"``
- Outputs are rebuilt on every call
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from media_localizer.core.session import UploadSession


class ExportUnavailableError(ValueError):
    """Raised when a session has nothing to export in a given format."""


@dataclass
class FormatterOutput:
    """A single exported file.

    Attributes:
        suffix: Appended to the source stem,
                e.g. ``"-voiceover-happy.txt"`` → ``"talk-voiceover-happy.txt"``.
        content: File text.
        media_type: MIME type, e.g. ``"text/srt"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Base class for export formats.

    New formats subclass this and get a key in FORMATTERS
    (formatters/__init__.py).
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name, e.g. 'SRT Captions'."""

    @abstractmethod
    def format(self, session: UploadSession) -> list[FormatterOutput]:
        """Build the output files for ``session``."""
