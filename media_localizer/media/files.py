"""In-memory media file container.

WHY: Every stage of the pipeline (acceptance gate, audio extraction,
multipart upload) needs the same three facts about a file: its display
name, its bytes, and the MIME type the user's system declared for it.
A small dataclass keeps these together without tying the pipeline to
the local filesystem.

RULES:
- mime_type may be empty (unknown); callers fall back to the extension
- size is always derived from content, never stored separately
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path


@dataclass
class MediaFile:
    """A named blob of media bytes with its declared MIME type."""

    name: str
    content: bytes
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """Lowercase extension with dot, e.g. ``".mp4"`` (empty if none)."""
        return Path(self.name).suffix.lower()

    @classmethod
    def from_path(cls, path: Path | str) -> MediaFile:
        """Read a file from disk, guessing the declared type from its name.

        RULES:
        - The guessed type stands in for the type a browser would declare
        - Unknown types are left empty rather than defaulted
        """
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content=path.read_bytes(), mime_type=mime_type or "")
