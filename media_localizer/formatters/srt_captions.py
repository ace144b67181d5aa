"""SRT caption formatter — heuristic timing for flat transcripts.

WHY: Users want a caption file they can drop into a video editor, but
the transcription endpoint returns plain text without per-line timing.
The encoder therefore assigns each line an estimated duration from its
length. This is an APPROXIMATION for a first editing pass, not a
transcription of when the words were actually spoken.

HOW: Every non-blank transcript line becomes one caption block. The
first block starts at 0; each block lasts ``max(3, ceil(len(line) / 20))``
seconds; the next block starts where the previous one ended.

RULES:
- Timestamps are HH:MM:SS,mmm; only whole seconds are computed, so the
  millisecond field is always 000
- Caption indices start at 1
- Blocks are separated by exactly one blank line; output ends with "\\n"
- No gaps and no overlaps between consecutive blocks
- An empty transcript produces an empty string
- Registered as "srt_captions"; media type "text/srt"
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Union

from media_localizer.core.session import UploadSession
from media_localizer.formatters.base import (
    BaseFormatter,
    ExportUnavailableError,
    FormatterOutput,
)

MIN_CAPTION_SECONDS = 3
CHARS_PER_SECOND = 20

SRT_MEDIA_TYPE = "text/srt"


@dataclass
class CaptionEntry:
    """One numbered, timed caption block."""

    index: int
    start_s: int
    end_s: int
    text: str


def caption_duration(line: str) -> int:
    """Estimated on-screen seconds for one caption line."""
    return max(MIN_CAPTION_SECONDS, math.ceil(len(line) / CHARS_PER_SECOND))


def format_timestamp(seconds: int) -> str:
    """Format whole seconds as ``HH:MM:SS,000``."""
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return "{:02d}:{:02d}:{:02d},000".format(hours, minutes, secs)


def _split_lines(transcript: Union[str, Iterable[str]]) -> List[str]:
    if isinstance(transcript, str):
        transcript = transcript.splitlines()
    return [line.strip() for line in transcript if line.strip()]


def build_caption_entries(transcript: Union[str, Iterable[str]]) -> List[CaptionEntry]:
    """Assign cumulative heuristic timing to each non-blank line."""
    entries: List[CaptionEntry] = []
    cursor = 0
    for index, line in enumerate(_split_lines(transcript), start=1):
        end = cursor + caption_duration(line)
        entries.append(CaptionEntry(index=index, start_s=cursor, end_s=end, text=line))
        cursor = end
    return entries


def encode_srt(transcript: Union[str, Iterable[str]]) -> str:
    """Render a transcript (text or lines) as an SRT document.

    Example:
        >>> print(encode_srt(["Hello world"]), end="")
        1
        00:00:00,000 --> 00:00:03,000
        Hello world
    """
    blocks = [
        "{}\n{} --> {}\n{}".format(
            entry.index,
            format_timestamp(entry.start_s),
            format_timestamp(entry.end_s),
            entry.text,
        )
        for entry in build_caption_entries(transcript)
    ]
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


class SRTCaptionFormatter(BaseFormatter):
    """Formatter that produces one SRT caption file from the transcript."""

    @property
    def name(self) -> str:
        return "SRT Captions"

    def format(self, session: UploadSession) -> List[FormatterOutput]:
        if session.transcript is None or not session.transcript.text.strip():
            raise ExportUnavailableError("No transcript to export as captions")
        return [
            FormatterOutput(
                suffix=".srt",
                content=encode_srt(session.transcript.lines()),
                media_type=SRT_MEDIA_TYPE,
            )
        ]
