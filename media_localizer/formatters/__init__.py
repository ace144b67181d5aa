"""Output formatter registry — downloadable files from a finished session.

WHY: The CLI needs a single lookup to find the right exporter by name.
A central dict makes it trivial to add new formats: create the formatter
class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["srt_captions"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags)
- Values are BaseFormatter subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from media_localizer.formatters.srt_captions import SRTCaptionFormatter
from media_localizer.formatters.voiceover_script import VoiceoverScriptFormatter

if TYPE_CHECKING:
    from media_localizer.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "srt_captions": SRTCaptionFormatter,
    "voiceover_script": VoiceoverScriptFormatter,
}
