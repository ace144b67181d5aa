"""Voice-over script formatter — plain text named after the emotion.

WHY: The voice artist (or a TTS step downstream) needs the annotated
script as a standalone file. Naming the file after the emotion keeps
several takes of the same transcript apart.

HOW: Writes a short header (emotion, language, style direction) followed
by the annotated script exactly as generated.

RULES:
- Suffix: ``-voiceover-<emotion>.txt``; media type "text/plain"
- Registered as "voiceover_script"
- Requires a generated voice-over; otherwise ExportUnavailableError
"""

from typing import List

from media_localizer.core.session import UploadSession
from media_localizer.formatters.base import (
    BaseFormatter,
    ExportUnavailableError,
    FormatterOutput,
)


class VoiceoverScriptFormatter(BaseFormatter):
    """Formatter that exports the annotated voice-over script."""

    @property
    def name(self) -> str:
        return "Voice-over Script"

    def format(self, session: UploadSession) -> List[FormatterOutput]:
        voiceover = session.voiceover
        if voiceover is None:
            raise ExportUnavailableError("No voice-over script has been generated")

        header = [
            "Emotion: {}".format(voiceover.emotion),
            "Language: {}".format(voiceover.language),
        ]
        if voiceover.emotion_description:
            header.append("Direction: {}".format(voiceover.emotion_description))

        content = "\n".join(header) + "\n\n" + voiceover.script.strip() + "\n"
        return [
            FormatterOutput(
                suffix="-voiceover-{}.txt".format(voiceover.emotion),
                content=content,
                media_type="text/plain",
            )
        ]
