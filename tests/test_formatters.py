"""Unit tests for the SRT encoder and the export formatters.

WHY: The SRT file goes straight into a video editor. A wrong separator,
a one-based timestamp, or an overlapping block makes editors reject the
file or show captions on top of each other.

HOW: The encoder is tested on plain strings and line lists; the
formatters on hand-built UploadSession objects.

RULES:
- Timing is heuristic: max(3, ceil(len / 20)) whole seconds per line
"""

import re

import pytest

from media_localizer.core.session import TranscriptDocument, UploadSession, VoiceoverScript
from media_localizer.formatters import FORMATTERS
from media_localizer.formatters.base import ExportUnavailableError
from media_localizer.formatters.srt_captions import (
    SRTCaptionFormatter,
    build_caption_entries,
    caption_duration,
    encode_srt,
    format_timestamp,
)
from media_localizer.formatters.voiceover_script import VoiceoverScriptFormatter
from media_localizer.media.files import MediaFile

TIMESTAMP_RE = re.compile(r"^\d{2}:\d{2}:\d{2},\d{3} --> \d{2}:\d{2}:\d{2},\d{3}$")


def _session(transcript=None, voiceover=None):
    session = UploadSession(file=MediaFile("talk.mp3", b"\x00", "audio/mpeg"))
    if transcript is not None:
        session.transcript = TranscriptDocument.parse(transcript)
    session.voiceover = voiceover
    return session


# ---------------------------------------------------------------------------
# encode_srt
# ---------------------------------------------------------------------------


class TestEncodeSrt:

    def test_two_line_example(self):
        srt = encode_srt("Hello world\nThis is a test line that is fairly long indeed")

        assert srt == (
            "1\n"
            "00:00:00,000 --> 00:00:03,000\n"
            "Hello world\n"
            "\n"
            "2\n"
            "00:00:03,000 --> 00:00:06,000\n"
            "This is a test line that is fairly long indeed\n"
        )

    def test_empty_transcript(self):
        assert encode_srt("") == ""
        assert encode_srt([]) == ""
        assert encode_srt("\n  \n") == ""

    def test_blank_lines_are_skipped_and_indices_stay_dense(self):
        entries = build_caption_entries(["first", "", "   ", "second"])
        assert [e.index for e in entries] == [1, 2]
        assert [e.text for e in entries] == ["first", "second"]

    def test_long_line_gets_longer_duration(self):
        line = "x" * 61
        assert caption_duration(line) == 4
        assert encode_srt([line]).splitlines()[1] == "00:00:00,000 --> 00:00:04,000"

    @pytest.mark.parametrize("length,expected", [(0, 3), (1, 3), (60, 3), (61, 4), (100, 5), (101, 6)])
    def test_duration_rule(self, length, expected):
        assert caption_duration("a" * length) == expected

    def test_blocks_are_contiguous(self):
        lines = ["a" * n for n in (5, 70, 130, 10, 45)]
        entries = build_caption_entries(lines)

        assert entries[0].start_s == 0
        for prev, nxt in zip(entries, entries[1:]):
            assert nxt.start_s == prev.end_s
        assert entries[-1].end_s == sum(caption_duration(line) for line in lines)

    def test_block_structure(self):
        srt = encode_srt(["one", "two", "three"])
        blocks = srt.rstrip("\n").split("\n\n")

        assert len(blocks) == 3
        for number, block in enumerate(blocks, start=1):
            index, timing, text = block.split("\n")
            assert index == str(number)
            assert TIMESTAMP_RE.match(timing)
            assert text

    def test_timestamps_past_one_hour(self):
        assert format_timestamp(3725) == "01:02:05,000"

    def test_many_lines_roll_past_an_hour(self):
        srt = encode_srt(["caption {}".format(i) for i in range(1201)])
        assert "01:00:00,000 --> 01:00:03,000" in srt


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class TestSRTCaptionFormatter:

    def test_registered(self):
        assert FORMATTERS["srt_captions"] is SRTCaptionFormatter

    def test_output(self):
        outputs = SRTCaptionFormatter().format(_session("Hello world\nSecond line"))

        assert len(outputs) == 1
        assert outputs[0].suffix == ".srt"
        assert outputs[0].media_type == "text/srt"
        assert outputs[0].content.startswith("1\n00:00:00,000 --> 00:00:03,000\nHello world\n")

    def test_translated_transcript_includes_both_sections(self):
        text = (
            "--- ORIGINAL TRANSCRIPTION ---\nHello.\n\n"
            "--- TRANSLATION (French) ---\nBonjour.\n"
        )
        content = SRTCaptionFormatter().format(_session(text))[0].content
        assert "--- ORIGINAL TRANSCRIPTION ---" in content
        assert "Bonjour." in content

    def test_no_transcript(self):
        with pytest.raises(ExportUnavailableError):
            SRTCaptionFormatter().format(_session())


class TestVoiceoverScriptFormatter:

    def test_registered(self):
        assert FORMATTERS["voiceover_script"] is VoiceoverScriptFormatter

    def test_output(self):
        voiceover = VoiceoverScript(
            script="Hello [PAUSE] *world*\n",
            emotion="dramatic",
            language="Spanish",
            original_text="Hello world",
            emotion_description="Speak with intensity.",
        )
        (output,) = VoiceoverScriptFormatter().format(_session("Hello world", voiceover))

        assert output.suffix == "-voiceover-dramatic.txt"
        assert output.media_type == "text/plain"
        assert output.content == (
            "Emotion: dramatic\n"
            "Language: Spanish\n"
            "Direction: Speak with intensity.\n"
            "\n"
            "Hello [PAUSE] *world*\n"
        )

    def test_direction_omitted_when_empty(self):
        voiceover = VoiceoverScript("Take one", "neutral", "English", "Take one")
        content = VoiceoverScriptFormatter().format(_session("Take one", voiceover))[0].content
        assert "Direction" not in content

    def test_no_voiceover(self):
        with pytest.raises(ExportUnavailableError):
            VoiceoverScriptFormatter().format(_session("Hello"))
