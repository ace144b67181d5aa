"""Shared test fixtures for the media_localizer test suite.

WHY: Several test modules need the same stand-ins: a transcoding engine
that does not need a real ffmpeg binary, a scriptable endpoint client,
and a handful of representative media files.

HOW: FakeEngine subclasses TranscodingEngine, keeping its real scratch
directory handling but replacing the ffmpeg probe and the ffmpeg run:
exec() writes a genuine WAV file with the requested channels and sample
rate via the stdlib ``wave`` module. FakeLocalizerClient records calls
and returns queued results or raises queued exceptions.

RULES:
- No test touches the network or a real ffmpeg binary
- Async code is driven with asyncio.run() inside synchronous tests
"""

from __future__ import annotations

import asyncio
import tempfile
import wave
from pathlib import Path
from typing import Any, List, Optional

import pytest

from media_localizer.api.models import TranscriptionResult, VoiceoverResult
from media_localizer.media.engine import TranscodingEngine, TranscodingError
from media_localizer.media.extract import AudioExtractor
from media_localizer.media.files import MediaFile


# ---------------------------------------------------------------------------
# Transcoding engine stand-in
# ---------------------------------------------------------------------------


class FakeEngine(TranscodingEngine):
    """TranscodingEngine with the ffmpeg binary replaced by a WAV writer.

    ``exec_started`` / ``exec_gate`` may be set to asyncio.Events to
    observe and hold a transcode in progress.
    """

    def __init__(self, load_delay: float = 0.0, fail_exec: bool = False) -> None:
        super().__init__(binary="ffmpeg")
        self.load_delay = load_delay
        self.fail_exec = fail_exec
        self.load_error: Optional[Exception] = None
        self.exec_calls: List[List[str]] = []
        self.exec_started: Optional[asyncio.Event] = None
        self.exec_gate: Optional[asyncio.Event] = None

    async def _load(self) -> Path:
        await asyncio.sleep(self.load_delay)
        if self.load_error is not None:
            raise self.load_error
        return Path(tempfile.mkdtemp(prefix="fake_engine_"))

    async def exec(self, args: List[str]) -> None:
        self.exec_calls.append(list(args))
        if self.exec_started is not None:
            self.exec_started.set()
        if self.exec_gate is not None:
            await self.exec_gate.wait()
        if self.fail_exec:
            raise TranscodingError("ffmpeg exited with code 1: Invalid data found when processing input")

        work_dir = self._require_ready()
        input_name = args[args.index("-i") + 1]
        if not (work_dir / input_name).exists():
            raise TranscodingError("{}: No such file or directory".format(input_name))

        channels = int(args[args.index("-ac") + 1])
        rate = int(args[args.index("-ar") + 1])
        with wave.open(str(work_dir / args[-1]), "wb") as wav:
            wav.setnchannels(channels)
            wav.setsampwidth(2)
            wav.setframerate(rate)
            wav.writeframes(b"\x00\x00" * (channels * rate // 10))

    def scratch_files(self) -> List[str]:
        work_dir = self._require_ready()
        return sorted(p.name for p in work_dir.iterdir())


# ---------------------------------------------------------------------------
# Endpoint client stand-in
# ---------------------------------------------------------------------------


class FakeLocalizerClient:
    """Records calls; returns (or raises) whatever the test queued.

    ``gate`` may be set to an asyncio.Event that transcribe() and
    generate_voiceover() wait on, to hold a request in flight.
    """

    def __init__(self) -> None:
        self.transcribe_calls: List[dict] = []
        self.voiceover_calls: List[dict] = []
        self.transcribe_result: Any = TranscriptionResult(
            transcription="Hello world\nThis is a test line that is fairly long indeed",
            file_name="talk.mp3",
            file_size=1024,
        )
        self.voiceover_result: Any = VoiceoverResult(
            voiceover_script="Hello [PAUSE] *world*",
            original_text="Hello world",
            emotion="happy",
            language="English",
            emotion_description="Speak with warmth.",
        )
        self.gate: Optional[asyncio.Event] = None

    async def transcribe(self, file, target_language=None, on_status=None):
        self.transcribe_calls.append({"file": file, "target_language": target_language})
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.transcribe_result, BaseException):
            raise self.transcribe_result
        return self.transcribe_result

    async def generate_voiceover(self, text, emotion, language, on_status=None):
        self.voiceover_calls.append({"text": text, "emotion": emotion, "language": language})
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.voiceover_result, BaseException):
            raise self.voiceover_result
        return self.voiceover_result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    eng = FakeEngine()
    yield eng
    eng.close()


@pytest.fixture
def extractor(engine):
    return AudioExtractor(engine)


@pytest.fixture
def fake_client():
    return FakeLocalizerClient()


@pytest.fixture
def audio_file():
    return MediaFile(name="talk.mp3", content=b"ID3" + b"\x00" * 1021, mime_type="audio/mpeg")


@pytest.fixture
def video_file():
    return MediaFile(name="My Clip (final).mp4", content=b"\x00\x00\x00\x18ftypmp42" * 64, mime_type="video/mp4")
