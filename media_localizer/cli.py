"""Command-line interface for the Media Localizer.

WHY: Users need a simple way to localize a media file from the terminal.
The CLI wires the full pipeline behind a single command: acceptance
gate, audio extraction for video, upload and transcription with optional
translation, optional voice-over script generation, and export of the
caption and script files.

HOW: Uses argparse to accept an input file, a target language, an
emotion, output format selection, and an output directory. Builds one
UploadOrchestrator around a LocalizerClient and an AudioExtractor, runs
it via asyncio.run(), and saves each formatter's output next to the
source (or to --output-dir). Status messages go to stderr.

RULES:
- Positional argument: input audio/video file path
- The acceptance gate runs before any extraction or network call; the
  size limit is checked on disk before the file is read
- --language must be one of TARGET_LANGUAGES; --emotion one of EMOTIONS
- --voiceover requests a voice-over script after transcription
- Output naming: {stem}{suffix}, numeric suffix for conflicts (talk-2.srt)
- Exit code 1 on any failed stage, 130 when interrupted
- The transcoding engine's scratch directory is always removed on exit
"""

from __future__ import annotations

import argparse
import asyncio
import itertools
import logging
import sys
from pathlib import Path
from typing import List, Optional

from media_localizer.api.client import LocalizerClient
from media_localizer.config import DEFAULT_EMOTION, EMOTIONS, LOCALIZER_API_URL, TARGET_LANGUAGES
from media_localizer.core.orchestrator import UploadOrchestrator
from media_localizer.core.session import FileRejectedError, check_upload_size
from media_localizer.core.state import ProcessingStatus
from media_localizer.formatters import FORMATTERS
from media_localizer.formatters.base import ExportUnavailableError, FormatterOutput
from media_localizer.media.engine import TranscodingEngine
from media_localizer.media.extract import AudioExtractor, output_path_for
from media_localizer.media.files import MediaFile


def _status(msg: str) -> None:
    """Print a status message to stderr (stdout stays clean for piping)."""
    print(msg, file=sys.stderr, flush=True)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Return a free path for ``{stem}{suffix}`` inside ``output_dir``.

    WHY: The same file is often localized several times (another
    language, another emotion); earlier exports must survive.

    RULES:
    - Free name first: talk.srt, talk-voiceover-happy.txt
    - Taken: a counter goes before the last extension, starting at 2
      (talk-2.srt, talk-voiceover-happy-2.txt)
    """
    name, dot, ext = suffix.rpartition(".")
    if not dot:
        name, ext = suffix, ""
    else:
        ext = "." + ext

    path = output_dir / "{}{}".format(stem, suffix)
    counter = itertools.count(2)
    while path.exists():
        path = output_dir / "{}{}-{}{}".format(stem, name, next(counter), ext)
    return path


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Write one formatter output as UTF-8 text and return its path."""
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _select_formats(args: argparse.Namespace) -> Optional[List[str]]:
    if args.formats:
        format_keys = [f.strip() for f in args.formats.split(",") if f.strip()]
        for key in format_keys:
            if key not in FORMATTERS:
                available = ", ".join(sorted(FORMATTERS.keys()))
                print(
                    "Error: Unknown format '{}'. Available formats: {}".format(key, available),
                    file=sys.stderr,
                )
                return None
        return format_keys

    format_keys = ["srt_captions"]
    if args.voiceover:
        format_keys.append("voiceover_script")
    return format_keys


async def _run_pipeline(args: argparse.Namespace) -> int:
    """Execute the localization pipeline and return the process exit code.

    HOW: select → submit → (voice-over) → export. A failed voice-over
    still exports the captions before reporting the failure.
    """
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        print("Error: File not found: {}".format(input_path), file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        print("Error: Output directory does not exist: {}".format(output_dir), file=sys.stderr)
        return 1

    format_keys = _select_formats(args)
    if format_keys is None:
        return 1

    try:
        check_upload_size(input_path.stat().st_size)
    except FileRejectedError as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1

    media = MediaFile.from_path(input_path)
    engine = TranscodingEngine()
    exit_code = 0

    try:
        async with LocalizerClient(base_url=args.api_url) as client:
            orchestrator = UploadOrchestrator(
                client,
                extractor=AudioExtractor(engine),
                on_status=_status,
            )

            try:
                orchestrator.select_file(media, target_language=args.language, emotion=args.emotion)
            except ValueError as e:
                print("Error: {}".format(e), file=sys.stderr)
                return 1

            session = await orchestrator.submit()
            if session.state.status is ProcessingStatus.ERROR:
                print("Error: {}".format(session.state.error), file=sys.stderr)
                return 1

            if args.keep_audio and session.upload_file is not None and session.upload_file is not media:
                wav_path = output_path_for(output_dir / input_path.name)
                wav_path.write_bytes(session.upload_file.content)
                _status("  Saved extracted audio: {}".format(wav_path.name))

            if args.voiceover:
                await orchestrator.generate_voiceover()
                if session.state.status is ProcessingStatus.ERROR:
                    print("Error: {}".format(session.state.error), file=sys.stderr)
                    exit_code = 1

            _status("Exporting...")
            saved_files: List[Path] = []
            for key in format_keys:
                formatter = FORMATTERS[key]()
                try:
                    outputs = formatter.format(session)
                except ExportUnavailableError as e:
                    _status("  Skipped {}: {}".format(formatter.name, e))
                    continue
                for output in outputs:
                    saved_path = _save_output(output, input_path.stem, output_dir)
                    saved_files.append(saved_path)
                    _status("  Saved: {}".format(saved_path.name))

            _status("")
            _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        return 130
    finally:
        engine.close()

    return exit_code


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Positional: input_file (required)
    - Optional: --language, --voiceover, --emotion, --formats,
      --output-dir, --api-url, --keep-audio, --verbose
    """
    parser = argparse.ArgumentParser(
        prog="media_localizer",
        description="Transcribe, translate and prepare voice-over scripts for "
                    "audio/video files. Exports SRT captions and script files.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the audio or video file to localize.",
    )

    parser.add_argument(
        "--language",
        default=None,
        choices=TARGET_LANGUAGES,
        metavar="LANGUAGE",
        help="Translate the transcript into this language. "
             "Available: {}.".format(", ".join(TARGET_LANGUAGES)),
    )

    parser.add_argument(
        "--voiceover",
        action="store_true",
        help="Generate a voice-over script after transcription.",
    )

    parser.add_argument(
        "--emotion",
        default=DEFAULT_EMOTION,
        choices=EMOTIONS,
        help="Voice-over emotion (default: %(default)s).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: srt_captions (+ voiceover_script with "
             "--voiceover).".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--api-url",
        default=LOCALIZER_API_URL,
        help="Base URL of the transcribe/voice-over endpoints (default: %(default)s).",
    )

    parser.add_argument(
        "--keep-audio",
        action="store_true",
        help="Also save the WAV extracted from a video input.",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI (``python -m media_localizer``).

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(_run_pipeline(args)))


if __name__ == "__main__":
    main()
