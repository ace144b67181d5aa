"""Owned handle on the ffmpeg transcoding engine.

WHY: Audio extraction drives ffmpeg through discrete command arguments,
exactly like a command-line media converter. Locating and probing the
binary and preparing a scratch directory is slow enough that it should
happen once, lazily, on the first video, and never twice even when
several extractions start at the same moment.

HOW: TranscodingEngine owns a private working directory that acts as the
engine's virtual filesystem (write_file / read_file / delete_file) and
runs ffmpeg inside it via asyncio subprocesses (exec). ensure_initialized()
starts one load task on first call and every concurrent caller awaits
that same task; once it succeeds the engine is marked ready.

RULES:
- One load in flight at most; concurrent callers share its result
- A failed load is not cached: the next ensure_initialized() retries
- exec() raises TranscodingError (with ffmpeg's stderr) on non-zero exit
- Load failures raise EngineInitError (a TranscodingError)
- File names are bare names inside the working directory, never paths
- close() is best-effort and never raises
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import shutil
import tempfile
import time
from pathlib import Path

from media_localizer.config import FFMPEG_BINARY

logger = logging.getLogger(__name__)


class TranscodingError(Exception):
    """Raised when audio extraction fails at any step.

    RULES:
    - Covers engine start-up, ffmpeg failures, and unreadable output
    - The orchestrator treats it as terminal for the current run
    """


class EngineInitError(TranscodingError):
    """Raised when the transcoding engine cannot be loaded."""


class TranscodingEngine:
    """Lazily loaded ffmpeg engine with a private scratch directory.

    WHY: The engine is the only resource shared between extraction calls.
    Making it an explicit object (rather than a module global) lets the
    caller decide its lifetime and lets tests substitute the command
    runner.

    RULES:
    - Use ensure_initialized() before any filesystem or exec call
    - binary defaults to FFMPEG_BINARY from config
    - Call close() when done to remove the scratch directory
    """

    def __init__(self, binary: str | None = None) -> None:
        self._binary = binary or FFMPEG_BINARY
        self._binary_path: str | None = None
        self._work_dir: Path | None = None
        self._init_task: asyncio.Future | None = None
        self._counter = itertools.count(1)
        self.load_count = 0

    @property
    def is_ready(self) -> bool:
        return self._work_dir is not None

    async def ensure_initialized(self) -> None:
        """Load the engine once; concurrent callers await the same load.

        HOW: The first caller wraps _load() in a task and stores it.
        Everyone awaits the task through asyncio.shield so one caller
        being cancelled does not cancel the load for the others.

        RULES:
        - Returns immediately when the engine is already ready
        - On failure, the stored task is dropped so a later call retries
        """
        if self.is_ready:
            return

        task = self._init_task
        if task is None:
            task = asyncio.ensure_future(self._run_load())
            self._init_task = task

        try:
            await asyncio.shield(task)
        except Exception:
            if self._init_task is task:
                self._init_task = None
            raise

    async def _run_load(self) -> None:
        self.load_count += 1
        logger.info("Loading transcoding engine (%s)", self._binary)
        try:
            self._work_dir = await self._load()
        except EngineInitError:
            raise
        except Exception as exc:
            raise EngineInitError(
                "Failed to load transcoding engine: {}".format(exc)
            ) from exc
        logger.info("Transcoding engine ready (work dir %s)", self._work_dir)

    async def _load(self) -> Path:
        """Locate and probe the ffmpeg binary, then create the work dir."""
        binary_path = shutil.which(self._binary)
        if binary_path is None:
            raise EngineInitError(
                "ffmpeg not found ('{}'). Install ffmpeg or set FFMPEG_BINARY.".format(
                    self._binary
                )
            )

        proc = await asyncio.create_subprocess_exec(
            binary_path,
            "-version",
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise EngineInitError(
                "ffmpeg probe failed: {}".format(stderr.decode(errors="replace").strip())
            )

        self._binary_path = binary_path
        return Path(tempfile.mkdtemp(prefix="media_localizer_ffmpeg_"))

    def _require_ready(self) -> Path:
        if self._work_dir is None:
            raise RuntimeError(
                "TranscodingEngine is not initialized: await ensure_initialized() first"
            )
        return self._work_dir

    def _path_for(self, name: str) -> Path:
        work_dir = self._require_ready()
        if Path(name).name != name:
            raise ValueError("Engine file names must be bare names: {!r}".format(name))
        return work_dir / name

    def next_token(self) -> str:
        """Return a token that distinguishes this call from every earlier one."""
        return "{}_{}".format(time.time_ns(), next(self._counter))

    # ------------------------------------------------------------------
    # Virtual filesystem
    # ------------------------------------------------------------------

    async def write_file(self, name: str, data: bytes) -> None:
        path = self._path_for(name)
        await asyncio.to_thread(path.write_bytes, data)

    async def read_file(self, name: str) -> bytes:
        path = self._path_for(name)
        return await asyncio.to_thread(path.read_bytes)

    async def delete_file(self, name: str) -> None:
        path = self._path_for(name)
        await asyncio.to_thread(path.unlink)

    # ------------------------------------------------------------------
    # Command interface
    # ------------------------------------------------------------------

    async def exec(self, args: list[str]) -> None:
        """Run ffmpeg with ``args`` inside the working directory.

        RULES:
        - Always runs non-interactively and overwrites outputs (-y)
        - Raises TranscodingError with stderr text on non-zero exit
        """
        work_dir = self._require_ready()
        cmd = [self._binary_path or self._binary, "-hide_banner", "-nostdin", "-y", *args]
        logger.debug("Running %s", " ".join(cmd))

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(work_dir),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            message = stderr.decode(errors="replace").strip()
            raise TranscodingError(
                "ffmpeg exited with code {}: {}".format(proc.returncode, message[-2000:])
            )

    def close(self) -> None:
        """Remove the working directory and forget the loaded state."""
        work_dir = self._work_dir
        self._work_dir = None
        self._init_task = None
        if work_dir is not None and work_dir.exists():
            try:
                shutil.rmtree(work_dir)
            except OSError:
                logger.warning("Failed to clean up engine work dir: %s", work_dir)
