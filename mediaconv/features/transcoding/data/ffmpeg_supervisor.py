import asyncio
import codecs
import logging
import re
from collections import deque
from typing import AsyncIterator, Callable, Optional
from mediaconv.core.config.settings import settings
from ..domain.interfaces import IProcessSupervisor
from ..domain.models import Completed, Failed, Invocation, Outcome, ProgressEvent

logger = logging.getLogger(__name__)

DURATION_RE = re.compile(r"Duration:\s*(\d+):(\d+):(\d+(?:\.\d+)?)")
TIME_RE = re.compile(r"time=\s*(-?\d+):(\d+):(\d+(?:\.\d+)?)")
LINE_SPLIT_RE = re.compile(r"[\r\n]")

# How much of stderr is kept as the failure cause
STDERR_TAIL_LINES = 40
READ_CHUNK_SIZE = 4096


def _to_seconds(hours: str, minutes: str, seconds: str) -> float:
    sign = -1 if hours.startswith("-") else 1
    return sign * (abs(int(hours)) * 3600 + int(minutes) * 60 + float(seconds))


async def _iter_lines(stream: asyncio.StreamReader) -> AsyncIterator[str]:
    """
    Yields stderr lines. ffmpeg rewrites its stats line with bare carriage
    returns, so both \\r and \\n terminate a line.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            buffer += decoder.decode(b"", final=True)
            break
        buffer += decoder.decode(chunk)
        *complete, buffer = LINE_SPLIT_RE.split(buffer)
        for line in complete:
            if line.strip():
                yield line
    if buffer.strip():
        yield buffer


class OutcomeLatch:
    """
    Single-assignment holder for a run's terminal outcome.
    The first resolve() wins; later ones are ignored rather than raising.
    """

    def __init__(self):
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def resolved(self) -> bool:
        return self._future.done()

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._future.result() if self._future.done() else None

    def resolve(self, outcome: Outcome) -> bool:
        if self._future.done():
            logger.debug(f"Ignoring terminal signal after resolution: {outcome}")
            return False
        self._future.set_result(outcome)
        return True

    async def wait(self) -> Outcome:
        # Shielded so a timeout around wait() leaves the latch usable
        return await asyncio.shield(self._future)


class FFmpegSupervisor(IProcessSupervisor):
    """
    Concrete implementation of IProcessSupervisor using asyncio subprocesses.

    Bridges the encoder's lifecycle (start, progress lines on stderr, exit)
    into one awaitable Outcome. Progress is telemetry only: it may be missing,
    repeated or out of order without affecting the result.
    """

    def __init__(
        self,
        on_start: Optional[Callable[[str], None]] = None,
        on_progress: Optional[Callable[[ProgressEvent], None]] = None,
        kill_grace_seconds: Optional[float] = None,
    ):
        self.on_start = on_start
        self.on_progress = on_progress
        self.kill_grace_seconds = (
            settings.FFMPEG_KILL_GRACE_SECONDS if kill_grace_seconds is None else kill_grace_seconds
        )

    async def run(self, invocation: Invocation, timeout: Optional[float] = None) -> Outcome:
        latch = OutcomeLatch()

        try:
            process = await asyncio.create_subprocess_exec(
                *invocation.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Failed to start FFmpeg: {e}")
            latch.resolve(Failed(cause=f"Failed to start {invocation.binary}: {e}"))
            return latch.outcome

        self._emit_start(invocation.command_line)
        watcher = asyncio.create_task(self._watch(process, latch))

        try:
            await asyncio.wait_for(latch.wait(), timeout)
        except asyncio.TimeoutError:
            logger.error(f"FFmpeg exceeded {timeout}s, terminating pid {process.pid}")
            latch.resolve(Failed(cause=f"Encoder timed out after {timeout}s"))
            await self._terminate(process)
            watcher.cancel()
            await asyncio.gather(watcher, return_exceptions=True)
        except asyncio.CancelledError:
            # Abandoned by the caller: don't leave an orphaned encoder behind
            logger.warning(f"FFmpeg run cancelled, killing pid {process.pid}")
            self._kill(process)
            watcher.cancel()
            raise
        else:
            await watcher

        return latch.outcome

    async def _watch(self, process: asyncio.subprocess.Process, latch: OutcomeLatch) -> None:
        tail = deque(maxlen=STDERR_TAIL_LINES)
        duration: Optional[float] = None

        try:
            async for line in _iter_lines(process.stderr):
                tail.append(line)
                if duration is None:
                    match = DURATION_RE.search(line)
                    if match:
                        duration = _to_seconds(*match.groups())
                match = TIME_RE.search(line)
                if match:
                    self._emit_progress(line, _to_seconds(*match.groups()), duration)
        except (OSError, ValueError) as e:
            logger.error(f"FFmpeg stderr stream failed: {e}")
            latch.resolve(Failed(cause=f"Encoder output stream error: {e}"))
            # Nothing drains stderr any more, so a chatty encoder would block on it
            await self._terminate(process)

        return_code = await process.wait()
        if return_code == 0:
            latch.resolve(Completed(return_code=0))
            return

        cause = "\n".join(tail).strip() or f"Encoder exited with code {return_code}"
        logger.error(f"FFmpeg exited with code {return_code}. STDERR: {cause}")
        latch.resolve(Failed(cause=cause, return_code=return_code))

    def _emit_start(self, command_line: str) -> None:
        logger.info(f"Executing FFmpeg: {command_line}")
        if self.on_start:
            try:
                self.on_start(command_line)
            except Exception as e:
                logger.warning(f"Start listener error: {e}")

    def _emit_progress(self, line: str, time_seconds: float, duration: Optional[float]) -> None:
        percent = (time_seconds / duration) * 100 if duration else None
        event = ProgressEvent(time_seconds=time_seconds, percent=percent, raw=line)
        if percent is not None:
            logger.debug(f"FFmpeg progress: {percent:.1f}%")
        if self.on_progress:
            try:
                self.on_progress(event)
            except Exception as e:
                logger.warning(f"Progress listener error: {e}")

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), self.kill_grace_seconds)
        except asyncio.TimeoutError:
            logger.error(f"FFmpeg pid {process.pid} ignored SIGTERM, killing")
            self._kill(process)
            await process.wait()

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
