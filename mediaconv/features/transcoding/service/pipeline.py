import asyncio
import logging
from typing import Optional
from mediaconv.core.config.settings import settings
from ..data.ffmpeg_command import FFmpegCommandBuilder
from ..data.ffmpeg_supervisor import FFmpegSupervisor
from ..data.temp_storage import TempFileManager
from ..domain.exceptions import ProcessingError, StagingError
from ..domain.interfaces import ICommandBuilder, IProcessSupervisor, ITempStorage
from ..domain.models import Failed, TranscodeOptions

logger = logging.getLogger(__name__)


class TranscodePipeline:
    """
    Runs one buffered transcode: stage input, build command, run encoder,
    read output. Both staged files are removed on every exit path.

    Instances hold no per-request state, so one pipeline can serve
    concurrent requests.
    """

    def __init__(
        self,
        storage: Optional[ITempStorage] = None,
        builder: Optional[ICommandBuilder] = None,
        supervisor: Optional[IProcessSupervisor] = None,
    ):
        # In a full DI framework, these would be injected.
        self.storage = storage or TempFileManager()
        self.builder = builder or FFmpegCommandBuilder()
        self.supervisor = supervisor or FFmpegSupervisor()

    async def process(self, input_bytes: bytes, options: TranscodeOptions, timeout: Optional[float] = None) -> bytes:
        """
        Returns the encoded output.

        Raises:
            StagingError: Writing the input or reading the output failed.
            ProcessingError: The encoder reported failure (or timed out).
        """
        if timeout is None:
            timeout = settings.FFMPEG_TIMEOUT_SECONDS

        with self.storage.staged(options.input_extension, options.output_extension) as staged:
            # 1. Stage the input
            try:
                await asyncio.to_thread(staged.input_path.write_bytes, input_bytes)
            except OSError as e:
                raise StagingError(f"Failed to write input: {e}", staged.input_path) from e

            # 2. Build & run
            invocation = self.builder.build(staged.input_path, staged.output_path, options)
            outcome = await self.supervisor.run(invocation, timeout=timeout)

            if isinstance(outcome, Failed):
                raise ProcessingError(outcome.cause, invocation.command_line, outcome.return_code)

            # 3. Collect the output
            try:
                output = await asyncio.to_thread(staged.output_path.read_bytes)
            except OSError as e:
                raise StagingError(f"Failed to read output: {e}", staged.output_path) from e

            if not output:
                raise StagingError("Encoder reported success but wrote no output", staged.output_path)

        logger.info(f"Transcoded {len(input_bytes)} bytes -> {len(output)} bytes ({options.output_format})")
        return output
