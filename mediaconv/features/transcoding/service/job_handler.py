import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from mediaconv.core.jobs.service.manager import JobManager
from mediaconv.core.jobs.types import JobType

from ..domain.exceptions import MediaConvError
from ..domain.models import TranscodeOptions
from . import api

logger = logging.getLogger(__name__)


@dataclass
class TranscodeResult:
    """
    The result of a successful conversion.
    """
    job_id: UUID
    content: bytes
    output_format: str


class TranscodeHandler:
    """
    Runs a conversion and keeps its job ledger entry in step.
    Ledger writes go through a worker thread so the event loop never waits on the database.
    """

    def __init__(self, job_manager: Optional[JobManager] = None):
        self.jobs = job_manager or JobManager()

    async def handle(self, job_type: JobType, input_bytes: bytes, options: TranscodeOptions) -> TranscodeResult:
        # Reject before anything is recorded or staged
        api.validate_options(options)

        job_id = await asyncio.to_thread(self.jobs.submit_job, job_type, options.to_payload())
        await asyncio.to_thread(self.jobs.mark_processing, job_id)

        logger.info(f"Processing {job_type.value} job {job_id} ({len(input_bytes)} bytes in)")

        try:
            output = await api.transcode(input_bytes, options)
        except MediaConvError as e:
            await asyncio.to_thread(self.jobs.mark_failed, job_id, str(e))
            raise
        except asyncio.CancelledError:
            # The task is already cancelled; record without awaiting
            self._record_cancellation(job_id)
            raise
        except Exception as e:
            logger.error(f"Job {job_id} failed unexpectedly: {e}")
            await asyncio.to_thread(self.jobs.mark_failed, job_id, f"Unexpected error: {e}")
            raise

        await asyncio.to_thread(
            self.jobs.mark_completed,
            job_id,
            {
                "output_format": options.output_format,
                "input_size_bytes": len(input_bytes),
                "output_size_bytes": len(output),
            },
        )
        return TranscodeResult(job_id=job_id, content=output, output_format=options.output_format)

    def _record_cancellation(self, job_id: UUID) -> None:
        try:
            self.jobs.mark_failed(job_id, "Cancelled before completion")
        except Exception as e:
            logger.error(f"Could not record cancellation of job {job_id}: {e}")
