import logging
from typing import Optional
from uuid import UUID
from datetime import datetime, timezone
from mediaconv.core.database.connection import SessionLocal
from ..models import JobModel
from ..types import JobType, JobStatus

logger = logging.getLogger(__name__)


class JobManager:
    """
    Public API for the job ledger.
    Tracks the lifecycle of each conversion; it never runs the conversion itself.
    """

    def submit_job(self, job_type: JobType, payload: Optional[dict] = None) -> UUID:
        """Create a Job Record in PENDING state."""
        with SessionLocal() as db:
            job = JobModel(job_type=job_type, payload=payload or {})
            db.add(job)
            db.commit()
            db.refresh(job)
            logger.info(f"Job Submitted: {job.id} [{job_type.value}]")
            return job.id

    def mark_processing(self, job_id: UUID) -> None:
        with SessionLocal() as db:
            job = self._require(db, job_id)
            job.status = JobStatus.PROCESSING
            job.started_at = datetime.now(timezone.utc)
            db.commit()

    def mark_completed(self, job_id: UUID, result_meta: dict) -> None:
        with SessionLocal() as db:
            job = self._require(db, job_id)
            job.status = JobStatus.COMPLETED
            job.result_meta = result_meta
            job.finished_at = datetime.now(timezone.utc)
            db.commit()
            logger.info(f"Job {job_id} Completed successfully.")

    def mark_failed(self, job_id: UUID, error_message: str) -> None:
        with SessionLocal() as db:
            job = self._require(db, job_id)
            job.status = JobStatus.FAILED
            job.error_message = error_message
            job.finished_at = datetime.now(timezone.utc)
            db.commit()
            logger.error(f"Job {job_id} Failed: {error_message}")

    def get_job(self, job_id: UUID) -> Optional[dict]:
        with SessionLocal() as db:
            job = db.get(JobModel, job_id)
            return job.to_dict() if job else None

    @staticmethod
    def _require(db, job_id: UUID) -> JobModel:
        job = db.get(JobModel, job_id)
        if not job:
            raise ValueError(f"Job {job_id} not found.")
        return job
