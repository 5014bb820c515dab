import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, JSON, Uuid
from mediaconv.core.database.base import Base
from .types import JobType, JobStatus


def utc_now():
    return datetime.now(timezone.utc)


class JobModel(Base):
    """
    One row per conversion request.
    The pipeline itself is stateless; this is an audit trail kept by the service layer.
    """
    __tablename__ = "jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    job_type = Column(SQLEnum(JobType), nullable=False)
    status = Column(SQLEnum(JobStatus), default=JobStatus.PENDING, nullable=False, index=True)

    payload = Column(JSON, default=dict)      # Transcode options as submitted
    result_meta = Column(JSON, default=dict)  # Output format, size in bytes

    created_at = Column(DateTime(timezone=True), default=utc_now)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    error_message = Column(String, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "job_type": self.job_type.value,
            "status": self.status.value,
            "payload": self.payload or {},
            "result_meta": self.result_meta or {},
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
