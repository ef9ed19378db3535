"""Job queue backed by the jobs table. Used for CRM sync after lead capture."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from app.db.enums import JobStatus, JobType
from app.db.models import Job

# Job.last_error column width
MAX_ERROR_LENGTH = 2000


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def enqueue_job(
    db: Session,
    job_type: JobType,
    payload: dict,
    org_id: UUID | None = None,
    idempotency_key: str | None = None,
    max_attempts: int = 1,
    run_at: datetime | None = None,
) -> Job:
    """
    Queue a job and commit.

    A job already queued under the same idempotency key is returned as is,
    so a repeated enqueue never produces a second side effect.
    """
    if idempotency_key:
        existing = get_job_by_key(db, idempotency_key)
        if existing:
            return existing

    job = Job(
        organization_id=org_id,
        job_type=job_type.value,
        payload=payload,
        run_at=run_at or _now_utc(),
        status=JobStatus.PENDING.value,
        max_attempts=max_attempts,
        idempotency_key=idempotency_key,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def get_job_by_key(db: Session, idempotency_key: str) -> Job | None:
    return db.query(Job).filter(Job.idempotency_key == idempotency_key).first()


def claim_pending_jobs(db: Session, limit: int = 10) -> list[Job]:
    """
    Take due pending jobs and mark them running in one commit.

    The attempt is counted before any handler runs. A worker that dies
    mid-handler leaves the job in running rather than replaying it.
    """
    jobs = (
        db.query(Job)
        .filter(Job.status == JobStatus.PENDING.value, Job.run_at <= _now_utc())
        .order_by(Job.run_at)
        .limit(limit)
        .all()
    )
    for job in jobs:
        job.status = JobStatus.RUNNING.value
        job.attempts += 1
    if jobs:
        db.commit()
    return jobs


def mark_completed(db: Session, job: Job) -> Job:
    job.status = JobStatus.COMPLETED.value
    job.completed_at = _now_utc()
    job.last_error = None
    db.commit()
    db.refresh(job)
    return job


def mark_failed(db: Session, job: Job, error: str) -> Job:
    """Record the error. Back to pending only while attempts remain."""
    job.last_error = error[:MAX_ERROR_LENGTH]
    if job.attempts < job.max_attempts:
        job.status = JobStatus.PENDING.value
    else:
        job.status = JobStatus.FAILED.value
        job.completed_at = _now_utc()
    db.commit()
    db.refresh(job)
    return job
