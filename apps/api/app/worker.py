"""
Background worker for processing scheduled jobs.

Usage:
    python -m app.worker

The worker polls for pending jobs and processes them.
For production, run this as a separate process (e.g., systemd service, Docker container).
"""

import asyncio
import logging
import os

from app.core.config import settings
from app.db.session import SessionLocal
from app.jobs.registry import resolve_job_handler
from app.services import job_service

logger = logging.getLogger(__name__)

# Worker configuration
POLL_INTERVAL_SECONDS = int(os.getenv("WORKER_POLL_INTERVAL", "10"))
BATCH_SIZE = int(os.getenv("WORKER_BATCH_SIZE", "10"))


async def process_job(db, job) -> None:
    """Process a single job based on its type."""
    logger.info(f"Processing job {job.id} (type={job.job_type}, attempt={job.attempts})")
    handler = resolve_job_handler(job.job_type)
    await handler(db, job)


async def run_once(db, batch_size: int = BATCH_SIZE) -> int:
    """
    Process one batch of due jobs. Returns the number of jobs picked up.

    Jobs are claimed as running before any handler runs, so a crash
    mid-handler never causes a silent re-run.
    """
    jobs = job_service.claim_pending_jobs(db, limit=batch_size)
    if jobs:
        logger.info(f"Claimed {len(jobs)} pending jobs")

    for job in jobs:
        try:
            await process_job(db, job)
        except Exception as e:
            db.rollback()
            job_service.mark_failed(db, job, f"{type(e).__name__}: {e}")
            logger.error("Job %s failed: %s", job.id, type(e).__name__)
            continue
        job_service.mark_completed(db, job)
        logger.info(f"Job {job.id} completed successfully")
    return len(jobs)


async def worker_loop() -> None:
    """Main worker loop - polls for and processes pending jobs."""
    logger.info(
        f"Worker starting (poll interval: {POLL_INTERVAL_SECONDS}s, batch size: {BATCH_SIZE})"
    )
    if not settings.is_hubspot_configured:
        logger.warning("HUBSPOT_ACCESS_TOKEN not set - CRM sync jobs will be skipped")

    while True:
        with SessionLocal() as db:
            try:
                await run_once(db)
            except Exception:
                logger.exception("Error in worker loop")
        await asyncio.sleep(POLL_INTERVAL_SECONDS)


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Worker stopped")


if __name__ == "__main__":
    main()
