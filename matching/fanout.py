"""Notification fan-out: one pending notification per matched candidate."""

import logging
from typing import List

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.errors import StoreError
from storage.database import JobCandidateNotification

logger = logging.getLogger(__name__)


def fan_out(session: Session, job_id: str, candidate_ids: List[str]) -> int:
    """
    Insert a pending notification for every candidate in one batch.

    The rows are flushed inside the caller's transaction, so a failure rolls
    back the whole batch. Calling this twice without clearing first creates
    duplicates.

    Args:
        session: Open database session
        job_id: Job being announced
        candidate_ids: Freelancers to notify

    Returns:
        Number of notifications written

    Raises:
        StoreError: If the batch insert fails
    """
    if not candidate_ids:
        logger.info(f"No matching candidates for job {job_id}")
        return 0

    rows = [
        JobCandidateNotification(job_id=job_id, freelancer_id=fid, status="pending")
        for fid in candidate_ids
    ]
    try:
        session.add_all(rows)
        session.flush()
    except SQLAlchemyError as e:
        logger.error(f"Error creating notifications for job {job_id}: {e}")
        raise StoreError(f"Failed to create notifications: {e}")

    logger.info(f"Created {len(rows)} notifications for job {job_id}")
    return len(rows)


def clear_notifications(session: Session, job_id: str) -> int:
    """Delete every notification for a job and return how many were removed."""
    result = session.execute(
        delete(JobCandidateNotification).where(
            JobCandidateNotification.job_id == job_id
        )
    )
    return result.rowcount or 0
