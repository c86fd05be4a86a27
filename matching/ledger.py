"""
Confirmation ledger: one availability row per (job, freelancer).

Rows are upserted by freelancers (in-window confirm or post-window open-job
accept) and flipped to ``declined`` by the owning client. Freelancers never
coordinate with each other here; any number of them may be ``available`` for
the same job at once.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.errors import StateTransitionError
from storage.database import FreelancerProfile, JobConfirmation, Profile

logger = logging.getLogger(__name__)

AVAILABLE = "available"
DECLINED = "declined"


def get_confirmation(
    session: Session, job_id: str, freelancer_id: str
) -> Optional[JobConfirmation]:
    return (
        session.query(JobConfirmation)
        .filter_by(job_id=job_id, freelancer_id=freelancer_id)
        .one_or_none()
    )


def _upsert(session: Session, job_id: str, freelancer_id: str, **fields) -> JobConfirmation:
    confirmation = get_confirmation(session, job_id, freelancer_id)

    if confirmation is None:
        try:
            with session.begin_nested():
                confirmation = JobConfirmation(
                    job_id=job_id, freelancer_id=freelancer_id, **fields
                )
                session.add(confirmation)
            return confirmation
        except IntegrityError:
            # A concurrent request for the same freelancer inserted the row first
            logger.info(
                f"Confirmation for freelancer {freelancer_id} on job {job_id} "
                f"already exists, updating it"
            )
            confirmation = get_confirmation(session, job_id, freelancer_id)

    if confirmation.status == DECLINED:
        raise StateTransitionError("Client has declined your availability for this job")

    for key, value in fields.items():
        setattr(confirmation, key, value)
    session.flush()
    return confirmation


def record_confirmation(session: Session, job_id: str, freelancer_id: str) -> JobConfirmation:
    """Mark a freelancer available for a job during the confirmation window."""
    confirmation = _upsert(session, job_id, freelancer_id, status=AVAILABLE)
    logger.info(f"Freelancer {freelancer_id} confirmed job {job_id}")
    return confirmation


def record_open_job_acceptance(
    session: Session, job_id: str, freelancer_id: str, note: str
) -> JobConfirmation:
    """Mark a freelancer available for a job whose window has closed."""
    confirmation = _upsert(
        session,
        job_id,
        freelancer_id,
        status=AVAILABLE,
        note=note,
        is_open_job_accepted=True,
    )
    logger.info(f"Freelancer {freelancer_id} accepted open job {job_id}")
    return confirmation


def decline(session: Session, job_id: str, freelancer_id: str) -> int:
    """
    Flip an available confirmation to declined.

    Returns:
        Number of rows updated; zero when there was nothing to decline
    """
    updated = (
        session.query(JobConfirmation)
        .filter_by(job_id=job_id, freelancer_id=freelancer_id, status=AVAILABLE)
        .update({"status": DECLINED}, synchronize_session=False)
    )
    logger.info(
        f"Declined freelancer {freelancer_id} for job {job_id} ({updated} rows)"
    )
    return updated


def has_available_confirmation(session: Session, job_id: str, freelancer_id: str) -> bool:
    confirmation = get_confirmation(session, job_id, freelancer_id)
    return confirmation is not None and confirmation.status == AVAILABLE


def _freelancer_fields(fp: Optional[FreelancerProfile]) -> Optional[Dict]:
    if fp is None:
        return None
    return {
        "available_now": fp.available_now,
        "has_first_aid": fp.has_first_aid,
        "newborn_experience": fp.newborn_experience,
        "special_needs_experience": fp.special_needs_experience,
        "max_children": fp.max_children,
        "hourly_rate_min": fp.hourly_rate_min,
        "hourly_rate_max": fp.hourly_rate_max,
        "languages": fp.languages or [],
    }


def list_available(session: Session, job_id: str) -> List[Dict]:
    """
    List available confirmations for a job with profile data for review cards.

    Returns:
        One dictionary per confirmed freelancer
    """
    confirmations = (
        session.query(JobConfirmation)
        .filter_by(job_id=job_id, status=AVAILABLE)
        .order_by(JobConfirmation.created_at, JobConfirmation.freelancer_id)
        .all()
    )
    if not confirmations:
        return []

    ids = [c.freelancer_id for c in confirmations]
    profiles = {
        profile.id: (profile, fp)
        for profile, fp in session.query(Profile, FreelancerProfile)
        .outerjoin(FreelancerProfile, FreelancerProfile.id == Profile.id)
        .filter(Profile.id.in_(ids))
        .all()
    }

    freelancers = []
    for confirmation in confirmations:
        if confirmation.freelancer_id not in profiles:
            logger.warning(
                f"Confirmation for job {job_id} references missing profile "
                f"{confirmation.freelancer_id}"
            )
            continue
        profile, fp = profiles[confirmation.freelancer_id]
        freelancers.append(
            {
                "id": profile.id,
                "full_name": profile.full_name,
                "photo_url": profile.photo_url,
                "city": profile.city,
                "freelancer_profile": _freelancer_fields(fp),
                "confirmation_note": confirmation.note,
                "is_open_job_accepted": bool(confirmation.is_open_job_accepted),
            }
        )
    return freelancers


def clear_confirmations(session: Session, job_id: str) -> int:
    result = session.execute(
        delete(JobConfirmation).where(JobConfirmation.job_id == job_id)
    )
    return result.rowcount or 0
