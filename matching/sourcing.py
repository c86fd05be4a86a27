"""
Candidate sourcing for a job request.

Pulls freelancers in the job's city who are available now, runs them through
the eligibility filter and caps the result to a batch size.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.errors import StoreError
from storage.database import FreelancerProfile, JobRequest, Profile

from .eligibility import CandidateSnapshot, JobCriteria, filter_eligible

logger = logging.getLogger(__name__)

DEFAULT_BATCH_LIMIT = 30


def criteria_for(job: JobRequest) -> JobCriteria:
    return JobCriteria(
        children_count=job.children_count,
        requirements=job.requirements or [],
        budget_min=job.budget_min,
        budget_max=job.budget_max,
        languages_pref=job.languages_pref or [],
    )


def load_candidate_pool(session: Session, city: str) -> List[CandidateSnapshot]:
    """
    Load freelancer snapshots for a city, limited to those available now.

    City matching is exact string equality.

    Raises:
        StoreError: If the query fails
    """
    try:
        rows = (
            session.query(Profile, FreelancerProfile)
            .join(FreelancerProfile, FreelancerProfile.id == Profile.id)
            .filter(
                Profile.role == "freelancer",
                Profile.city == city,
                FreelancerProfile.available_now.is_(True),
            )
            .all()
        )
    except SQLAlchemyError as e:
        raise StoreError(f"Candidate query failed: {e}")

    return [
        CandidateSnapshot(
            id=profile.id,
            city=profile.city,
            available_now=fp.available_now,
            has_first_aid=fp.has_first_aid,
            newborn_experience=fp.newborn_experience,
            special_needs_experience=fp.special_needs_experience,
            max_children=fp.max_children,
            hourly_rate_min=fp.hourly_rate_min,
            hourly_rate_max=fp.hourly_rate_max,
            languages=fp.languages or [],
        )
        for profile, fp in rows
    ]


def source_candidates(
    session: Session, job: JobRequest, limit: int = DEFAULT_BATCH_LIMIT
) -> List[str]:
    """
    Find eligible freelancer IDs for a job.

    Args:
        session: Open database session
        job: Job request to source candidates for
        limit: Maximum number of candidates to return

    Returns:
        Eligible freelancer IDs sorted ascending and capped to ``limit``
    """
    pool = load_candidate_pool(session, job.location_city)
    eligible = sorted(filter_eligible(criteria_for(job), pool))

    logger.info(
        f"Sourced {len(eligible)} eligible candidates out of {len(pool)} "
        f"for job {job.id}"
    )

    if len(eligible) > limit:
        logger.info(f"Capping candidates for job {job.id} to {limit}")
    return eligible[:limit]
