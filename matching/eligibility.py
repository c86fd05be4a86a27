"""
Hard-constraint eligibility filter.

Given a job's matching criteria and a pool of freelancer snapshots that is
already scoped to the job's city and to freelancers available now, keep the
candidates that satisfy capacity, capability, budget and language rules.
"""

import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# Job requirement -> freelancer capability flag
REQUIREMENT_FLAGS = {
    "first_aid": "has_first_aid",
    "newborn": "newborn_experience",
    "special_needs": "special_needs_experience",
}


class JobCriteria(BaseModel):
    """Matching-relevant view of a job request."""

    model_config = ConfigDict(frozen=True)

    children_count: int
    requirements: List[str] = Field(default_factory=list)
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None
    languages_pref: List[str] = Field(default_factory=list)


class CandidateSnapshot(BaseModel):
    """Read-only projection of a freelancer taken at sourcing time."""

    model_config = ConfigDict(frozen=True)

    id: str
    city: Optional[str] = None
    available_now: bool = True
    has_first_aid: bool = False
    newborn_experience: bool = False
    special_needs_experience: bool = False
    max_children: int = 0
    hourly_rate_min: Optional[int] = None
    hourly_rate_max: Optional[int] = None
    languages: List[str] = Field(default_factory=list)


def rejection_reason(criteria: JobCriteria, candidate: CandidateSnapshot) -> Optional[str]:
    """
    Return why a candidate fails the job's hard constraints.

    Args:
        criteria: Job matching criteria
        candidate: Freelancer snapshot

    Returns:
        A short reason string, or None if the candidate is eligible
    """
    if candidate.max_children < criteria.children_count:
        return f"max_children {candidate.max_children} < {criteria.children_count}"

    for requirement in criteria.requirements:
        flag = REQUIREMENT_FLAGS.get(requirement)
        if flag and not getattr(candidate, flag):
            return f"missing {flag}"

    # Unset bounds on either side are unbounded
    if (
        criteria.budget_min is not None
        and candidate.hourly_rate_max is not None
        and candidate.hourly_rate_max < criteria.budget_min
    ):
        return f"rate_max {candidate.hourly_rate_max} < budget_min {criteria.budget_min}"
    if (
        criteria.budget_max is not None
        and candidate.hourly_rate_min is not None
        and candidate.hourly_rate_min > criteria.budget_max
    ):
        return f"rate_min {candidate.hourly_rate_min} > budget_max {criteria.budget_max}"

    if criteria.languages_pref:
        if not set(criteria.languages_pref) & set(candidate.languages or []):
            return "language mismatch"

    return None


def filter_eligible(
    criteria: JobCriteria, pool: Iterable[CandidateSnapshot]
) -> List[str]:
    """
    Filter a candidate pool down to the IDs eligible for a job.

    Args:
        criteria: Job matching criteria
        pool: City- and availability-scoped candidate snapshots

    Returns:
        IDs of eligible candidates, in pool order
    """
    eligible = []
    for candidate in pool:
        reason = rejection_reason(criteria, candidate)
        if reason:
            logger.debug(f"Skipping candidate {candidate.id}: {reason}")
            continue
        eligible.append(candidate.id)

    return eligible
