"""Candidate matching and confirmation-window logic."""

from .eligibility import CandidateSnapshot, JobCriteria, filter_eligible
from .sourcing import source_candidates

__all__ = [
    "CandidateSnapshot",
    "JobCriteria",
    "filter_eligible",
    "source_candidates",
]
