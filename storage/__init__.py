"""Relational storage for the matching service."""

from .database import (
    Base,
    Conversation,
    Database,
    FreelancerProfile,
    JobCandidateNotification,
    JobConfirmation,
    JobRequest,
    Profile,
    db,
)

__all__ = [
    "Base",
    "Conversation",
    "Database",
    "FreelancerProfile",
    "JobCandidateNotification",
    "JobConfirmation",
    "JobRequest",
    "Profile",
    "db",
]
