"""API models for the nanny matching service."""

from .schemas import (
    ConfirmationCountResponse,
    ConfirmedFreelancer,
    ConfirmedListResponse,
    CreateJobRequest,
    CreateJobResponse,
    FreelancerChoice,
    FreelancerProfileOut,
    JobOut,
    JobResponse,
    JobSummary,
    NotificationListResponse,
    NotificationOut,
    OkResponse,
    OpenJobAcceptRequest,
    RestartJobResponse,
    SelectResponse,
)

__all__ = [
    "CreateJobRequest",
    "CreateJobResponse",
    "RestartJobResponse",
    "OpenJobAcceptRequest",
    "FreelancerChoice",
    "OkResponse",
    "FreelancerProfileOut",
    "ConfirmedFreelancer",
    "ConfirmedListResponse",
    "SelectResponse",
    "JobOut",
    "JobResponse",
    "JobSummary",
    "NotificationOut",
    "NotificationListResponse",
    "ConfirmationCountResponse",
]
