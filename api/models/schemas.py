"""
Data models for the nanny matching service.

This module contains Pydantic models for job requests, confirmations,
selections, and the responses returned by the jobs API.
"""

from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from api.config import MAX_CONFIRM_WINDOW_SECONDS, MIN_CONFIRM_WINDOW_SECONDS

Requirement = Literal["first_aid", "newborn", "special_needs"]


def _ensure_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]


class CreateJobRequest(BaseModel):
    """Request model for creating a job and starting the match."""

    care_type: str = Field(..., min_length=1, description="Type of care requested")
    children_count: int = Field(..., ge=1, description="Number of children")
    children_age_group: str = Field(..., description="Children's age group")
    location_city: str = Field(..., min_length=1, description="City of the job")
    start_at: Optional[datetime] = Field(None, description="Requested start time")
    shift_hours: Optional[str] = Field(None, description="Requested shift hours")
    languages_pref: List[str] = Field(
        default_factory=list, description="Preferred languages, empty for any"
    )
    requirements: List[Requirement] = Field(
        default_factory=list, description="Required freelancer capabilities"
    )
    budget_min: Optional[int] = Field(None, ge=0, description="Minimum hourly budget")
    budget_max: Optional[int] = Field(None, ge=0, description="Maximum hourly budget")
    notes: Optional[str] = Field(None, description="Free-text notes for freelancers")
    confirm_window_seconds: Optional[int] = Field(
        None,
        ge=MIN_CONFIRM_WINDOW_SECONDS,
        le=MAX_CONFIRM_WINDOW_SECONDS,
        description="Length of the confirmation window in seconds",
    )

    @model_validator(mode="after")
    def budget_range_ordered(self) -> "CreateJobRequest":
        if (
            self.budget_min is not None
            and self.budget_max is not None
            and self.budget_min > self.budget_max
        ):
            raise ValueError("budget_min must not exceed budget_max")
        return self


class CreateJobResponse(BaseModel):
    job_id: str = Field(..., description="Identifier of the new job")
    confirm_ends_at: UtcDatetime = Field(..., description="End of the confirmation window")


class RestartJobResponse(CreateJobResponse):
    notifications_sent: int = Field(..., description="Candidates notified by the restart")


class OpenJobAcceptRequest(BaseModel):
    """Request model for accepting a job after its window closed."""

    note: str = Field(..., min_length=1, max_length=500, description="Note to the client")


class FreelancerChoice(BaseModel):
    """Request body naming a freelancer for select or decline."""

    freelancer_id: str = Field(..., min_length=1, description="Freelancer identifier")


class OkResponse(BaseModel):
    ok: bool = True


class FreelancerProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    available_now: bool
    has_first_aid: bool
    newborn_experience: bool
    special_needs_experience: bool
    max_children: int
    hourly_rate_min: Optional[int] = None
    hourly_rate_max: Optional[int] = None
    languages: List[str] = Field(default_factory=list)


class ConfirmedFreelancer(BaseModel):
    """A freelancer who confirmed availability, as shown to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: Optional[str] = None
    photo_url: Optional[str] = None
    city: Optional[str] = None
    freelancer_profile: Optional[FreelancerProfileOut] = None
    confirmation_note: Optional[str] = None
    is_open_job_accepted: bool = False


class ConfirmedListResponse(BaseModel):
    freelancers: List[ConfirmedFreelancer] = Field(default_factory=list)
    confirm_ends_at: Optional[UtcDatetime] = None


class SelectResponse(BaseModel):
    conversation_id: str


class JobOut(BaseModel):
    """Full job request as returned to its participants."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    status: str
    stage: str
    care_type: str
    children_count: int
    children_age_group: str
    location_city: str
    start_at: Optional[UtcDatetime] = None
    shift_hours: Optional[str] = None
    languages_pref: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None
    notes: Optional[str] = None
    confirm_window_seconds: int
    confirm_starts_at: Optional[UtcDatetime] = None
    confirm_ends_at: Optional[UtcDatetime] = None
    selected_freelancer_id: Optional[str] = None
    locked_at: Optional[UtcDatetime] = None
    offered_hourly_rate: Optional[int] = None
    price_offer_status: Optional[str] = None
    created_at: UtcDatetime


class JobResponse(BaseModel):
    job: JobOut


class JobSummary(BaseModel):
    """Job fields shown on a freelancer's notification card."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    care_type: str
    children_count: int
    children_age_group: str
    location_city: str
    shift_hours: Optional[str] = None
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None
    requirements: List[str] = Field(default_factory=list)
    confirm_ends_at: Optional[UtcDatetime] = None


class NotificationOut(BaseModel):
    id: str
    job_id: str
    status: str
    created_at: UtcDatetime
    job: JobSummary
    is_confirmed: bool = False
    is_declined: bool = False


class NotificationListResponse(BaseModel):
    notifications: List[NotificationOut] = Field(default_factory=list)


class ConfirmationCountResponse(BaseModel):
    count: int = Field(..., description="Available confirmations across waiting jobs")
