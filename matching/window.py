"""
Confirmation window state for a job request.

The window is declarative: a start and end timestamp stored on the job and
compared against the request's own clock reading. Nothing reaps expired
windows; a job simply reads as closed once ``now`` passes ``confirm_ends_at``.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from api.errors import StateTransitionError
from storage.database import JobRequest

READY = "ready"
NOTIFYING = "notifying"
LOCKED = "locked"
ACTIVE = "active"
COMPLETED = "completed"

ASSIGNED_STATUSES = (LOCKED, ACTIVE, COMPLETED)

DEFAULT_WINDOW_SECONDS = 90


def utc_now() -> datetime:
    """Default clock; one reading is taken per request."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from stores without tz support."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def window_fields(now: datetime, seconds: int) -> Dict:
    """Column values for a job entering ``notifying`` with a fresh window."""
    return {
        "status": NOTIFYING,
        "confirm_starts_at": now,
        "confirm_ends_at": now + timedelta(seconds=seconds),
        "selected_freelancer_id": None,
        "locked_at": None,
    }


def open_window(job: JobRequest, now: datetime, seconds: int) -> datetime:
    """
    Move a job into ``notifying`` with a fresh window and no selection.

    Returns:
        The new window end
    """
    for key, value in window_fields(now, seconds).items():
        setattr(job, key, value)
    return job.confirm_ends_at


def is_window_open(job: JobRequest, now: datetime) -> bool:
    ends = as_utc(job.confirm_ends_at)
    return ends is not None and now <= ends


def is_assigned(job: JobRequest) -> bool:
    return job.status in ASSIGNED_STATUSES or job.selected_freelancer_id is not None


def ensure_can_confirm(job: JobRequest, now: datetime) -> None:
    if is_assigned(job):
        raise StateTransitionError("Job has already been assigned")
    if not is_window_open(job, now):
        raise StateTransitionError("Confirmation window ended")


def ensure_can_accept_open_job(job: JobRequest, now: datetime) -> None:
    if job.confirm_ends_at is None or is_window_open(job, now):
        raise StateTransitionError(
            "Confirmation window is still open. Use /confirm endpoint instead."
        )
    if is_assigned(job):
        raise StateTransitionError("Job has already been assigned")


def ensure_can_decline(job: JobRequest) -> None:
    if is_assigned(job):
        raise StateTransitionError("Job has already been assigned")


def ensure_can_restart(job: JobRequest) -> None:
    if job.status in ASSIGNED_STATUSES:
        raise StateTransitionError(
            "Cannot restart a job that has been assigned or completed"
        )
