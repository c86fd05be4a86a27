"""
Job matching service.

This module ties candidate sourcing, notification fan-out, the confirmation
window and the confirmation ledger together into the operations exposed by
the jobs API. Each operation reads the clock once and runs its writes inside
a database transaction.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from api.config import get_settings
from api.errors import (
    NannyMatchError,
    NotFound,
    PermissionDenied,
    SelectionConflict,
    StateTransitionError,
    StoreError,
)
from api.models import CreateJobRequest, JobOut, JobSummary
from matching import ledger, window
from matching.fanout import clear_notifications, fan_out
from matching.sourcing import source_candidates
from storage.database import (
    Conversation,
    JobCandidateNotification,
    JobConfirmation,
    JobRequest,
    db,
)

logger = logging.getLogger(__name__)

INITIAL_STAGE = "Request"
PRICE_OFFER_STAGE = "Price Offer"


def carry_over_stage(job: JobRequest) -> str:
    """Stage label for a freshly locked job, based on any price offer already sent."""
    if job.offered_hourly_rate and job.price_offer_status in ("pending", "accepted"):
        return PRICE_OFFER_STAGE
    return INITIAL_STAGE


class JobService:
    """
    Operations on job requests for clients and freelancers.

    Wraps the matching package for use in the API layer.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        batch_limit: Optional[int] = None,
        default_window_seconds: Optional[int] = None,
    ):
        settings = get_settings()
        self.clock = clock or window.utc_now
        self.batch_limit = batch_limit or settings.match_batch_limit
        self.default_window_seconds = (
            default_window_seconds or settings.default_confirm_window_seconds
        )

    @contextmanager
    def _transaction(self):
        try:
            with db.session_scope() as session:
                yield session
        except NannyMatchError:
            raise
        except SQLAlchemyError as e:
            raise StoreError(str(e))

    @staticmethod
    def _get_job(session, job_id: str) -> JobRequest:
        job = session.get(JobRequest, job_id)
        if job is None:
            raise NotFound("Job not found")
        return job

    @staticmethod
    def _get_owned_job(session, job_id: str, user_id: str) -> JobRequest:
        # Missing and not-owned read the same to the caller
        job = session.get(JobRequest, job_id)
        if job is None or job.client_id != user_id:
            raise NotFound("Not found")
        return job

    def create_job(self, user_id: str, request: CreateJobRequest) -> Tuple[str, datetime]:
        """
        Create a job, notify matching freelancers and open the confirmation window.

        The job row is committed as ``ready`` before matching starts; if
        sourcing or fan-out fails it stays ``ready`` until the client restarts it.

        Args:
            user_id: Creating client
            request: Validated job criteria

        Returns:
            Tuple of (job_id, confirm_ends_at)
        """
        fields = request.model_dump()
        fields["confirm_window_seconds"] = (
            request.confirm_window_seconds or self.default_window_seconds
        )

        with self._transaction() as session:
            job = JobRequest(
                client_id=user_id,
                status=window.READY,
                stage=INITIAL_STAGE,
                **fields,
            )
            session.add(job)
            session.flush()
            job_id = job.id

        logger.info(f"Created job {job_id} for client {user_id}, finding candidates")

        with self._transaction() as session:
            job = self._get_job(session, job_id)
            candidates = source_candidates(session, job, self.batch_limit)
            fan_out(session, job_id, candidates)
            ends = window.open_window(job, self.clock(), job.confirm_window_seconds)

        logger.info(f"Job {job_id} notifying {len(candidates)} candidates until {ends}")
        return job_id, ends

    def open_notification(self, user_id: str, job_id: str, notification_id: str) -> None:
        """Mark a freelancer's notification as opened."""
        now = self.clock()
        with self._transaction() as session:
            session.query(JobCandidateNotification).filter_by(
                id=notification_id, job_id=job_id, freelancer_id=user_id
            ).update(
                {"status": "opened", "opened_at": now}, synchronize_session=False
            )

    def confirm(self, user_id: str, job_id: str) -> None:
        """Record a freelancer's in-window confirmation."""
        now = self.clock()
        with self._transaction() as session:
            job = self._get_job(session, job_id)
            window.ensure_can_confirm(job, now)
            ledger.record_confirmation(session, job_id, user_id)

    def accept_open_job(self, user_id: str, job_id: str, note: str) -> None:
        """Record a freelancer's acceptance of a job whose window has closed."""
        now = self.clock()
        with self._transaction() as session:
            job = self._get_job(session, job_id)
            window.ensure_can_accept_open_job(job, now)
            ledger.record_open_job_acceptance(session, job_id, user_id, note)

    def list_confirmed(
        self, user_id: str, job_id: str
    ) -> Tuple[List[Dict], Optional[datetime]]:
        """
        List freelancers currently available for a client's job.

        Returns:
            Tuple of (freelancer dictionaries, confirm_ends_at)
        """
        with self._transaction() as session:
            job = self._get_owned_job(session, job_id, user_id)
            freelancers = ledger.list_available(session, job_id)
            return freelancers, window.as_utc(job.confirm_ends_at)

    def select_freelancer(self, user_id: str, job_id: str, freelancer_id: str) -> str:
        """
        Lock a job to one confirmed freelancer and open a conversation.

        Notification cleanup runs in a savepoint; if it fails the lock is kept.
        A failure creating the conversation rolls the whole selection back.

        Args:
            user_id: Owning client
            job_id: Job to lock
            freelancer_id: Freelancer being selected

        Returns:
            The new conversation ID

        Raises:
            NotFound: Job missing or not owned by the caller
            StateTransitionError: Freelancer has no available confirmation
            SelectionConflict: The job was locked by another selection
        """
        now = self.clock()
        with self._transaction() as session:
            job = self._get_owned_job(session, job_id, user_id)

            if not ledger.has_available_confirmation(session, job_id, freelancer_id):
                raise StateTransitionError(
                    "Freelancer has not confirmed availability for this job"
                )

            locked = (
                session.query(JobRequest)
                .filter(
                    JobRequest.id == job_id,
                    JobRequest.status.notin_(window.ASSIGNED_STATUSES),
                    JobRequest.selected_freelancer_id.is_(None),
                )
                .update(
                    {
                        "status": window.LOCKED,
                        "selected_freelancer_id": freelancer_id,
                        "locked_at": now,
                        "stage": carry_over_stage(job),
                    },
                    synchronize_session=False,
                )
            )
            if locked == 0:
                raise SelectionConflict("Job has already been assigned")

            try:
                with session.begin_nested():
                    removed = clear_notifications(session, job_id)
                logger.info(f"Removed {removed} notifications for locked job {job_id}")
            except SQLAlchemyError as e:
                logger.error(f"Error deleting notifications for job {job_id}: {e}")

            conversation = Conversation(
                job_id=job_id, client_id=user_id, freelancer_id=freelancer_id
            )
            session.add(conversation)
            session.flush()
            conversation_id = conversation.id

        logger.info(
            f"Job {job_id} locked to freelancer {freelancer_id}, "
            f"conversation {conversation_id}"
        )
        return conversation_id

    def decline(self, user_id: str, job_id: str, freelancer_id: str) -> None:
        """Decline a freelancer's confirmation. Declining nothing is not an error."""
        with self._transaction() as session:
            job = self._get_owned_job(session, job_id, user_id)
            window.ensure_can_decline(job)
            ledger.decline(session, job_id, freelancer_id)

    def restart(self, user_id: str, job_id: str) -> Tuple[str, datetime, int]:
        """
        Discard the current match round and run a fresh one.

        Returns:
            Tuple of (job_id, confirm_ends_at, notifications_sent)
        """
        now = self.clock()
        with self._transaction() as session:
            job = self._get_job(session, job_id)
            if job.client_id != user_id:
                raise PermissionDenied("Forbidden")
            window.ensure_can_restart(job)

            # Reopen only if no selection has locked the job since it was read
            fields = window.window_fields(now, job.confirm_window_seconds)
            fields["stage"] = INITIAL_STAGE
            reopened = (
                session.query(JobRequest)
                .filter(
                    JobRequest.id == job_id,
                    JobRequest.status.notin_(window.ASSIGNED_STATUSES),
                    JobRequest.selected_freelancer_id.is_(None),
                )
                .update(fields, synchronize_session=False)
            )
            if reopened == 0:
                raise StateTransitionError(
                    "Cannot restart a job that has been assigned or completed"
                )

            clear_notifications(session, job_id)
            ledger.clear_confirmations(session, job_id)

            logger.info(f"Restarting search for job {job_id}")
            candidates = source_candidates(session, job, self.batch_limit)
            sent = fan_out(session, job_id, candidates)

        return job_id, fields["confirm_ends_at"], sent

    def get_job(self, user_id: str, job_id: str) -> JobOut:
        """Fetch a job for its client or its selected freelancer."""
        with self._transaction() as session:
            job = self._get_job(session, job_id)
            if user_id not in (job.client_id, job.selected_freelancer_id):
                raise PermissionDenied("Forbidden")
            return JobOut.model_validate(job)

    def list_notifications(self, user_id: str) -> List[Dict]:
        """
        List a freelancer's pending and opened notifications, newest first.

        Each entry carries the job summary and whether the freelancer has
        confirmed or been declined for that job.
        """
        with self._transaction() as session:
            rows = (
                session.query(JobCandidateNotification, JobRequest)
                .join(JobRequest, JobRequest.id == JobCandidateNotification.job_id)
                .filter(
                    JobCandidateNotification.freelancer_id == user_id,
                    JobCandidateNotification.status.in_(("pending", "opened")),
                )
                .order_by(JobCandidateNotification.created_at.desc())
                .all()
            )
            statuses = dict(
                session.query(JobConfirmation.job_id, JobConfirmation.status)
                .filter(JobConfirmation.freelancer_id == user_id)
                .all()
            )

            return [
                {
                    "id": notification.id,
                    "job_id": notification.job_id,
                    "status": notification.status,
                    "created_at": notification.created_at,
                    "job": JobSummary.model_validate(job),
                    "is_confirmed": statuses.get(job.id) == ledger.AVAILABLE,
                    "is_declined": statuses.get(job.id) == ledger.DECLINED,
                }
                for notification, job in rows
            ]

    def count_waiting_confirmations(self, user_id: str) -> int:
        """Count available confirmations across a client's notifying jobs."""
        with self._transaction() as session:
            return (
                session.query(func.count(JobConfirmation.id))
                .join(JobRequest, JobRequest.id == JobConfirmation.job_id)
                .filter(
                    JobRequest.client_id == user_id,
                    JobRequest.status == window.NOTIFYING,
                    JobConfirmation.status == ledger.AVAILABLE,
                )
                .scalar()
                or 0
            )


# Global job service instance
job_service = JobService()
