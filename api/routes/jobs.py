"""
Job request endpoints.

This module provides endpoints for creating jobs, confirming availability,
reviewing confirmations, selecting a freelancer and restarting a search.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import (
    CurrentUser,
    get_current_user,
    require_client,
    require_freelancer,
)
from api.errors import NannyMatchError
from api.models import (
    ConfirmedListResponse,
    CreateJobRequest,
    CreateJobResponse,
    FreelancerChoice,
    JobResponse,
    OkResponse,
    OpenJobAcceptRequest,
    RestartJobResponse,
    SelectResponse,
)
from api.services.job_service import job_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", response_model=CreateJobResponse)
def create_job(request: CreateJobRequest, user: CurrentUser = Depends(require_client)):
    """
    Create a job, notify matching freelancers and open the confirmation window.

    Args:
        request: Job criteria and confirmation window length

    Returns:
        CreateJobResponse with the job ID and window end

    Raises:
        HTTPException: If matching or notification fails
    """
    try:
        job_id, ends = job_service.create_job(user.id, request)
        return CreateJobResponse(job_id=job_id, confirm_ends_at=ends)

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Job creation failed: {e}")
        raise HTTPException(status_code=500, detail=f"Job creation failed: {str(e)}")


@router.post("/{job_id}/notifications/{notification_id}/open", response_model=OkResponse)
def open_notification(
    job_id: str,
    notification_id: str,
    user: CurrentUser = Depends(require_freelancer),
):
    """Mark a notification as opened by its freelancer."""
    try:
        job_service.open_notification(user.id, job_id, notification_id)
        return OkResponse()

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Opening notification {notification_id} failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{job_id}/confirm", response_model=OkResponse)
def confirm_availability(job_id: str, user: CurrentUser = Depends(require_freelancer)):
    """
    Confirm a freelancer's availability while the window is open.

    Raises:
        HTTPException: 400 once the window has ended or the job is assigned
    """
    try:
        job_service.confirm(user.id, job_id)
        return OkResponse()

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Confirmation failed for job {job_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{job_id}/accept-open-job", response_model=OkResponse)
def accept_open_job(
    job_id: str,
    request: OpenJobAcceptRequest,
    user: CurrentUser = Depends(require_freelancer),
):
    """
    Accept a job whose confirmation window has closed, with a note to the client.

    Raises:
        HTTPException: 400 while the window is open or once the job is assigned
    """
    try:
        job_service.accept_open_job(user.id, job_id, request.note)
        return OkResponse()

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Open job acceptance failed for job {job_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{job_id}/confirmed", response_model=ConfirmedListResponse)
def list_confirmed(job_id: str, user: CurrentUser = Depends(require_client)):
    """List freelancers who are available for the caller's job."""
    try:
        freelancers, ends = job_service.list_confirmed(user.id, job_id)
        return ConfirmedListResponse(freelancers=freelancers, confirm_ends_at=ends)

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Listing confirmations failed for job {job_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{job_id}/select", response_model=SelectResponse)
def select_freelancer(
    job_id: str,
    request: FreelancerChoice,
    user: CurrentUser = Depends(require_client),
):
    """
    Lock the job to a confirmed freelancer and open a conversation.

    Returns:
        SelectResponse with the conversation ID

    Raises:
        HTTPException: 404 if not found, 400 if the freelancer has not
            confirmed, 409 if another selection won
    """
    try:
        logger.info(f"Selecting freelancer {request.freelancer_id} for job {job_id}")
        conversation_id = job_service.select_freelancer(
            user.id, job_id, request.freelancer_id
        )
        return SelectResponse(conversation_id=conversation_id)

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Selection failed for job {job_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Selection failed: {str(e)}")


@router.post("/{job_id}/decline", response_model=OkResponse)
def decline_freelancer(
    job_id: str,
    request: FreelancerChoice,
    user: CurrentUser = Depends(require_client),
):
    """Decline a freelancer's confirmation for the caller's job."""
    try:
        job_service.decline(user.id, job_id, request.freelancer_id)
        return OkResponse()

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Decline failed for job {job_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{job_id}/restart", response_model=RestartJobResponse)
def restart_job(job_id: str, user: CurrentUser = Depends(require_client)):
    """
    Clear the current round and notify matching freelancers again.

    Raises:
        HTTPException: 400 if the job is assigned or completed
    """
    try:
        job_id, ends, sent = job_service.restart(user.id, job_id)
        return RestartJobResponse(
            job_id=job_id, confirm_ends_at=ends, notifications_sent=sent
        )

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Restart failed for job {job_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Restart failed: {str(e)}")


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: str, user: CurrentUser = Depends(get_current_user)):
    """Fetch a job for its client or its selected freelancer."""
    try:
        return JobResponse(job=job_service.get_job(user.id, job_id))

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Fetching job {job_id} failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
