"""
Freelancer notification feed and client confirmation counter.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import CurrentUser, require_client, require_freelancer
from api.errors import NannyMatchError
from api.models import ConfirmationCountResponse, NotificationListResponse
from api.services.job_service import job_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(user: CurrentUser = Depends(require_freelancer)):
    """
    List the caller's pending and opened job notifications, newest first.

    Returns:
        NotificationListResponse with job summaries and confirmation flags
    """
    try:
        return NotificationListResponse(
            notifications=job_service.list_notifications(user.id)
        )

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Listing notifications failed for {user.id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


counts_router = APIRouter(prefix="/confirmations", tags=["Notifications"])


@counts_router.get("/count", response_model=ConfirmationCountResponse)
def count_confirmations(user: CurrentUser = Depends(require_client)):
    """Count available confirmations across the caller's jobs that are still notifying."""
    try:
        return ConfirmationCountResponse(
            count=job_service.count_waiting_confirmations(user.id)
        )

    except NannyMatchError:
        raise
    except Exception as e:
        logger.error(f"Counting confirmations failed for {user.id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
