# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks that must never slow down or fail an API request.
#
# Tasks:
# - send_push_notification: Deliver one Expo push message to a device
# =============================================================================

import logging
from typing import Any

import httpx
from celery import shared_task

from app.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# Push Notifications
# =============================================================================

def build_push_payload(
    token: str,
    title: str,
    body: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the JSON body the Expo push API expects."""
    return {
        "to": token,
        "title": title,
        "body": body,
        "data": data or {},
    }


@shared_task(name="workers.tasks.send_push_notification")
def send_push_notification(
    token: str,
    title: str,
    body: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    POST one push message to the Expo push API.

    Delivery is fire-and-forget: a rejected or unreachable push is logged
    and reported in the task result, never raised.

    Args:
        token: Expo push token of the receiving device
        title: Notification title
        body: Notification body
        data: Extra payload for the app (e.g. {"type": "challenge", "id": ...})

    Returns:
        Dict with:
        - sent: bool
        - status_code: HTTP status from Expo (if a response arrived)
        - error: Failure description (if not sent)
    """
    payload = build_push_payload(token, title, body, data)

    try:
        response = httpx.post(
            settings.EXPO_PUSH_URL,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=settings.PUSH_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.warning(f"Push delivery error: {e}")
        return {"sent": False, "status_code": None, "error": str(e)}

    if response.is_error:
        logger.warning(f"Push delivery failed: {response.status_code} {response.text}")
        return {"sent": False, "status_code": response.status_code, "error": response.text}

    logger.info(f"Push delivered: {title}")
    return {"sent": True, "status_code": response.status_code, "error": None}
