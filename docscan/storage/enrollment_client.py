import logging
from typing import Any, Optional

import requests

from docscan.config import settings

logger = logging.getLogger(__name__)


def fetch_enrollment(base_url: str, user_id: str) -> Optional[Any]:
    """
    Look up the student's enrollment through the enrollment API.

    Any failure is logged and reported as None so the caller can fall back
    to the data stored on the student record.
    """
    url = f"{base_url.rstrip('/')}/api/enrollment"
    try:
        response = requests.get(
            url,
            params={"userId": user_id, "getEnrollment": "true"},
            timeout=settings.enrollment_api_timeout,
        )
        if not response.ok:
            logger.warning(f"Enrollment API returned {response.status_code} for {user_id}")
            return None
        return (response.json() or {}).get("enrollment")
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.error(f"Error fetching enrollment data for {user_id}: {e}")
        return None
