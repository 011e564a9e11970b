import logging
from dataclasses import dataclass

import requests

from docscan.config import settings
from docscan.utils.errors import DownloadError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass
class DownloadedFile:
    content: bytes
    mime_type: str


def classify_mime_type(content_type: str | None) -> str:
    """Reduce a Content-Type header to its bare media type."""
    if not content_type:
        return DEFAULT_MIME_TYPE
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type or DEFAULT_MIME_TYPE


def download_file(url: str) -> DownloadedFile:
    """
    Fetch a document from its download URL.

    No retry is attempted here; any failure is fatal for the scan.

    Raises:
        DownloadError: If the request fails or the response is not a success status
    """
    try:
        response = requests.get(url, timeout=settings.download_timeout)
    except requests.RequestException as e:
        logger.error(f"Document download failed: {e}")
        raise DownloadError(f"Failed to download file: {e}") from e

    if not response.ok:
        logger.error(f"Document download returned {response.status_code} {response.reason}")
        raise DownloadError(
            f"Failed to download file: {response.status_code} {response.reason}",
            status=response.status_code,
        )

    mime_type = classify_mime_type(response.headers.get("Content-Type"))
    logger.info(f"Downloaded document: {len(response.content)} bytes ({mime_type})")
    return DownloadedFile(content=response.content, mime_type=mime_type)
