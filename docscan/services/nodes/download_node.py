import logging
from docscan.services.states import ScanState, fail_scan
from docscan.services.processors.file_retriever import download_file
from docscan.utils.errors import DownloadError

logger = logging.getLogger(__name__)

def download_document(state: ScanState) -> ScanState:
    """Step 2: Download the document bytes"""
    logger.info("Step 2: Downloading document")
    try:
        downloaded = download_file(state["file_url"])
    except DownloadError as e:
        logger.error(f"Error downloading document: {e}")
        return fail_scan(state, 500, "Failed to download document", e.message)

    state["file_bytes"] = downloaded.content
    state["mime_type"] = downloaded.mime_type
    return state
