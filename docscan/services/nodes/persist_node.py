import logging
from datetime import datetime, timezone
from docscan.api.models import DocumentValidation
from docscan.services.states import ScanState
from docscan.storage import repository

logger = logging.getLogger(__name__)

def build_validation_record(state: ScanState) -> DocumentValidation:
    result = state["validation_result"]
    return DocumentValidation(
        **result.model_dump(),
        extracted_text=state["extracted_text"],
        scanned_at=datetime.now(timezone.utc).isoformat(),
        scanned_by=state.get("registrar_uid"),
        scan_version=state.get("previous_scan_version", 0) + 1,
        ocr_method=state.get("ocr_method") or "gemini",
    )

def persist_validation(state: ScanState) -> ScanState:
    """Step 5: Save the validation record; a failed write does not fail the scan"""
    logger.info("Step 5: Persisting validation record")
    record = build_validation_record(state)
    try:
        record = repository.save_validation(state["user_id"], state["document_id"], record)
        state["persisted"] = True
    except Exception as e:
        logger.error(
            f"Error updating document with validation results: {e}",
            exc_info=True,
            extra={
                "event": "scan_persist_failed",
                "user_id": state["user_id"],
                "document_id": state["document_id"],
                "scan_version": record.scan_version,
            },
        )
        state["errors"] = state.get("errors", []) + [f"Persistence failed: {str(e)}"]
        state["persisted"] = False
    state["validation"] = record
    return state
