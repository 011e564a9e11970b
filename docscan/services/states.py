from typing import TypedDict, Optional, Any

from docscan.api.models import DocumentValidation, ValidationResult
from docscan.services.reference_data import ReferenceData


class ScanState(TypedDict):
    """State that flows through the LangGraph scan workflow"""
    document_id: str  # Also the document type tag, e.g. "birthCertificate"
    user_id: str
    registrar_uid: Optional[str]
    enrollment_payload: Optional[Any]  # studentEnrollmentData from the request body
    enrollment_api_url: Optional[str]  # Base URL of the enrollment API
    file_url: Optional[str]
    previous_scan_version: int
    reference_data: Optional[ReferenceData]
    file_bytes: Optional[bytes]
    mime_type: Optional[str]
    extracted_text: str
    ocr_method: Optional[str]
    validation_result: Optional[ValidationResult]
    validation: Optional[DocumentValidation]
    persisted: bool
    status_code: int  # HTTP status to answer with
    error: Optional[str]  # Set when a step short-circuits the scan
    error_details: Optional[str]
    errors: list[str]  # Non-fatal problems, for logging


def initial_scan_state(
    document_id: str,
    user_id: str,
    registrar_uid: Optional[str] = None,
    enrollment_payload: Optional[Any] = None,
    enrollment_api_url: Optional[str] = None,
) -> ScanState:
    return {
        "document_id": document_id,
        "user_id": user_id,
        "registrar_uid": registrar_uid,
        "enrollment_payload": enrollment_payload,
        "enrollment_api_url": enrollment_api_url,
        "file_url": None,
        "previous_scan_version": 0,
        "reference_data": None,
        "file_bytes": None,
        "mime_type": None,
        "extracted_text": "",
        "ocr_method": None,
        "validation_result": None,
        "validation": None,
        "persisted": False,
        "status_code": 200,
        "error": None,
        "error_details": None,
        "errors": [],
    }


def fail_scan(state: ScanState, status_code: int, error: str, details: Optional[str] = None) -> ScanState:
    """Mark the scan as failed; the workflow stops after the current node."""
    state["status_code"] = status_code
    state["error"] = error
    state["error_details"] = details
    return state
