import logging
from docscan.services.states import ScanState, fail_scan
from docscan.services.reference_data import normalize
from docscan.storage import enrollment_client, repository

logger = logging.getLogger(__name__)

def resolve_document(state: ScanState) -> ScanState:
    """Step 1: Load the student record, the document entry and the reference data"""
    user_id = state["user_id"]
    document_id = state["document_id"]
    logger.info(f"Step 1: Resolving document {document_id} for {user_id}")

    student = repository.load_student(user_id)
    if student is None:
        return fail_scan(state, 404, "User document not found")

    documents = student.get("documents") or {}
    document = documents.get(document_id)
    if not document:
        return fail_scan(state, 404, "Document not found")

    file_url = document.get("fileUrl")
    if not file_url:
        return fail_scan(state, 400, "Document URL not found")

    state["file_url"] = file_url
    state["previous_scan_version"] = repository.stored_scan_version(document)

    # Reference data: request body, then enrollment API, then the student record.
    # Only a missing source falls through; an empty object is used as given
    student_data = state.get("enrollment_payload")
    if student_data is None and state.get("enrollment_api_url"):
        student_data = enrollment_client.fetch_enrollment(state["enrollment_api_url"], user_id)
    if student_data is None:
        logger.info("No enrollment data available, using student record")
        student_data = {
            "personalInfo": student.get("personalInfo") or {},
            "enrollmentInfo": student.get("enrollmentInfo") or {},
        }
    state["reference_data"] = normalize(student_data)
    return state
