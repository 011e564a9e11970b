from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from typing import Optional
from docscan.api.models import ScanErrorResponse, ScanRequest, ScanResponse
from docscan.config import logger, settings
from docscan.services.states import initial_scan_state
from docscan.services.workflow import scan_graph

router = APIRouter(prefix="/api", tags=["documents"])


def _error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ScanErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def _read_scan_request(request: Request) -> ScanRequest:
    # The body is optional and a malformed one is treated as empty
    try:
        body = await request.json()
    except Exception:
        return ScanRequest()
    if not isinstance(body, dict):
        return ScanRequest()
    return ScanRequest.model_validate(body)


@router.post("/documents/{document_id}/scan", response_model=ScanResponse)
async def scan_document(
    document_id: str,
    request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    registrar_uid: Optional[str] = Query(None, alias="registrarUid"),
):
    """
    Scan one uploaded document: download it, extract its text with Gemini,
    validate the text against the student's data and store the result on
    students/{userId}.documents.{document_id}.
    """
    if not user_id:
        return _error_response(400, "User ID is required")

    scan_request = await _read_scan_request(request)
    enrollment_api_url = settings.enrollment_api_base_url or str(request.base_url)

    initial_state = initial_scan_state(
        document_id=document_id,
        user_id=user_id,
        registrar_uid=registrar_uid or None,
        enrollment_payload=scan_request.student_enrollment_data,
        enrollment_api_url=enrollment_api_url,
    )

    try:
        final_state = await run_in_threadpool(scan_graph.invoke, initial_state)
    except Exception as e:
        logger.error(f"Error scanning document {document_id}: {e}", exc_info=True)
        return _error_response(500, "Failed to scan document", str(e) or "Unknown error")

    if final_state.get("error"):
        logger.info(
            f"Scan of {document_id} for {user_id} stopped: "
            f"{final_state['status_code']} {final_state['error']}"
        )
        return _error_response(final_state["status_code"], final_state["error"], final_state.get("error_details"))

    validation = final_state["validation"]
    errors = final_state.get("errors", [])
    logger.info(
        f"Scan completed for {document_id}: {validation.validation_status}, "
        f"scanVersion {validation.scan_version}, persisted={final_state['persisted']}"
        + (f", {len(errors)} issue(s)" if errors else "")
    )
    return ScanResponse(validation=validation, persisted=final_state["persisted"])


@router.get("/health")
async def health():
    return {"status": "healthy"}
