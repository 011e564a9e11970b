import logging
from docscan.services.states import ScanState, fail_scan
from docscan.services.processors.ocr_processor import ocr_processor

logger = logging.getLogger(__name__)

def extract_ocr(state: ScanState) -> ScanState:
    """Step 3: Extract text from the document using Gemini vision"""
    logger.info("Step 3: Extracting OCR text from document")
    try:
        result = ocr_processor.extract_text(state["file_bytes"], state["mime_type"])
    except Exception as e:
        logger.error(f"Gemini OCR failed: {e}", exc_info=True)
        return fail_scan(
            state,
            500,
            "Failed to extract text from document. Please check your Gemini API key "
            "and ensure a vision-capable model is available.",
            str(e) or "Unknown error",
        )

    if not result.text.strip():
        logger.warning("OCR extraction returned empty text")
        return fail_scan(
            state,
            400,
            "No text could be extracted from the document. "
            "Please ensure the document contains readable text.",
        )

    state["extracted_text"] = result.text
    state["ocr_method"] = result.method
    return state
