"""Rule-based verdict used when AI validation cannot be completed."""
from docscan.api.models import ValidationDetails, ValidationResult

MIN_TEXT_LENGTH = 20
MIN_WORD_COUNT = 5
MIN_ALPHA_RATIO = 0.5
MIN_DISTINCT_RATIO = 0.3
DISTINCT_CHECK_MIN_WORDS = 10


def is_likely_irrelevant(text: str) -> bool:
    """
    Flag text that carries too little signal to be a real document.

    Too short, too few words, mostly non-letters, or a long run of the same
    few words repeated.
    """
    stripped = text.strip()
    if len(stripped) < MIN_TEXT_LENGTH:
        return True

    words = stripped.lower().split()
    if len(words) < MIN_WORD_COUNT:
        return True

    visible = [ch for ch in stripped if not ch.isspace()]
    alpha = sum(1 for ch in visible if ch.isalpha())
    if alpha / len(visible) < MIN_ALPHA_RATIO:
        return True

    if len(words) >= DISTINCT_CHECK_MIN_WORDS and len(set(words)) / len(words) < MIN_DISTINCT_RATIO:
        return True

    return False


def fallback_validation(extracted_text: str, document_name: str, error: BaseException | None) -> ValidationResult:
    """Low-confidence verdict that keeps the OCR text usable when validation fails."""
    reason = str(error) if error else "Unknown error"
    irrelevant = is_likely_irrelevant(extracted_text)

    if irrelevant:
        summary = (
            f"Document scanned but validation failed. The extracted text appears to be irrelevant "
            f"to a {document_name} (too short or unrelated content). Error: {reason}"
        )
    else:
        summary = (
            f"Document scanned but AI validation could not be completed. Error: {reason}. "
            f"Please review the extracted text manually."
        )

    return ValidationResult(
        validation_summary=summary,
        validation_status="invalid" if irrelevant else "pending",
        validation_details=ValidationDetails(),
        confidence_score=0.1 if irrelevant else 0.0,
        key_findings=[
            f"Extracted text length: {len(extracted_text)} characters",
            f"First 100 chars: {extracted_text[:100]}",
        ],
    )
