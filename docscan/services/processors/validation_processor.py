import json
import math
import logging
from typing import Any

import dspy
from pydantic import ValidationError

from docscan.api.models import ValidationDetails, ValidationField, ValidationResult
from docscan.services.reference_data import ReferenceData, normalize
from docscan.utils.errors import NoAvailableModelError, ValidationAPIError
from docscan.utils.json_extraction import extract_json_text
from docscan.utils.llm_config import completion_text, get_model_status, run_with_model_ladder

logger = logging.getLogger(__name__)

DOCUMENT_TYPE_NAMES = {
    "reportCard": "Report Card (Form 138)",
    "certificateOfGoodMoral": "Certificate of Good Moral Character",
    "birthCertificate": "Birth Certificate",
    "idPicture": "ID Picture",
    "form137": "Form 137 (Permanent Record)",
    "certificateOfCompletion": "Certificate of Completion",
    "marriageCertificate": "Marriage Certificate",
    "transcript": "Transcript of Records",
    "diploma": "Diploma",
    "id": "Identification Document",
    "medical": "Medical Certificate",
}

_UNRELATED = "It must NOT consist of random text or content unrelated to the document type."

DOCUMENT_TYPE_EXPECTATIONS = {
    "birthCertificate": (
        "A birth certificate lists the full name, date and place of birth, the parents' names, "
        "a registry number and official seals or stamps. " + _UNRELATED
    ),
    "transcript": (
        "A transcript lists the student name, subjects or courses, grades, credits, GPA, "
        "the school name, dates and academic terms. " + _UNRELATED
    ),
    "diploma": (
        "A diploma shows the student name, the degree or certificate awarded, the school name, "
        "the graduation date, signatures and official seals. " + _UNRELATED
    ),
    "reportCard": (
        "A report card shows the student name, school name, subjects, grades, teacher names, "
        "dates and the academic period. " + _UNRELATED
    ),
    "form137": (
        "A Form 137 permanent record shows the student name, school history, subjects and "
        "final grades per school year. " + _UNRELATED
    ),
    "certificateOfGoodMoral": (
        "A certificate of good moral character names the student and the issuing school, "
        "states the student's conduct and carries a date and signature. " + _UNRELATED
    ),
    "certificateOfCompletion": (
        "A certificate of completion names the student, the completed program or grade level, "
        "the school, a date and signatures. " + _UNRELATED
    ),
    "marriageCertificate": (
        "A marriage certificate names both spouses, the date and place of marriage, witnesses "
        "and the registering office. " + _UNRELATED
    ),
    "id": (
        "An ID document shows a name, photo, ID number, birth date, address and the issuing "
        "authority. " + _UNRELATED
    ),
    "idPicture": (
        "An ID picture is mostly a photograph; any text should be a name or caption. " + _UNRELATED
    ),
    "medical": (
        "A medical document shows the patient name, medical findings, dates and the doctor or "
        "clinic. " + _UNRELATED
    ),
}

VERDICT_STATUSES = ("valid", "warning", "invalid")
IRRELEVANCE_MARKERS = ("irrelevant", "not relevant", "does not match", "unrelated")

DEFAULT_SUMMARY = "Validation completed but summary is missing."
DEFAULT_STATUS = "warning"
DEFAULT_CONFIDENCE = 0.5


def document_type_name(document_type: str) -> str:
    return DOCUMENT_TYPE_NAMES.get(document_type, document_type)


def document_type_expectation(document_type: str) -> str:
    return DOCUMENT_TYPE_EXPECTATIONS.get(
        document_type,
        f"A {document_type} document should contain information related to its type. " + _UNRELATED,
    )


def build_validation_prompt(extracted_text: str, document_type: str, reference: ReferenceData) -> str:
    """Single prompt asking for a JSON verdict on the extracted text."""
    name = document_type_name(document_type)
    has_student_data = reference.has_student_data

    if has_student_data:
        student_section = f"Student information to compare against:\n{reference.describe()}"
        compare_step = "then compare it field by field with the student information."
        valid_rule = f"the text belongs to a {name} AND matches the student information"
        warning_rule = "the text is relevant but some fields do not match, or it is only partly relevant"
        invalid_rule = f"the text is NOT a {name}, OR it has significant mismatches"
        matches_rule = "fields that agree between the document and the student information"
        mismatches_rule = "fields that disagree, with the expected and the found value"
    else:
        student_section = (
            "Student information is not available for comparison. "
            "Only check that the text is relevant to the document type."
        )
        compare_step = "focusing on document type relevance only."
        valid_rule = f"the text belongs to a {name}"
        warning_rule = "the text seems only partly relevant"
        invalid_rule = f"the text is NOT a {name}"
        matches_rule = "key information found in the document"
        mismatches_rule = "inconsistencies or problems found in the document"

    return f"""You are a document validation system reviewing text extracted from a {name}.

First decide whether the text is actually relevant to a {name}.
{document_type_expectation(document_type)}
If the text is unrelated (random words, another subject, nonsense), mark it "invalid" with a low confidence score.

Extracted document text:
{extracted_text}

{student_section}

Provide:
1. validationSummary: 2-3 sentences on relevance and accuracy. Check relevance first, {compare_step}
2. validationStatus:
   - "valid": {valid_rule}
   - "warning": {warning_rule}
   - "invalid": {invalid_rule}
3. validationDetails:
   - matches: {matches_rule}
   - mismatches: {mismatches_rule}
   - missingFields: expected information that is absent
   - extraFields: unexpected information that is present
4. confidenceScore between 0 and 1. Use a score below 0.3 when the text is irrelevant.
5. keyFindings: 3-5 short findings, or a note that the text is irrelevant.

Respond with a JSON object of exactly this shape:
{{
  "validationSummary": "string",
  "validationStatus": "valid" | "warning" | "invalid",
  "validationDetails": {{
    "matches": [{{"field": "string", "expectedValue": "string", "foundValue": "string", "confidence": 0.0, "match": true}}],
    "mismatches": [{{"field": "string", "expectedValue": "string", "foundValue": "string", "confidence": 0.0, "match": false, "notes": "string"}}],
    "missingFields": ["string"],
    "extraFields": ["string"]
  }},
  "confidenceScore": 0.0,
  "keyFindings": ["string"]
}}

Return ONLY the JSON object, with no text before or after it.
"""


def _coerce_fields(entries: Any, match: bool) -> list[ValidationField]:
    if not isinstance(entries, list):
        return []
    fields = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            present = {key: value for key, value in entry.items() if value is not None}
            fields.append(ValidationField.model_validate({"match": match, **present}))
        except ValidationError as e:
            logger.warning(f"Skipping malformed validation field {entry!r}: {e.error_count()} errors")
    return fields


def _coerce_names(entries: Any) -> list[str]:
    if not isinstance(entries, list):
        return []
    return [str(entry) for entry in entries if isinstance(entry, (str, int, float))]


def coerce_details(raw: Any) -> ValidationDetails:
    if not isinstance(raw, dict):
        return ValidationDetails()
    return ValidationDetails(
        matches=_coerce_fields(raw.get("matches"), match=True),
        mismatches=_coerce_fields(raw.get("mismatches"), match=False),
        missing_fields=_coerce_names(raw.get("missingFields")),
        extra_fields=_coerce_names(raw.get("extraFields")),
    )


def result_from_payload(payload: dict) -> ValidationResult:
    """Fill every absent or unusable field of a parsed verdict with a safe default."""
    summary = payload.get("validationSummary")
    if not isinstance(summary, str) or not summary.strip():
        summary = DEFAULT_SUMMARY

    status = payload.get("validationStatus")
    if status not in VERDICT_STATUSES:
        status = DEFAULT_STATUS

    confidence = payload.get("confidenceScore")
    if (
        isinstance(confidence, bool)
        or not isinstance(confidence, (int, float))
        or not math.isfinite(confidence)
    ):
        confidence = DEFAULT_CONFIDENCE

    findings = payload.get("keyFindings")
    if not isinstance(findings, list):
        findings = []

    return ValidationResult(
        validation_summary=summary,
        validation_status=status,
        validation_details=coerce_details(payload.get("validationDetails")),
        confidence_score=confidence,
        key_findings=[str(finding) for finding in findings if finding is not None],
    )


def heuristic_from_text(text: str, document_type: str) -> ValidationResult:
    """Verdict synthesized from a reply that could not be parsed as JSON."""
    lowered = text.lower()
    is_irrelevant = any(marker in lowered for marker in IRRELEVANCE_MARKERS)
    excerpt = text[:150]
    if is_irrelevant:
        summary = f"Document text appears to be irrelevant to {document_type_name(document_type)}. {excerpt}"
    else:
        summary = f"Validation completed but response format was invalid. {excerpt}"

    return ValidationResult(
        validation_summary=summary,
        validation_status="invalid" if is_irrelevant else "warning",
        validation_details=ValidationDetails(),
        confidence_score=0.2 if is_irrelevant else 0.3,
        key_findings=[text[:100]],
    )


def parse_validation_response(text: str, document_type: str) -> ValidationResult:
    """
    Turn the raw validation reply into a fully populated ValidationResult.

    The reply is expected to hold a JSON object, possibly fenced in markdown or
    surrounded by prose. When no JSON object can be parsed, a keyword
    heuristic over the raw text decides between "invalid" and "warning".
    """
    candidate = extract_json_text(text) or text.strip()
    try:
        payload = json.loads(candidate)
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        logger.error(f"Failed to parse validation response as JSON: {e}")
        logger.debug(f"Raw validation response: {text[:500]}")
        return heuristic_from_text(text, document_type)

    return result_from_payload(payload)


class ValidationProcessor:
    """Structural validation of OCR text against student reference data."""

    def validate(self, extracted_text: str, document_type: str, student_data: Any) -> ValidationResult:
        """
        Validate extracted text for a document type.

        Args:
            extracted_text: Text returned by the OCR step
            document_type: Document type tag, e.g. "birthCertificate"
            student_data: Reference data in any shape; normalized here

        Returns:
            ValidationResult with every field populated

        Raises:
            NoAvailableModelError: If no model in the ladder is available
            ValidationAPIError: If the model call fails or returns nothing
        """
        reference = normalize(student_data)
        prompt = build_validation_prompt(extracted_text, document_type, reference)
        logger.info(
            f"Validating {document_type} ({len(extracted_text)} chars, "
            f"student data: {'yes' if reference.has_student_data else 'no'})"
        )

        def _call(lm: dspy.LM) -> str:
            return completion_text(lm(prompt))

        try:
            text, _ = run_with_model_ladder(_call, purpose="validation")
        except NoAvailableModelError:
            raise
        except Exception as e:
            status = get_model_status(e)
            logger.error(f"Gemini API error during validation: {e}")
            raise ValidationAPIError(
                f"AI validation API error: {e}. Status: {status or 'unknown'}", status=status
            ) from e

        if not text or not text.strip():
            raise ValidationAPIError("AI validation returned empty response")

        result = parse_validation_response(text, document_type)
        logger.info(
            f"Validation result for {document_type}: {result.validation_status} "
            f"(confidence {result.confidence_score:.2f})"
        )
        return result


validation_processor = ValidationProcessor()
