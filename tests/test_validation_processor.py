import json

import pytest

from docscan.services.processors.validation_processor import (
    build_validation_prompt,
    document_type_expectation,
    document_type_name,
    parse_validation_response,
    validation_processor,
)
from docscan.services.reference_data import normalize
from docscan.utils.errors import NoAvailableModelError, ValidationAPIError
from tests.fakes import ProviderError

STUDENT = {
    "personalInfo": {"firstName": "Juan", "lastName": "Dela Cruz", "birthYear": 2010},
    "enrollmentInfo": {"studentId": "2024-117", "gradeLevel": "7"},
}

VERDICT = {
    "validationSummary": "The birth certificate matches the student record.",
    "validationStatus": "valid",
    "validationDetails": {
        "matches": [
            {"field": "name", "expectedValue": "Juan Dela Cruz", "foundValue": "Juan Dela Cruz",
             "confidence": 0.95, "match": True},
        ],
        "mismatches": [
            {"field": "birthDay", "expectedValue": "14", "foundValue": "15",
             "confidence": 0.6, "match": False, "notes": "Possible OCR misread"},
        ],
        "missingFields": ["registryNumber"],
        "extraFields": ["religion"],
    },
    "confidenceScore": 0.88,
    "keyFindings": ["Name matches", "Birth year 2010"],
}


def test_fenced_json_round_trips():
    text = "Here is the validation:\n```json\n" + json.dumps(VERDICT, indent=2) + "\n```"
    result = parse_validation_response(text, "birthCertificate")
    dumped = result.model_dump(by_alias=True, exclude_none=True)
    assert dumped == VERDICT


def test_absent_fields_get_defaults():
    result = parse_validation_response('{"validationStatus": "invalid"}', "diploma")
    assert result.validation_status == "invalid"
    assert result.validation_summary == "Validation completed but summary is missing."
    assert result.confidence_score == 0.5
    assert result.key_findings == []
    assert result.validation_details.model_dump(by_alias=True) == {
        "matches": [], "mismatches": [], "missingFields": [], "extraFields": [],
    }


def test_unusable_values_are_replaced():
    payload = {
        "validationSummary": "",
        "validationStatus": "great",
        "confidenceScore": "high",
        "keyFindings": "name matches",
        "validationDetails": {"matches": [{"field": "name"}, "garbage", {"notes": "no field"}]},
    }
    result = parse_validation_response(json.dumps(payload), "transcript")
    assert result.validation_status == "warning"
    assert result.confidence_score == 0.5
    assert result.key_findings == []
    assert [m.field for m in result.validation_details.matches] == ["name"]
    assert result.validation_details.matches[0].match is True
    assert result.validation_details.mismatches == []


def test_confidence_is_clamped_to_unit_interval():
    result = parse_validation_response('{"confidenceScore": 7, "validationStatus": "valid"}', "id")
    assert result.confidence_score == 1.0
    result = parse_validation_response('{"confidenceScore": -0.4}', "id")
    assert result.confidence_score == 0.0


def test_non_finite_confidence_uses_defaults():
    text = (
        '{"validationSummary": "x", "validationStatus": "valid", "confidenceScore": NaN,'
        ' "validationDetails": {"matches": [{"field": "name", "confidence": NaN},'
        ' {"field": "birthYear", "confidence": Infinity}]}}'
    )
    result = parse_validation_response(text, "birthCertificate")
    assert result.validation_status == "valid"
    assert result.confidence_score == 0.5
    assert [m.confidence for m in result.validation_details.matches] == [0.0, 0.0]
    result = parse_validation_response('{"confidenceScore": -Infinity}', "id")
    assert result.confidence_score == 0.5


def test_numeric_field_names_are_kept_as_text():
    payload = {"validationDetails": {"matches": [{"field": 2010, "foundValue": 2010, "confidence": 0.8}]}}
    result = parse_validation_response(json.dumps(payload), "birthCertificate")
    assert [(m.field, m.found_value) for m in result.validation_details.matches] == [("2010", "2010")]


def test_unparseable_reply_mentioning_irrelevance_is_invalid():
    text = "The extracted text is unrelated to a birth certificate; it describes a fox. " * 3
    result = parse_validation_response(text, "birthCertificate")
    assert result.validation_status == "invalid"
    assert result.confidence_score == 0.2
    assert result.validation_summary == (
        "Document text appears to be irrelevant to Birth Certificate. " + text[:150]
    )
    assert result.key_findings == [text[:100]]


def test_unparseable_reply_without_markers_is_warning():
    text = "the quick brown fox jumps over the lazy dog"
    result = parse_validation_response(text, "birthCertificate")
    assert result.validation_status == "warning"
    assert result.confidence_score == 0.3
    assert result.validation_summary.startswith("Validation completed but response format was invalid.")


def test_json_array_is_treated_as_unparseable():
    result = parse_validation_response('["valid"]', "diploma")
    assert result.validation_status == "warning"
    assert result.confidence_score == 0.3


def test_broken_json_inside_fence_uses_heuristic():
    text = '```json\n{"validationStatus": "invalid", "validationSummary": "Not relevant\n```'
    result = parse_validation_response(text, "reportCard")
    assert result.validation_status == "invalid"
    assert result.confidence_score == 0.2


def test_prompt_compares_against_student_data():
    prompt = build_validation_prompt("CERTIFICATE OF LIVE BIRTH", "birthCertificate", normalize(STUDENT))
    assert "Birth Certificate" in prompt
    assert document_type_expectation("birthCertificate") in prompt
    assert "CERTIFICATE OF LIVE BIRTH" in prompt
    assert "- Name: Juan Dela Cruz" in prompt
    assert "- Student ID: 2024-117" in prompt
    assert '"validationStatus": "valid" | "warning" | "invalid"' in prompt
    assert "Return ONLY the JSON object" in prompt


def test_prompt_without_student_data_checks_relevance_only():
    prompt = build_validation_prompt("Some text", "vaccinationCard", normalize(None))
    assert "Student information is not available for comparison" in prompt
    assert "- Name:" not in prompt
    assert "A vaccinationCard document should contain information related to its type." in prompt


def test_document_type_name_falls_back_to_tag():
    assert document_type_name("reportCard") == "Report Card (Form 138)"
    assert document_type_name("vaccinationCard") == "vaccinationCard"


def test_validate_returns_parsed_verdict(lm_script):
    lm_script.reply("validation", "```json\n" + json.dumps(VERDICT) + "\n```")

    result = validation_processor.validate("CERTIFICATE OF LIVE BIRTH Juan", "birthCertificate", STUDENT)

    assert result.validation_status == "valid"
    assert result.confidence_score == 0.88
    prompt = lm_script.instances[-1].last_prompt
    assert "- Name: Juan Dela Cruz" in prompt


def test_validate_tolerates_missing_student_data(lm_script):
    lm_script.reply("validation", '{"validationStatus": "warning", "confidenceScore": 0.4}')
    result = validation_processor.validate("Some document text here", "diploma", None)
    assert result.validation_status == "warning"
    assert "Student information is not available" in lm_script.instances[-1].last_prompt


def test_network_failure_raises_validation_api_error(lm_script):
    lm_script.reply("validation", ProviderError("connection reset", 503))
    with pytest.raises(ValidationAPIError) as excinfo:
        validation_processor.validate("text", "diploma", STUDENT)
    assert excinfo.value.status == 503
    assert lm_script.models_called("validation") == ["gemini-2.5-flash"]


def test_empty_reply_raises_validation_api_error(lm_script):
    lm_script.reply("validation", "   ")
    with pytest.raises(ValidationAPIError, match="empty response"):
        validation_processor.validate("text", "diploma", STUDENT)


def test_no_model_available_is_raised_as_is(lm_script):
    lm_script.reply("validation", ProviderError("not found", 404))
    with pytest.raises(NoAvailableModelError, match="validation"):
        validation_processor.validate("text", "diploma", STUDENT)
