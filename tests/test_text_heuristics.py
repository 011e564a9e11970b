import pytest

from docscan.utils.text_heuristics import fallback_validation, is_likely_irrelevant

BIRTH_CERTIFICATE_TEXT = (
    "Republic of the Philippines Certificate of Live Birth Name of child Juan Santos "
    "Dela Cruz Date of birth March 14 2010 Place of birth Quezon City"
)


@pytest.mark.parametrize("text", [
    "cat",
    "too short text",
    "one two three four",
    "12345 67890 11121 31415 92653 58979",
    "lorem lorem lorem lorem lorem lorem lorem lorem ipsum ipsum ipsum ipsum",
])
def test_low_signal_text_is_irrelevant(text):
    assert is_likely_irrelevant(text)


def test_document_like_text_is_not_flagged():
    assert not is_likely_irrelevant(BIRTH_CERTIFICATE_TEXT)


def test_fallback_for_irrelevant_text_is_invalid():
    result = fallback_validation("cat", "Birth Certificate", RuntimeError("quota exceeded"))
    assert result.validation_status == "invalid"
    assert result.confidence_score == 0.1
    assert "quota exceeded" in result.validation_summary
    assert result.key_findings == ["Extracted text length: 3 characters", "First 100 chars: cat"]


def test_fallback_for_plausible_text_is_pending():
    result = fallback_validation(BIRTH_CERTIFICATE_TEXT, "Birth Certificate", None)
    assert result.validation_status == "pending"
    assert result.confidence_score == 0.0
    assert "Unknown error" in result.validation_summary
    assert result.validation_details.matches == []
