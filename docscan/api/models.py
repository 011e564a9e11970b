import math

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Optional, List, Literal


ValidationStatus = Literal["valid", "warning", "invalid", "pending"]
OCRMethod = Literal["gemini", "tesseract", "hybrid"]

VALIDATION_STATUSES = ("valid", "warning", "invalid", "pending")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _clamp_unit(value: float, default: float) -> float:
    # NaN and infinities fall back to the default
    if not math.isfinite(value):
        return default
    return min(max(value, 0.0), 1.0)


class ValidationField(CamelModel):
    field: str
    expected_value: Optional[str] = None
    found_value: Optional[str] = None
    confidence: float = 0.0
    match: bool = False
    notes: Optional[str] = None

    @field_validator("field", "expected_value", "found_value", "notes", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return _clamp_unit(value, default=0.0)


class ValidationDetails(CamelModel):
    matches: List[ValidationField] = Field(default_factory=list)
    mismatches: List[ValidationField] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)
    extra_fields: List[str] = Field(default_factory=list)


class ValidationResult(CamelModel):
    """Verdict produced by the structural validator or by a heuristic fallback."""
    validation_summary: str
    validation_status: ValidationStatus
    validation_details: ValidationDetails = Field(default_factory=ValidationDetails)
    confidence_score: float = Field(ge=0, le=1)
    key_findings: List[str] = Field(default_factory=list)

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return _clamp_unit(float(value), default=0.5)
        return value


class DocumentValidation(ValidationResult):
    """Validation record stored on students/{userId}.documents.{documentId}."""
    extracted_text: str
    scanned_at: str  # ISO-8601, UTC
    scanned_by: Optional[str] = None
    scan_version: int = Field(ge=1)
    ocr_method: OCRMethod = "gemini"


class ScanRequest(CamelModel):
    student_enrollment_data: Optional[Any] = None


class ScanResponse(BaseModel):
    success: bool = True
    validation: DocumentValidation
    persisted: bool  # False when the record was computed but not saved


class ScanErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None
