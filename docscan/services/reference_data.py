"""
Student reference data used to cross-check extracted document text.

Enrollment payloads arrive with an arbitrary shape (request body, enrollment
API, raw Firestore record). `normalize` converts them once, at ingress, into
`ReferenceData`; nothing past that point sees the untyped form.
"""
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _InfoModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (str, int, float)):
            text = str(value).strip()
            return text or None
        return None


class PersonalInfo(_InfoModel):
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    name_extension: Optional[str] = None
    birth_month: Optional[str] = None
    birth_day: Optional[str] = None
    birth_year: Optional[str] = None
    place_of_birth: Optional[str] = None
    email: Optional[str] = None


class EnrollmentInfo(_InfoModel):
    student_id: Optional[str] = None
    grade_level: Optional[str] = None
    course_code: Optional[str] = None
    course_name: Optional[str] = None
    school_year: Optional[str] = None


class ReferenceData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    enrollment_info: EnrollmentInfo = Field(default_factory=EnrollmentInfo)

    @property
    def has_student_data(self) -> bool:
        p, e = self.personal_info, self.enrollment_info
        return bool(p.first_name or p.last_name or e.student_id or p.birth_year)

    def describe(self) -> str:
        """Render the reference data as readable key-value lines for a prompt."""
        p, e = self.personal_info, self.enrollment_info

        def join(*parts: Optional[str], sep: str = " ") -> str:
            return sep.join(part for part in parts if part)

        birth_date = "/".join(part or "" for part in (p.birth_month, p.birth_day, p.birth_year))
        lines = [
            ("Name", join(p.first_name, p.middle_name, p.last_name, p.name_extension)),
            ("Birth Date", birth_date if birth_date.strip("/") else ""),
            ("Place of Birth", p.place_of_birth or ""),
            ("Email", p.email or ""),
            ("Student ID", e.student_id or ""),
            ("Grade Level", e.grade_level or ""),
            ("Course", join(e.course_code, e.course_name)),
            ("School Year", e.school_year or ""),
        ]
        return "\n".join(f"- {label}: {value}" for label, value in lines)


def _section(raw: Mapping, key: str) -> Mapping:
    value = raw.get(key)
    return value if isinstance(value, Mapping) else {}


def normalize(raw: Any) -> ReferenceData:
    """
    Convert a loosely-typed student payload into ReferenceData.

    Missing, null or non-mapping input yields empty personal and enrollment
    sections; partially present input keeps what it has and fills the rest.
    Applying it to an existing ReferenceData returns an equal object.
    """
    if isinstance(raw, ReferenceData):
        return raw
    if not isinstance(raw, Mapping):
        return ReferenceData()
    return ReferenceData(
        personal_info=PersonalInfo.model_validate(dict(_section(raw, "personalInfo"))),
        enrollment_info=EnrollmentInfo.model_validate(dict(_section(raw, "enrollmentInfo"))),
    )
