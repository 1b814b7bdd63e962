"""
Record types for Company Manager.

A Record pairs one company with one employee and carries two repeatable
sub-entities: skills and education entries. The JSON shape uses the
camelCase keys of the persisted slot.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import ValidationError

MIN_RATING = 1
MAX_RATING = 5

# Editable string fields of a record, in form order
FORM_FIELDS = [
    "companyName",
    "companyAddress",
    "companyEmail",
    "companyPhone",
    "employeeName",
    "designation",
    "joinDate",
    "empEmail",
    "empPhone",
]


@dataclass
class Skill:
    """One rated skill; names are unique within a record."""

    name: str
    rating: int

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Skill name must be a non-empty string.")
        # bool is an int subclass
        if isinstance(self.rating, bool) or not isinstance(self.rating, int):
            raise ValidationError(f"Skill rating must be an integer: {self.rating!r}")
        if not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValidationError(f"Skill rating must be {MIN_RATING}-{MAX_RATING}: {self.rating}")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "rating": self.rating}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Skill":
        return cls(name=data["name"], rating=data["rating"])


@dataclass
class Education:
    """One education entry. Identical entries may repeat."""

    school: str
    course: str
    completed_year: str  # YYYY-MM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "school": self.school,
            "course": self.course,
            "completedYear": self.completed_year,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Education":
        return cls(
            school=str(data.get("school", "")),
            course=str(data.get("course", "")),
            completed_year=str(data.get("completedYear", "")),
        )


@dataclass
class Record:
    """A company + employee pairing as stored in the slot."""

    id: str
    company_name: str
    company_email: str
    company_phone: str
    employee_name: str
    join_date: str
    emp_email: str
    emp_phone: str
    created_at: str
    company_address: str = ""
    designation: str = ""
    skills: List[Skill] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase dictionary stored in the slot."""
        return {
            "id": self.id,
            "companyName": self.company_name,
            "companyAddress": self.company_address,
            "companyEmail": self.company_email,
            "companyPhone": self.company_phone,
            "employeeName": self.employee_name,
            "designation": self.designation,
            "joinDate": self.join_date,
            "empEmail": self.emp_email,
            "empPhone": self.emp_phone,
            "skills": [s.to_dict() for s in self.skills],
            "education": [e.to_dict() for e in self.education],
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """
        Build a Record from its stored dictionary.

        Raises:
            ValidationError: If the id is missing or a nested entry is malformed.
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Record must be an object, got {type(data).__name__}")
        record_id = data.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise ValidationError("Record is missing its id.")

        try:
            skills = [Skill.from_dict(s) for s in data.get("skills") or []]
            education = [Education.from_dict(e) for e in data.get("education") or []]
        except (KeyError, TypeError, AttributeError) as e:
            raise ValidationError(f"Record {record_id} has a malformed entry: {e}")

        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return cls(
            id=record_id,
            company_name=text("companyName"),
            company_address=text("companyAddress"),
            company_email=text("companyEmail"),
            company_phone=text("companyPhone"),
            employee_name=text("employeeName"),
            designation=text("designation"),
            join_date=text("joinDate"),
            emp_email=text("empEmail"),
            emp_phone=text("empPhone"),
            skills=skills,
            education=education,
            created_at=text("createdAt"),
        )

    def form_values(self) -> Dict[str, str]:
        """Editable fields keyed by their form names."""
        data = self.to_dict()
        return {name: data[name] for name in FORM_FIELDS}
