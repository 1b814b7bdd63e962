"""
Form validation for company records.

``validate_form`` checks a candidate record (field values plus the skill
and education lists) and returns every violation in a fixed order:
required fields, maximum lengths, join date, skills, education.
"""

from datetime import date
from typing import List, Mapping, Optional, Sequence

REQUIRED_FIELDS = [
    ("companyName", "Company Name"),
    ("companyEmail", "Company Email"),
    ("companyPhone", "Company Phone"),
    ("employeeName", "Employee Name"),
    ("joinDate", "Join Date"),
    ("empEmail", "Employee Email"),
    ("empPhone", "Employee Phone"),
]

MAX_LENGTHS = [
    ("companyName", "Company Name", 50),
    ("companyEmail", "Company Email", 100),
    ("companyPhone", "Company Phone", 15),
    ("employeeName", "Employee Name", 25),
    ("empEmail", "Employee Email", 100),
    ("empPhone", "Employee Phone", 15),
]

JOIN_DATE_IN_FUTURE = "Join Date must be a past date."
JOIN_DATE_INVALID = "Join Date must be a valid date."
SKILLS_REQUIRED = "Add at least one skill."
EDUCATION_REQUIRED = "Add at least one education entry."


def validate_form(
    fields: Mapping[str, Optional[str]],
    skills: Sequence[object],
    education: Sequence[object],
    today: Optional[date] = None,
) -> List[str]:
    """
    Validate a candidate record.

    Args:
        fields: Form values keyed by camelCase field name.
        skills: Current skill entries.
        education: Current education entries.
        today: Reference day for the join date check. Defaults to today.

    Returns:
        Ordered list of violation messages; empty when the candidate is valid.
    """
    errors: List[str] = []

    def value(name: str) -> str:
        return (fields.get(name) or "").strip()

    for name, label in REQUIRED_FIELDS:
        if not value(name):
            errors.append(f"{label} is required.")

    for name, label, limit in MAX_LENGTHS:
        if len(value(name)) > limit:
            errors.append(f"{label} max length {limit}")

    join_date = value("joinDate")
    if join_date:
        try:
            joined = date.fromisoformat(join_date)
        except ValueError:
            errors.append(JOIN_DATE_INVALID)
        else:
            if joined > (today or date.today()):
                errors.append(JOIN_DATE_IN_FUTURE)

    if len(skills) == 0:
        errors.append(SKILLS_REQUIRED)

    if len(education) == 0:
        errors.append(EDUCATION_REQUIRED)

    return errors
