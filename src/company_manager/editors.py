"""
Skill and education editors used during one form session.

Both editors own an ordered list that is rendered as chips (skills) or
rows (education) and posted back through hidden form fields.
"""

import calendar
import logging
from typing import Iterable, List, Optional, Sequence

from .errors import SubEntryError, ValidationError
from .models import MAX_RATING, MIN_RATING, Education, Skill

logger = logging.getLogger(__name__)

SKILL_NAME_REQUIRED = "Select a skill name."
SKILL_RATING_INVALID = "Enter rating 1–5."
EDUCATION_FIELDS_REQUIRED = "Education: all fields are required."


class SkillCatalog:
    """Fixed list of selectable skill names."""

    def __init__(self, names: Iterable[str]):
        self.names: List[str] = list(names)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self):
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def filter(self, query: Optional[str]) -> List[str]:
        """Catalog names containing ``query``, case-insensitively. Empty query shows all."""
        q = (query or "").lower()
        if not q:
            return list(self.names)
        return [name for name in self.names if q in name.lower()]


def parse_rating(value: object) -> Optional[int]:
    """Parse a rating as an integer in 1..5, or return None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        rating = value
    else:
        text = str(value if value is not None else "").strip()
        try:
            rating = int(text)
        except ValueError:
            return None
    if MIN_RATING <= rating <= MAX_RATING:
        return rating
    return None


class SkillsEditor:
    """Skills added so far, unique by name."""

    def __init__(self, catalog: SkillCatalog, skills: Iterable[Skill] = ()):
        self.catalog = catalog
        self.skills: List[Skill] = []
        for skill in skills:
            self._put(skill)

    def __len__(self) -> int:
        return len(self.skills)

    def _put(self, skill: Skill) -> None:
        self.skills = [s for s in self.skills if s.name != skill.name]
        self.skills.append(skill)

    def add_skill(self, name: Optional[str], rating: object) -> Skill:
        """
        Add a skill, replacing any existing entry with the same name.

        Raises:
            SubEntryError: If the name is not a catalog entry or the rating
                is not an integer from 1 to 5.
        """
        name = (name or "").strip()
        if not name or name not in self.catalog:
            raise SubEntryError(SKILL_NAME_REQUIRED)
        parsed = parse_rating(rating)
        if parsed is None:
            raise SubEntryError(SKILL_RATING_INVALID)
        skill = Skill(name=name, rating=parsed)
        self._put(skill)
        logger.debug(f"Skill set: {name}={parsed}")
        return skill

    def remove_skill(self, name: str) -> None:
        self.skills = [s for s in self.skills if s.name != name]

    def names(self) -> List[str]:
        return [s.name for s in self.skills]


class EducationEditor:
    """Education rows in insertion order."""

    def __init__(self, entries: Iterable[Education] = ()):
        self.entries: List[Education] = list(entries)

    def __len__(self) -> int:
        return len(self.entries)

    def add_education(
        self,
        school: Optional[str],
        course: Optional[str],
        completed_year: Optional[str],
    ) -> Education:
        """
        Append an education row.

        Raises:
            SubEntryError: If any of the three fields is empty.
        """
        school = (school or "").strip()
        course = (course or "").strip()
        completed_year = (completed_year or "").strip()
        if not school or not course or not completed_year:
            raise SubEntryError(EDUCATION_FIELDS_REQUIRED)
        entry = Education(school=school, course=course, completed_year=completed_year)
        self.entries.append(entry)
        return entry

    def remove_education(self, index: int) -> None:
        if 0 <= index < len(self.entries):
            del self.entries[index]


def format_month_year(value: Optional[str]) -> str:
    """
    Render a ``YYYY-MM`` value as abbreviated month and year, e.g. "Mar 2021".

    Empty values render as "". Values that are not ``YYYY-MM`` are returned
    unchanged.
    """
    if not value:
        return ""
    parts = value.split("-")
    if len(parts) < 2:
        return value
    try:
        year = int(parts[0])
        month = int(parts[1])
    except ValueError:
        return value
    if not 1 <= month <= 12:
        return value
    return f"{calendar.month_abbr[month]} {year}"


def skills_from_pairs(catalog: SkillCatalog, names: Sequence[str], ratings: Sequence[str]) -> SkillsEditor:
    """
    Rebuild a skills editor from posted hidden fields.

    Pairs that no longer form a valid skill are dropped.
    """
    editor = SkillsEditor(catalog)
    for name, rating in zip(names, ratings):
        parsed = parse_rating(rating)
        if not name or parsed is None:
            logger.debug(f"Dropping malformed posted skill {name!r}={rating!r}")
            continue
        try:
            editor._put(Skill(name=name, rating=parsed))
        except ValidationError:
            continue
    return editor


def education_from_rows(
    schools: Sequence[str],
    courses: Sequence[str],
    years: Sequence[str],
) -> EducationEditor:
    """Rebuild an education editor from posted hidden fields."""
    return EducationEditor(
        Education(school=s, course=c, completed_year=y)
        for s, c, y in zip(schools, courses, years)
    )
