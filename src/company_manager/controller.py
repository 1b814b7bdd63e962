"""
Form controller: create and edit company records.

One controller instance is one form session. ``activate`` resets every
piece of transient state, so nothing from an earlier session survives a
navigation. On a successful submit the controller persists the record,
sets a confirmation message and schedules navigation back to the list;
the scheduled navigation is cancelled if the session ends first.
"""

import logging
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .editors import EducationEditor, SkillCatalog, SkillsEditor
from .errors import RecordNotFoundError
from .models import FORM_FIELDS, Education, Record, Skill
from .repository import RecordRepository
from .scheduling import ScheduledTask, Scheduler, TimerScheduler
from .validator import validate_form

logger = logging.getLogger(__name__)

LIST_ROUTE = "/list"
DEFAULT_NAVIGATE_DELAY = 0.8

SAVED_MESSAGE = "Saved successfully."
RECORD_GONE = "This company no longer exists."

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 8
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Fields kept verbatim; every other field is trimmed
UNTRIMMED_FIELDS = {"designation"}


class FormMode(Enum):
    CREATE = "create"
    EDIT = "edit"


@dataclass
class SubmitResult:
    """Outcome of a submit attempt."""

    success: bool
    errors: List[str] = field(default_factory=list)
    record: Optional[Record] = None


def random_id() -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def empty_fields() -> Dict[str, str]:
    return {name: "" for name in FORM_FIELDS}


class FormController:
    """Drives one create-or-edit form session."""

    def __init__(
        self,
        repository: RecordRepository,
        catalog: SkillCatalog,
        navigate: Callable[[str], None],
        scheduler: Optional[Scheduler] = None,
        navigate_delay: float = DEFAULT_NAVIGATE_DELAY,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = random_id,
    ):
        self.repository = repository
        self.catalog = catalog
        self.navigate = navigate
        self.scheduler = scheduler or TimerScheduler()
        self.navigate_delay = navigate_delay
        self.clock = clock
        self.id_factory = id_factory

        self.mode = FormMode.CREATE
        self.edit_id: Optional[str] = None
        self.original: Optional[Record] = None
        self.fields: Dict[str, str] = empty_fields()
        self.skills = SkillsEditor(catalog)
        self.education = EducationEditor()
        self.errors: List[str] = []
        self.message: Optional[str] = None
        self.pending_navigation: Optional[ScheduledTask] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self, edit_id: Optional[str] = None) -> None:
        """
        Start a fresh form session.

        With ``edit_id`` the stored record is loaded into the form; an
        unknown id leaves the form empty without reporting an error.
        """
        self.deactivate()
        self.mode = FormMode.EDIT if edit_id else FormMode.CREATE
        self.edit_id = edit_id or None
        self.original = None
        self.fields = empty_fields()
        self.skills = SkillsEditor(self.catalog)
        self.education = EducationEditor()
        self.errors = []
        self.message = None

        if self.edit_id is None:
            return

        record = self.repository.find_by_id(self.edit_id)
        if record is None:
            logger.debug(f"Edit requested for unknown record {self.edit_id}; showing empty form")
            return

        self.original = record
        self.fields = record.form_values()
        self.skills = SkillsEditor(self.catalog, record.skills)
        self.education = EducationEditor(record.education)

    def deactivate(self) -> None:
        """End the session, cancelling a navigation that has not fired yet."""
        if self.pending_navigation is not None:
            self.pending_navigation.cancel()
            self.pending_navigation = None

    def load_submission(
        self,
        fields: Mapping[str, Optional[str]],
        skills: Iterable[Skill] = (),
        education: Iterable[Education] = (),
        errors: Iterable[str] = (),
    ) -> None:
        """
        Replace the in-progress values with a posted form's values.

        ``errors`` are the violations from the last submit attempt; they
        stay listed until the next submit.
        """
        self.fields = {name: fields.get(name) or "" for name in FORM_FIELDS}
        self.skills = SkillsEditor(self.catalog, skills)
        self.education = EducationEditor(education)
        self.errors = [e for e in errors if e]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def validate(self) -> List[str]:
        return validate_form(
            self.fields,
            self.skills.skills,
            self.education.entries,
            today=self.clock().date(),
        )

    def build_record(self) -> Record:
        """
        Assemble a record from the current fields and editors.

        In edit mode the id and creation timestamp come from the loaded
        record; in create mode a fresh unused id and the current time are
        assigned.

        Raises:
            RecordNotFoundError: In edit mode when no record was loaded.
        """
        values = {
            name: value if name in UNTRIMMED_FIELDS else value.strip()
            for name, value in self.fields.items()
        }

        if self.mode is FormMode.EDIT:
            if self.original is None:
                raise RecordNotFoundError(self.edit_id or "")
            record_id = self.original.id
            created_at = self.original.created_at
        else:
            record_id = self._new_id()
            created_at = self.clock().strftime(TIMESTAMP_FORMAT)

        return Record(
            id=record_id,
            company_name=values["companyName"],
            company_address=values["companyAddress"],
            company_email=values["companyEmail"],
            company_phone=values["companyPhone"],
            employee_name=values["employeeName"],
            designation=values["designation"],
            join_date=values["joinDate"],
            emp_email=values["empEmail"],
            emp_phone=values["empPhone"],
            skills=list(self.skills.skills),
            education=list(self.education.entries),
            created_at=created_at,
        )

    def submit(self) -> SubmitResult:
        """
        Validate and persist the form.

        Violations are kept on ``errors`` until the next submit and nothing
        is written. On success the record is inserted (create) or replaced
        (edit) and navigation to the list is scheduled.
        """
        self.errors = []
        self.message = None

        violations = self.validate()
        if violations:
            self.errors = violations
            logger.debug(f"Submit rejected with {len(violations)} violation(s)")
            return SubmitResult(success=False, errors=violations)

        try:
            record = self.build_record()
            if self.mode is FormMode.EDIT:
                self.repository.replace(record.id, record)
            else:
                self.repository.insert(record)
        except RecordNotFoundError as e:
            logger.warning(f"Submit for a missing record: {e}")
            self.errors = [RECORD_GONE]
            return SubmitResult(success=False, errors=list(self.errors))

        self.announce_saved()
        return SubmitResult(success=True, record=record)

    def announce_saved(self) -> None:
        """Show the saved confirmation and schedule navigation to the list."""
        self.message = SAVED_MESSAGE
        self.deactivate()
        self.pending_navigation = self.scheduler.schedule(
            self.navigate_delay, lambda: self.navigate(LIST_ROUTE)
        )

    def cancel(self) -> None:
        """Drop all in-progress state and go straight back to the list."""
        self.deactivate()
        self.fields = empty_fields()
        self.skills = SkillsEditor(self.catalog)
        self.education = EducationEditor()
        self.errors = []
        self.message = None
        self.navigate(LIST_ROUTE)

    def _new_id(self) -> str:
        taken = self.repository.existing_ids()
        while True:
            candidate = self.id_factory()
            if candidate and candidate not in taken:
                return candidate
