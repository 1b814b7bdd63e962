"""Test configuration and fixtures for Company Manager tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for development testing
_src_dir = Path(__file__).parent.parent / "src"
if _src_dir.exists():
    sys.path.insert(0, str(_src_dir))

from company_manager.editors import SkillCatalog  # noqa: E402
from company_manager.models import Education, Record, Skill  # noqa: E402
from company_manager.repository import RecordRepository  # noqa: E402
from company_manager.storage import SlotStorage, init_db  # noqa: E402


# ==============================================================================
# Shared pytest fixtures
# ==============================================================================

@pytest.fixture(autouse=True)
def web_environment(monkeypatch):
    """Keep the web secret and auth settings out of the real environment."""
    monkeypatch.setenv("CMGR_WEB_SECRET", "test-secret")
    for name in ("CMGR_WEB_AUTH", "CMGR_WEB_USER", "CMGR_WEB_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path) -> Path:
    """An initialized, empty database."""
    path = tmp_path / "db" / "companies.db"
    init_db(path)
    return path


@pytest.fixture
def storage(db_path) -> SlotStorage:
    return SlotStorage(db_path)


@pytest.fixture
def repository(storage) -> RecordRepository:
    return RecordRepository(storage)


@pytest.fixture
def catalog() -> SkillCatalog:
    return SkillCatalog(["Python", "Go", "SQL", "Docker", "JavaScript"])


def make_record(record_id: str = "abc12345", **overrides) -> Record:
    """Build a valid record; keyword arguments override attributes."""
    values = dict(
        id=record_id,
        company_name="Acme",
        company_address="1 Main St",
        company_email="a@acme.com",
        company_phone="12345",
        employee_name="Jo",
        designation="Engineer",
        join_date="2020-01-01",
        emp_email="jo@acme.com",
        emp_phone="555",
        skills=[Skill(name="Go", rating=4)],
        education=[Education(school="MIT", course="CS", completed_year="2015-06")],
        created_at="2024-01-02 03:04:05",
    )
    values.update(overrides)
    return Record(**values)


@pytest.fixture
def sample_record() -> Record:
    return make_record()
