"""
Tests for company_manager.web module.

Tests the Flask routes for the list, form and delete views, plus auth,
CSRF and host binding safety.
"""

import re
from base64 import b64encode

import pytest

from company_manager.repository import RecordRepository
from company_manager.storage import SlotStorage

from conftest import make_record

EXAMPLE_FORM = {
    "companyName": "Acme",
    "companyAddress": "",
    "companyEmail": "a@acme.com",
    "companyPhone": "12345",
    "employeeName": "Jo",
    "designation": "",
    "joinDate": "2020-01-01",
    "empEmail": "jo@acme.com",
    "empPhone": "555",
    "skill_name": ["Go"],
    "skill_rating": ["4"],
    "edu_school": ["MIT"],
    "edu_course": ["CS"],
    "edu_year": ["2015-06"],
}


def get_csrf_token(response) -> str:
    """Extract the CSRF token from a response's HTML."""
    match = re.search(
        rb'name="csrf_token"[^>]*value="([^"]*)"',
        response.data
    )
    if match:
        return match.group(1).decode("utf-8")
    return ""


def form_data(action: str, **overrides):
    data = dict(EXAMPLE_FORM)
    data["action"] = action
    data.update(overrides)
    return data


@pytest.fixture
def app(db_path):
    """Create a test Flask app with CSRF checks off."""
    from company_manager.web import create_app

    app = create_app(db_path)
    app.config["TESTING"] = True
    app.config["WTF_CSRF_ENABLED"] = False
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def repo(db_path):
    return RecordRepository(SlotStorage(db_path))


class TestRouting:
    """Tests for route fallback."""

    def test_root_redirects_to_list(self, client):
        """Test that the empty route lands on the list."""
        response = client.get("/")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/list")

    def test_unknown_route_redirects_to_list(self, client):
        """Test that unrecognized paths fall back to the list."""
        response = client.get("/something/else/entirely")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/list")

    def test_static_assets_served(self, client):
        """Test that static files are not swallowed by the router."""
        response = client.get("/static/app.js")
        assert response.status_code == 200


class TestListPage:
    """Tests for the list view."""

    def test_empty_list(self, client):
        """Test the empty-state row."""
        response = client.get("/list")
        assert response.status_code == 200
        assert b"No companies added yet." in response.data

    def test_lists_records(self, client, repo):
        """Test that stored records are shown with actions."""
        repo.insert(make_record("a1", company_name="Acme"))
        repo.insert(make_record("b2", company_name="Beta", company_email="b@beta.io"))

        response = client.get("/list")

        assert b"Acme" in response.data
        assert b"Beta" in response.data
        assert b"/edit/a1" in response.data
        assert b"/delete/b2" in response.data

    def test_search(self, client, repo):
        """Test filtering by the search box."""
        repo.insert(make_record("a1", company_name="Acme"))
        repo.insert(make_record("b2", company_name="Beta", company_email="b@beta.io"))

        response = client.get("/list?q=BETA")

        assert b"Beta" in response.data
        assert b"/edit/a1" not in response.data

    def test_search_without_match(self, client, repo):
        """Test the empty state for a search with no result."""
        repo.insert(make_record("a1"))
        response = client.get("/list?q=zzz")
        assert b"No matching companies." in response.data


class TestFormPage:
    """Tests for the create and edit form."""

    def test_new_form(self, client):
        """Test that the create form renders with the skill catalog."""
        response = client.get("/new")
        assert response.status_code == 200
        assert b"New Company" in response.data
        assert b'<option value="Python">' in response.data

    def test_add_skill(self, client):
        """Test adding a skill chip."""
        response = client.post("/new", data=form_data(
            "add_skill", skill_name=[], skill_rating=[], new_skill_name="Python", new_skill_rating="5",
        ))
        assert response.status_code == 200
        assert b'name="skill_name" value="Python"' in response.data
        assert "Python — Rating: 5".encode() in response.data

    def test_add_skill_bad_rating_shows_toast(self, client):
        """Test that a rejected skill shows a self-dismissing message."""
        response = client.post("/new", data=form_data(
            "add_skill", new_skill_name="Python", new_skill_rating="9",
        ))
        assert "Enter rating 1–5.".encode() in response.data
        assert b"data-dismiss-after=\"2000\"" in response.data
        assert b'name="skill_name" value="Python"' not in response.data

    def test_readd_skill_replaces(self, client):
        """Test that adding an existing skill name updates its rating."""
        response = client.post("/new", data=form_data(
            "add_skill", new_skill_name="Go", new_skill_rating="2",
        ))
        assert response.data.count(b'name="skill_name" value="Go"') == 1
        assert "Go — Rating: 2".encode() in response.data

    def test_remove_skill(self, client):
        """Test removing a skill chip."""
        response = client.post("/new", data=form_data("remove_skill:Go"))
        assert b'name="skill_name" value="Go"' not in response.data

    def test_add_education(self, client):
        """Test adding an education row with a formatted year."""
        response = client.post("/new", data=form_data(
            "add_education", edu_school=[], edu_course=[], edu_year=[],
            new_edu_school="ETH", new_edu_course="Math", new_edu_year="2021-03",
        ))
        assert "ETH — Math — Mar 2021".encode() in response.data

    def test_add_education_missing_field(self, client):
        """Test the transient error for an incomplete education row."""
        response = client.post("/new", data=form_data(
            "add_education", new_edu_school="ETH", new_edu_course="", new_edu_year="2021-03",
        ))
        assert b"Education: all fields are required." in response.data

    def test_remove_education(self, client):
        """Test removing an education row by position."""
        response = client.post("/new", data=form_data("remove_education:0"))
        assert b'name="edu_school" value="MIT"' not in response.data

    def test_filter_skills(self, client):
        """Test narrowing the catalog options."""
        response = client.post("/new", data=form_data("filter_skills", skill_search="scri"))
        assert b'<option value="JavaScript">' in response.data
        assert b'<option value="TypeScript">' in response.data
        assert b'<option value="Python">' not in response.data
        # already-added skills stay
        assert b'name="skill_name" value="Go"' in response.data

    def test_submit_creates_record(self, client, repo):
        """Test the create example end to end through the web form."""
        response = client.post("/new", data=form_data("submit"))

        records = repo.list_all()
        assert len(records) == 1
        assert records[0].company_name == "Acme"
        assert records[0].skills[0].name == "Go"
        assert records[0].education[0].completed_year == "2015-06"
        assert records[0].created_at

        assert response.status_code == 302
        assert response.headers["Location"].endswith(f"/edit/{records[0].id}?saved=1")

    def test_saved_page_confirms_and_navigates(self, client, repo):
        """Test the confirmation page shown after a save."""
        response = client.post("/new", data=form_data("submit"), follow_redirects=True)

        assert response.status_code == 200
        assert b"Saved successfully." in response.data
        assert b'data-navigate-url="/list" data-navigate-after="800"' in response.data
        assert b'<noscript><meta http-equiv="refresh" content="1;url=/list"></noscript>' in response.data
        assert f'action="/edit/{repo.list_all()[0].id}"'.encode() in response.data

    def test_refresh_after_save_does_not_duplicate(self, client, repo):
        """Test that reloading the saved page or saving again keeps one record."""
        response = client.post("/new", data=form_data("submit"))
        saved_url = response.headers["Location"]
        record_id = repo.list_all()[0].id

        client.get(saved_url)
        client.get(saved_url)
        client.post(f"/edit/{record_id}", data=form_data("submit"))

        assert [r.id for r in repo.list_all()] == [record_id]

    def test_errors_survive_sub_entry_actions(self, client):
        """Test that validation errors stay listed until the next submit."""
        first = client.post("/new", data=form_data("submit", companyName=""))
        errors = [e.decode("utf-8") for e in re.findall(rb'name="error" value="([^"]*)"', first.data)]
        assert errors == ["Company Name is required."]

        second = client.post("/new", data=form_data(
            "add_education", companyName="", error=errors,
            new_edu_school="ETH", new_edu_course="Math", new_edu_year="2021-03",
        ))
        assert b"Company Name is required." in second.data
        assert "ETH — Math — Mar 2021".encode() in second.data

        third = client.post("/new", data=form_data("submit", companyName="", error=errors, joinDate="9999-01-01"))
        assert b"Company Name is required." in third.data
        assert b"Join Date must be a past date." in third.data

    def test_resubmit_clears_stale_errors(self, client, repo):
        """Test that a successful submit drops errors carried from earlier."""
        response = client.post("/new", data=form_data("submit", error=["Company Name is required."]))
        assert response.status_code == 302
        assert len(repo.list_all()) == 1

    def test_submit_invalid_shows_all_errors(self, client, repo):
        """Test that an empty form lists every violation and stores nothing."""
        response = client.post("/new", data={"action": "submit"})

        assert b"Company Name is required." in response.data
        assert b"Employee Phone is required." in response.data
        assert b"Add at least one skill." in response.data
        assert b"Add at least one education entry." in response.data
        assert b"data-navigate-url" not in response.data
        assert repo.list_all() == []

    def test_submit_future_join_date(self, client, repo):
        """Test that a future join date blocks saving."""
        response = client.post("/new", data=form_data("submit", joinDate="9999-01-01"))
        assert b"Join Date must be a past date." in response.data
        assert repo.list_all() == []

    def test_cancel(self, client, repo):
        """Test that cancel goes back to the list without saving."""
        response = client.post("/new", data=form_data("cancel"))
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/list")
        assert repo.list_all() == []

    def test_edit_form_seeded(self, client, repo, sample_record):
        """Test that the edit form shows stored values."""
        repo.insert(sample_record)

        response = client.get(f"/edit/{sample_record.id}")

        assert b"Edit Company" in response.data
        assert b'value="Acme"' in response.data
        assert b'name="skill_name" value="Go"' in response.data
        assert "MIT — CS — Jun 2015".encode() in response.data

    def test_edit_unknown_id_shows_empty_form(self, client):
        """Test the silent fallback for an unknown id."""
        response = client.get("/edit/missing")
        assert response.status_code == 200
        assert b"Edit Company" in response.data
        assert b'name="skill_name"' not in response.data

    def test_edit_submit_preserves_identity(self, client, repo, sample_record):
        """Test that editing keeps id and createdAt."""
        repo.insert(sample_record)

        client.post(f"/edit/{sample_record.id}", data=form_data("submit", companyName="Acme Two"))

        records = repo.list_all()
        assert len(records) == 1
        assert records[0].id == sample_record.id
        assert records[0].created_at == sample_record.created_at
        assert records[0].company_name == "Acme Two"

    def test_edit_submit_for_deleted_record(self, client, repo):
        """Test that saving an edit for a missing record reports it."""
        response = client.post("/edit/missing", data=form_data("submit"))
        assert b"This company no longer exists." in response.data
        assert repo.list_all() == []


class TestDelete:
    """Tests for the delete confirmation flow."""

    def test_confirmation_page(self, client, repo, sample_record):
        """Test that deleting asks first."""
        repo.insert(sample_record)
        response = client.get(f"/delete/{sample_record.id}")
        assert b"Are you sure you want to delete this company?" in response.data
        assert len(repo.list_all()) == 1

    def test_confirmed_delete(self, client, repo, sample_record):
        """Test that a confirmed POST deletes."""
        repo.insert(sample_record)
        response = client.post(
            f"/delete/{sample_record.id}", data={"confirm": "yes"}, follow_redirects=True
        )
        assert response.status_code == 200
        assert b"Company deleted." in response.data
        assert repo.list_all() == []

    def test_unconfirmed_delete_keeps_record(self, client, repo, sample_record):
        """Test that a POST without confirmation deletes nothing."""
        repo.insert(sample_record)
        client.post(f"/delete/{sample_record.id}", data={})
        assert len(repo.list_all()) == 1

    def test_delete_missing_redirects(self, client):
        """Test that an unknown id goes back to the list."""
        response = client.get("/delete/missing")
        assert response.status_code == 302


class TestWebAuth:
    """Tests for optional basic auth."""

    @pytest.fixture
    def client_with_auth(self, db_path, monkeypatch):
        from company_manager.web import create_app

        monkeypatch.setenv("CMGR_WEB_AUTH", "admin:secret123")
        app = create_app(db_path)
        app.config["TESTING"] = True
        return app.test_client()

    def test_requires_credentials(self, client_with_auth):
        """Test that requests without credentials are refused."""
        response = client_with_auth.get("/list")
        assert response.status_code == 401
        assert "WWW-Authenticate" in response.headers

    def test_wrong_credentials(self, client_with_auth):
        """Test that wrong credentials are refused."""
        credentials = b64encode(b"admin:wrong").decode("utf-8")
        response = client_with_auth.get("/list", headers={"Authorization": f"Basic {credentials}"})
        assert response.status_code == 401

    def test_valid_credentials(self, client_with_auth):
        """Test that valid credentials pass."""
        credentials = b64encode(b"admin:secret123").decode("utf-8")
        response = client_with_auth.get("/list", headers={"Authorization": f"Basic {credentials}"})
        assert response.status_code == 200

    def test_separate_env_vars(self, monkeypatch):
        """Test the user/password variable pair."""
        from company_manager.web import get_auth_credentials

        monkeypatch.setenv("CMGR_WEB_USER", "u")
        monkeypatch.setenv("CMGR_WEB_PASSWORD", "p")
        assert get_auth_credentials() == ("u", "p")


class TestCSRFProtection:
    """Tests for CSRF protection."""

    @pytest.fixture
    def client(self, db_path):
        from company_manager.web import create_app

        app = create_app(db_path)
        app.config["TESTING"] = True
        return app.test_client()

    def test_post_without_token_fails(self, client):
        """Test that POST without a token is rejected."""
        response = client.post("/new", data=form_data("submit"))
        assert response.status_code == 400
        assert b"CSRF token validation failed" in response.data

    def test_post_with_token_succeeds(self, client):
        """Test that POST with the form's token is accepted."""
        token = get_csrf_token(client.get("/new"))
        assert token

        response = client.post("/new", data=form_data("submit", csrf_token=token), follow_redirects=True)

        assert response.status_code == 200
        assert b"Saved successfully." in response.data

    def test_delete_requires_token(self, client, db_path, sample_record):
        """Test that the delete POST is protected too."""
        RecordRepository(SlotStorage(db_path)).insert(sample_record)
        response = client.post(f"/delete/{sample_record.id}", data={"confirm": "yes"})
        assert response.status_code == 400


class TestHostBindingSafety:
    """Tests for non-localhost binding checks."""

    @pytest.mark.parametrize("host", ["127.0.0.1", "localhost", "127.1.2.3", "::1"])
    def test_localhost(self, host):
        """Test addresses treated as local."""
        from company_manager.web import is_localhost
        assert is_localhost(host) is True

    @pytest.mark.parametrize("host", ["0.0.0.0", "192.168.1.1", "10.0.0.1"])
    def test_not_localhost(self, host):
        """Test addresses treated as exposed."""
        from company_manager.web import is_localhost
        assert is_localhost(host) is False

    def test_run_server_refuses_exposed_host(self, db_path):
        """Test that run_server exits for non-localhost without the flag."""
        from company_manager.web import run_server

        with pytest.raises(SystemExit) as exc_info:
            run_server(host="0.0.0.0", db_path=db_path, allow_unsafe_bind=False)

        assert exc_info.value.code == 1
