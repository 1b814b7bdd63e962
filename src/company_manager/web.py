"""
Web UI for Company Manager.

Provides a local-first web interface for:
- Listing and searching company records
- Creating and editing records with skill and education entries
- Deleting records after confirmation

Form State:
===========
Each request builds a fresh form controller. Skills and education entries
added so far travel between requests as hidden form fields, so editing
a form never touches the stored slot until it is submitted.

Security Features (opt-in):
- Basic auth: Set CMGR_WEB_AUTH=user:pass or CMGR_WEB_USER + CMGR_WEB_PASSWORD
- Host binding safety: Refuses non-localhost binds unless explicitly allowed
- CSRF protection: Flask-WTF token validation for all POST requests
"""

from __future__ import annotations

import functools
import logging
import os
import secrets
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from flask import Flask, Response, flash, redirect, render_template, request, url_for
from flask_wtf.csrf import CSRFError, CSRFProtect, generate_csrf

from .config import Config
from .controller import LIST_ROUTE, FormController, FormMode
from .editors import (
    SkillCatalog,
    education_from_rows,
    format_month_year,
    skills_from_pairs,
)
from .errors import SubEntryError
from .models import Education, Skill
from .paths import get_db_path, get_state_dir
from .repository import RecordRepository
from .router import DELETE, EDIT, LIST, NEW, Route, Router
from .scheduling import DeferredScheduler
from .storage import SlotStorage, init_db
from .views import DELETE_PROMPT, ListView

logger = logging.getLogger(__name__)


def get_auth_credentials() -> Optional[tuple[str, str]]:
    """
    Get authentication credentials from environment variables.

    Credentials can be set via:
    - CMGR_WEB_AUTH=user:pass (combined format)
    - CMGR_WEB_USER + CMGR_WEB_PASSWORD (separate vars)

    Returns:
        Tuple of (username, password) if auth is configured, None otherwise.
    """
    auth_combined = os.environ.get("CMGR_WEB_AUTH", "").strip()
    if auth_combined and ":" in auth_combined:
        user, _, password = auth_combined.partition(":")
        if user and password:
            return (user, password)

    user = os.environ.get("CMGR_WEB_USER", "").strip()
    password = os.environ.get("CMGR_WEB_PASSWORD", "").strip()
    if user and password:
        return (user, password)

    return None


def check_auth(username: str, password: str) -> bool:
    """Verify credentials against configured auth using constant-time comparison."""
    creds = get_auth_credentials()
    if creds is None:
        return True

    expected_user, expected_pass = creds
    user_ok = secrets.compare_digest(username, expected_user)
    pass_ok = secrets.compare_digest(password, expected_pass)
    return user_ok and pass_ok


def requires_auth(f: Callable) -> Callable:
    """
    Decorator that requires HTTP Basic Auth if configured.

    If no auth is configured, requests pass through.
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        if get_auth_credentials() is None:
            return f(*args, **kwargs)

        auth = request.authorization
        if not auth or not check_auth(auth.username or "", auth.password or ""):
            return Response(
                "Authentication required.\n"
                "Configure via CMGR_WEB_AUTH=user:pass or "
                "CMGR_WEB_USER + CMGR_WEB_PASSWORD environment variables.",
                401,
                {"WWW-Authenticate": 'Basic realm="Company Manager"'},
            )
        return f(*args, **kwargs)
    return decorated


def is_localhost(host: str) -> bool:
    """True if ``host`` is localhost (127.x.x.x, "localhost" or ::1)."""
    return host == "localhost" or host.startswith("127.") or host == "::1"


def get_secret_key() -> str:
    """
    Get Flask secret key with the following precedence:
    1. Environment variable CMGR_WEB_SECRET
    2. State file .cmgr/web_secret
    3. Generate new random key and save to state file
    """
    secret = os.environ.get("CMGR_WEB_SECRET")
    if secret and secret.strip():
        logger.info("Using secret key from environment variable")
        return secret.strip()

    state_dir = get_state_dir()
    secret_file = state_dir / "web_secret"

    if secret_file.exists():
        try:
            saved_secret = secret_file.read_text().strip()
            if saved_secret:
                logger.info("Using secret key from state file")
                return saved_secret
        except OSError as e:
            logger.warning(f"Could not read secret key file: {e}")

    logger.info("Generating new secret key")
    new_secret = secrets.token_urlsafe(32)
    try:
        state_dir.mkdir(parents=True, exist_ok=True)
        secret_file.write_text(new_secret)
        secret_file.chmod(0o600)
    except OSError as e:
        logger.warning(f"Could not save secret key to disk: {e}")
        logger.warning("Using ephemeral secret key (sessions won't persist)")
    return new_secret


def posted_sub_entries(form: Any, catalog: SkillCatalog) -> Tuple[List[Skill], List[Education]]:
    """Skills and education rows carried in a posted form's hidden fields."""
    skills = skills_from_pairs(
        catalog,
        form.getlist("skill_name"),
        form.getlist("skill_rating"),
    )
    education = education_from_rows(
        form.getlist("edu_school"),
        form.getlist("edu_course"),
        form.getlist("edu_year"),
    )
    return skills.skills, education.entries


def create_app(db_path: Optional[Path] = None, config: Optional[Config] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        db_path: Path to the database file. Falls back to the config, then
            the default location.
        config: Loaded configuration. Defaults are used if None.

    Returns:
        Configured Flask application.
    """
    config = config or Config()
    templates_dir = Path(__file__).parent / "templates"
    static_dir = Path(__file__).parent / "static"

    app = Flask(
        __name__,
        template_folder=str(templates_dir),
        static_folder=str(static_dir),
    )
    app.secret_key = get_secret_key()

    if db_path is None:
        db_path = config.resolve_db_path() or get_db_path()
    app.config["DB_PATH"] = Path(db_path)
    app.config["SLOT"] = config.storage.slot
    app.config["SKILL_CATALOG"] = list(config.skills.catalog)
    app.config["NAVIGATE_DELAY_MS"] = config.form.navigate_delay_ms
    app.config["TOAST_MS"] = config.form.toast_ms

    init_db(app.config["DB_PATH"])

    CSRFProtect(app)
    app.jinja_env.globals["csrf_token"] = generate_csrf
    app.jinja_env.filters["month_year"] = format_month_year

    @app.context_processor
    def inject_globals() -> Dict[str, Any]:
        return {"toast_ms": app.config["TOAST_MS"]}

    @app.errorhandler(CSRFError)
    def csrf_failed(e: CSRFError):
        logger.warning("CSRF token validation failed for %s: %s", request.path, e.description)
        return Response(
            "CSRF token validation failed. Please reload the page and try again.",
            400,
        )

    def get_repository() -> RecordRepository:
        return RecordRepository(SlotStorage(app.config["DB_PATH"], app.config["SLOT"]))

    def get_catalog() -> SkillCatalog:
        return SkillCatalog(app.config["SKILL_CATALOG"])

    def list_url() -> str:
        return url_for("dispatch", path=LIST)

    # -------------------------
    # List view
    # -------------------------
    def list_view(route: Route):
        if route.fallback:
            return redirect(list_url())

        query = request.args.get("q", "")
        # Listing never deletes; the delete route supplies a real confirmation.
        view = ListView(get_repository(), confirm=lambda record: False)
        records = view.show(query)
        return render_template(
            "list.html",
            page_title="Company List",
            records=records,
            query=query,
        )

    # -------------------------
    # Delete confirmation
    # -------------------------
    def delete_view(route: Route):
        repository = get_repository()
        record_id = route.record_id or ""

        if request.method == "POST":
            view = ListView(
                repository,
                confirm=lambda record: request.form.get("confirm") == "yes",
            )
            if view.delete(record_id):
                flash("Company deleted.", "success")
            return redirect(list_url())

        record = repository.find_by_id(record_id)
        if record is None:
            return redirect(list_url())
        return render_template(
            "confirm_delete.html",
            page_title="Delete Company",
            record=record,
            prompt=DELETE_PROMPT,
        )

    # -------------------------
    # Form view
    # -------------------------
    def form_view(route: Route):
        catalog = get_catalog()
        navigation: Dict[str, str] = {}
        controller = FormController(
            get_repository(),
            catalog,
            navigate=lambda target: navigation.setdefault("target", target),
            scheduler=DeferredScheduler(),
            navigate_delay=app.config["NAVIGATE_DELAY_MS"] / 1000.0,
        )
        controller.activate(route.record_id if route.key == EDIT else None)

        toast: Optional[str] = None
        skill_query = ""
        new_skill_rating = ""
        new_edu: Dict[str, str] = {"school": "", "course": "", "year": ""}

        if request.method == "POST":
            action = request.form.get("action", "submit")
            if action == "cancel":
                controller.cancel()
                return redirect(url_for("dispatch", path=navigation["target"].lstrip("/")))

            skills, education = posted_sub_entries(request.form, catalog)
            controller.load_submission(
                request.form, skills, education, errors=request.form.getlist("error")
            )
            skill_query = request.form.get("skill_search", "")
            new_skill_rating = request.form.get("new_skill_rating", "")
            new_edu = {
                "school": request.form.get("new_edu_school", ""),
                "course": request.form.get("new_edu_course", ""),
                "year": request.form.get("new_edu_year", ""),
            }

            command, _, argument = action.partition(":")
            try:
                if command == "add_skill":
                    controller.skills.add_skill(
                        request.form.get("new_skill_name"), new_skill_rating
                    )
                    skill_query = ""
                    new_skill_rating = ""
                elif command == "remove_skill":
                    controller.skills.remove_skill(argument)
                elif command == "add_education":
                    controller.education.add_education(
                        new_edu["school"], new_edu["course"], new_edu["year"]
                    )
                    new_edu = {"school": "", "course": "", "year": ""}
                elif command == "remove_education":
                    if argument.isdigit():
                        controller.education.remove_education(int(argument))
                elif command == "submit":
                    result = controller.submit()
                    if result.success:
                        # Post/redirect/get; the saved page edits the stored record.
                        saved_path = Route(EDIT, result.record.id).path.lstrip("/")
                        return redirect(url_for("dispatch", path=saved_path, saved=1))
            except SubEntryError as e:
                toast = e.message
        elif request.args.get("saved") and controller.original is not None:
            controller.announce_saved()

        pending = controller.pending_navigation
        return render_template(
            "form.html",
            page_title="Edit Company" if controller.mode is FormMode.EDIT else "New Company",
            form_path=route.path,
            controller=controller,
            fields=controller.fields,
            skills=controller.skills.skills,
            education=controller.education.entries,
            catalog_names=catalog.filter(skill_query),
            skill_query=skill_query,
            new_skill_rating=new_skill_rating,
            new_edu=new_edu,
            toast=toast,
            redirect_delay_ms=round(pending.delay * 1000) if pending is not None else None,
            redirect_url=url_for("dispatch", path=LIST_ROUTE.lstrip("/")),
        )

    router = Router()
    router.add(LIST, list_view)
    router.add(NEW, form_view)
    router.add(EDIT, form_view)
    router.add(DELETE, delete_view)

    @app.route("/", defaults={"path": ""}, methods=["GET", "POST"])
    @app.route("/<path:path>", methods=["GET", "POST"])
    @requires_auth
    def dispatch(path: str):
        return router.dispatch(path)

    return app


def run_server(
    host: str = "127.0.0.1",
    port: int = 5000,
    debug: bool = False,
    db_path: Optional[Path] = None,
    config: Optional[Config] = None,
    allow_unsafe_bind: bool = False,
) -> None:
    """
    Run the web server.

    Args:
        host: Host to bind to. Defaults to 127.0.0.1 (localhost only).
        port: Port to listen on.
        debug: Enable debug mode.
        db_path: Path to the database file.
        config: Loaded configuration.
        allow_unsafe_bind: If True, allow binding to non-localhost addresses.
    """
    if not is_localhost(host) and not allow_unsafe_bind:
        print("\n" + "=" * 70)
        print("WARNING: BINDING TO NON-LOCALHOST ADDRESS")
        print("=" * 70)
        print(f"   You are binding to '{host}' which may expose this server")
        print("   to other machines on your network or the internet.")
        print()
        print("   Consider using authentication by setting:")
        print("     CMGR_WEB_AUTH=username:password")
        print()
        print("   To proceed anyway, use:")
        print("     --i-know-what-im-doing")
        print("=" * 70 + "\n")
        raise SystemExit(1)

    if get_auth_credentials() is not None:
        logger.info("Authentication is ENABLED")
    else:
        logger.info("Authentication is DISABLED (set CMGR_WEB_AUTH to enable)")

    app = create_app(db_path, config)
    logger.info(f"Starting Company Manager at http://{host}:{port}")
    print(f"\nCompany Manager running at http://{host}:{port}")
    print("   Press Ctrl+C to stop\n")
    app.run(host=host, port=port, debug=debug)
