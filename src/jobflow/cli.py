"""
JobFlow command line.

Each sub-command maps to a dashboard route. Protected routes go through the
route guard first: without a stored token the command stops and asks the
user to log in (exit code 3).

Exit codes:
    0  success
    1  request or validation failure
    2  usage error
    3  not logged in
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm, Prompt

from jobflow.coordinator import DashboardCoordinator
from jobflow.models.application import APPLICATION_STATUSES
from jobflow.models.config import ClientSettings
from jobflow.models.job import JOB_URL_STATUSES, POSTED_AFTER_CHOICES
from jobflow.router import LOGIN_PATH
from jobflow.services.auth import AuthError
from jobflow.services.uploads import UploadError
from jobflow.utils.forms import FormValidationError
from jobflow.utils.http_client import HttpError, NetworkError
from jobflow.views.selection import Selection

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_LOGIN_REQUIRED = 3

# Route rendered by each sub-command
COMMAND_ROUTES = {
    "login": LOGIN_PATH,
    "signup": LOGIN_PATH,
    "logout": LOGIN_PATH,
    "whoami": LOGIN_PATH,
    "dashboard": "/",
    "urls": "/urls",
    "applications": "/applications",
    "preferences": "/preferences",
    "profile": "/profile",
    "upload": "/profile",
    "search": "/listings",
    "listings": "/listings",
    "auto-apply": "/listings",
    "settings": "/settings",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobflow", description="Job search dashboard for the terminal"
    )
    parser.add_argument("--config", help="Path to client settings JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    for name in ("login", "signup"):
        p = sub.add_parser(name, help=f"{name.capitalize()} with email and password")
        p.add_argument("--email")
        p.add_argument("--password")
    sub.add_parser("logout", help="Forget the stored token")
    sub.add_parser("whoami", help="Show the logged-in email")
    sub.add_parser("dashboard", help="Stats, preferences and recent applications")

    urls = sub.add_parser("urls", help="Manage saved job URLs")
    urls_sub = urls.add_subparsers(dest="action", required=True)
    p = urls_sub.add_parser("list")
    p.add_argument("--search", default="")
    p.add_argument("--status", choices=("all", *JOB_URL_STATUSES), default="all")
    p = urls_sub.add_parser("add")
    p.add_argument("url")
    p.add_argument("--company")
    p.add_argument("--position")
    p.add_argument("--location")
    p.add_argument("--title")
    p.add_argument("--status", choices=JOB_URL_STATUSES, default="pending")
    p = urls_sub.add_parser("delete")
    p.add_argument("ids", nargs="+")
    p = urls_sub.add_parser("open")
    p.add_argument("ids", nargs="*")
    p.add_argument("--all", action="store_true", help="Open every listed URL")

    p = sub.add_parser("applications", help="List submitted applications")
    p.add_argument("--search", default="")
    p.add_argument("--status", choices=("all", *APPLICATION_STATUSES), default="all")

    prefs = sub.add_parser("preferences", help="Free-text job preferences")
    prefs_sub = prefs.add_subparsers(dest="action", required=True)
    prefs_sub.add_parser("show")
    p = prefs_sub.add_parser("edit")
    p.add_argument("--qualifications")
    p.add_argument("--work-experience")
    p.add_argument("--job-preferences")

    profile = sub.add_parser("profile", help="Professional profile")
    profile_sub = profile.add_subparsers(dest="action", required=True)
    profile_sub.add_parser("show")
    p = profile_sub.add_parser("edit")
    for field in (
        "name",
        "email",
        "phone",
        "location",
        "experience",
        "education",
        "summary",
        "availability",
        "salary-expectation",
        "linkedin-url",
        "github-url",
        "portfolio-url",
    ):
        p.add_argument(f"--{field}")
    p.add_argument("--remote", action=argparse.BooleanOptionalAction, default=None)
    for field in ("skill", "language", "certification"):
        p.add_argument(f"--add-{field}", action="append", default=[])
        p.add_argument(f"--remove-{field}", action="append", default=[])

    p = sub.add_parser("upload", help="Upload a CV (PDF, DOC or DOCX, max 5MB)")
    p.add_argument("path", type=Path)

    p = sub.add_parser("search", help="Discover jobs")
    p.add_argument("--title", required=True)
    p.add_argument("--location", required=True)
    p.add_argument("--posted-after", choices=tuple(POSTED_AFTER_CHOICES), default="7")
    p.add_argument("--remote", action="store_true")

    sub.add_parser("listings", help="Show jobs from the last search")
    p = sub.add_parser("auto-apply", help="Send selected jobs to the extension")
    p.add_argument("ids", nargs="*")
    p.add_argument("--all", action="store_true", help="Apply to every listed job")

    settings = sub.add_parser("settings", help="Local dashboard settings")
    settings_sub = settings.add_subparsers(dest="action", required=True)
    settings_sub.add_parser("show")
    p = settings_sub.add_parser("set")
    p.add_argument("pairs", nargs="+", metavar="KEY=VALUE")
    p = settings_sub.add_parser("export")
    p.add_argument("--format", choices=("json", "csv"), default="json")
    p.add_argument("--output", type=Path)
    p = settings_sub.add_parser("clear-data")
    p.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser


def parse_setting_pairs(pairs: Sequence[str]) -> dict[str, Any]:
    """Parse KEY=VALUE pairs; values are read as JSON when possible."""
    changes: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got: {pair}")
        try:
            changes[key] = json.loads(raw)
        except json.JSONDecodeError:
            changes[key] = raw
    return changes


def _status_filter(status: str) -> Optional[str]:
    return None if status == "all" else status


async def _authenticate(app: DashboardCoordinator, args: argparse.Namespace) -> int:
    email = args.email or Prompt.ask("Email")
    password = args.password if args.password is not None else Prompt.ask(
        "Password", password=True
    )
    action = app.auth.signup if args.command == "signup" else app.auth.login
    try:
        with app.notifier.busy("Signing in..."):
            result = await action(email, password)
    except FormValidationError as e:
        for message in e.field_errors.values():
            app.notifier.error("Invalid input", message)
        return EXIT_FAILURE
    except (AuthError, HttpError, NetworkError) as e:
        title = "Signup failed" if args.command == "signup" else "Login failed"
        app.notifier.error(title, str(e))
        return EXIT_FAILURE
    app.notifier.success("Welcome!", f"Signed in as {result.email}")
    return EXIT_OK


async def _upload(app: DashboardCoordinator, path: Path) -> int:
    try:
        with app.notifier.busy("Uploading CV..."):
            result = await app.uploads.upload(path)
    except UploadError as e:
        app.notifier.error("Upload failed", str(e))
        return EXIT_FAILURE
    except (HttpError, NetworkError) as e:
        app.notifier.error("Upload failed", str(e))
        return EXIT_FAILURE
    app.notifier.success("CV uploaded", f"{result.file_name} ({result.file_url})")
    return EXIT_OK


async def _urls(app: DashboardCoordinator, args: argparse.Namespace) -> int:
    view = app.job_urls_view
    if args.action == "list":
        ok = await view.show(args.search, _status_filter(args.status))
    elif args.action == "add":
        ok = await view.add(
            {
                "url": args.url,
                "company": args.company,
                "position": args.position,
                "location": args.location,
                "title": args.title,
                "status": args.status,
            }
        )
    elif args.action == "delete":
        ok = await view.delete(args.ids) == len(args.ids)
    else:
        selection = Selection(args.ids)
        if args.all:
            try:
                urls = await app.job_urls.list()
            except (HttpError, NetworkError) as e:
                app.notifier.error("Failed to load job URLs", str(e))
                return EXIT_FAILURE
            selection.toggle_all(u.id for u in urls)
        ok = await view.open_selected(selection) > 0
    return EXIT_OK if ok else EXIT_FAILURE


async def _profile(app: DashboardCoordinator, args: argparse.Namespace) -> int:
    if args.action == "show":
        ok = await app.profile_view.show()
    else:
        changes = {
            "name": args.name,
            "email": args.email,
            "phone": args.phone,
            "location": args.location,
            "experience": args.experience,
            "education": args.education,
            "summary": args.summary,
            "availability": args.availability,
            "salary_expectation": args.salary_expectation,
            "linkedin_url": args.linkedin_url,
            "github_url": args.github_url,
            "portfolio_url": args.portfolio_url,
            "remote_preference": args.remote,
        }
        list_edits = {
            "skills": (args.add_skill, args.remove_skill),
            "languages": (args.add_language, args.remove_language),
            "certifications": (args.add_certification, args.remove_certification),
        }
        ok = await app.profile_view.edit(changes, list_edits)
    return EXIT_OK if ok else EXIT_FAILURE


async def _settings(app: DashboardCoordinator, args: argparse.Namespace) -> int:
    view = app.settings_view
    if args.action == "show":
        return EXIT_OK if view.show() else EXIT_FAILURE
    if args.action == "set":
        try:
            changes = parse_setting_pairs(args.pairs)
        except ValueError as e:
            app.notifier.error("Invalid setting", str(e))
            return EXIT_USAGE
        return EXIT_OK if view.set(changes) else EXIT_FAILURE
    if args.action == "export":
        output = args.output or Path(f"jobflow-export.{args.format}")
        return EXIT_OK if await view.export(args.format, output) else EXIT_FAILURE

    if not args.yes and not Confirm.ask(
        "Are you sure you want to clear all data? This action cannot be undone."
    ):
        return EXIT_OK
    view.clear_data()
    return EXIT_OK


async def dispatch(app: DashboardCoordinator, args: argparse.Namespace) -> int:
    """Run one parsed command against a coordinator."""
    decision = app.navigate(COMMAND_ROUTES[args.command])
    if not decision.should_render:
        app.notifier.error("Not logged in", "Please log in first: jobflow login")
        return EXIT_LOGIN_REQUIRED

    command = args.command
    if command in ("login", "signup"):
        return await _authenticate(app, args)
    if command == "logout":
        app.auth.logout()
        app.notifier.success("Logged out")
        return EXIT_OK
    if command == "whoami":
        if not app.auth.is_logged_in():
            app.notifier.error("Not logged in", "Please log in first: jobflow login")
            return EXIT_LOGIN_REQUIRED
        app.notifier.console.print(app.auth.current_email() or "(unknown email)")
        return EXIT_OK
    if command == "dashboard":
        ok = await app.dashboard_view.show()
    elif command == "urls":
        return await _urls(app, args)
    elif command == "applications":
        ok = await app.applications_view.show(args.search, _status_filter(args.status))
    elif command == "preferences":
        if args.action == "show":
            ok = await app.preferences_view.show()
        else:
            ok = (
                await app.preferences_view.edit(
                    {
                        "qualifications": args.qualifications,
                        "work_experience": args.work_experience,
                        "job_preferences": args.job_preferences,
                    }
                )
                is not None
            )
    elif command == "profile":
        return await _profile(app, args)
    elif command == "upload":
        return await _upload(app, args.path)
    elif command == "search":
        result = await app.listings_view.search(
            {
                "title": args.title,
                "location": args.location,
                "posted_after": args.posted_after,
                "remote": args.remote,
            }
        )
        ok = result is not None
        if ok:
            app.listings_view.show()
    elif command == "listings":
        ok = app.listings_view.show()
    elif command == "auto-apply":
        selection = Selection(args.ids)
        if args.all:
            selection.toggle_all(j.id for j in app.discovery.discovered_jobs())
        ok = await app.listings_view.auto_apply(selection) > 0
    else:
        return await _settings(app, args)
    return EXIT_OK if ok else EXIT_FAILURE


async def run(args: argparse.Namespace, settings: Optional[ClientSettings] = None) -> int:
    async with DashboardCoordinator(settings=settings, config_path=args.config) as app:
        return await dispatch(app, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = ClientSettings.load(args.config)
    except (FileNotFoundError, ValidationError) as e:
        Console(stderr=True).print(f"[bold red]Configuration error:[/bold red] {e}")
        return EXIT_FAILURE

    try:
        return asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
