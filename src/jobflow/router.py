"""
Route Table and Guard

Every dashboard tab is a route. Protected routes require a stored token; the
guard only checks that a token exists and never calls the backend, so a
logged-in user's view renders immediately.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from jobflow.utils.logger import get_logger
from jobflow.utils.token_store import CredentialProvider

LOGIN_PATH = "/auth"

RouteAction = Literal["render", "redirect", "not-found"]


@dataclass(frozen=True)
class Route:
    path: str
    title: str
    protected: bool = True


ROUTES: dict[str, Route] = {
    route.path: route
    for route in (
        Route(LOGIN_PATH, "Sign in", protected=False),
        Route("/", "Dashboard"),
        Route("/applications", "Applications"),
        Route("/urls", "Job URLs"),
        Route("/listings", "Job Listings"),
        Route("/profile", "Profile"),
        Route("/preferences", "Preferences"),
        Route("/settings", "Settings"),
    )
}


@dataclass(frozen=True)
class RouteDecision:
    action: RouteAction
    path: str
    route: Optional[Route] = None
    redirect_to: Optional[str] = None

    @property
    def should_render(self) -> bool:
        return self.action == "render"


def normalize_path(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0] or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


class RouteGuard:
    """Decides whether a path renders, redirects to login, or is unknown."""

    def __init__(self, credentials: CredentialProvider):
        self.credentials = credentials
        self.logger = get_logger(component="route_guard")

    def resolve(self, path: str) -> RouteDecision:
        path = normalize_path(path)
        route = ROUTES.get(path)
        if route is None:
            self.logger.info("Unknown route", path=path)
            return RouteDecision("not-found", path)

        if route.protected and not self.credentials.get():
            self.logger.info("Redirecting to login", path=path)
            return RouteDecision("redirect", path, route, redirect_to=LOGIN_PATH)

        return RouteDecision("render", path, route)
