"""
app/services/access_service.py

Purpose: Role-based access to dashboard routes

- Route permission table lookup (unknown routes are admin-only)
- Navigation entries visible to a role
- Route guard decision for incoming page requests
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Union

from app.core.logging import get_logger, LogContext
from app.models.identity import Identity, Role
from utils.constants import (
    DASHBOARD_PATH,
    DEFAULT_ROUTE_ROLES,
    GUARDED_EXACT_PATHS,
    GUARDED_PREFIXES,
    LOGIN_PATH,
    NAVIGATION_ITEMS,
    PUBLIC_PATHS,
    ROUTE_PERMISSIONS,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class GuardDecision:
    """
    Outcome of the route guard for one request.

    action is one of "pass", "redirect" or "forbid". clear_session is set
    when the request carried a token that no longer resolves to an identity.
    """
    action: str
    location: Optional[str] = None
    clear_session: bool = False

    @property
    def is_pass(self) -> bool:
        return self.action == "pass"


PASS = GuardDecision("pass")


def normalize_path(path: str) -> str:
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


class AccessPolicy:
    """
    Single source of truth for who may see which dashboard route.
    Used by the navigation endpoint, the API dependencies and the route guard.
    """

    def __init__(
        self,
        permissions: Optional[Mapping[str, Iterable[str]]] = None,
        default_roles: Iterable[str] = DEFAULT_ROUTE_ROLES,
    ):
        source = ROUTE_PERMISSIONS if permissions is None else permissions
        self._permissions: Dict[str, frozenset] = {
            route: frozenset(roles) for route, roles in source.items()
        }
        self._default_roles = frozenset(default_roles)

    @property
    def permissions(self) -> Dict[str, List[str]]:
        return {route: sorted(roles) for route, roles in self._permissions.items()}

    def allowed_roles(self, route: str) -> frozenset:
        return self._permissions.get(normalize_path(route), self._default_roles)

    def check_access(self, route: str, role: Union[Role, str, None]) -> bool:
        """
        Checks whether a role may view a route.

        Args:
            route: Page path, e.g. "/dashboard/users"
            role: Role of the viewer; None means nobody is signed in

        Returns:
            True if allowed. Routes missing from the table are admin-only.
        """
        if role is None:
            return False
        role = role.value if isinstance(role, Role) else role
        return role in self.allowed_roles(route)

    def navigation_for(self, role: Union[Role, str, None]) -> List[dict]:
        return [dict(item) for item in NAVIGATION_ITEMS if self.check_access(item["href"], role)]

    def protected_route_for(self, path: str) -> Optional[str]:
        """
        Maps a dashboard path to the table entry governing it: the exact entry
        when present, otherwise the longest table route that prefixes it.
        Returns None for paths outside the dashboard.
        """
        path = normalize_path(path)
        if path in self._permissions:
            return path
        if path != DASHBOARD_PATH and not path.startswith(DASHBOARD_PATH + "/"):
            return None
        candidates = [
            route for route in self._permissions
            if route != DASHBOARD_PATH and path.startswith(route + "/")
        ]
        if candidates:
            return max(candidates, key=len)
        return path

    @staticmethod
    def is_guarded(path: str) -> bool:
        path = normalize_path(path)
        return path in GUARDED_EXACT_PATHS or path.startswith(GUARDED_PREFIXES)

    def evaluate(self, path: str, identity: Optional[Identity], has_token: bool) -> GuardDecision:
        """
        Decides what happens to a page request.

        - token present on a public path: redirect to the dashboard
        - no resolvable session on a protected path: redirect to login,
          dropping a stale token so the login page is reachable again
        - signed in without the role for the path: forbid
        - otherwise: pass
        """
        path = normalize_path(path)
        if not self.is_guarded(path):
            return PASS

        if path in PUBLIC_PATHS:
            if has_token:
                return GuardDecision("redirect", DASHBOARD_PATH)
            return PASS

        if identity is None:
            return GuardDecision("redirect", LOGIN_PATH, clear_session=has_token)

        route = self.protected_route_for(path) or path
        if not self.check_access(route, identity.role):
            with LogContext(uid=identity.uid, path=path):
                logger.info(f"Role {identity.role.value} denied")
            return GuardDecision("forbid")

        return PASS
