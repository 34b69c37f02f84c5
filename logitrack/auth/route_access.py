"""Table d'accès par rôle et garde de navigation.

``ROUTE_ACCESS`` est l'unique source de vérité : elle alimente à la fois la
décision renvoyée au front (``RouteGate``) et le contrôle côté serveur
(``logitrack.api.v1.dependencies.require_route_access``).
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

from logitrack.auth.roles import role_in
from logitrack.models.user.utilisateur_model import UserRole
from logitrack.schemas.toast_schema import Toast, ToastType
from logitrack.schemas.user.principal_schema import Principal

logger = logging.getLogger(__name__)

ADMIN = UserRole.ADMIN.value
GESTIONNAIRE = UserRole.GESTIONNAIRE.value
LIVREUR = UserRole.LIVREUR.value

ALL_ROLES = frozenset({ADMIN, GESTIONNAIRE, LIVREUR})
STAFF_ROLES = frozenset({ADMIN, GESTIONNAIRE})

ROUTE_ACCESS: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "/": ALL_ROLES,  # tableau de bord
        "/colis": STAFF_ROLES,
        "/liste-colis": STAFF_ROLES,
        "/mes-colis": frozenset({LIVREUR}),
        "/colis/livres": ALL_ROLES,
        "/colis/refuses": ALL_ROLES,
        "/colis/annules": ALL_ROLES,
        "/colis/relance": frozenset({LIVREUR}),
        "/colis/relance-autre": frozenset({LIVREUR}),
        "/bons": ALL_ROLES,
        "/bons-paiement": STAFF_ROLES,
        "/bons-retour": STAFF_ROLES,
        "/clients": STAFF_ROLES,
        "/entreprises": STAFF_ROLES,
        "/livreurs": STAFF_ROLES,
        "/utilisateur": frozenset({ADMIN}),
        "/track-users": frozenset({ADMIN}),
        "/parametres": frozenset({ADMIN}),
        "/db-management": frozenset({ADMIN}),
    }
)

LOGIN_PATH = "/login"
HOME_PATH = "/"
ACCESS_DENIED_MESSAGE = "Vous n'avez pas accès à cette page"


class GateState(str, enum.Enum):
    CHECKING = "checking"
    ALLOWED = "allowed"
    DENIED_REDIRECTING = "denied_redirecting"


class AccessDenied(Exception):
    """Le rôle du principal ne figure pas dans la règle de la route."""

    def __init__(self, path: str, required: Iterable[str]):
        super().__init__(f"Accès refusé à {path}")
        self.path = path
        self.required = frozenset(required)


def normalize_path(path: str) -> str:
    path = (path or "").split("?", 1)[0].split("#", 1)[0].strip() or HOME_PATH
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or HOME_PATH
    return path


def required_roles(path: str) -> Optional[frozenset[str]]:
    """Rôles exigés pour ``path`` ; ``None`` pour une route publique."""
    return ROUTE_ACCESS.get(normalize_path(path))


def principal_has_access(principal: Optional[Principal], roles: Iterable[str]) -> bool:
    if principal is None or not principal.role:
        return False
    return role_in(principal.role, roles)


@dataclass
class GateDecision:
    path: str
    state: GateState = GateState.CHECKING
    redirect_to: Optional[str] = None
    toasts: list[Toast] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.state is GateState.ALLOWED


class RouteGate:
    """Garde évaluée à chaque changement de route ou de principal.

    Contrôle ponctuel et synchrone, sans nouvelle tentative : une route absente
    de la table est publique, sinon le rôle doit y figurer, faute de quoi le
    principal est renvoyé vers l'accueil avec un unique toast d'avertissement.
    """

    def __init__(
        self,
        has_access: Callable[[Optional[Principal], Iterable[str]], bool] = principal_has_access,
        *,
        home_path: str = HOME_PATH,
        login_path: str = LOGIN_PATH,
    ):
        self._has_access = has_access
        self.home_path = home_path
        self.login_path = login_path

    def evaluate(self, path: str, principal: Optional[Principal]) -> GateDecision:
        decision = GateDecision(path=normalize_path(path))

        if decision.path == self.login_path:
            decision.state = GateState.ALLOWED
            return decision

        roles = required_roles(decision.path)
        if roles is None:
            decision.state = GateState.ALLOWED
            return decision

        if principal is None:
            decision.state = GateState.DENIED_REDIRECTING
            decision.redirect_to = self.login_path
            return decision

        if self._has_access(principal, roles):
            decision.state = GateState.ALLOWED
            return decision

        logger.info(
            "Accès refusé: utilisateur %s (%s) sur %s",
            principal.id,
            principal.role,
            decision.path,
        )
        decision.state = GateState.DENIED_REDIRECTING
        decision.redirect_to = self.home_path
        decision.toasts.append(Toast(message=ACCESS_DENIED_MESSAGE, type=ToastType.WARNING))
        return decision

    def ensure(self, path: str, principal: Optional[Principal]) -> None:
        """Variante serveur : lève ``AccessDenied`` au lieu de rediriger."""
        roles = required_roles(path)
        if roles is None:
            return
        if not self._has_access(principal, roles):
            raise AccessDenied(normalize_path(path), roles)


def navigation_for(principal: Optional[Principal]) -> list[str]:
    """Routes de la table accessibles au principal, dans l'ordre de la table."""
    if principal is None:
        return []
    return [path for path, roles in ROUTE_ACCESS.items() if principal_has_access(principal, roles)]
