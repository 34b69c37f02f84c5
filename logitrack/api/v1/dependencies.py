import logging
import re
from urllib.parse import unquote

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from logitrack.auth.route_access import AccessDenied, RouteGate
from logitrack.auth.roles import role_in
from logitrack.auth.session_store import CookieSessionStorage, SessionStore
from logitrack.core import security
from logitrack.core.config import settings
from logitrack.crud import utilisateur_crud
from logitrack.db.session import get_db
from logitrack.notifications.inbox import NotificationInbox
from logitrack.schemas.user.principal_schema import Principal
from pydantic import ValidationError

log = logging.getLogger(__name__)

__all__ = [
    "get_db",
    "get_session_store",
    "get_current_principal",
    "get_optional_principal",
    "get_inbox",
    "require_roles",
    "require_route_access",
]


def _normalize_token_value(raw_token: str | None) -> str | None:
    """Return a clean JWT string from a cookie or an ``Authorization`` header.

    Browsers may percent-encode cookie values (``Bearer%20…``) and some
    clients send quoted strings; ``Bearer``/``Token`` prefixes are accepted in
    any case.
    """

    if raw_token is None:
        return None

    token = unquote(raw_token.strip().strip('"').strip("'"))
    if not token:
        return None

    match = re.match(r"^(bearer|token)[\s,:]+(.+)$", token, flags=re.IGNORECASE)
    if match:
        token = match.group(2)

    token = token.strip()
    return token or None


def get_session_store(request: Request, response: Response, db: Session = Depends(get_db)) -> SessionStore:
    storage = CookieSessionStorage(
        request,
        response,
        secure=settings.is_production,
        httponly_keys={settings.SESSION_COOKIE_NAME},
    )
    return SessionStore(db, storage, settings=settings)


def _principal_from_token(token: str | None, db: Session) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )

    try:
        payload = security.decode_access_token(token)
        user_id = int(payload["sub"])
    except security.InvalidTokenError as exc:
        log.warning("Validation échouée: %s.", exc.reason)
        if exc.reason == "token_expired":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired") from exc
        raise credentials_exception from exc
    except (ValueError, TypeError) as exc:
        log.warning("Validation échouée: identifiant mal formé dans le jeton.")
        raise credentials_exception from exc

    user = utilisateur_crud.get_user(db, user_id)
    if user is None:
        log.warning("Validation échouée: utilisateur %s introuvable.", user_id)
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="inactive_user")

    try:
        return Principal.model_validate(user)
    except ValidationError as exc:
        log.warning("Utilisateur %s: rôle invalide '%s'.", user.id, user.role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="invalid_role") from exc


def get_current_principal(request: Request, db: Session = Depends(get_db)) -> Principal:
    """Principal authentifié, validé côté serveur à chaque requête."""

    token_sources = (
        request.cookies.get(settings.SESSION_COOKIE_NAME),
        request.headers.get("Authorization"),
    )

    last_unauthorized_error: HTTPException | None = None

    for candidate in token_sources:
        token = _normalize_token_value(candidate)
        if not token:
            continue

        try:
            return _principal_from_token(token, db)
        except HTTPException as exc:
            if exc.status_code != status.HTTP_401_UNAUTHORIZED:
                raise
            last_unauthorized_error = exc

    if last_unauthorized_error is not None:
        raise last_unauthorized_error

    log.warning("Validation échouée: Pas de token fourni.")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")


def get_optional_principal(request: Request, db: Session = Depends(get_db)) -> Optional[Principal]:
    try:
        return get_current_principal(request, db)
    except HTTPException as exc:
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            return None
        raise


def get_inbox(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> NotificationInbox:
    inbox = NotificationInbox(db, principal, settings=settings)
    inbox.fetch_notifications()
    return inbox


def require_roles(*roles: str) -> Callable[..., Principal]:
    """Dépendance qui refuse (403) un principal dont le rôle n'est pas listé."""

    def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not role_in(principal.role, roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="access_denied")
        return principal

    return _dependency


def require_route_access(path: str) -> Callable[..., Principal]:
    """Applique côté serveur la règle de ``ROUTE_ACCESS`` associée à ``path``."""

    gate = RouteGate()

    def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        try:
            gate.ensure(path, principal)
        except AccessDenied as exc:
            log.info("Accès API refusé à %s pour l'utilisateur %s.", exc.path, principal.id)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="access_denied") from exc
        return principal

    return _dependency
